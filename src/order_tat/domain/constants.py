"""
领域常量定义：订单状态、状态族、团队名、里程碑

状态族与挂起（parked）标记均为显式声明的映射，不依赖状态名的前缀/后缀推断。
"""
from enum import Enum
from typing import Dict, FrozenSet, Optional, Tuple, Union


# ==================== 状态族 ====================

class StatusFamily(Enum):
    """状态族：状态所属的业务阶段"""
    AUDIT_REVIEW = "AUDIT_REVIEW"
    CREDIT_APPROVAL = "CREDIT_APPROVAL"
    TRADING = "TRADING"


# ==================== 订单状态 ====================

class OrderStatus(Enum):
    """订单状态（按工作流顺序声明，枚举值不表示数值大小）"""
    DRAFT = "DRAFT"
    SUBMITTED = "SUBMITTED"
    STARTED = "STARTED"
    AUDIT_REVIEW_LEVEL1_OPEN = "AUDIT_REVIEW_LEVEL1_OPEN"
    AUDIT_REVIEW_LEVEL1_IN_PROGRESS = "AUDIT_REVIEW_LEVEL1_IN_PROGRESS"
    AUDIT_REVIEW_LEVEL1_PARKED = "AUDIT_REVIEW_LEVEL1_PARKED"
    AUDIT_REVIEW_LEVEL1_SUBMITTED = "AUDIT_REVIEW_LEVEL1_SUBMITTED"
    AUDIT_REVIEW_LEVEL2_OPEN = "AUDIT_REVIEW_LEVEL2_OPEN"
    AUDIT_REVIEW_LEVEL2_IN_PROGRESS = "AUDIT_REVIEW_LEVEL2_IN_PROGRESS"
    AUDIT_REVIEW_LEVEL2_PARKED = "AUDIT_REVIEW_LEVEL2_PARKED"
    AUDIT_REVIEW_LEVEL2_APPROVED = "AUDIT_REVIEW_LEVEL2_APPROVED"
    AUDIT_REVIEW_CREDIT_APPROVAL_LEVEL1_OPEN = "AUDIT_REVIEW_CREDIT_APPROVAL_LEVEL1_OPEN"
    AUDIT_REVIEW_CREDIT_APPROVAL_LEVEL1_IN_PROGRESS = "AUDIT_REVIEW_CREDIT_APPROVAL_LEVEL1_IN_PROGRESS"
    AUDIT_REVIEW_CREDIT_APPROVAL_LEVEL1_PARKED = "AUDIT_REVIEW_CREDIT_APPROVAL_LEVEL1_PARKED"
    AUDIT_REVIEW_CREDIT_APPROVAL_LEVEL1_SUBMITTED = "AUDIT_REVIEW_CREDIT_APPROVAL_LEVEL1_SUBMITTED"
    AUDIT_REVIEW_CREDIT_APPROVAL_LEVEL2_OPEN = "AUDIT_REVIEW_CREDIT_APPROVAL_LEVEL2_OPEN"
    AUDIT_REVIEW_CREDIT_APPROVAL_LEVEL2_IN_PROGRESS = "AUDIT_REVIEW_CREDIT_APPROVAL_LEVEL2_IN_PROGRESS"
    AUDIT_REVIEW_CREDIT_APPROVAL_LEVEL2_PARKED = "AUDIT_REVIEW_CREDIT_APPROVAL_LEVEL2_PARKED"
    AUDIT_REVIEW_CREDIT_APPROVAL_LEVEL2_APPROVED = "AUDIT_REVIEW_CREDIT_APPROVAL_LEVEL2_APPROVED"
    TRADING_OPEN = "TRADING_OPEN"
    TRADING_IN_PROGRESS = "TRADING_IN_PROGRESS"
    TRADING_PARKED = "TRADING_PARKED"
    TRADING_SUBMITTED = "TRADING_SUBMITTED"
    COMPLETED = "COMPLETED"

    @property
    def family(self) -> Optional[StatusFamily]:
        """所属状态族（无则 None）"""
        return STATUS_FAMILIES.get(self)

    @property
    def is_parked(self) -> bool:
        """是否为挂起状态（挂起期间不计工作时长）"""
        return self in PARKED_STATUSES

    @property
    def is_audit_review_status(self) -> bool:
        # 信贷审批阶段同样归审核团队负责
        return self.family in (StatusFamily.AUDIT_REVIEW, StatusFamily.CREDIT_APPROVAL)

    @property
    def is_trading_status(self) -> bool:
        return self.family is StatusFamily.TRADING

    @property
    def workflow_index(self) -> int:
        """在工作流中的位置（0 起）"""
        return _WORKFLOW_ORDER[self]

    @classmethod
    def parse(cls, value: Union["OrderStatus", str]) -> "OrderStatus":
        """由成员或状态名解析状态，未知名称抛出 ValueError"""
        if isinstance(value, cls):
            return value
        name = str(value).strip().upper()
        try:
            return cls[name]
        except KeyError:
            raise ValueError(f"未知订单状态: {value}") from None

    @classmethod
    def of_family(cls, family: StatusFamily) -> FrozenSet["OrderStatus"]:
        """指定状态族的全部状态"""
        return frozenset(s for s, f in STATUS_FAMILIES.items() if f is family)


_WORKFLOW_ORDER: Dict[OrderStatus, int] = {s: i for i, s in enumerate(OrderStatus)}


# ==================== 显式映射 ====================

STATUS_FAMILIES: Dict[OrderStatus, StatusFamily] = {
    OrderStatus.AUDIT_REVIEW_LEVEL1_OPEN: StatusFamily.AUDIT_REVIEW,
    OrderStatus.AUDIT_REVIEW_LEVEL1_IN_PROGRESS: StatusFamily.AUDIT_REVIEW,
    OrderStatus.AUDIT_REVIEW_LEVEL1_PARKED: StatusFamily.AUDIT_REVIEW,
    OrderStatus.AUDIT_REVIEW_LEVEL1_SUBMITTED: StatusFamily.AUDIT_REVIEW,
    OrderStatus.AUDIT_REVIEW_LEVEL2_OPEN: StatusFamily.AUDIT_REVIEW,
    OrderStatus.AUDIT_REVIEW_LEVEL2_IN_PROGRESS: StatusFamily.AUDIT_REVIEW,
    OrderStatus.AUDIT_REVIEW_LEVEL2_PARKED: StatusFamily.AUDIT_REVIEW,
    OrderStatus.AUDIT_REVIEW_LEVEL2_APPROVED: StatusFamily.AUDIT_REVIEW,
    OrderStatus.AUDIT_REVIEW_CREDIT_APPROVAL_LEVEL1_OPEN: StatusFamily.CREDIT_APPROVAL,
    OrderStatus.AUDIT_REVIEW_CREDIT_APPROVAL_LEVEL1_IN_PROGRESS: StatusFamily.CREDIT_APPROVAL,
    OrderStatus.AUDIT_REVIEW_CREDIT_APPROVAL_LEVEL1_PARKED: StatusFamily.CREDIT_APPROVAL,
    OrderStatus.AUDIT_REVIEW_CREDIT_APPROVAL_LEVEL1_SUBMITTED: StatusFamily.CREDIT_APPROVAL,
    OrderStatus.AUDIT_REVIEW_CREDIT_APPROVAL_LEVEL2_OPEN: StatusFamily.CREDIT_APPROVAL,
    OrderStatus.AUDIT_REVIEW_CREDIT_APPROVAL_LEVEL2_IN_PROGRESS: StatusFamily.CREDIT_APPROVAL,
    OrderStatus.AUDIT_REVIEW_CREDIT_APPROVAL_LEVEL2_PARKED: StatusFamily.CREDIT_APPROVAL,
    OrderStatus.AUDIT_REVIEW_CREDIT_APPROVAL_LEVEL2_APPROVED: StatusFamily.CREDIT_APPROVAL,
    OrderStatus.TRADING_OPEN: StatusFamily.TRADING,
    OrderStatus.TRADING_IN_PROGRESS: StatusFamily.TRADING,
    OrderStatus.TRADING_PARKED: StatusFamily.TRADING,
    OrderStatus.TRADING_SUBMITTED: StatusFamily.TRADING,
}

PARKED_STATUSES: FrozenSet[OrderStatus] = frozenset({
    OrderStatus.AUDIT_REVIEW_LEVEL1_PARKED,
    OrderStatus.AUDIT_REVIEW_LEVEL2_PARKED,
    OrderStatus.AUDIT_REVIEW_CREDIT_APPROVAL_LEVEL1_PARKED,
    OrderStatus.AUDIT_REVIEW_CREDIT_APPROVAL_LEVEL2_PARKED,
    OrderStatus.TRADING_PARKED,
})


# ==================== 团队与里程碑 ====================

class TeamName:
    """内置团队名常量"""
    audit_review = "AUDIT_REVIEW"
    trading = "TRADING"

    @classmethod
    def all(cls) -> list[str]:
        return [cls.audit_review, cls.trading]


class Milestone:
    """里程碑区间：(起点状态, 终点状态)"""
    overall: Tuple[OrderStatus, OrderStatus] = (OrderStatus.DRAFT, OrderStatus.COMPLETED)
    review: Tuple[OrderStatus, OrderStatus] = (OrderStatus.SUBMITTED, OrderStatus.STARTED)
    execution: Tuple[OrderStatus, OrderStatus] = (OrderStatus.STARTED, OrderStatus.COMPLETED)


# ==================== 计时口径 ====================

class TatMode(Enum):
    """团队 TAT 计时口径"""
    WALL_CLOCK = "wall_clock"          # 自然时间，仅扣除挂起
    BUSINESS_HOURS = "business_hours"  # 仅计营业时间（跳过夜间与周末），再扣除挂起

    @classmethod
    def parse(cls, value: Union["TatMode", str, None]) -> "TatMode":
        """解析计时口径，空值回落到 WALL_CLOCK"""
        if isinstance(value, cls):
            return value
        if not value:
            return cls.WALL_CLOCK
        try:
            return cls(str(value).strip().lower())
        except ValueError:
            raise ValueError(f"未知计时口径: {value}") from None
