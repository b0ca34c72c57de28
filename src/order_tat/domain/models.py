"""
领域模型：订单、状态流转、团队配置
"""
from dataclasses import dataclass, field
from datetime import datetime, time, timedelta, tzinfo
from typing import Dict, FrozenSet, List, Optional, Tuple

from dateutil import tz

from order_tat.domain.constants import OrderStatus
from order_tat.domain.exceptions import TeamConfigError
from order_tat.shared.utils import format_duration


# ==================== 订单相关 ====================

@dataclass
class StatusTransition:
    """状态流转记录：订单在 change_time 进入 status（本地时间，不带时区）"""
    status: OrderStatus
    change_time: Optional[datetime]


@dataclass
class Order:
    """订单（聚合根）：标识 + 按插入顺序保存的状态流转历史"""
    order_id: Optional[str] = None
    status_transitions: Optional[List[StatusTransition]] = field(default_factory=list)
    status: Optional[OrderStatus] = None


# ==================== 团队配置 ====================

@dataclass(frozen=True)
class ActivityBlock:
    """
    活动区块（值对象）：团队的一段连续负责窗口

    Attributes:
        statuses: 属于该区块的状态集合
        entry_status: 首次出现即标记区块开始的状态
        first_in_progress_status: 标记实际开始处理（而非排队）的状态
    """
    statuses: FrozenSet[OrderStatus]
    entry_status: OrderStatus
    first_in_progress_status: OrderStatus

    def __post_init__(self):
        object.__setattr__(self, "statuses", frozenset(self.statuses))
        if self.entry_status not in self.statuses:
            raise TeamConfigError(f"入口状态 {self.entry_status.name} 不在区块状态集合中")
        if self.first_in_progress_status not in self.statuses:
            raise TeamConfigError(
                f"处理中状态 {self.first_in_progress_status.name} 不在区块状态集合中"
            )

    def contains(self, status: OrderStatus) -> bool:
        return status in self.statuses


@dataclass(frozen=True)
class TeamConfig:
    """
    团队配置（值对象）

    zone_id 仅用于周末判定所在的日历，不做夏令时/节假日处理。
    """
    team_name: str
    activity_blocks: Tuple[ActivityBlock, ...]
    start_time: time
    cutoff_time: time
    zone_id: str = "Asia/Shanghai"

    def __post_init__(self):
        object.__setattr__(self, "activity_blocks", tuple(self.activity_blocks))

        if not self.start_time < self.cutoff_time:
            raise TeamConfigError(
                f"团队 {self.team_name}: 开始时间 {self.start_time} 必须早于截止时间 {self.cutoff_time}"
            )

        seen: set = set()
        for block in self.activity_blocks:
            overlap = seen & block.statuses
            if overlap:
                names = ", ".join(sorted(s.name for s in overlap))
                raise TeamConfigError(f"团队 {self.team_name}: 活动区块状态重叠 ({names})")
            seen |= block.statuses

        if tz.gettz(self.zone_id) is None:
            raise TeamConfigError(f"团队 {self.team_name}: 无法识别的时区 {self.zone_id}")

    @property
    def tzinfo(self) -> tzinfo:
        return tz.gettz(self.zone_id)

    @property
    def statuses(self) -> FrozenSet[OrderStatus]:
        """全部区块状态的并集"""
        result: FrozenSet[OrderStatus] = frozenset()
        for block in self.activity_blocks:
            result = result | block.statuses
        return result


# ==================== 报告相关 ====================

@dataclass
class TatReport:
    """单个订单的 TAT 汇总（数据传输对象）"""
    order_id: Optional[str]
    overall: timedelta
    review: timedelta
    execution: timedelta
    teams: Dict[str, timedelta] = field(default_factory=dict)

    def to_dict(self) -> dict:
        """转换为字典（秒数 + 可读文本）"""
        def _render(value: timedelta) -> dict:
            return {
                "seconds": int(value.total_seconds()),
                "text": format_duration(value),
            }

        return {
            "order_id": self.order_id,
            "overall": _render(self.overall),
            "review": _render(self.review),
            "execution": _render(self.execution),
            "teams": {name: _render(value) for name, value in self.teams.items()},
        }

    def __repr__(self) -> str:
        teams = ", ".join(f"{k}={format_duration(v)}" for k, v in self.teams.items())
        return (f"TatReport({self.order_id}, overall={format_duration(self.overall)}, "
                f"review={format_duration(self.review)}, "
                f"execution={format_duration(self.execution)}, teams=[{teams}])")
