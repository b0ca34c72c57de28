"""
订单 TAT（turn-around-time）汇总模块

- 里程碑 TAT：起点状态首次出现 → 终点状态最后一次出现，自然时间
- 团队 TAT：逐个活动区块定位负责窗口，按截止时间调整有效起点，
  扣除挂起区间后求和
"""
import logging
from dataclasses import dataclass
from datetime import datetime, timedelta
from typing import Callable, Dict, List, Mapping, Optional

from order_tat.domain.constants import Milestone, OrderStatus, TatMode, TeamName
from order_tat.domain.exceptions import UnknownTeamError
from order_tat.domain.models import ActivityBlock, Order, StatusTransition, TatReport, TeamConfig
from order_tat.domain.services.business_calendar import BusinessCalendarCalculator

logger = logging.getLogger(__name__)


# ==================
# Types & Constants
# ==================

ZERO = timedelta(0)

# 区间度量函数：(起点, 终点) -> 时长
Measure = Callable[[datetime, datetime], timedelta]


@dataclass(frozen=True)
class BlockWindow:
    """活动区块在流转历史中的实际窗口"""
    entry_time: datetime
    exit_time: datetime
    in_progress_time: Optional[datetime] = None


def sort_transitions(order: Optional[Order]) -> List[StatusTransition]:
    """
    按时间排序流转记录（稳定排序，写入新列表，不修改订单本身）

    缺少时间戳的记录被忽略。
    """
    if order is None or not order.status_transitions:
        return []

    dated = [t for t in order.status_transitions if t.change_time is not None]
    skipped = len(order.status_transitions) - len(dated)
    if skipped:
        logger.warning(f"订单 {order.order_id}: 忽略 {skipped} 条缺少时间戳的流转记录")

    return sorted(dated, key=lambda t: t.change_time)


# ==================
# Services（服务层）
# ==================

class BlockLocator:
    """区块定位：入口状态首次出现 → 第一条区块外的流转"""

    def locate(self, transitions: List[StatusTransition], block: ActivityBlock) -> Optional[BlockWindow]:
        entry_index = None
        for i, transition in enumerate(transitions):
            if transition.status == block.entry_status and block.contains(transition.status):
                entry_index = i
                break

        if entry_index is None:
            return None

        in_progress_time = None
        for transition in transitions[entry_index + 1:]:
            if not block.contains(transition.status):
                return BlockWindow(
                    entry_time=transitions[entry_index].change_time,
                    exit_time=transition.change_time,
                    in_progress_time=in_progress_time,
                )
            if in_progress_time is None and transition.status == block.first_in_progress_status:
                in_progress_time = transition.change_time

        # 区块尚未结束
        return None


class EffectiveStartPolicy:
    """有效起点策略：截止时间之后进入顺延到下一营业日，已开始处理则以处理时间为准"""

    def __init__(self, calendar: BusinessCalendarCalculator):
        self.calendar = calendar

    def resolve(self, window: BlockWindow, config: TeamConfig) -> datetime:
        entry = window.entry_time
        if entry.time() <= config.cutoff_time:
            return entry

        next_start = self.calendar.next_business_day_start(entry.date() + timedelta(days=1), config)
        if window.in_progress_time is not None and window.in_progress_time < next_start:
            return window.in_progress_time
        return next_start


class ParkedTimeService:
    """挂起时长：[t_i, t_i+1) 且 t_i 为挂起状态，裁剪到统计窗口后累加"""

    def calculate(
        self,
        transitions: List[StatusTransition],
        window_start: datetime,
        window_end: datetime,
        measure: Measure,
    ) -> timedelta:
        total = ZERO
        for current, following in zip(transitions, transitions[1:]):
            if current.status is None or not current.status.is_parked:
                continue
            start = max(current.change_time, window_start)
            end = min(following.change_time, window_end)
            if end > start:
                total += measure(start, end)
        return total


# ==================
# Facade（对外门面：编排服务）
# ==================

class TatAggregator:
    """TAT 汇总器：组合里程碑与团队计时规则"""

    def __init__(
        self,
        calendar: BusinessCalendarCalculator,
        team_configs: Mapping[str, TeamConfig],
        mode: TatMode = TatMode.WALL_CLOCK,
    ):
        self.calendar = calendar
        self.team_configs = team_configs
        self.mode = mode

        self.block_locator = BlockLocator()
        self.start_policy = EffectiveStartPolicy(calendar)
        self.parked_service = ParkedTimeService()

    # ---- 里程碑 TAT ----

    def milestone_tat(self, order: Order, start_status: OrderStatus, end_status: OrderStatus) -> timedelta:
        """起点状态首次出现 → 终点状态最后一次出现（任一缺失为 0）"""
        start_time = None
        end_time = None

        for transition in sort_transitions(order):
            if transition.status == start_status and start_time is None:
                start_time = transition.change_time
            if transition.status == end_status:
                end_time = transition.change_time

        if start_time is None or end_time is None:
            return ZERO
        return max(end_time - start_time, ZERO)

    def overall_tat(self, order: Order) -> timedelta:
        return self.milestone_tat(order, *Milestone.overall)

    def review_tat(self, order: Order) -> timedelta:
        return self.milestone_tat(order, *Milestone.review)

    def execution_tat(self, order: Order) -> timedelta:
        return self.milestone_tat(order, *Milestone.execution)

    # ---- 团队 TAT ----

    def team_tat(self, order: Order, team_name: str) -> timedelta:
        """
        团队净工作时长：各活动区块独立计算后求和

        Raises:
            UnknownTeamError: 团队不在注册表中
        """
        config = self.team_configs.get(team_name)
        if config is None:
            raise UnknownTeamError(team_name)

        transitions = sort_transitions(order)
        if not transitions:
            return ZERO

        total = ZERO
        for block in config.activity_blocks:
            total += self.block_tat(transitions, block, config)
        return total

    def block_tat(
        self,
        transitions: List[StatusTransition],
        block: ActivityBlock,
        config: TeamConfig,
    ) -> timedelta:
        """单个区块的净时长（transitions 须已按时间排序）"""
        window = self.block_locator.locate(transitions, block)
        if window is None:
            logger.debug(f"团队 {config.team_name}: 区块 {block.entry_status.name} 未开始或未结束，计 0")
            return ZERO

        effective_start = self.start_policy.resolve(window, config)
        if effective_start >= window.exit_time:
            return ZERO

        measure = self._measure(config)
        gross = measure(effective_start, window.exit_time)
        parked = self.parked_service.calculate(transitions, effective_start, window.exit_time, measure)

        logger.debug(
            f"团队 {config.team_name}: 区块 {block.entry_status.name} "
            f"{effective_start} → {window.exit_time}，毛时长 {gross}，挂起 {parked}"
        )
        return max(gross - parked, ZERO)

    def audit_review_team_tat(self, order: Order) -> timedelta:
        return self.team_tat(order, TeamName.audit_review)

    def trading_team_tat(self, order: Order) -> timedelta:
        return self.team_tat(order, TeamName.trading)

    def team_tats(self, order: Order) -> Dict[str, timedelta]:
        """注册表中全部团队的 TAT"""
        return {name: self.team_tat(order, name) for name in self.team_configs}

    # ---- 汇总 ----

    def build_report(self, order: Order) -> TatReport:
        """生成单个订单的 TAT 汇总"""
        return TatReport(
            order_id=order.order_id,
            overall=self.overall_tat(order),
            review=self.review_tat(order),
            execution=self.execution_tat(order),
            teams=self.team_tats(order),
        )

    # ---- 内部实现 ----

    def _measure(self, config: TeamConfig) -> Measure:
        if self.mode is TatMode.BUSINESS_HOURS:
            return lambda start, end: self.calendar.calculate_duration(start, end, config)
        return lambda start, end: end - start
