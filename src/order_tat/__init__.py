"""
order_tat：订单 TAT（turn-around-time）计算

- 营业日历：周末判定、截止时间顺延、营业时长
- TAT 汇总：里程碑区间、团队净工作时长（多活动区块，扣除挂起）
"""
from order_tat.domain.constants import OrderStatus, StatusFamily, TatMode, TeamName
from order_tat.domain.exceptions import TatError, TeamConfigError, UnknownTeamError
from order_tat.domain.models import ActivityBlock, Order, StatusTransition, TatReport, TeamConfig
from order_tat.domain.services import BusinessCalendarCalculator, TatAggregator

__version__ = "0.1.0"

__all__ = [
    "OrderStatus",
    "StatusFamily",
    "TatMode",
    "TeamName",
    "TatError",
    "TeamConfigError",
    "UnknownTeamError",
    "ActivityBlock",
    "Order",
    "StatusTransition",
    "TatReport",
    "TeamConfig",
    "BusinessCalendarCalculator",
    "TatAggregator",
]
