"""
领域服务层（Domain Services）
职责：封装营业日历与 TAT 计时规则
依赖：domain.models
"""

from order_tat.domain.services.business_calendar import BusinessCalendarCalculator, WeekendCalendarProvider, StartAdjustmentPolicy
from order_tat.domain.services.tat import TatAggregator, BlockLocator, EffectiveStartPolicy, ParkedTimeService

__all__ = [
    # Business Calendar
    "BusinessCalendarCalculator",
    "WeekendCalendarProvider",
    "StartAdjustmentPolicy",
    # TAT
    "TatAggregator",
    "BlockLocator",
    "EffectiveStartPolicy",
    "ParkedTimeService",
]
