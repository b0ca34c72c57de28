"""
营业日历与营业时长计算模块

## 计时规则

### 1. 营业日判定
- 周一至周五为营业日，周六、周日为周末（固定规则，不可配置）
- 不处理法定节假日与夏令时

### 2. 每日营业窗口
- 每个团队配置自己的开始时间（start_time）与截止时间（cutoff_time）
- 营业时长只统计 [start_time, cutoff_time] 内的部分

### 3. 起点调整
- 截止时间之后进入：顺延到下一个营业日的开始时间
- 营业日开始时间之前进入：对齐到当日开始时间
- 周末进入：顺延到下一个营业日的开始时间

### 4. 时区约定
- 所有时间均为不带时区的本地时间
- 团队的 zone_id 只标识所用日历，不做换算
"""

import logging
from datetime import date, datetime, timedelta
from typing import Optional, Union

from order_tat.domain.models import TeamConfig

logger = logging.getLogger(__name__)


# ==================
# Types & Constants
# ==================

DayLike = Union[date, datetime]

ZERO = timedelta(0)
WEEKEND_DAYS = (5, 6)  # Saturday=5, Sunday=6


def _as_date(day: DayLike) -> date:
    return day.date() if isinstance(day, datetime) else day


# ==================
# Providers（日历提供者）
# ==================

class WeekendCalendarProvider:
    """营业日历提供者：仅排除周六、周日"""

    def is_business_day(self, day: DayLike) -> bool:
        """判断是否为营业日"""
        return _as_date(day).weekday() not in WEEKEND_DAYS

    def next_business_day(self, day: DayLike) -> date:
        """获取不早于 day 的第一个营业日（含当天）"""
        current = _as_date(day)
        # 周末最多连续 2 天，循环必然终止
        while not self.is_business_day(current):
            current += timedelta(days=1)
        return current


# ==================
# Policies（策略层）
# ==================

class StartAdjustmentPolicy:
    """起点调整策略：截止时间 / 开始时间 / 周末"""

    def __init__(self, provider: WeekendCalendarProvider):
        self.provider = provider

    def next_business_day_start(self, day: DayLike, config: TeamConfig) -> datetime:
        """不早于 day 的第一个营业日 + 团队开始时间"""
        return datetime.combine(self.provider.next_business_day(day), config.start_time)

    def adjust(self, start: datetime, config: TeamConfig) -> datetime:
        """将起点调整到最近的可计时刻"""
        clock = start.time()

        if clock > config.cutoff_time:
            return self.next_business_day_start(start.date() + timedelta(days=1), config)

        if not self.provider.is_business_day(start):
            return self.next_business_day_start(start.date(), config)

        if clock < config.start_time:
            return datetime.combine(start.date(), config.start_time)

        return start


# ==================
# Service（编排服务层）
# ==================

class BusinessCalendarCalculator:
    """营业日历计算服务（编排层）：组合 Provider 与 Policy，对外提供统一接口"""

    def __init__(self, provider: Optional[WeekendCalendarProvider] = None):
        self.provider = provider or WeekendCalendarProvider()
        self.start_policy = StartAdjustmentPolicy(self.provider)

    # ---- 对外 API：委托 Provider/Policy ----

    def is_business_day(self, day: DayLike) -> bool:
        """判断是否为营业日（委托 WeekendCalendarProvider）"""
        return self.provider.is_business_day(day)

    def is_weekend(self, day: DayLike) -> bool:
        return not self.provider.is_business_day(day)

    def next_business_day_start(self, day: DayLike, config: TeamConfig) -> datetime:
        """获取不早于 day 的营业日开始时刻（委托 StartAdjustmentPolicy）"""
        return self.start_policy.next_business_day_start(day, config)

    def adjust_start(self, start: datetime, config: TeamConfig) -> datetime:
        """起点调整（委托 StartAdjustmentPolicy）"""
        return self.start_policy.adjust(start, config)

    def calculate_duration(
        self,
        start: Optional[datetime],
        end: Optional[datetime],
        config: Optional[TeamConfig],
    ) -> timedelta:
        """
        计算 [start, end) 内落在营业时间的累计时长

        Args:
            start: 起点（本地时间）
            end: 终点（本地时间）
            config: 团队配置（提供开始/截止时间）

        Returns:
            营业时长；start 晚于 end、缺少参数或调整后起点越过 end 时为 0
        """
        if start is None or end is None or config is None:
            return ZERO
        if start > end:
            return ZERO

        effective_start = self.adjust_start(start, config)
        if effective_start > end:
            logger.debug(f"调整后的起点 {effective_start} 晚于终点 {end}，营业时长为 0")
            return ZERO

        return self._accumulate(effective_start, end, config)

    # ---- 内部实现 ----

    def _accumulate(self, start: datetime, end: datetime, config: TeamConfig) -> timedelta:
        """逐日累加营业窗口与 [start, end) 的重叠部分"""
        total = ZERO
        current = start

        while current < end:
            day = current.date()
            next_day_start = datetime.combine(day + timedelta(days=1), config.start_time)

            if not self.provider.is_business_day(day):
                current = next_day_start
                continue

            if current.time() > config.cutoff_time:
                current = next_day_start
                continue

            if current.time() < config.start_time:
                current = datetime.combine(day, config.start_time)

            day_end = datetime.combine(day, config.cutoff_time)
            interval_end = min(end, day_end)

            if current < interval_end:
                total += interval_end - current

            current = next_day_start

        return total
