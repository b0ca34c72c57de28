"""应用层依赖装配工厂。"""

import logging
from dataclasses import dataclass
from typing import Optional

from order_tat.config.settings import Settings, load_settings
from order_tat.config.loader import ConfigLoader
from order_tat.domain.constants import TatMode
from order_tat.domain.services.business_calendar import BusinessCalendarCalculator
from order_tat.domain.services.tat import TatAggregator

logger = logging.getLogger(__name__)


def setup_logging(log_level: str):
    """配置日志"""
    logging.basicConfig(
        level=log_level,
        format="%(asctime)s %(levelname)s %(name)s %(message)s",
    )


@dataclass
class ApplicationContext:
    """应用上下文，向宿主系统暴露所需入口。"""

    settings: Settings
    config: ConfigLoader
    calendar: BusinessCalendarCalculator
    aggregator: TatAggregator


def build_application(
    config_path: Optional[str] = None,
    settings: Optional[Settings] = None,
) -> ApplicationContext:
    """组装应用依赖，返回可供宿主系统使用的上下文。"""

    settings = settings or load_settings()
    setup_logging(settings.log_level)

    config = ConfigLoader(config_path or settings.config_path)

    # 环境变量优先于配置文件
    mode = TatMode.parse(settings.tat_mode) if settings.tat_mode else config.get_tat_mode()

    calendar = BusinessCalendarCalculator()
    # 配置文件未给出 timezone 时回落到 TZ
    registry = config.get_team_configs(default_zone=settings.timezone)
    aggregator = TatAggregator(calendar, registry, mode=mode)
    logger.info(f"TAT 汇总器已就绪，计时口径：{mode.value}")

    return ApplicationContext(
        settings=settings,
        config=config,
        calendar=calendar,
        aggregator=aggregator,
    )
