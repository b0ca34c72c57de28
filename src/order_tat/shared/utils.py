"""
共享工具函数
职责：时间解析与时长格式化
依赖：无
"""
import logging
from datetime import datetime, time, timedelta
from typing import Union

logger = logging.getLogger(__name__)


# ==================== 时间解析 ====================

def parse_time(value: Union[str, int, time]) -> time:
    """
    解析一天中的时刻

    Args:
        value: "HH:MM" / "HH:MM:SS" 字符串、time 对象，
            或整数分钟数（YAML 1.1 会把未加引号的 17:00 解析为 1020）

    Returns:
        time 对象

    Raises:
        ValueError: 无法解析时刻
    """
    if isinstance(value, time):
        return value

    if isinstance(value, bool):
        raise ValueError(f"无法解析时刻: {value}")

    if isinstance(value, int):
        if not 0 <= value < 24 * 60:
            raise ValueError(f"无法解析时刻: {value}")
        return time(value // 60, value % 60)

    formats = [
        "%H:%M",
        "%H:%M:%S",
    ]

    text = str(value).strip()
    for fmt in formats:
        try:
            return datetime.strptime(text, fmt).time()
        except ValueError:
            continue

    raise ValueError(f"无法解析时刻: {value}")


# ==================== 时长格式化 ====================

def format_duration(value: timedelta) -> str:
    """格式化时长，如 "2d 3h 05m"、"40m"、"-1h 00m" """
    total_seconds = int(value.total_seconds())
    sign = "-" if total_seconds < 0 else ""
    total_seconds = abs(total_seconds)

    days, rest = divmod(total_seconds, 86400)
    hours, rest = divmod(rest, 3600)
    minutes, seconds = divmod(rest, 60)

    if days:
        text = f"{days}d {hours}h {minutes:02d}m"
    elif hours:
        text = f"{hours}h {minutes:02d}m"
    else:
        text = f"{minutes}m"
    if seconds:
        text += f" {seconds:02d}s"
    return sign + text
