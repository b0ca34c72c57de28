"""
配置管理模块
职责：集中加载环境变量与运行时配置
使用 dataclass + 环境变量（.env 通过 python-dotenv 加载）
"""
import os
from dataclasses import dataclass
from pathlib import Path
from typing import Optional

from dotenv import load_dotenv


# 加载 .env（项目根目录优先，当前工作目录可覆盖）
def _load_env_chain():
    base_dir = Path(__file__).parents[3]
    candidates = [
        base_dir / ".env",
        Path.cwd() / ".env",
    ]
    for env_file in candidates:
        if env_file.exists():
            load_dotenv(dotenv_path=env_file, override=True)

_load_env_chain()


@dataclass
class Settings:
    """应用配置"""

    # ==================== 运行时配置 ====================
    log_level: str = "INFO"
    timezone: str = "Asia/Shanghai"

    # ==================== TAT 配置 ====================
    config_path: Optional[Path] = None
    tat_mode: Optional[str] = None

    @staticmethod
    def from_env() -> "Settings":
        """从环境变量加载配置"""
        log_level = os.getenv("LOG_LEVEL", "INFO").upper()
        timezone = os.getenv("TZ", "Asia/Shanghai")

        config_path_str = os.getenv("ORDER_TAT_CONFIG")
        config_path = Path(config_path_str) if config_path_str else None

        # 为空表示沿用配置文件中的 tat_mode
        tat_mode = os.getenv("ORDER_TAT_MODE") or None

        return Settings(
            log_level=log_level,
            timezone=timezone,
            config_path=config_path,
            tat_mode=tat_mode,
        )


def load_settings() -> Settings:
    """加载配置（提供函数式接口，不强制单例）"""
    return Settings.from_env()
