"""
配置文件加载工具

分层职责：
- 路径解析：确定最终配置文件路径
- 文件读取：读取原始文本内容
- 内容解析：将文本解析为 Python 字典
- 注册表构建：将 teams 段转换为不可变的 TeamConfig 注册表
"""
import os
import logging
from pathlib import Path
from types import MappingProxyType
from typing import Any, Dict, Mapping, Optional, Union

import yaml

from order_tat.domain.constants import OrderStatus, StatusFamily, TatMode
from order_tat.domain.exceptions import TeamConfigError
from order_tat.domain.models import ActivityBlock, TeamConfig
from order_tat.shared.utils import parse_time

logger = logging.getLogger(__name__)

DEFAULT_TIMEZONE = "Asia/Shanghai"


class ConfigLoader:
    """配置加载器

    职责：负责加载 YAML 配置并提供点号路径访问与领域便捷方法。
    使用优先级：入参路径 > 环境变量 ORDER_TAT_CONFIG > 默认相对路径。
    """

    def __init__(self, config_path: Optional[Union[str, Path]] = None):
        # 路径解析层
        self.config_path: Path = self._resolve_config_path(config_path)
        # 配置存储
        self._config: Dict[str, Any] = {}
        # 加载流程（读取 -> 解析 -> 存储）
        self._load()

    # ==================
    # 分层私有方法
    # ==================

    def _resolve_config_path(self, config_path: Optional[Union[str, Path]]) -> Path:
        """路径解析：入参 > 环境变量 > 默认路径。"""
        if config_path:
            return Path(config_path)
        env_path = os.getenv("ORDER_TAT_CONFIG")
        if env_path:
            return Path(env_path)
        base_dir = Path(__file__).parents[3]
        return base_dir / "config" / "teams.yaml"

    def _read_text(self, path: Path) -> str:
        """文件读取：读取原始文本。"""
        if not path.exists():
            raise FileNotFoundError(f"配置文件不存在：{path}")
        return path.read_text(encoding="utf-8")

    def _parse_yaml(self, text: str) -> Dict[str, Any]:
        """内容解析：YAML 文本 -> 字典。"""
        data = yaml.safe_load(text)
        return data or {}

    def _load(self) -> None:
        """加载流程：读取 -> 解析 -> 存储。"""
        raw_text = self._read_text(self.config_path)
        self._config = self._parse_yaml(raw_text)
        logger.info(f"已加载配置文件：{self.config_path}")


    # ==================
    # 便捷方法
    # ==================

    def get(self, key: str, default: Any = None) -> Any:
        """获取配置项（点号路径）。

        行为：一旦中间层或最终值为 None，返回 default。
        例：get("teams.TRADING.start_time")
        """
        value = self._config
        for k in key.split('.'):
            if not isinstance(value, dict) or value.get(k) is None:
                return default
            value = value[k]
        return value

    def get_timezone(self, default: str = DEFAULT_TIMEZONE) -> str:
        """获取默认时区：配置文件 timezone > default"""
        return self.get('timezone', default)

    def get_tat_mode(self) -> TatMode:
        """获取团队 TAT 计时口径"""
        return TatMode.parse(self.get('tat_mode'))

    def get_team_configs(self, default_zone: Optional[str] = None) -> Mapping[str, TeamConfig]:
        """构建团队配置注册表（只读映射）

        Args:
            default_zone: 配置文件未给出 timezone 时使用的时区（通常来自环境变量 TZ）
        """
        teams = self.get('teams', {})
        if not isinstance(teams, dict):
            raise TeamConfigError(f"teams 必须是以团队名为键的映射，实际为 {type(teams).__name__}")

        zone = self.get_timezone(default_zone or DEFAULT_TIMEZONE)
        registry = {
            name: build_team_config(name, raw, default_zone=zone)
            for name, raw in teams.items()
        }
        logger.info(f"已加载 {len(registry)} 个团队配置：{', '.join(registry) or '-'}")
        return MappingProxyType(registry)


# ==================
# 注册表构建
# ==================

def build_activity_block(raw: Dict[str, Any]) -> ActivityBlock:
    """由配置字典构建活动区块

    statuses 显式列出状态；或用 family 取整个状态族，再用 exclude 剔除。
    """
    if not isinstance(raw, dict):
        raise TeamConfigError(f"活动区块必须是映射，实际为 {raw!r}")

    try:
        if raw.get('family'):
            family = StatusFamily(str(raw['family']).strip().upper())
            statuses = set(OrderStatus.of_family(family))
            statuses -= {OrderStatus.parse(s) for s in raw.get('exclude', [])}
        else:
            statuses = {OrderStatus.parse(s) for s in raw.get('statuses', [])}

        return ActivityBlock(
            statuses=frozenset(statuses),
            entry_status=OrderStatus.parse(raw['entry_status']),
            first_in_progress_status=OrderStatus.parse(raw['first_in_progress_status']),
        )
    except KeyError as e:
        raise TeamConfigError(f"活动区块缺少字段：{e.args[0]}") from None
    except TeamConfigError:
        raise
    except ValueError as e:
        raise TeamConfigError(f"活动区块配置错误：{e}") from e


def build_team_config(name: str, raw: Dict[str, Any], default_zone: str = DEFAULT_TIMEZONE) -> TeamConfig:
    """由配置字典构建团队配置"""
    raw = raw or {}
    if not isinstance(raw, dict):
        raise TeamConfigError(f"团队 {name}: 配置必须是映射，实际为 {type(raw).__name__}")

    blocks = raw.get('activity_blocks') or []
    if not isinstance(blocks, list) or not blocks:
        raise TeamConfigError(f"团队 {name}: 未配置活动区块")

    try:
        start_time = parse_time(raw.get('start_time', '09:00'))
        cutoff_time = parse_time(raw.get('cutoff_time', '17:00'))
    except ValueError as e:
        raise TeamConfigError(f"团队 {name}: {e}") from e

    return TeamConfig(
        team_name=name,
        activity_blocks=tuple(build_activity_block(b) for b in blocks),
        start_time=start_time,
        cutoff_time=cutoff_time,
        zone_id=raw.get('zone_id') or default_zone,
    )
