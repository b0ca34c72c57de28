"""领域异常定义。"""


class TatError(Exception):
    """TAT 计算相关异常基类"""


class UnknownTeamError(TatError, LookupError):
    """请求的团队不在配置注册表中（调用方错误，不回落为 0）"""

    def __init__(self, team_name: str):
        super().__init__(f"未知团队: {team_name}")
        self.team_name = team_name


class TeamConfigError(TatError, ValueError):
    """团队/活动区块配置不合法"""
