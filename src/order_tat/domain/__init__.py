"""
领域层（Domain Layer）
职责：订单状态、团队配置等领域模型与计时规则
依赖：无（仅 shared）
"""
