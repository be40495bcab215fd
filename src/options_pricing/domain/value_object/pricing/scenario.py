"""
情景分析相关值对象
"""
from dataclasses import dataclass


@dataclass(frozen=True)
class ScenarioShift:
    """
    情景冲击

    Attributes:
        spot_change: 标的价格相对变化 (0.05 表示 +5%)
        volatility_change: 波动率相对变化 (-0.2 表示波动率下降 20%)
        days_passed: 经过的自然日数
    """
    spot_change: float = 0.0
    volatility_change: float = 0.0
    days_passed: float = 0.0


@dataclass(frozen=True)
class SensitivityPoint:
    """敏感度扫描中单个标的价格点的计算结果"""
    spot_price: float
    price: float
    delta: float
    gamma: float
    theta: float
    vega: float
