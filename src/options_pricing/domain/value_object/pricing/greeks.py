"""
Greeks 计算结果值对象
"""
from dataclasses import asdict, dataclass
from enum import Enum
from typing import Any, Dict


class Moneyness(str, Enum):
    """行权价相对标的价格的虚实状态"""
    ITM = "ITM"
    ATM = "ATM"
    OTM = "OTM"


class GreekName(str, Enum):
    """五个标准 Greeks"""
    DELTA = "delta"
    GAMMA = "gamma"
    THETA = "theta"
    VEGA = "vega"
    RHO = "rho"


@dataclass(frozen=True)
class GreeksResult:
    """
    单次定价计算结果

    Attributes:
        price: 理论权利金 (>= 0)
        delta: 对标的价格的敏感度
        gamma: Delta 对标的价格的敏感度
        theta: 每日时间衰减
        vega: 波动率变动 1% 的价格变化
        rho: 利率变动 1% 的价格变化
        intrinsic_value: 内在价值 (基于未经股息调整的标的价格)
        time_value: 时间价值 = price - intrinsic_value (不截断，近似误差可能使其略小于 0)
        moneyness: 虚实状态
        break_even_price: 到期盈亏平衡价
    """
    price: float
    delta: float
    gamma: float
    theta: float
    vega: float
    rho: float
    intrinsic_value: float
    time_value: float
    moneyness: Moneyness
    break_even_price: float

    def greek(self, name: GreekName) -> float:
        """按名称取单个 Greek"""
        return getattr(self, GreekName(name).value)

    def to_dict(self) -> Dict[str, Any]:
        """转换为可直接 JSON 序列化的字典"""
        data = asdict(self)
        data["moneyness"] = self.moneyness.value
        return data


@dataclass(frozen=True)
class GreekInterpretation:
    """
    单个 Greek 数值的解读

    Attributes:
        label: 简短标签 (如 "Deep ITM")
        color: 展示颜色提示
        description: 说明
    """
    label: str
    color: str
    description: str
