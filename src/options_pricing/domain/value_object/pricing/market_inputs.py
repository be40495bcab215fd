"""
定价输入值对象

定义期权类型枚举和单次定价计算的市场输入参数。
"""
from dataclasses import dataclass
from enum import Enum
from typing import Union


class OptionType(str, Enum):
    """期权类型"""
    CALL = "call"
    PUT = "put"

    @classmethod
    def parse(cls, value: Union["OptionType", str]) -> "OptionType":
        """接受枚举或大小写不敏感的字符串 ("call" | "put")"""
        if isinstance(value, cls):
            return value
        return cls(str(value).strip().lower())


@dataclass(frozen=True)
class MarketInputs:
    """
    单次定价计算的市场输入

    每次计算新建一个实例；构造时不做校验，由 GreeksEngine.calculate 校验。

    Attributes:
        spot_price: 标的价格 (> 0)
        strike_price: 行权价 (> 0)
        time_to_expiry: 剩余到期时间 (年化，剩余天数 / 365，>= 0)
        risk_free_rate: 无风险利率 (年化，如 0.065)
        volatility: 隐含波动率 (年化小数，如 0.25，> 0)
        option_type: 期权类型 (OptionType 或 "call" | "put")
        dividend_yield: 连续股息率 (年化，>= 0)
    """
    spot_price: float
    strike_price: float
    time_to_expiry: float
    risk_free_rate: float
    volatility: float
    option_type: Union[OptionType, str]
    dividend_yield: float = 0.0
