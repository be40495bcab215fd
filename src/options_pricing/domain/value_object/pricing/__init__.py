"""
Pricing 子模块 - 定价相关值对象

包含定价输入、Greeks 结果、情景分析。
"""
from .market_inputs import OptionType, MarketInputs
from .greeks import Moneyness, GreekName, GreeksResult, GreekInterpretation
from .scenario import ScenarioShift, SensitivityPoint

__all__ = [
    "OptionType",
    "MarketInputs",
    "Moneyness",
    "GreekName",
    "GreeksResult",
    "GreekInterpretation",
    "ScenarioShift",
    "SensitivityPoint",
]
