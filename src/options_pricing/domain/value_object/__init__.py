"""
Value Object Module

领域层值对象定义。

子模块分类:
- pricing/: 定价相关 (市场输入、Greeks 结果、情景分析)
- config/: 配置相关 (市场惯例、合约乘数表)
"""

from .pricing.market_inputs import OptionType, MarketInputs
from .pricing.greeks import Moneyness, GreekName, GreeksResult, GreekInterpretation
from .pricing.scenario import ScenarioShift, SensitivityPoint
from .config.lot_size_table import LotSizeTable
from .config.market_convention import MarketConvention

__all__ = [
    # 定价输入
    "OptionType",
    "MarketInputs",
    # 计算结果
    "Moneyness",
    "GreekName",
    "GreeksResult",
    "GreekInterpretation",
    # 情景分析
    "ScenarioShift",
    "SensitivityPoint",
    # 配置
    "LotSizeTable",
    "MarketConvention",
]
