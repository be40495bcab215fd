"""
MarketConvention - 市场惯例配置值对象

通用 Black-Scholes 与印度市场版本共用同一套公式，区别只在于
默认无风险利率、默认股息率和合约乘数表，统一收拢为本配置对象注入 GreeksEngine。
"""
from dataclasses import dataclass, field

from .lot_size_table import LotSizeTable


@dataclass(frozen=True)
class MarketConvention:
    """
    市场惯例

    所有字段均有默认值 (通用市场)，印度市场等配置由
    config/domain_service/pricing/market_convention.toml 加载。
    """

    name: str = "generic"                                        # 市场名称
    risk_free_rate: float = 0.05                                 # 默认无风险利率
    dividend_yield: float = 0.0                                  # 默认连续股息率
    lot_sizes: LotSizeTable = field(default_factory=LotSizeTable)  # 合约乘数表
    atm_threshold: float = 0.02                                  # |S-K|/S 小于该值视为平值
    days_per_year: int = 365                                     # 年化天数
