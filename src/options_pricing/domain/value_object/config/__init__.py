from .lot_size_table import LotSizeTable, DEFAULT_LOT_SIZE
from .market_convention import MarketConvention

__all__ = [
    "LotSizeTable",
    "DEFAULT_LOT_SIZE",
    "MarketConvention",
]
