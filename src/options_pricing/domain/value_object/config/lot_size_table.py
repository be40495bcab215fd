"""
LotSizeTable - 合约乘数表值对象

标的代码 -> 每手合约单位数的只读映射。构造后不可修改，可被并发读取。
"""
from dataclasses import dataclass
from typing import Dict, Iterator, Mapping, Tuple

DEFAULT_LOT_SIZE = 1


@dataclass(frozen=True)
class LotSizeTable:
    """
    合约乘数表

    entries 中的代码统一转为大写并排序，查询大小写不敏感。
    未登记的代码返回 DEFAULT_LOT_SIZE (1)。
    """

    entries: Tuple[Tuple[str, int], ...] = ()

    def __post_init__(self) -> None:
        normalized: Dict[str, int] = {}
        for symbol, size in self.entries:
            key = self._normalize(symbol)
            if not key:
                raise ValueError("合约乘数表中存在空的标的代码")
            if isinstance(size, bool) or not isinstance(size, int) or size <= 0:
                raise ValueError(f"标的 {key} 的合约乘数必须为正整数: {size!r}")
            normalized[key] = size
        object.__setattr__(self, "entries", tuple(sorted(normalized.items())))
        object.__setattr__(self, "_index", normalized)

    @classmethod
    def from_mapping(cls, mapping: Mapping[str, int]) -> "LotSizeTable":
        """从 {代码: 乘数} 字典构建"""
        return cls(entries=tuple(mapping.items()))

    def get(self, symbol: str) -> int:
        """查询合约乘数，未登记返回 1"""
        return self._index.get(self._normalize(symbol), DEFAULT_LOT_SIZE)

    def __contains__(self, symbol: object) -> bool:
        return isinstance(symbol, str) and self._normalize(symbol) in self._index

    def __iter__(self) -> Iterator[str]:
        return iter(self._index)

    def __len__(self) -> int:
        return len(self.entries)

    @staticmethod
    def _normalize(symbol: str) -> str:
        return str(symbol).strip().upper()
