"""
定价领域异常定义

定价核心只有一种失败: 输入不合法 (InvalidInputError)，按失败的约束参数化。
配置层的错误 (TOML 取值不合法、未知市场) 使用 ConfigurationError。
"""
from enum import Enum
from typing import Any, Dict, Optional


class PricingError(Exception):
    """定价领域异常基类"""

    def __init__(self, message: str, details: Optional[Dict[str, Any]] = None) -> None:
        super().__init__(message)
        self.message = message
        self.details = details or {}

    def to_dict(self) -> Dict[str, Any]:
        """转换为字典，供调用方序列化 (如 HTTP 400 响应体)"""
        return {
            "error_type": self.__class__.__name__,
            "message": self.message,
            "details": self.details,
        }


class InvalidInputReason(str, Enum):
    """输入校验失败原因"""
    NON_POSITIVE_SPOT = "non_positive_spot"
    NON_POSITIVE_STRIKE = "non_positive_strike"
    NON_POSITIVE_VOLATILITY = "non_positive_volatility"
    NEGATIVE_TIME_TO_EXPIRY = "negative_time_to_expiry"
    NEGATIVE_DIVIDEND_YIELD = "negative_dividend_yield"
    NON_FINITE_VALUE = "non_finite_value"
    INVALID_OPTION_TYPE = "invalid_option_type"
    NEGATIVE_QUANTITY = "negative_quantity"
    INVALID_RANGE = "invalid_range"


class InvalidInputError(PricingError, ValueError):
    """
    输入参数不合法

    Attributes:
        reason: 失败的约束
        field: 出错的字段名
        value: 出错的取值
    """

    def __init__(
        self,
        reason: InvalidInputReason,
        field: str,
        value: Any,
        message: Optional[str] = None,
    ) -> None:
        self.reason = reason
        self.field = field
        self.value = value
        super().__init__(
            message or f"{field} 不合法: {value!r} ({reason.value})",
            details={"reason": reason.value, "field": field, "value": value},
        )


class ConfigurationError(PricingError, ValueError):
    """市场惯例配置不合法或缺失"""
    pass
