"""
Greeks 展示格式化与数值解读

为期权链表格、Greeks 面板等展示层提供统一的小数位和分档标签。
"""
from ...value_object.pricing.greeks import GreekInterpretation, GreekName

_DECIMALS = {
    GreekName.DELTA: 4,
    GreekName.GAMMA: 5,
    GreekName.THETA: 4,
    GreekName.VEGA: 4,
    GreekName.RHO: 4,
}


def format_greek(value: float, greek: GreekName) -> str:
    """按 Greek 类型格式化小数位 (gamma 5 位，其余 4 位)"""
    return f"{value:.{_DECIMALS[GreekName(greek)]}f}"


def interpret_greek(value: float, greek: GreekName) -> GreekInterpretation:
    """将单个 Greek 数值映射为分档解读"""
    greek = GreekName(greek)
    if greek == GreekName.DELTA:
        return _interpret_delta(value)
    if greek == GreekName.GAMMA:
        if value > 0.1:
            return GreekInterpretation("Very High", "red", "Rapid delta changes")
        if value > 0.05:
            return GreekInterpretation("High", "orange", "Significant acceleration")
        if value > 0.02:
            return GreekInterpretation("Moderate", "yellow", "Standard acceleration")
        return GreekInterpretation("Low", "green", "Stable delta")
    if greek == GreekName.THETA:
        if value < -0.5:
            return GreekInterpretation("Rapid Decay", "red", "Losing value quickly")
        if value < -0.2:
            return GreekInterpretation("High Decay", "orange", "Notable time decay")
        if value < -0.05:
            return GreekInterpretation("Moderate Decay", "yellow", "Standard decay")
        if value < 0:
            return GreekInterpretation("Low Decay", "green", "Minimal decay")
        return GreekInterpretation("Positive", "green", "Earning theta")
    if greek == GreekName.VEGA:
        if value > 0.5:
            return GreekInterpretation("Very Sensitive", "red", "High volatility risk")
        if value > 0.3:
            return GreekInterpretation("Sensitive", "orange", "Moderate vol risk")
        if value > 0.1:
            return GreekInterpretation("Moderate", "yellow", "Some vol exposure")
        return GreekInterpretation("Low", "green", "Limited vol risk")
    # RHO
    if abs(value) > 0.5:
        return GreekInterpretation("High Sensitivity", "orange", "Rate sensitive")
    if abs(value) > 0.2:
        return GreekInterpretation("Moderate", "yellow", "Some rate exposure")
    return GreekInterpretation("Low", "green", "Limited rate risk")


def _interpret_delta(value: float) -> GreekInterpretation:
    if value > 0.7:
        return GreekInterpretation("Deep ITM", "green", "Behaves like stock")
    if value > 0.5:
        return GreekInterpretation("ITM", "green", "Strong directional exposure")
    if value > 0.3:
        return GreekInterpretation("Near ATM", "yellow", "Moderate directional exposure")
    if value > 0:
        return GreekInterpretation("OTM", "orange", "Lower probability")
    if value > -0.3:
        return GreekInterpretation("OTM Put", "orange", "Lower probability")
    if value > -0.5:
        return GreekInterpretation("Near ATM", "yellow", "Moderate exposure")
    if value > -0.7:
        return GreekInterpretation("ITM Put", "green", "Strong downside exposure")
    return GreekInterpretation("Deep ITM", "green", "Strong downside exposure")
