"""
Pricing Module

期权定价领域服务。

- GreeksEngine: Black-Scholes-Merton 价格与 Greeks 引擎
- ScenarioAnalyzer: 情景冲击与敏感度扫描
- norm_cdf / norm_pdf: 标准正态分布近似
- format_greek / interpret_greek: Greeks 展示格式化与解读
"""

from .normal_distribution import norm_cdf, norm_pdf
from .greeks_engine import GreeksEngine
from .scenario_analyzer import ScenarioAnalyzer
from .greeks_interpreter import format_greek, interpret_greek

__all__ = [
    "norm_cdf",
    "norm_pdf",
    "GreeksEngine",
    "ScenarioAnalyzer",
    "format_greek",
    "interpret_greek",
]
