"""
engine_setup.py - GreeksEngine 装配

按 环境变量 -> TOML 市场惯例 -> GreeksEngine 的顺序完成装配，
供 HTTP 层、交易记录等调用方在启动时获取引擎实例。
"""
import logging
from typing import Optional

from src.main.config.config_loader import ConfigLoader
from src.main.config.domain_service_config_loader import DEFAULT_MARKET, load_market_convention
from src.options_pricing.domain.domain_service.pricing.greeks_engine import GreeksEngine

logger = logging.getLogger(__name__)


def create_greeks_engine(
    market: Optional[str] = None,
    overrides: Optional[dict] = None,
    overrides_path: Optional[str] = None,
) -> GreeksEngine:
    """
    创建 GreeksEngine

    优先级: 显式参数 > 环境变量 (PRICING_*) > YAML 覆盖文件 > TOML 文件 > 默认值

    Args:
        market: 市场名称，未指定时取 PRICING_MARKET，再回退到 generic
        overrides: 市场惯例字段覆盖值
        overrides_path: YAML 覆盖文件，未指定时取 PRICING_OVERRIDES_FILE

    Raises:
        ConfigurationError: 市场不存在、覆盖文件缺失或配置不合法
    """
    env = ConfigLoader.load_pricing_env()

    merged: dict = {}
    path = overrides_path or env["overrides_file"]
    if path:
        merged.update(ConfigLoader.load_overrides_file(path))
    merged.update(env["overrides"])
    merged.update(overrides or {})

    market_name = market or env["market"] or DEFAULT_MARKET
    convention = load_market_convention(market_name, overrides=merged)
    logger.info(
        "GreeksEngine 已创建: market=%s, risk_free_rate=%s, dividend_yield=%s",
        convention.name, convention.risk_free_rate, convention.dividend_yield,
    )
    return GreeksEngine(convention)
