"""
domain_service_config_loader.py - 领域服务 TOML 配置加载器

从 config/domain_service/ 目录下的 TOML 文件加载领域服务配置，
并转换为对应的配置值对象。
"""
import logging
from pathlib import Path
from typing import List, Optional

from src.main.config.config_loader import ConfigLoader
from src.options_pricing.domain.exceptions import ConfigurationError
from src.options_pricing.domain.value_object.config.lot_size_table import LotSizeTable
from src.options_pricing.domain.value_object.config.market_convention import MarketConvention

logger = logging.getLogger(__name__)

# 项目根目录 (从 src/main/config/ 向上 3 级)
_PROJECT_ROOT = Path(__file__).resolve().parent.parent.parent.parent
_DOMAIN_SERVICE_CONFIG_DIR = _PROJECT_ROOT / "config" / "domain_service"
MARKET_CONVENTION_PATH = _DOMAIN_SERVICE_CONFIG_DIR / "pricing" / "market_convention.toml"

DEFAULT_MARKET = "generic"


def _load_toml(path: Path) -> dict:
    """加载 TOML 文件，文件不存在时返回空字典"""
    if not path.exists():
        logger.warning("配置文件不存在，使用默认值: %s", path)
        return {}
    return ConfigLoader.load_toml(str(path))


def available_markets(path: Optional[Path] = None) -> List[str]:
    """列出 TOML 中已配置的市场名称"""
    data = _load_toml(path or MARKET_CONVENTION_PATH)
    return sorted(name for name, section in data.items() if isinstance(section, dict))


def load_market_convention(
    name: str = DEFAULT_MARKET,
    overrides: Optional[dict] = None,
    path: Optional[Path] = None,
) -> MarketConvention:
    """
    加载市场惯例配置

    优先级: overrides > TOML 文件 > dataclass 默认值

    Args:
        name: 市场名称 (大小写不敏感，如 "generic" / "india")
        overrides: 运行时覆盖值 (如来自环境变量或 YAML 的 risk_free_rate)
        path: TOML 文件路径，默认为 config/domain_service/pricing/market_convention.toml

    Raises:
        ConfigurationError: 非默认市场在 TOML 中不存在，或字段取值不合法
    """
    key = name.strip().lower()
    data = _load_toml(path or MARKET_CONVENTION_PATH)
    overrides = overrides or {}

    section = data.get(key)
    if section is None:
        if key != DEFAULT_MARKET:
            raise ConfigurationError(
                f"未知市场: {name}",
                details={"market": name, "available": sorted(data)},
            )
        section = {}

    ConfigLoader.validate_convention_config(key, section)

    override_lots = overrides.get("lot_sizes", {})
    if not isinstance(override_lots, dict):
        raise ConfigurationError(f"市场 {key} 的 lot_sizes 覆盖值必须为表: {override_lots!r}")
    lot_sizes = dict(section.get("lot_sizes", {}))
    lot_sizes.update(override_lots)

    # 覆盖值与 TOML 合并后再校验一次
    merged = {**section, **overrides, "lot_sizes": lot_sizes}
    ConfigLoader.validate_convention_config(key, merged)

    kwargs = {"name": key}
    _map_field(kwargs, "risk_free_rate", overrides, "risk_free_rate", section, "risk_free_rate")
    _map_field(kwargs, "dividend_yield", overrides, "dividend_yield", section, "dividend_yield")
    _map_field(kwargs, "atm_threshold", overrides, "atm_threshold", section, "atm_threshold")
    _map_field(kwargs, "days_per_year", overrides, "days_per_year", section, "days_per_year")

    try:
        kwargs["lot_sizes"] = LotSizeTable.from_mapping(lot_sizes)
    except ValueError as e:
        raise ConfigurationError(f"市场 {key} 的合约乘数表不合法: {e}") from e

    convention = MarketConvention(**kwargs)
    logger.debug(
        "已加载市场惯例 %s: r=%s, q=%s, 合约乘数 %d 项",
        convention.name, convention.risk_free_rate, convention.dividend_yield,
        len(convention.lot_sizes),
    )
    return convention


def _map_field(
    kwargs: dict,
    config_key: str,
    overrides: dict,
    override_key: str,
    toml_section: dict,
    toml_key: str,
) -> None:
    """辅助: 按优先级填充字段 (overrides > toml > 默认值)"""
    if override_key in overrides:
        kwargs[config_key] = overrides[override_key]
    elif toml_key in toml_section:
        kwargs[config_key] = toml_section[toml_key]
