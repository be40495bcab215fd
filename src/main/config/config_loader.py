"""
config_loader.py - 配置加载器

支持:
1. TOML 配置文件 (市场惯例配置)
2. YAML 配置文件 (调用方的覆盖配置)
3. 环境变量 (.env，选择市场和覆盖利率)
4. 配置验证
"""
import logging
import math
import os
import sys
from pathlib import Path
from typing import Any, Dict

from dotenv import load_dotenv

from src.options_pricing.domain.exceptions import ConfigurationError

# Python 3.11+ 内置 tomllib，之前版本使用 tomli
if sys.version_info >= (3, 11):
    import tomllib
else:
    import tomli as tomllib

logger = logging.getLogger(__name__)

# 从 src/main/config/config_loader.py 到项目根目录需要 4 级 parent
PROJECT_ROOT = Path(__file__).resolve().parent.parent.parent.parent

ENV_MARKET = "PRICING_MARKET"
ENV_RISK_FREE_RATE = "PRICING_RISK_FREE_RATE"
ENV_DIVIDEND_YIELD = "PRICING_DIVIDEND_YIELD"
ENV_OVERRIDES_FILE = "PRICING_OVERRIDES_FILE"


class ConfigLoader:
    """
    配置加载器

    - 市场惯例: 从 TOML 文件加载
    - 运行环境: 从环境变量加载 (.env)
    """

    @staticmethod
    def load_toml(path: str) -> Dict[str, Any]:
        """加载 TOML 配置文件"""
        with open(path, "rb") as f:
            return tomllib.load(f)

    @staticmethod
    def load_yaml(path: str) -> Dict[str, Any]:
        """加载 YAML 配置文件，空文件返回空字典"""
        import yaml
        with open(path, "r", encoding="utf-8") as f:
            return yaml.safe_load(f) or {}

    @staticmethod
    def load_overrides_file(path: str) -> Dict[str, Any]:
        """
        加载市场惯例覆盖文件 (YAML)

        相对路径按项目根目录解析。文件内容须为映射，如:
            risk_free_rate: 0.07
            lot_sizes:
              NIFTY: 75

        Raises:
            ConfigurationError: 文件不存在或顶层不是映射
        """
        resolved = Path(path)
        if not resolved.is_absolute():
            resolved = PROJECT_ROOT / resolved
        if not resolved.exists():
            raise ConfigurationError(
                f"覆盖配置文件不存在: {resolved}", details={"path": str(resolved)}
            )
        data = ConfigLoader.load_yaml(str(resolved))
        if not isinstance(data, dict):
            raise ConfigurationError(
                f"覆盖配置文件顶层必须为映射: {resolved}", details={"path": str(resolved)}
            )
        logger.info("已加载覆盖配置文件: %s", resolved)
        return data

    @staticmethod
    def load_pricing_env() -> Dict[str, Any]:
        """
        从环境变量加载定价相关配置

        读取:
            PRICING_MARKET: 市场名称 (如 india)
            PRICING_RISK_FREE_RATE: 覆盖默认无风险利率
            PRICING_DIVIDEND_YIELD: 覆盖默认股息率
            PRICING_OVERRIDES_FILE: YAML 覆盖文件路径

        Returns:
            {"market": str | None, "overrides": {...}, "overrides_file": str | None}

        Raises:
            ConfigurationError: 数值型变量无法解析为浮点数
        """
        env_path = PROJECT_ROOT / ".env"
        if env_path.exists():
            load_dotenv(dotenv_path=env_path)
        else:
            load_dotenv()

        overrides: Dict[str, float] = {}
        for env_key, field_name in (
            (ENV_RISK_FREE_RATE, "risk_free_rate"),
            (ENV_DIVIDEND_YIELD, "dividend_yield"),
        ):
            raw = os.getenv(env_key)
            if not raw:
                continue
            try:
                overrides[field_name] = float(raw)
            except ValueError:
                raise ConfigurationError(
                    f"环境变量 {env_key} 不是合法数值: {raw!r}",
                    details={"env": env_key, "value": raw},
                ) from None

        market = os.getenv(ENV_MARKET) or None
        overrides_file = os.getenv(ENV_OVERRIDES_FILE) or None
        if market or overrides or overrides_file:
            logger.info(
                "已从环境变量加载定价配置: market=%s, overrides=%s, overrides_file=%s",
                market, overrides, overrides_file,
            )
        return {"market": market, "overrides": overrides, "overrides_file": overrides_file}

    @staticmethod
    def validate_convention_config(name: str, config: Dict[str, Any]) -> bool:
        """
        验证单个市场惯例配置节

        Args:
            name: 市场名称
            config: 市场配置字典

        Returns:
            True 如果配置有效

        Raises:
            ConfigurationError: 字段取值不合法
        """
        for key in ("risk_free_rate", "dividend_yield", "atm_threshold"):
            if key not in config:
                continue
            value = config[key]
            if isinstance(value, bool) or not isinstance(value, (int, float)):
                raise ConfigurationError(f"市场 {name} 的 {key} 必须为数值: {value!r}")
            if not math.isfinite(value):
                raise ConfigurationError(f"市场 {name} 的 {key} 必须为有限数值: {value!r}")

        if config.get("dividend_yield", 0.0) < 0:
            raise ConfigurationError(f"市场 {name} 的 dividend_yield 不能为负数")
        if "atm_threshold" in config and config["atm_threshold"] <= 0:
            raise ConfigurationError(f"市场 {name} 的 atm_threshold 必须大于 0")
        if "days_per_year" in config:
            days = config["days_per_year"]
            if isinstance(days, bool) or not isinstance(days, int) or days <= 0:
                raise ConfigurationError(f"市场 {name} 的 days_per_year 必须为正整数: {days!r}")

        lot_sizes = config.get("lot_sizes", {})
        if not isinstance(lot_sizes, dict):
            raise ConfigurationError(f"市场 {name} 的 lot_sizes 必须为表")
        for symbol, size in lot_sizes.items():
            if isinstance(size, bool) or not isinstance(size, int) or size <= 0:
                raise ConfigurationError(
                    f"市场 {name} 中 {symbol} 的合约乘数必须为正整数: {size!r}"
                )
        return True
