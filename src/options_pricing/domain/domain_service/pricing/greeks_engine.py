"""
GreeksEngine 领域服务

基于 Black-Scholes-Merton 模型 (连续股息率) 计算欧式期权理论价格、
五个标准 Greeks 以及内在价值、时间价值、虚实状态、盈亏平衡价。
通用市场与印度市场共用同一套公式，差异 (默认利率、股息率、合约乘数表)
通过注入的 MarketConvention 表达。

纯计算服务，无副作用，可被任意线程并发调用。
"""
import math
from datetime import date, datetime, time
from typing import Optional, Union

from ...exceptions import InvalidInputError, InvalidInputReason
from ...value_object.config.market_convention import MarketConvention
from ...value_object.pricing.greeks import GreeksResult, Moneyness
from ...value_object.pricing.market_inputs import MarketInputs, OptionType
from .normal_distribution import norm_cdf, norm_pdf

DateLike = Union[date, datetime, str]


class GreeksEngine:
    """
    Black-Scholes-Merton Greeks 引擎

    职责: 将 MarketInputs 转换为 GreeksResult，并提供构造合法输入所需的
    到期时间换算与合约乘数查询。
    """

    def __init__(self, convention: Optional[MarketConvention] = None):
        self._convention = convention or MarketConvention()

    @property
    def convention(self) -> MarketConvention:
        return self._convention

    @property
    def risk_free_rate(self) -> float:
        """当前市场惯例下的默认无风险利率"""
        return self._convention.risk_free_rate

    def build_inputs(
        self,
        spot_price: float,
        strike_price: float,
        time_to_expiry: float,
        volatility: float,
        option_type: Union[OptionType, str],
        risk_free_rate: Optional[float] = None,
        dividend_yield: Optional[float] = None,
    ) -> MarketInputs:
        """构造 MarketInputs，未指定的利率和股息率取市场惯例默认值"""
        return MarketInputs(
            spot_price=spot_price,
            strike_price=strike_price,
            time_to_expiry=time_to_expiry,
            risk_free_rate=(
                self._convention.risk_free_rate if risk_free_rate is None else risk_free_rate
            ),
            volatility=volatility,
            option_type=option_type,
            dividend_yield=(
                self._convention.dividend_yield if dividend_yield is None else dividend_yield
            ),
        )

    def calculate(self, inputs: MarketInputs) -> GreeksResult:
        """
        计算理论价格与 Greeks

        Args:
            inputs: 市场输入

        Returns:
            GreeksResult (theta 为每日值，vega / rho 为每 1% 变动值)

        Raises:
            InvalidInputError: spot/strike/volatility <= 0, time_to_expiry < 0,
                dividend_yield < 0, 数值非有限或期权类型非法
        """
        option_type = self._validate(inputs)

        S = inputs.spot_price
        K = inputs.strike_price
        T = inputs.time_to_expiry
        r = inputs.risk_free_rate
        sigma = inputs.volatility
        q = inputs.dividend_yield
        is_call = option_type == OptionType.CALL

        intrinsic = max(0.0, S - K) if is_call else max(0.0, K - S)
        moneyness = self._moneyness(S, K, is_call)

        sqrt_T = math.sqrt(T)
        vol_sqrt_T = sigma * sqrt_T

        # 到期边界: d1/d2 无定义，价格取内在价值，Greeks 取单侧极限
        if vol_sqrt_T == 0.0:
            if is_call:
                delta = 1.0 if S > K else 0.0
            else:
                delta = -1.0 if S < K else 0.0
            return GreeksResult(
                price=intrinsic,
                delta=delta,
                gamma=0.0,
                theta=0.0,
                vega=0.0,
                rho=0.0,
                intrinsic_value=intrinsic,
                time_value=0.0,
                moneyness=moneyness,
                break_even_price=K + intrinsic if is_call else K - intrinsic,
            )

        try:
            dividend_factor = math.exp(-q * T)
            discount_factor = math.exp(-r * T)
        except OverflowError:
            raise InvalidInputError(
                InvalidInputReason.NON_FINITE_VALUE, "risk_free_rate", r,
                message=f"计算溢出: r={r}, q={q}, T={T}",
            ) from None
        adj_spot = S * dividend_factor
        gamma_denominator = adj_spot * vol_sqrt_T
        if gamma_denominator == 0.0:
            raise InvalidInputError(
                InvalidInputReason.NON_FINITE_VALUE, "dividend_yield", q,
                message=f"股息调整后的标的价格下溢为 0: S={S}, q={q}, T={T}",
            )

        # ln(adj_spot / K) = ln(S) - ln(K) - qT
        d1 = (math.log(S) - math.log(K) - q * T + (r + 0.5 * sigma * sigma) * T) / vol_sqrt_T
        d2 = d1 - vol_sqrt_T

        pdf_d1 = norm_pdf(d1)

        # Gamma 和 Vega 对 call/put 相同
        gamma = pdf_d1 / gamma_denominator
        vega = adj_spot * pdf_d1 * sqrt_T
        decay = -(adj_spot * pdf_d1 * sigma) / (2.0 * sqrt_T)

        if is_call:
            cdf_d1 = norm_cdf(d1)
            cdf_d2 = norm_cdf(d2)
            price = adj_spot * cdf_d1 - K * discount_factor * cdf_d2
            delta = cdf_d1 * dividend_factor
            theta = decay - r * K * discount_factor * cdf_d2 + q * adj_spot * cdf_d1
            rho = K * T * discount_factor * cdf_d2
        else:
            cdf_neg_d1 = norm_cdf(-d1)
            cdf_neg_d2 = norm_cdf(-d2)
            price = K * discount_factor * cdf_neg_d2 - adj_spot * cdf_neg_d1
            delta = -cdf_neg_d1 * dividend_factor
            theta = decay + r * K * discount_factor * cdf_neg_d2 - q * adj_spot * cdf_neg_d1
            rho = -K * T * discount_factor * cdf_neg_d2

        # 近似误差可能使极度虚值期权价格略小于 0
        price = max(0.0, price)

        return GreeksResult(
            price=price,
            delta=delta,
            gamma=gamma,
            theta=theta / self._convention.days_per_year,
            vega=vega / 100.0,  # 每 1% 波动率
            rho=rho / 100.0,  # 每 1% 利率
            intrinsic_value=intrinsic,
            time_value=price - intrinsic,
            moneyness=moneyness,
            break_even_price=K + price if is_call else K - price,
        )

    def time_to_expiry_in_years(
        self, expiration: DateLike, as_of: Optional[DateLike] = None
    ) -> float:
        """
        将到期日换算为年化剩余时间

        max(0, 剩余天数) / days_per_year，已到期返回 0。
        两端均为 date 时按整日计算，含 datetime 时按小数日计算。
        只有一端带时区时，另一端按该时区解释。

        Args:
            expiration: 到期日 (date / datetime / ISO-8601 字符串)
            as_of: 计算基准时刻，默认为当前时刻 (或今天)
        """
        expiry = self._parse_date(expiration)
        if as_of is None:
            if isinstance(expiry, datetime):
                now: Union[date, datetime] = datetime.now(expiry.tzinfo)
            else:
                now = date.today()
        else:
            now = self._parse_date(as_of)

        if isinstance(expiry, datetime) or isinstance(now, datetime):
            expiry_dt, now_dt = self._as_datetime(expiry), self._as_datetime(now)
            # 仅一端带时区时，无时区一端视为同一时区
            if expiry_dt.tzinfo is None and now_dt.tzinfo is not None:
                expiry_dt = expiry_dt.replace(tzinfo=now_dt.tzinfo)
            elif now_dt.tzinfo is None and expiry_dt.tzinfo is not None:
                now_dt = now_dt.replace(tzinfo=expiry_dt.tzinfo)
            days = (expiry_dt - now_dt).total_seconds() / 86400.0
        else:
            days = float((expiry - now).days)

        return max(0.0, days) / self._convention.days_per_year

    def lot_size(self, symbol: str) -> int:
        """查询合约乘数，未登记的标的返回 1"""
        return self._convention.lot_sizes.get(symbol)

    def contract_value(self, premium: float, symbol: str, quantity: int = 1) -> float:
        """
        计算合约总价值 = 权利金 × 合约乘数 × 手数

        Raises:
            InvalidInputError: quantity < 0
        """
        if quantity < 0:
            raise InvalidInputError(
                InvalidInputReason.NEGATIVE_QUANTITY, "quantity", quantity,
                message=f"quantity 不能为负数: {quantity}",
            )
        return premium * self.lot_size(symbol) * quantity

    def _moneyness(self, spot: float, strike: float, is_call: bool) -> Moneyness:
        if abs(spot - strike) / spot < self._convention.atm_threshold:
            return Moneyness.ATM
        if is_call:
            return Moneyness.ITM if spot > strike else Moneyness.OTM
        return Moneyness.ITM if spot < strike else Moneyness.OTM

    @staticmethod
    def _validate(inputs: MarketInputs) -> OptionType:
        """校验输入参数，返回解析后的期权类型"""
        try:
            option_type = OptionType.parse(inputs.option_type)
        except ValueError:
            raise InvalidInputError(
                InvalidInputReason.INVALID_OPTION_TYPE, "option_type", inputs.option_type,
                message=f"option_type 必须为 call 或 put: {inputs.option_type!r}",
            ) from None

        for name in (
            "spot_price", "strike_price", "time_to_expiry",
            "risk_free_rate", "volatility", "dividend_yield",
        ):
            value = getattr(inputs, name)
            if not math.isfinite(value):
                raise InvalidInputError(
                    InvalidInputReason.NON_FINITE_VALUE, name, value,
                    message=f"{name} 必须为有限数值: {value!r}",
                )

        if inputs.spot_price <= 0:
            raise InvalidInputError(
                InvalidInputReason.NON_POSITIVE_SPOT, "spot_price", inputs.spot_price,
                message="spot_price 必须大于 0",
            )
        if inputs.strike_price <= 0:
            raise InvalidInputError(
                InvalidInputReason.NON_POSITIVE_STRIKE, "strike_price", inputs.strike_price,
                message="strike_price 必须大于 0",
            )
        if inputs.volatility <= 0:
            raise InvalidInputError(
                InvalidInputReason.NON_POSITIVE_VOLATILITY, "volatility", inputs.volatility,
                message="volatility 必须大于 0",
            )
        if inputs.time_to_expiry < 0:
            raise InvalidInputError(
                InvalidInputReason.NEGATIVE_TIME_TO_EXPIRY, "time_to_expiry", inputs.time_to_expiry,
                message="time_to_expiry 不能为负数",
            )
        if inputs.dividend_yield < 0:
            raise InvalidInputError(
                InvalidInputReason.NEGATIVE_DIVIDEND_YIELD, "dividend_yield", inputs.dividend_yield,
                message="dividend_yield 不能为负数",
            )
        return option_type

    @staticmethod
    def _parse_date(value: DateLike) -> Union[date, datetime]:
        if isinstance(value, (date, datetime)):
            return value
        text = str(value).strip()
        if len(text) == 10:
            return date.fromisoformat(text)
        return datetime.fromisoformat(text.replace("Z", "+00:00"))

    @staticmethod
    def _as_datetime(value: Union[date, datetime]) -> datetime:
        if isinstance(value, datetime):
            return value
        return datetime.combine(value, time())
