"""
GreeksEngine 单元测试

验证 GreeksEngine 的输入校验、参考值、到期边界、虚实状态、
到期时间换算与合约乘数计算。
"""
import math
from datetime import date, datetime, timedelta, timezone

import pytest

from src.options_pricing.domain.domain_service.pricing.greeks_engine import GreeksEngine
from src.options_pricing.domain.exceptions import InvalidInputError, InvalidInputReason
from src.options_pricing.domain.value_object.config.lot_size_table import LotSizeTable
from src.options_pricing.domain.value_object.config.market_convention import MarketConvention
from src.options_pricing.domain.value_object.pricing.greeks import Moneyness
from src.options_pricing.domain.value_object.pricing.market_inputs import MarketInputs, OptionType


@pytest.fixture
def engine():
    return GreeksEngine()


@pytest.fixture
def india_engine():
    convention = MarketConvention(
        name="india",
        risk_free_rate=0.065,
        lot_sizes=LotSizeTable.from_mapping({"NIFTY": 25, "BANKNIFTY": 15, "SBIN": 1500}),
    )
    return GreeksEngine(convention)


def _make_input(
    spot_price=100.0,
    strike_price=100.0,
    time_to_expiry=0.5,
    risk_free_rate=0.05,
    volatility=0.2,
    option_type=OptionType.CALL,
    dividend_yield=0.0,
) -> MarketInputs:
    return MarketInputs(
        spot_price=spot_price,
        strike_price=strike_price,
        time_to_expiry=time_to_expiry,
        risk_free_rate=risk_free_rate,
        volatility=volatility,
        option_type=option_type,
        dividend_yield=dividend_yield,
    )


def _exact_cdf(x):
    return 0.5 * (1.0 + math.erf(x / math.sqrt(2.0)))


def _reference(S, K, T, r, sigma, q, opt):
    """基于 math.erf 的教科书 Black-Scholes-Merton 参照实现 (theta 年化)"""
    adj = S * math.exp(-q * T)
    D = math.exp(-r * T)
    d1 = (math.log(adj / K) + (r + 0.5 * sigma ** 2) * T) / (sigma * math.sqrt(T))
    d2 = d1 - sigma * math.sqrt(T)
    pdf = math.exp(-0.5 * d1 * d1) / math.sqrt(2 * math.pi)
    decay = -adj * pdf * sigma / (2 * math.sqrt(T))
    if opt == "call":
        price = adj * _exact_cdf(d1) - K * D * _exact_cdf(d2)
        theta = decay - r * K * D * _exact_cdf(d2) + q * adj * _exact_cdf(d1)
    else:
        price = K * D * _exact_cdf(-d2) - adj * _exact_cdf(-d1)
        theta = decay + r * K * D * _exact_cdf(-d2) - q * adj * _exact_cdf(-d1)
    return price, theta


class TestGreeksEngineValidation:
    """输入校验测试"""

    @pytest.mark.parametrize("field, value, reason", [
        ("spot_price", 0.0, InvalidInputReason.NON_POSITIVE_SPOT),
        ("spot_price", -1.0, InvalidInputReason.NON_POSITIVE_SPOT),
        ("strike_price", 0.0, InvalidInputReason.NON_POSITIVE_STRIKE),
        ("strike_price", -5.0, InvalidInputReason.NON_POSITIVE_STRIKE),
        ("volatility", 0.0, InvalidInputReason.NON_POSITIVE_VOLATILITY),
        ("volatility", -0.1, InvalidInputReason.NON_POSITIVE_VOLATILITY),
        ("time_to_expiry", -0.01, InvalidInputReason.NEGATIVE_TIME_TO_EXPIRY),
        ("dividend_yield", -0.02, InvalidInputReason.NEGATIVE_DIVIDEND_YIELD),
        ("spot_price", math.nan, InvalidInputReason.NON_FINITE_VALUE),
        ("volatility", math.inf, InvalidInputReason.NON_FINITE_VALUE),
        ("risk_free_rate", math.nan, InvalidInputReason.NON_FINITE_VALUE),
    ])
    def test_invalid_numeric_fields(self, engine, field, value, reason):
        with pytest.raises(InvalidInputError) as exc_info:
            engine.calculate(_make_input(**{field: value}))
        assert exc_info.value.reason == reason
        assert exc_info.value.field == field
        assert field in str(exc_info.value)

    def test_invalid_option_type(self, engine):
        with pytest.raises(InvalidInputError) as exc_info:
            engine.calculate(_make_input(option_type="straddle"))
        assert exc_info.value.reason == InvalidInputReason.INVALID_OPTION_TYPE

    def test_invalid_input_is_value_error(self, engine):
        with pytest.raises(ValueError):
            engine.calculate(_make_input(spot_price=-1.0))

    def test_error_to_dict(self, engine):
        with pytest.raises(InvalidInputError) as exc_info:
            engine.calculate(_make_input(strike_price=0.0))
        data = exc_info.value.to_dict()
        assert data["error_type"] == "InvalidInputError"
        assert data["details"]["reason"] == "non_positive_strike"
        assert data["details"]["field"] == "strike_price"

    def test_string_option_type_accepted(self, engine):
        by_enum = engine.calculate(_make_input(option_type=OptionType.PUT))
        by_str = engine.calculate(_make_input(option_type="PUT"))
        assert by_enum == by_str

    def test_dividend_discount_underflow_rejected(self, engine):
        """e^(-qT) 下溢使股息调整后的标的价格为 0 时，按非有限数值拒绝"""
        with pytest.raises(InvalidInputError) as exc_info:
            engine.calculate(_make_input(time_to_expiry=1.0, dividend_yield=1000.0))
        assert exc_info.value.reason == InvalidInputReason.NON_FINITE_VALUE
        assert exc_info.value.field == "dividend_yield"

    def test_negative_rate_is_valid(self, engine):
        result = engine.calculate(_make_input(risk_free_rate=-0.01))
        assert result.price > 0


class TestGreeksEngineReferenceValues:
    """与参考表 (Hull, S=49, K=50, r=5%, σ=20%, T=20 周) 对照"""

    def test_call_reference(self, engine):
        result = engine.calculate(_make_input(
            spot_price=49.0, strike_price=50.0, time_to_expiry=20.0 / 52.0,
            risk_free_rate=0.05, volatility=0.2,
        ))
        assert result.price == pytest.approx(2.4006, abs=2e-3)
        assert result.delta == pytest.approx(0.5216, abs=1e-3)
        assert result.gamma == pytest.approx(0.0655, abs=1e-3)
        assert result.theta == pytest.approx(-4.3053 / 365.0, abs=1e-4)
        assert result.vega == pytest.approx(0.1211, abs=1e-3)
        assert result.rho == pytest.approx(0.0891, abs=1e-3)

    def test_put_reference(self, engine):
        result = engine.calculate(_make_input(
            spot_price=49.0, strike_price=50.0, time_to_expiry=20.0 / 52.0,
            risk_free_rate=0.05, volatility=0.2, option_type=OptionType.PUT,
        ))
        assert result.price == pytest.approx(2.4482, abs=2e-3)
        assert result.delta == pytest.approx(0.5216 - 1.0, abs=1e-3)
        assert result.rho < 0

    @pytest.mark.parametrize("opt", ["call", "put"])
    @pytest.mark.parametrize("q", [0.0, 0.03, 0.08])
    def test_matches_exact_reference_with_dividend(self, engine, opt, q):
        S, K, T, r, sigma = 100.0, 95.0, 0.5, 0.06, 0.25
        result = engine.calculate(_make_input(
            spot_price=S, strike_price=K, time_to_expiry=T, risk_free_rate=r,
            volatility=sigma, option_type=opt, dividend_yield=q,
        ))
        price, theta_annual = _reference(S, K, T, r, sigma, q, opt)
        assert result.price == pytest.approx(price, abs=1e-4)
        assert result.theta == pytest.approx(theta_annual / 365.0, abs=1e-6)

    def test_put_theta_includes_dividend_carry(self, engine):
        """看跌期权 theta 含股息项 -q·S·e^(-qT)·N(-d1)，不可省略"""
        S, K, T, r, sigma, q = 100.0, 110.0, 0.25, 0.05, 0.3, 0.04
        with_q = engine.calculate(_make_input(
            spot_price=S, strike_price=K, time_to_expiry=T, risk_free_rate=r,
            volatility=sigma, option_type="put", dividend_yield=q,
        ))
        adj = S * math.exp(-q * T)
        d1 = (math.log(adj / K) + (r + 0.5 * sigma ** 2) * T) / (sigma * math.sqrt(T))
        d2 = d1 - sigma * math.sqrt(T)
        pdf = math.exp(-0.5 * d1 * d1) / math.sqrt(2 * math.pi)
        without_carry = (
            -adj * pdf * sigma / (2 * math.sqrt(T))
            + r * K * math.exp(-r * T) * _exact_cdf(-d2)
        ) / 365.0
        carry = q * adj * _exact_cdf(-d1) / 365.0
        assert with_q.theta == pytest.approx(without_carry - carry, abs=1e-6)
        assert with_q.theta != pytest.approx(without_carry, abs=1e-6)

    @pytest.mark.parametrize("opt", ["call", "put"])
    def test_theta_matches_finite_difference(self, engine, opt):
        """theta (年化) ≈ -∂V/∂T"""
        h = 1e-3
        base = dict(spot_price=100.0, strike_price=95.0, risk_free_rate=0.06,
                    volatility=0.25, option_type=opt, dividend_yield=0.03)
        up = engine.calculate(_make_input(time_to_expiry=0.5 + h, **base)).price
        down = engine.calculate(_make_input(time_to_expiry=0.5 - h, **base)).price
        theta = engine.calculate(_make_input(time_to_expiry=0.5, **base)).theta
        assert theta * 365.0 == pytest.approx(-(up - down) / (2 * h), rel=5e-3)


class TestGreeksEngineScenarios:
    """典型场景"""

    def test_atm_30_day_call(self, engine):
        result = engine.calculate(_make_input(
            spot_price=580.0, strike_price=580.0, time_to_expiry=30.0 / 365.0,
            risk_free_rate=0.065, volatility=0.15,
        ))
        assert 10.0 <= result.price <= 14.0
        assert 0.5 <= result.delta <= 0.6
        assert result.moneyness == Moneyness.ATM
        assert result.intrinsic_value == 0.0
        assert result.time_value == pytest.approx(result.price)
        assert result.break_even_price == pytest.approx(580.0 + result.price)

    def test_deep_itm_call(self, engine):
        result = engine.calculate(_make_input(
            spot_price=700.0, strike_price=500.0, time_to_expiry=7.0 / 365.0,
            risk_free_rate=0.065, volatility=0.2,
        ))
        assert result.delta > 0.999
        assert result.intrinsic_value == 200.0
        assert result.moneyness == Moneyness.ITM
        assert result.price >= 200.0

    def test_deep_otm_put(self, engine):
        result = engine.calculate(_make_input(
            spot_price=700.0, strike_price=300.0, time_to_expiry=7.0 / 365.0,
            risk_free_rate=0.065, volatility=0.2, option_type="put",
        ))
        assert result.price == pytest.approx(0.0, abs=1e-6)
        assert result.delta == pytest.approx(0.0, abs=1e-6)
        assert result.moneyness == Moneyness.OTM
        assert result.break_even_price == pytest.approx(300.0, abs=1e-6)

    def test_dividend_lowers_call_delta(self, engine):
        plain = engine.calculate(_make_input(time_to_expiry=1.0))
        with_q = engine.calculate(_make_input(time_to_expiry=1.0, dividend_yield=0.05))
        assert with_q.delta < plain.delta
        assert with_q.price < plain.price
        assert with_q.delta <= math.exp(-0.05)

    def test_put_break_even(self, engine):
        result = engine.calculate(_make_input(strike_price=110.0, option_type="put"))
        assert result.break_even_price == pytest.approx(110.0 - result.price)
        assert result.intrinsic_value == 10.0

    def test_intrinsic_uses_unadjusted_spot(self, engine):
        result = engine.calculate(_make_input(spot_price=120.0, dividend_yield=0.1))
        assert result.intrinsic_value == 20.0


class TestGreeksEngineExpiry:
    """到期边界 (time_to_expiry == 0)"""

    @pytest.mark.parametrize("opt, spot, expected_delta, expected_price", [
        ("call", 110.0, 1.0, 10.0),
        ("call", 90.0, 0.0, 0.0),
        ("call", 100.0, 0.0, 0.0),
        ("put", 90.0, -1.0, 10.0),
        ("put", 110.0, 0.0, 0.0),
        ("put", 100.0, 0.0, 0.0),
    ])
    def test_expiry_boundary(self, engine, opt, spot, expected_delta, expected_price):
        result = engine.calculate(_make_input(
            spot_price=spot, strike_price=100.0, time_to_expiry=0.0, option_type=opt,
        ))
        assert result.price == expected_price
        assert result.price == result.intrinsic_value
        assert result.delta == expected_delta
        assert result.gamma == 0.0
        assert result.theta == 0.0
        assert result.vega == 0.0
        assert result.rho == 0.0
        assert result.time_value == 0.0

    def test_expiry_never_nan(self, engine):
        result = engine.calculate(_make_input(time_to_expiry=0.0, dividend_yield=0.05))
        for value in result.to_dict().values():
            if isinstance(value, float):
                assert not math.isnan(value)


class TestMoneyness:

    @pytest.mark.parametrize("opt, strike, expected", [
        ("call", 101.0, Moneyness.ATM),
        ("put", 99.0, Moneyness.ATM),
        ("call", 90.0, Moneyness.ITM),
        ("call", 110.0, Moneyness.OTM),
        ("put", 110.0, Moneyness.ITM),
        ("put", 90.0, Moneyness.OTM),
    ])
    def test_classification(self, engine, opt, strike, expected):
        result = engine.calculate(_make_input(strike_price=strike, option_type=opt))
        assert result.moneyness == expected

    def test_threshold_from_convention(self):
        wide = GreeksEngine(MarketConvention(atm_threshold=0.1))
        result = wide.calculate(_make_input(strike_price=108.0))
        assert result.moneyness == Moneyness.ATM


class TestTimeToExpiry:

    def test_whole_days(self, engine):
        years = engine.time_to_expiry_in_years(date(2026, 1, 31), date(2026, 1, 1))
        assert years == pytest.approx(30.0 / 365.0)

    def test_expired_clamps_to_zero(self, engine):
        assert engine.time_to_expiry_in_years(date(2026, 1, 1), date(2026, 2, 1)) == 0.0

    def test_fractional_days(self, engine):
        years = engine.time_to_expiry_in_years(
            datetime(2026, 1, 2, 12, 0), datetime(2026, 1, 2, 0, 0)
        )
        assert years == pytest.approx(0.5 / 365.0)

    def test_mixed_date_and_datetime(self, engine):
        years = engine.time_to_expiry_in_years(date(2026, 1, 3), datetime(2026, 1, 2, 12, 0))
        assert years == pytest.approx(0.5 / 365.0)

    def test_utc_timestamp_against_date(self, engine):
        years = engine.time_to_expiry_in_years("2026-01-03T00:00:00Z", date(2026, 1, 1))
        assert years == pytest.approx(2.0 / 365.0)

    def test_aware_and_naive_datetimes(self, engine):
        expiry = datetime(2026, 1, 2, 15, 30, tzinfo=timezone(timedelta(hours=5, minutes=30)))
        years = engine.time_to_expiry_in_years(expiry, datetime(2026, 1, 2, 3, 30))
        assert years == pytest.approx(0.5 / 365.0)

    def test_both_aware_different_zones(self, engine):
        expiry = datetime(2026, 1, 2, 10, 0, tzinfo=timezone.utc)
        as_of = datetime(2026, 1, 2, 10, 0, tzinfo=timezone(timedelta(hours=-2)))
        assert engine.time_to_expiry_in_years(expiry, as_of) == 0.0

    def test_iso_strings(self, engine):
        years = engine.time_to_expiry_in_years("2026-03-01", "2026-02-01")
        assert years == pytest.approx(28.0 / 365.0)

    def test_default_as_of_is_today(self, engine):
        expiry = date.today() + timedelta(days=10)
        assert engine.time_to_expiry_in_years(expiry) == pytest.approx(10.0 / 365.0)

    def test_days_per_year_from_convention(self):
        engine = GreeksEngine(MarketConvention(days_per_year=252))
        years = engine.time_to_expiry_in_years(date(2026, 1, 31), date(2026, 1, 1))
        assert years == pytest.approx(30.0 / 252.0)


class TestLotSizeAndContractValue:

    def test_unknown_symbol_defaults_to_one(self, engine, india_engine):
        assert engine.lot_size("UNKNOWN_TICKER") == 1
        assert india_engine.lot_size("UNKNOWN_TICKER") == 1

    def test_lookup_is_case_insensitive(self, india_engine):
        assert india_engine.lot_size("NIFTY") == 25
        assert india_engine.lot_size("nifty") == 25
        assert india_engine.lot_size(" BankNifty ") == 15

    def test_contract_value(self, india_engine):
        assert india_engine.contract_value(100.0, "NIFTY", 2) == pytest.approx(5000.0)
        assert india_engine.contract_value(2.5, "SBIN") == pytest.approx(3750.0)
        assert india_engine.contract_value(10.0, "UNKNOWN", 3) == pytest.approx(30.0)

    def test_zero_quantity(self, india_engine):
        assert india_engine.contract_value(100.0, "NIFTY", 0) == 0.0

    def test_negative_quantity_rejected(self, india_engine):
        with pytest.raises(InvalidInputError) as exc_info:
            india_engine.contract_value(100.0, "NIFTY", -1)
        assert exc_info.value.reason == InvalidInputReason.NEGATIVE_QUANTITY


class TestBuildInputs:

    def test_defaults_from_convention(self, india_engine):
        inputs = india_engine.build_inputs(580.0, 580.0, 30 / 365, 0.15, "call")
        assert inputs.risk_free_rate == 0.065
        assert inputs.dividend_yield == 0.0
        assert india_engine.risk_free_rate == 0.065

    def test_explicit_values_win(self, india_engine):
        inputs = india_engine.build_inputs(
            580.0, 580.0, 30 / 365, 0.15, "put", risk_free_rate=0.07, dividend_yield=0.01,
        )
        assert inputs.risk_free_rate == 0.07
        assert inputs.dividend_yield == 0.01

    def test_generic_default_rate(self, engine):
        assert engine.risk_free_rate == 0.05
