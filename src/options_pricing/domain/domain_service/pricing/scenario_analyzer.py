"""
ScenarioAnalyzer 领域服务

在 GreeksEngine 之上提供两类单合约分析:
- 情景冲击: 标的价格、波动率相对变化与时间流逝后的重新定价
- 敏感度扫描: 在标的价格区间上等距取点计算价格与 Greeks
"""
from typing import List, Sequence

import pandas as pd

from ...exceptions import InvalidInputError, InvalidInputReason
from ...value_object.pricing.greeks import GreeksResult
from ...value_object.pricing.market_inputs import MarketInputs
from ...value_object.pricing.scenario import ScenarioShift, SensitivityPoint
from .greeks_engine import GreeksEngine

SENSITIVITY_COLUMNS = ["spot_price", "price", "delta", "gamma", "theta", "vega"]


class ScenarioAnalyzer:
    """单合约情景与敏感度分析"""

    def __init__(self, engine: GreeksEngine):
        self._engine = engine

    def scenario_greeks(self, inputs: MarketInputs, shift: ScenarioShift) -> GreeksResult:
        """
        按情景冲击调整输入后重新计算

        剩余时间按 days_passed 扣减并截断到 0，到期后按内在价值处理。

        Raises:
            InvalidInputError: 原始或冲击后的输入不合法 (如波动率被冲击到 <= 0)
        """
        days_per_year = self._engine.convention.days_per_year
        shifted = MarketInputs(
            spot_price=inputs.spot_price * (1.0 + shift.spot_change),
            strike_price=inputs.strike_price,
            time_to_expiry=max(0.0, inputs.time_to_expiry - shift.days_passed / days_per_year),
            risk_free_rate=inputs.risk_free_rate,
            volatility=inputs.volatility * (1.0 + shift.volatility_change),
            option_type=inputs.option_type,
            dividend_yield=inputs.dividend_yield,
        )
        return self._engine.calculate(shifted)

    def sensitivity(
        self,
        inputs: MarketInputs,
        min_spot: float,
        max_spot: float,
        steps: int = 10,
    ) -> List[SensitivityPoint]:
        """
        在 [min_spot, max_spot] 上等距取 steps + 1 个标的价格点计算

        Raises:
            InvalidInputError: steps < 1, min_spot <= 0 或 max_spot < min_spot
        """
        if steps < 1:
            raise InvalidInputError(
                InvalidInputReason.INVALID_RANGE, "steps", steps,
                message=f"steps 必须 >= 1: {steps}",
            )
        if min_spot <= 0:
            raise InvalidInputError(
                InvalidInputReason.NON_POSITIVE_SPOT, "min_spot", min_spot,
                message="min_spot 必须大于 0",
            )
        if max_spot < min_spot:
            raise InvalidInputError(
                InvalidInputReason.INVALID_RANGE, "max_spot", max_spot,
                message=f"max_spot ({max_spot}) 不能小于 min_spot ({min_spot})",
            )

        step = (max_spot - min_spot) / steps
        points = []
        for i in range(steps + 1):
            spot = max_spot if i == steps else min_spot + i * step
            result = self._engine.calculate(
                MarketInputs(
                    spot_price=spot,
                    strike_price=inputs.strike_price,
                    time_to_expiry=inputs.time_to_expiry,
                    risk_free_rate=inputs.risk_free_rate,
                    volatility=inputs.volatility,
                    option_type=inputs.option_type,
                    dividend_yield=inputs.dividend_yield,
                )
            )
            points.append(
                SensitivityPoint(
                    spot_price=spot,
                    price=result.price,
                    delta=result.delta,
                    gamma=result.gamma,
                    theta=result.theta,
                    vega=result.vega,
                )
            )
        return points

    @staticmethod
    def sensitivity_frame(points: Sequence[SensitivityPoint]) -> pd.DataFrame:
        """将扫描结果转换为 DataFrame，每行一个标的价格点"""
        if not points:
            return pd.DataFrame(columns=SENSITIVITY_COLUMNS)
        return pd.DataFrame(
            [[getattr(p, col) for col in SENSITIVITY_COLUMNS] for p in points],
            columns=SENSITIVITY_COLUMNS,
        )
