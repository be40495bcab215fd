"""
标准正态分布函数

不依赖统计库。累积分布函数使用 Zelen & Severo 有理多项式近似
(Abramowitz & Stegun 26.2.17)，绝对误差 < 7.5e-8。
"""
import math

_INV_SQRT_2PI = 1.0 / math.sqrt(2.0 * math.pi)

# Abramowitz & Stegun 26.2.17 系数
_P = 0.2316419
_B1 = 0.319381530
_B2 = -0.356563782
_B3 = 1.781477937
_B4 = -1.821255978
_B5 = 1.330274429


def norm_pdf(x: float) -> float:
    """标准正态分布概率密度函数 φ(x)"""
    return _INV_SQRT_2PI * math.exp(-0.5 * x * x)


def norm_cdf(x: float) -> float:
    """
    标准正态分布累积分布函数 N(x)

    在 |x| 上求上尾概率，再按 N(x) = 1 - N(-x) 对称折回，
    因此 N(x) + N(-x) 与 1 的差只来自浮点舍入。
    """
    z = abs(x)
    t = 1.0 / (1.0 + _P * z)
    poly = t * (_B1 + t * (_B2 + t * (_B3 + t * (_B4 + t * _B5))))
    tail = norm_pdf(z) * poly
    return 1.0 - tail if x > 0 else tail
