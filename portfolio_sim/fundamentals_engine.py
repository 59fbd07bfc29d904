"""
portfolio_sim/fundamentals_engine.py
------------------------------------
Industry-relative scoring of raw fundamentals into a 0-100 category score.

The result is the ``Numeric`` input that ``MetricNormalizer`` passes through.

Pipeline per category::

    raw fundamentals
        → component ratio vs. industry average   (clipped to [0, 1])
        → industry-to-market weight              (clipped to [0, 1])
        → weighted sum × 100                     (clamped to [0, 100])
"""

from __future__ import annotations

import math
import numbers
import re
from typing import Mapping

import numpy as np

from portfolio_sim.constants import (
    DEFAULT_INDUSTRY,
    DIVIDEND_CONSISTENCY_SCORES,
    FUNDAMENTAL_WEIGHTS,
    INDUSTRY_AVERAGES,
    MARKET_AVERAGES,
)
from portfolio_sim.config import SCORE_MAX, SCORE_MIN
from portfolio_sim.enums import Category
from portfolio_sim.metrics_engine import MetricNormalizer


_CAMEL_BOUNDARY = re.compile(r"(?<!^)(?=[A-Z])")

# Beta earns full credit at 1.0 and none at 1.0 ± _BETA_BAND.
_BETA_BAND = 0.5
# RSI earns full credit at 50 and none at 50 ± _RSI_BAND.
_RSI_IDEAL = 50.0
_RSI_BAND = 25.0


class FundamentalsScorer:
    """
    Scores a category's fundamentals bundle against industry and market
    averages.

    Bundles are plain mappings; keys may be snake_case
    (``revenue_growth``) or camelCase (``revenueGrowth``).  Required fields
    per category are the keys of ``FUNDAMENTAL_WEIGHTS[category]``.
    """

    # ------------------------------------------------------------------ #
    #  Public entry point
    # ------------------------------------------------------------------ #

    @staticmethod
    def score(category: Category, details: Mapping, industry: str) -> int:
        """
        Compute the 0-100 score for one category.

        Parameters
        ----------
        category : Category
        details : Mapping
            Raw fundamentals for *category*.
        industry : str
            Industry name; unknown industries use the ``"Default"`` averages.

        Returns
        -------
        int
            Score in ``[0, 100]``.

        Raises
        ------
        ValueError
            If a required field is missing from *details*.
        """
        fields = FundamentalsScorer._extract(category, details)
        industry_avgs = FundamentalsScorer.industry_averages(industry)[category]
        market_avgs = MARKET_AVERAGES[category]

        dispatch = {
            Category.PERFORMANCE: FundamentalsScorer._performance_components,
            Category.STABILITY:   FundamentalsScorer._stability_components,
            Category.VALUE:       FundamentalsScorer._value_components,
            Category.MOMENTUM:    FundamentalsScorer._momentum_components,
        }
        ratios, market_weights = dispatch[category](fields, industry_avgs, market_avgs)

        weights = np.array(list(FUNDAMENTAL_WEIGHTS[category].values()), dtype=float)
        ratios = np.clip(np.array(ratios, dtype=float), 0.0, 1.0)
        market_weights = np.clip(np.array(market_weights, dtype=float), 0.0, 1.0)

        weighted = float(np.sum(weights * ratios * market_weights)) * 100.0
        clamped = min(float(SCORE_MAX), max(float(SCORE_MIN), weighted))
        return MetricNormalizer.round_half_up(clamped)

    @staticmethod
    def industry_averages(industry: str) -> dict:
        """Reference levels for *industry*, falling back to ``"Default"``."""
        return INDUSTRY_AVERAGES.get(industry, INDUSTRY_AVERAGES[DEFAULT_INDUSTRY])

    # ------------------------------------------------------------------ #
    #  Per-category components
    #  Each returns (ratios, market_weights) ordered as FUNDAMENTAL_WEIGHTS.
    # ------------------------------------------------------------------ #

    @staticmethod
    def _performance_components(f: dict, ind: dict, mkt: dict):
        keys = ("revenue_growth", "profit_margin", "return_on_capital")
        ratios = [_ratio(f[k], ind[k]) for k in keys]
        market = [_ratio(ind[k], mkt[k]) for k in keys]
        return ratios, market

    @staticmethod
    def _stability_components(f: dict, ind: dict, mkt: dict):
        stock_div = _consistency_level(f["dividend_consistency"])
        industry_div = _consistency_level(ind["dividend_consistency"])

        ratios = [
            _ratio(ind["volatility"], f["volatility"]),   # lower is better
            1.0 - min(_BETA_BAND, abs(1.0 - f["beta"])) / _BETA_BAND,
            _ratio(stock_div, industry_div),
        ]
        market = [
            _ratio(mkt["volatility"], ind["volatility"]),
            _ratio(ind["beta"], mkt["beta"]),
            _ratio(industry_div, mkt["dividend_consistency"]),
        ]
        return ratios, market

    @staticmethod
    def _value_components(f: dict, ind: dict, mkt: dict):
        ratios = [
            _ratio(ind["pe_ratio"], f["pe_ratio"]),       # lower is better
            _ratio(ind["pb_ratio"], f["pb_ratio"]),       # lower is better
            _ratio(_percent(f["dividend_yield"]), ind["dividend_yield"]),
        ]
        market = [
            _ratio(mkt["pe_ratio"], ind["pe_ratio"]),
            _ratio(mkt["pb_ratio"], ind["pb_ratio"]),
            _ratio(ind["dividend_yield"], mkt["dividend_yield"]),
        ]
        return ratios, market

    @staticmethod
    def _momentum_components(f: dict, ind: dict, mkt: dict):
        rsi_deviation = abs(f["rsi"] - _RSI_IDEAL) / _RSI_BAND
        ratios = [
            _ratio(f["three_month_return"], ind["three_month_return"]),
            1.0 - rsi_deviation,
            0.5 + f["relative_performance"] / 5.0,
        ]
        market = [
            _ratio(ind["three_month_return"], mkt["three_month_return"]),
            _ratio(ind["rsi"], mkt["rsi"]),
            1.0,
        ]
        return ratios, market

    # ------------------------------------------------------------------ #
    #  Field extraction
    # ------------------------------------------------------------------ #

    @staticmethod
    def _extract(category: Category, details: Mapping) -> dict:
        """Pull the required fields, accepting snake_case or camelCase keys."""
        normalized = {_snake(str(k)): v for k, v in details.items()}
        fields = {}
        for name in FUNDAMENTAL_WEIGHTS[category]:
            if name not in normalized or normalized[name] is None:
                raise ValueError(
                    f"Missing '{name}' in {category.value} fundamentals. "
                    f"Got: {sorted(details.keys())}"
                )
            value = normalized[name]
            if name in ("dividend_consistency", "dividend_yield"):
                fields[name] = value
            else:
                fields[name] = float(value)
        return fields


# ---------------------------------------------------------------------------
# Module-level helpers
# ---------------------------------------------------------------------------

def _ratio(numerator: float, denominator: float) -> float:
    """``numerator / denominator``; 0.0 for a non-positive or non-finite divisor."""
    if not (math.isfinite(numerator) and math.isfinite(denominator)):
        return 0.0
    if denominator <= 0:
        return 0.0
    return numerator / denominator


def _percent(value) -> float:
    """Accept ``2.5`` or ``"2.5%"``; unparseable strings become NaN."""
    if isinstance(value, str):
        try:
            return float(value.strip().rstrip("%"))
        except ValueError:
            return float("nan")
    return float(value)


def _consistency_level(rating) -> float:
    """Rating label via ``DIVIDEND_CONSISTENCY_SCORES``; a number is already the level."""
    if isinstance(rating, numbers.Real) and not isinstance(rating, bool):
        return float(rating)
    return DIVIDEND_CONSISTENCY_SCORES.get(str(rating).strip().lower(), 0.0)


def _snake(name: str) -> str:
    if name.isupper():          # "RSI"
        return name.lower()
    return _CAMEL_BOUNDARY.sub("_", name).lower()
