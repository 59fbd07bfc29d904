"""
portfolio_sim/constants.py
--------------------------
Business tables shared across the scoring engines.

Placing these here keeps the normalizer, the fundamentals scorer and the
aggregator aligned on a single source of truth without circular imports.
"""

from __future__ import annotations

from portfolio_sim.enums import Category


# ---------------------------------------------------------------------------
# Qualitative label → 0-100 score
# ---------------------------------------------------------------------------
# One table for every qualitative rating a market-data provider may attach to
# a metric block.  Keys are lower-case; lookups strip and lower the label
# first.  Labels not listed here score NEUTRAL_SCORE (config.py).
#
#   High / Strong / Excellent   90   clearly above peers
#   Good                        75
#   Fair / Average / Medium     60   in line with peers
#   Weak / Unstable / Low / Poor 30  clearly below peers
# ---------------------------------------------------------------------------

QUALITATIVE_SCORES: dict[str, int] = {
    "high":      90,
    "strong":    90,
    "excellent": 90,
    "good":      75,
    "fair":      60,
    "average":   60,
    "medium":    60,
    "weak":      30,
    "unstable":  30,
    "low":       30,
    "poor":      30,
}


# ---------------------------------------------------------------------------
# Quality score composite weights
# ---------------------------------------------------------------------------
# Equal weighting of the four category scores.  Must sum to 1.0.

QUALITY_WEIGHTS: dict[Category, float] = {
    Category.PERFORMANCE: 0.25,
    Category.STABILITY:   0.25,
    Category.VALUE:       0.25,
    Category.MOMENTUM:    0.25,
}


# ---------------------------------------------------------------------------
# Fundamentals scoring
# ---------------------------------------------------------------------------
# Component weights inside each category (each row sums to 1.0).

FUNDAMENTAL_WEIGHTS: dict[Category, dict[str, float]] = {
    Category.PERFORMANCE: {
        "revenue_growth":     0.40,
        "profit_margin":      0.30,
        "return_on_capital":  0.30,
    },
    Category.STABILITY: {
        "volatility":            0.55,
        "beta":                  0.25,
        "dividend_consistency":  0.20,
    },
    Category.VALUE: {
        "pe_ratio":        0.50,
        "pb_ratio":        0.30,
        "dividend_yield":  0.20,
    },
    Category.MOMENTUM: {
        "three_month_return":    0.40,
        "rsi":                   0.40,
        "relative_performance":  0.20,
    },
}

# Dividend consistency rating → numeric level used for stock/industry ratios.
DIVIDEND_CONSISTENCY_SCORES: dict[str, float] = {
    "high":    100.0,
    "good":     75.0,
    "medium":   50.0,
    "low":      25.0,
    "poor":     25.0,
}

# Broad-market reference levels.  Percent fields are in percent units.
MARKET_AVERAGES: dict[Category, dict[str, float]] = {
    Category.PERFORMANCE: {
        "revenue_growth":    7.0,
        "profit_margin":     12.0,
        "return_on_capital": 12.0,
    },
    Category.STABILITY: {
        "volatility":           15.0,
        "beta":                 1.0,
        "dividend_consistency": 75.0,
    },
    Category.VALUE: {
        "pe_ratio":       16.0,
        "pb_ratio":       3.0,
        "dividend_yield": 2.5,
    },
    Category.MOMENTUM: {
        "three_month_return":   3.0,
        "relative_performance": 0.0,
        "rsi":                  50.0,
    },
}

# Per-industry reference levels.  Unknown industries fall back to "Default".
INDUSTRY_AVERAGES: dict[str, dict[Category, dict]] = {
    "Tech": {
        Category.PERFORMANCE: {"revenue_growth": 21.74, "profit_margin": 12.38, "return_on_capital": 22.74},
        Category.STABILITY:   {"volatility": 44.3, "beta": 1.54, "dividend_consistency": "Medium"},
        Category.VALUE:       {"pe_ratio": 36.4, "pb_ratio": 19.4, "dividend_yield": 0.38},
        Category.MOMENTUM:    {"three_month_return": -13.62, "relative_performance": 19.0, "rsi": 39.5},
    },
    "ESG": {
        Category.PERFORMANCE: {"revenue_growth": 7.0, "profit_margin": 5.0, "return_on_capital": 4.0},
        Category.STABILITY:   {"volatility": 47.0, "beta": 1.5, "dividend_consistency": "Medium"},
        Category.VALUE:       {"pe_ratio": 24.0, "pb_ratio": 3.0, "dividend_yield": 2.0},
        Category.MOMENTUM:    {"three_month_return": -12.0, "relative_performance": -10.0, "rsi": 45.0},
    },
    "Healthcare": {
        Category.PERFORMANCE: {"revenue_growth": 8.0, "profit_margin": 14.0, "return_on_capital": 10.0},
        Category.STABILITY:   {"volatility": 24.0, "beta": 1.0, "dividend_consistency": "Medium"},
        Category.VALUE:       {"pe_ratio": 37.0, "pb_ratio": 4.0, "dividend_yield": 1.5},
        Category.MOMENTUM:    {"three_month_return": 4.0, "relative_performance": 5.0, "rsi": 44.0},
    },
    "Financial Planning": {
        Category.PERFORMANCE: {"revenue_growth": 7.0, "profit_margin": 16.0, "return_on_capital": 15.0},
        Category.STABILITY:   {"volatility": 1.1, "beta": 1.05, "dividend_consistency": "High"},
        Category.VALUE:       {"pe_ratio": 17.0, "pb_ratio": 2.5, "dividend_yield": 2.2},
        Category.MOMENTUM:    {"three_month_return": 3.5, "relative_performance": 1.0, "rsi": 51.0},
    },
    "Consumer": {
        Category.PERFORMANCE: {"revenue_growth": 5.0, "profit_margin": 12.0, "return_on_capital": 11.0},
        Category.STABILITY:   {"volatility": 0.95, "beta": 0.9, "dividend_consistency": "Medium"},
        Category.VALUE:       {"pe_ratio": 19.0, "pb_ratio": 2.5, "dividend_yield": 1.8},
        Category.MOMENTUM:    {"three_month_return": 3.0, "relative_performance": 1.0, "rsi": 54.0},
    },
    "Real Estate": {
        Category.PERFORMANCE: {"revenue_growth": 5.0, "profit_margin": 25.0, "return_on_capital": 4.5},
        Category.STABILITY:   {"volatility": 8.6, "beta": 0.8, "dividend_consistency": "Medium"},
        Category.VALUE:       {"pe_ratio": 36.0, "pb_ratio": 2.5, "dividend_yield": 4.0},
        Category.MOMENTUM:    {"three_month_return": 2.0, "relative_performance": -5.0, "rsi": 49.0},
    },
    "Default": {
        Category.PERFORMANCE: {"revenue_growth": 7.0, "profit_margin": 15.0, "return_on_capital": 12.0},
        Category.STABILITY:   {"volatility": 1.0, "beta": 1.0, "dividend_consistency": "Medium"},
        Category.VALUE:       {"pe_ratio": 18.0, "pb_ratio": 2.5, "dividend_yield": 1.5},
        Category.MOMENTUM:    {"three_month_return": 3.5, "relative_performance": 1.2, "rsi": 52.0},
    },
}

DEFAULT_INDUSTRY: str = "Default"
