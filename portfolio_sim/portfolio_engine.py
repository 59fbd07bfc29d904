"""
portfolio_sim/portfolio_engine.py
---------------------------------
Pure aggregation engine: holdings → portfolio-level category scores.

Design contract:
  - No ledger state, no mutation of holdings
  - Weights are current dollar values (shares × live price)
  - Zero total value yields zero scores, never NaN
  - Fully deterministic and stateless (all methods are @staticmethod)
"""

from __future__ import annotations

from typing import Iterable, List, Mapping, Union

import numpy as np
import pandas as pd

from portfolio_sim.config import VALUE_EPSILON
from portfolio_sim.constants import QUALITY_WEIGHTS
from portfolio_sim.enums import Category
from portfolio_sim.metrics_engine import MetricNormalizer
from portfolio_sim.models import CategoryScoreSet, Holding


HoldingsLike = Union[Mapping[str, Holding], Iterable[Holding]]

_FRAME_COLUMNS = [
    "ticker", "name", "industry", "shares", "price", "value",
    "purchase_price", "weight",
] + [c.value for c in Category]


class PortfolioAggregator:
    """
    Compute value-weighted category scores and the composite quality score
    for a set of holdings.

    *holdings* may be a ``{ticker: Holding}`` mapping (as stored on a
    ``Portfolio``) or any iterable of :class:`Holding`.
    """

    # ------------------------------------------------------------------ #
    #  Public entry points
    # ------------------------------------------------------------------ #

    @staticmethod
    def metrics(holdings: HoldingsLike) -> CategoryScoreSet:
        """
        All four category scores plus quality for *holdings*.

        Returns ``CategoryScoreSet.zero()`` for empty or zero-value holdings.
        """
        items = _as_list(holdings)
        values = _values(items)
        if values.sum() < VALUE_EPSILON:
            return CategoryScoreSet.zero()

        scores = {
            category: PortfolioAggregator._weighted(category, items, values)
            for category in Category
        }
        return PortfolioAggregator.composite(scores)

    @staticmethod
    def category_score(category: Category, holdings: HoldingsLike) -> int:
        """
        Value-weighted average of each holding's normalised *category* score.

        Formula::

            score = round( Σ value_i · s_i / Σ value_i )

        Returns ``0`` when the total value is below ``VALUE_EPSILON``.
        """
        items = _as_list(holdings)
        values = _values(items)
        if values.sum() < VALUE_EPSILON:
            return 0
        return PortfolioAggregator._weighted(category, items, values)

    @staticmethod
    def quality_score(holdings: HoldingsLike) -> int:
        """Equal-weighted composite of the four category scores; 0 when empty."""
        return PortfolioAggregator.metrics(holdings).quality_score

    @staticmethod
    def composite(scores: Mapping[Category, int]) -> CategoryScoreSet:
        """
        Build a :class:`CategoryScoreSet` from four category scores.

        ``quality_score`` is the ``QUALITY_WEIGHTS``-weighted mean of the
        (already rounded) category scores, rounded half-up.  Used both for
        aggregated holdings and for a single stock's pass-through scores, so
        the two paths cannot disagree.
        """
        weights = np.array([QUALITY_WEIGHTS[c] for c in Category], dtype=float)
        values = np.array([scores[c] for c in Category], dtype=float)
        quality = float(np.dot(weights, values) / weights.sum())

        return CategoryScoreSet(
            performance=int(scores[Category.PERFORMANCE]),
            stability=int(scores[Category.STABILITY]),
            value=int(scores[Category.VALUE]),
            momentum=int(scores[Category.MOMENTUM]),
            quality_score=MetricNormalizer.round_half_up(quality),
        )

    # ------------------------------------------------------------------ #
    #  Tabular views
    # ------------------------------------------------------------------ #

    @staticmethod
    def industry_values(holdings: HoldingsLike) -> pd.Series:
        """Summed holding value per industry, indexed by industry name."""
        items = _as_list(holdings)
        if not items:
            return pd.Series(dtype=float, name="value")
        frame = pd.DataFrame({
            "industry": [h.stock.industry for h in items],
            "value":    [h.value for h in items],
        })
        return frame.groupby("industry", sort=True)["value"].sum()

    @staticmethod
    def holdings_frame(holdings: HoldingsLike) -> pd.DataFrame:
        """
        One row per holding with its live value, portfolio weight and the
        four normalised category scores.

        Returns an empty frame with the full column set when there are no
        holdings.
        """
        items = _as_list(holdings)
        if not items:
            return pd.DataFrame(columns=_FRAME_COLUMNS)

        total = sum(h.value for h in items)
        rows = []
        for h in items:
            scores = MetricNormalizer.stock_scores(h.stock)
            row = {
                "ticker":         h.ticker,
                "name":           h.stock.name,
                "industry":       h.stock.industry,
                "shares":         h.shares,
                "price":          h.stock.price,
                "value":          h.value,
                "purchase_price": h.purchase_price,
                "weight":         h.value / total if total >= VALUE_EPSILON else 0.0,
            }
            row.update({c.value: scores[c] for c in Category})
            rows.append(row)
        return pd.DataFrame(rows, columns=_FRAME_COLUMNS)

    # ------------------------------------------------------------------ #
    #  Private helpers
    # ------------------------------------------------------------------ #

    @staticmethod
    def _weighted(category: Category, items: List[Holding], values: np.ndarray) -> int:
        scores = np.array(
            [MetricNormalizer.normalize(h.stock.metric(category)) for h in items],
            dtype=float,
        )
        weighted = float(np.dot(values, scores) / values.sum())
        return MetricNormalizer.round_half_up(weighted)


def _as_list(holdings: HoldingsLike) -> List[Holding]:
    if isinstance(holdings, Mapping):
        return list(holdings.values())
    return list(holdings)


def _values(items: List[Holding]) -> np.ndarray:
    return np.array([h.value for h in items], dtype=float)
