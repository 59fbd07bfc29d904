from __future__ import annotations

import math

from portfolio_sim.config import NEUTRAL_SCORE, SCORE_MAX, SCORE_MIN
from portfolio_sim.constants import QUALITATIVE_SCORES
from portfolio_sim.enums import Category
from portfolio_sim.models import Numeric, Qualitative, Stock


class MetricNormalizer:
    """
    Converts one stock's raw per-category metric block into a 0-100 score.

    Accepts the two ``MetricInput`` variants:

    * :class:`Numeric`     — already on the 0-100 scale (e.g. produced by
      ``FundamentalsScorer``); clamped and rounded.
    * :class:`Qualitative` — a rating label looked up in
      ``QUALITATIVE_SCORES``; unknown labels score ``NEUTRAL_SCORE``.

    Only static methods are exposed, so results depend on the input alone.
    """

    # ------------------------------------------------------------------
    # Public API
    # ------------------------------------------------------------------

    @staticmethod
    def normalize(metric_input) -> int:
        """
        Return the integer score in ``[SCORE_MIN, SCORE_MAX]`` for one block.

        Raises
        ------
        TypeError
            If *metric_input* is neither ``Numeric`` nor ``Qualitative``.
        """
        if isinstance(metric_input, Numeric):
            return MetricNormalizer.score_numeric(metric_input.value)
        if isinstance(metric_input, Qualitative):
            return MetricNormalizer.score_label(metric_input.label)
        raise TypeError(
            f"Unsupported metric input: {metric_input!r}. "
            "Expected Numeric or Qualitative."
        )

    @staticmethod
    def stock_scores(stock: Stock) -> dict:
        """Score all four categories of *stock*: ``{Category: int}``."""
        return {
            category: MetricNormalizer.normalize(stock.metric(category))
            for category in Category
        }

    # ------------------------------------------------------------------
    # Variant handlers
    # ------------------------------------------------------------------

    @staticmethod
    def score_label(label: str) -> int:
        key = (label or "").strip().lower()
        return QUALITATIVE_SCORES.get(key, NEUTRAL_SCORE)

    @staticmethod
    def score_numeric(value: float) -> int:
        """
        Clamp *value* to the score range and round half-up.

        NaN carries no information and scores neutral; infinities clamp to
        the nearest bound.
        """
        value = float(value)
        if math.isnan(value):
            return NEUTRAL_SCORE
        clamped = max(float(SCORE_MIN), min(float(SCORE_MAX), value))
        return MetricNormalizer.round_half_up(clamped)

    # ------------------------------------------------------------------
    # Helpers
    # ------------------------------------------------------------------

    @staticmethod
    def round_half_up(value: float) -> int:
        """Nearest integer, .5 going up (62.5 → 63; built-in ``round`` gives 62)."""
        return int(math.floor(value + 0.5))
