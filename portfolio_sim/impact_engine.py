"""
portfolio_sim/impact_engine.py
------------------------------
Read-only "what-if" preview of a candidate buy.

Design contract:
  - Never mutates the ledger or the portfolio it reads
  - Reuses ``ledger.merge_purchase`` so the projected holding is exactly the
    one a committed buy would produce
  - Never fails on business rules: unaffordable amounts are still previewed
    (flagged via ``within_cash``), degenerate amounts or prices preview as a
    no-op, and zero totals give 0 rather than NaN
"""

from __future__ import annotations

import logging
import math
import numbers
from typing import Dict

from portfolio_sim.config import DELTA_DECIMALS, VALUE_EPSILON
from portfolio_sim.enums import Category
from portfolio_sim.ledger import HoldingLedger, merge_purchase
from portfolio_sim.metrics_engine import MetricNormalizer
from portfolio_sim.models import (
    CategoryScoreSet,
    ImpactResult,
    IndustryShift,
    Portfolio,
    ScoreDelta,
    Stock,
)
from portfolio_sim.portfolio_engine import PortfolioAggregator

logger = logging.getLogger(__name__)


class ImpactSimulator:
    """
    Preview how buying *dollar_amount* of a stock would move every category
    score, the quality score and the industry mix.

    Usage
    -----
    ::

        simulator = ImpactSimulator(ledger)
        impact = simulator.preview(stock, 25.0)
        impact.delta.performance        # e.g. +4.5
        impact.industry_allocation["Tech"].new_percent

    Pipeline::

        committed holdings ─┬─→ Aggregator ─────────────→ current_metrics
                            └─→ clone + merge_purchase ─→ Aggregator → new_metrics
                                                          (first trade: stock's own scores)
        new − current → delta (1 dp)
        industry values before / after → industry_allocation
    """

    def __init__(self, ledger: HoldingLedger):
        self._ledger = ledger

    def preview(self, stock: Stock, dollar_amount: float) -> ImpactResult:
        """Preview a buy against the ledger's current committed portfolio."""
        return ImpactSimulator.preview_portfolio(self._ledger.portfolio, stock, dollar_amount)

    # ------------------------------------------------------------------ #
    #  Core
    # ------------------------------------------------------------------ #

    @staticmethod
    def preview_portfolio(
        portfolio: Portfolio,
        stock: Stock,
        dollar_amount: float,
    ) -> ImpactResult:
        """
        Compute the :class:`ImpactResult` for buying *stock* with
        *dollar_amount* on top of *portfolio*.

        Parameters
        ----------
        portfolio : Portfolio
            Committed state to preview against.  Read only.
        stock : Stock
            Candidate stock.
        dollar_amount : float
            Candidate spend.  Amounts above ``portfolio.cash`` are previewed
            as if affordable and reported with ``within_cash=False``.

        Returns
        -------
        ImpactResult
        """
        holdings = portfolio.holdings
        was_empty = portfolio.is_empty

        current = (
            CategoryScoreSet.zero() if was_empty
            else PortfolioAggregator.metrics(holdings)
        )

        tradable = _is_tradable(stock, dollar_amount)
        if tradable:
            # Shallow clone: holdings are immutable, stocks stay shared.
            simulated = dict(holdings)
            simulated[stock.ticker] = merge_purchase(
                holdings.get(stock.ticker),
                stock,
                dollar_amount,
                portfolio.last_updated.date().isoformat(),
            )
            projected_shares = dollar_amount / stock.price
        else:
            simulated = dict(holdings)
            projected_shares = 0.0

        if not tradable:
            new = current
        elif was_empty:
            # First trade: the stock's own scores, not a one-element blend.
            new = PortfolioAggregator.composite(MetricNormalizer.stock_scores(stock))
        else:
            new = PortfolioAggregator.metrics(simulated)

        result = ImpactResult(
            current_metrics=current,
            new_metrics=new,
            delta=_delta(current, new),
            industry_allocation=_industry_allocation(holdings, simulated),
            dollar_amount=float(dollar_amount) if _finite(dollar_amount) else 0.0,
            projected_shares=projected_shares,
            within_cash=tradable and dollar_amount <= portfolio.cash,
        )

        logger.debug(
            "Preview %s $%s: quality %d → %d",
            stock.ticker, dollar_amount, current.quality_score, new.quality_score,
        )
        return result


# ---------------------------------------------------------------------------
# Helpers
# ---------------------------------------------------------------------------

def _finite(value) -> bool:
    return (
        isinstance(value, numbers.Real)
        and not isinstance(value, bool)
        and math.isfinite(value)
    )


def _is_tradable(stock: Stock, dollar_amount) -> bool:
    return (
        _finite(dollar_amount) and dollar_amount > 0
        and _finite(stock.price) and stock.price > 0
    )


def _delta(current: CategoryScoreSet, new: CategoryScoreSet) -> ScoreDelta:
    fields = [c.value for c in Category] + ["quality_score"]
    return ScoreDelta(**{
        name: round(float(getattr(new, name) - getattr(current, name)), DELTA_DECIMALS)
        for name in fields
    })


def _industry_allocation(before, after) -> Dict[str, IndustryShift]:
    """
    Percent of total holding value per industry, before and after.

    Covers the union of industries on both sides; a side with zero total
    value reports 0 for every industry.
    """
    current_values = PortfolioAggregator.industry_values(before)
    new_values = PortfolioAggregator.industry_values(after)

    current_total = float(current_values.sum())
    new_total = float(new_values.sum())

    industries = sorted(set(current_values.index) | set(new_values.index))
    allocation: Dict[str, IndustryShift] = {}
    for industry in industries:
        allocation[industry] = IndustryShift(
            current_percent=_percent_of(current_values.get(industry, 0.0), current_total),
            new_percent=_percent_of(new_values.get(industry, 0.0), new_total),
        )
    return allocation


def _percent_of(part: float, total: float) -> float:
    if total < VALUE_EPSILON:
        return 0.0
    return float(part) / total * 100.0
