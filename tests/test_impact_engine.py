"""
tests/test_impact_engine.py
---------------------------
Unit tests for ImpactSimulator.

Test coverage:
    First trade          — stock's own scores, 100% allocation, zero baseline
    Non-empty portfolio  — value-weighted projection, industry shift, union
    Repeat ticker        — merges into the held position
    Purity               — idempotent, never mutates the ledger
    Fidelity             — committed buy matches the preview
    Degenerate inputs    — zero / negative / NaN amounts and prices are no-ops
    Affordability        — within_cash flag, preview still computed
    Output               — one-decimal deltas, finite numbers, to_dict()
"""

import math
import unittest
from datetime import datetime, timedelta, timezone

from portfolio_sim.enums import Category
from portfolio_sim.impact_engine import ImpactSimulator
from portfolio_sim.ledger import HoldingLedger, open_portfolio
from portfolio_sim.metrics_engine import MetricNormalizer
from portfolio_sim.models import CategoryScoreSet, Numeric, Qualitative, Stock
from portfolio_sim.portfolio_engine import PortfolioAggregator


# ---------------------------------------------------------------------------
# Factories
# ---------------------------------------------------------------------------

def _clock():
    state = {"now": datetime(2024, 5, 6, 14, 0, tzinfo=timezone.utc)}

    def tick():
        value = state["now"]
        state["now"] += timedelta(minutes=5)
        return value
    return tick


def _numeric_stock(ticker, industry, perf, stab, value, mom, price=10.0) -> Stock:
    return Stock(
        ticker=ticker, name=ticker, industry=industry, price=price,
        metrics={
            Category.PERFORMANCE: Numeric(perf),
            Category.STABILITY:   Numeric(stab),
            Category.VALUE:       Numeric(value),
            Category.MOMENTUM:    Numeric(mom),
        },
    )


def _labelled_stock() -> Stock:
    return Stock(
        ticker="SYK", name="Stryker", industry="Healthcare", price=20.0,
        metrics={
            Category.PERFORMANCE: Qualitative("Strong"),
            Category.STABILITY:   Qualitative("Good"),
            Category.VALUE:       Qualitative("Fair"),
            Category.MOMENTUM:    Qualitative("Weak"),
        },
    )


def _setup():
    ledger = HoldingLedger(initial_cash=100.0, clock=_clock())
    return ledger, ImpactSimulator(ledger)


def _held_a():
    """Ledger holding $50 of A (Tech: 80/60/50/70)."""
    ledger, sim = _setup()
    a = _numeric_stock("A", "Tech", 80, 60, 50, 70)
    ledger.buy(a, 50.0)
    return ledger, sim, a


# ===========================================================================
# 1. First trade
# ===========================================================================

class TestFirstTrade(unittest.TestCase):

    def test_new_metrics_are_stocks_own_scores(self):
        _, sim = _setup()
        stock = _labelled_stock()
        impact = sim.preview(stock, 25.0)

        expected = PortfolioAggregator.composite(MetricNormalizer.stock_scores(stock))
        self.assertEqual(impact.new_metrics, expected)
        self.assertEqual(
            (impact.new_metrics.performance, impact.new_metrics.stability,
             impact.new_metrics.value, impact.new_metrics.momentum,
             impact.new_metrics.quality_score),
            (90, 75, 60, 30, 64),
        )

    def test_baseline_is_zero(self):
        _, sim = _setup()
        impact = sim.preview(_labelled_stock(), 25.0)
        self.assertEqual(impact.current_metrics, CategoryScoreSet.zero())
        self.assertEqual(impact.delta.performance, 90.0)
        self.assertEqual(impact.delta.quality_score, 64.0)

    def test_full_allocation_to_candidate_industry(self):
        _, sim = _setup()
        impact = sim.preview(_labelled_stock(), 25.0)
        self.assertEqual(list(impact.industry_allocation), ["Healthcare"])
        shift = impact.industry_allocation["Healthcare"]
        self.assertEqual(shift.current_percent, 0.0)
        self.assertAlmostEqual(shift.new_percent, 100.0)

    def test_projected_shares(self):
        _, sim = _setup()
        self.assertAlmostEqual(sim.preview(_labelled_stock(), 25.0).projected_shares, 1.25)

    def test_static_entry_point_on_portfolio_value(self):
        portfolio = open_portfolio(100.0)
        impact = ImpactSimulator.preview_portfolio(portfolio, _labelled_stock(), 10.0)
        self.assertEqual(impact.new_metrics.quality_score, 64)


# ===========================================================================
# 2. Non-empty portfolio
# ===========================================================================

class TestNonEmpty(unittest.TestCase):

    def test_value_weighted_projection(self):
        _, sim, _ = _held_a()
        b = _numeric_stock("B", "Healthcare", 40, 80, 70, 30)
        impact = sim.preview(b, 50.0)

        self.assertEqual(impact.current_metrics.performance, 80)
        self.assertEqual(
            (impact.new_metrics.performance, impact.new_metrics.stability,
             impact.new_metrics.value, impact.new_metrics.momentum),
            (60, 70, 60, 50),
        )
        self.assertEqual(impact.new_metrics.quality_score, 60)
        self.assertEqual(impact.delta.performance, -20.0)
        self.assertEqual(impact.delta.stability, 10.0)

    def test_industry_union_and_shift(self):
        _, sim, _ = _held_a()
        b = _numeric_stock("B", "Healthcare", 40, 80, 70, 30)
        alloc = sim.preview(b, 50.0).industry_allocation

        self.assertEqual(sorted(alloc), ["Healthcare", "Tech"])
        self.assertAlmostEqual(alloc["Tech"].current_percent, 100.0)
        self.assertAlmostEqual(alloc["Tech"].new_percent, 50.0)
        self.assertEqual(alloc["Healthcare"].current_percent, 0.0)
        self.assertAlmostEqual(alloc["Healthcare"].new_percent, 50.0)

    def test_repeat_ticker_merges(self):
        _, sim, a = _held_a()
        impact = sim.preview(a, 25.0)
        self.assertEqual(impact.new_metrics, impact.current_metrics)
        self.assertEqual(impact.delta.quality_score, 0.0)
        self.assertEqual(list(impact.industry_allocation), ["Tech"])
        self.assertAlmostEqual(impact.industry_allocation["Tech"].new_percent, 100.0)

    def test_current_reflects_live_price(self):
        ledger, sim, a = _held_a()
        b = _numeric_stock("B", "Healthcare", 0, 0, 0, 0)
        ledger.buy(b, 50.0)
        before = sim.preview(a, 10.0).current_metrics.performance
        b.price = 30.0          # B now worth 150 vs A's 50
        after = sim.preview(a, 10.0).current_metrics.performance
        self.assertEqual(before, 40)
        self.assertEqual(after, 20)


# ===========================================================================
# 3. Purity and fidelity
# ===========================================================================

class TestPurity(unittest.TestCase):

    def test_idempotent(self):
        _, sim, _ = _held_a()
        b = _numeric_stock("B", "Healthcare", 40, 80, 70, 30)
        self.assertEqual(sim.preview(b, 30.0), sim.preview(b, 30.0))

    def test_ledger_untouched(self):
        ledger, sim, _ = _held_a()
        portfolio = ledger.portfolio
        holding = ledger.holding("A")
        b = _numeric_stock("B", "Healthcare", 40, 80, 70, 30)

        sim.preview(b, 30.0)
        sim.preview(ledger.holding("A").stock, 30.0)

        self.assertIs(ledger.portfolio, portfolio)
        self.assertIs(ledger.holding("A"), holding)
        self.assertEqual(ledger.cash, 50.0)
        self.assertEqual(ledger.version, 1)
        self.assertNotIn("B", portfolio.holdings)

    def test_preview_matches_commit(self):
        ledger, sim, a = _held_a()
        b = _numeric_stock("B", "Healthcare", 33, 81, 47, 12, price=7.0)
        impact = sim.preview(b, 30.0)
        ledger.buy(b, 30.0)
        self.assertEqual(ledger.snapshot().portfolio_metrics, impact.new_metrics)

    def test_preview_matches_commit_on_repeat_ticker(self):
        ledger, sim, a = _held_a()
        a.price = 12.5
        impact = sim.preview(a, 20.0)
        ledger.buy(a, 20.0)
        self.assertEqual(ledger.snapshot().portfolio_metrics, impact.new_metrics)


# ===========================================================================
# 4. Degenerate inputs
# ===========================================================================

class TestDegenerate(unittest.TestCase):

    def test_bad_amounts_are_noops(self):
        _, sim, _ = _held_a()
        b = _numeric_stock("B", "Healthcare", 40, 80, 70, 30)
        for amount in (0, -10.0, float("nan"), math.inf):
            with self.subTest(amount=amount):
                impact = sim.preview(b, amount)
                self.assertEqual(impact.new_metrics, impact.current_metrics)
                self.assertEqual(impact.delta.as_dict(), {
                    "performance": 0.0, "stability": 0.0, "value": 0.0,
                    "momentum": 0.0, "quality_score": 0.0,
                })
                self.assertEqual(impact.projected_shares, 0.0)
                self.assertFalse(impact.within_cash)
                self.assertAlmostEqual(impact.industry_allocation["Tech"].new_percent, 100.0)
                self.assertTrue(math.isfinite(impact.dollar_amount))

    def test_bad_price_is_noop(self):
        _, sim, _ = _held_a()
        b = _numeric_stock("B", "Healthcare", 40, 80, 70, 30)
        b.price = 0.0
        impact = sim.preview(b, 10.0)
        self.assertEqual(impact.new_metrics, impact.current_metrics)
        self.assertNotIn("Healthcare", impact.industry_allocation)

    def test_bad_amount_on_empty_portfolio(self):
        _, sim = _setup()
        impact = sim.preview(_labelled_stock(), 0.0)
        self.assertEqual(impact.new_metrics, CategoryScoreSet.zero())
        self.assertEqual(impact.industry_allocation, {})


# ===========================================================================
# 5. Affordability
# ===========================================================================

class TestAffordability(unittest.TestCase):

    def test_within_cash(self):
        _, sim = _setup()
        self.assertTrue(sim.preview(_labelled_stock(), 100.0).within_cash)

    def test_over_cash_still_previewed(self):
        _, sim, _ = _held_a()
        b = _numeric_stock("B", "Healthcare", 40, 80, 70, 30)
        impact = sim.preview(b, 150.0)
        self.assertFalse(impact.within_cash)
        # 50 of A vs 150 of B
        self.assertEqual(impact.new_metrics.performance, 50)
        self.assertAlmostEqual(impact.industry_allocation["Healthcare"].new_percent, 75.0)


# ===========================================================================
# 6. Output
# ===========================================================================

class TestOutput(unittest.TestCase):

    def test_deltas_are_one_decimal_floats(self):
        _, sim, _ = _held_a()
        b = _numeric_stock("B", "Healthcare", 41, 83, 77, 39)
        impact = sim.preview(b, 20.0)
        for name, delta in impact.delta.as_dict().items():
            with self.subTest(field=name):
                self.assertIsInstance(delta, float)
                self.assertEqual(delta, round(delta, 1))
                self.assertEqual(
                    delta,
                    getattr(impact.new_metrics, name) - getattr(impact.current_metrics, name),
                )

    def test_to_dict_shape(self):
        _, sim, _ = _held_a()
        data = sim.preview(_labelled_stock(), 20.0).to_dict()
        self.assertEqual(
            set(data),
            {"current_metrics", "new_metrics", "delta", "industry_allocation",
             "dollar_amount", "projected_shares", "within_cash"},
        )
        self.assertEqual(
            set(data["industry_allocation"]["Tech"]), {"current_percent", "new_percent"}
        )

    def test_preview_logged_at_debug(self):
        _, sim = _setup()
        with self.assertLogs("portfolio_sim.impact_engine", level="DEBUG") as logs:
            sim.preview(_labelled_stock(), 10.0)
        self.assertIn("SYK", logs.output[0])


if __name__ == "__main__":
    unittest.main()
