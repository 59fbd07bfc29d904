"""
portfolio_sim/models.py
-----------------------
In-memory data model shared by the ledger, the aggregator and the impact
simulator.

Design contract:
  - Stock is the only mutable type; its ``price`` belongs to the market-data
    side and is read lazily, never written by the engine.
  - Holding, Portfolio and every result type are frozen.  Ledger reducers
    build new instances instead of editing old ones.
"""

from __future__ import annotations

import math
import numbers
from dataclasses import dataclass, field
from datetime import datetime
from typing import Dict, Mapping, Optional, Tuple, Union

from portfolio_sim.enums import Category, TradeAction, TradeErrorKind


# ---------------------------------------------------------------------------
# Metric inputs (tagged variant)
# ---------------------------------------------------------------------------

@dataclass(frozen=True)
class Numeric:
    """A metric block already reduced to a number on the 0-100 scale."""
    value: float


@dataclass(frozen=True)
class Qualitative:
    """A metric block expressed as a rating label, e.g. ``"Strong"``."""
    label: str


MetricInput = Union[Numeric, Qualitative]


# ---------------------------------------------------------------------------
# Stock / Holding / Portfolio
# ---------------------------------------------------------------------------

@dataclass
class Stock:
    """
    One tradable equity as supplied by the market-data provider.

    ``metrics`` may be keyed by :class:`Category` or by the category's string
    value; missing categories are filled with an empty label, which the
    normalizer scores as neutral.
    """
    ticker: str
    name: str
    industry: str
    price: float
    metrics: Dict[Category, MetricInput] = field(default_factory=dict)

    def __post_init__(self):
        if not isinstance(self.ticker, str) or not self.ticker.strip():
            raise ValueError("Stock ticker must be a non-empty string.")
        self.ticker = self.ticker.strip().upper()

        if isinstance(self.price, bool) or not isinstance(self.price, numbers.Real):
            raise ValueError(f"{self.ticker}: price must be a number, got {self.price!r}.")
        if not math.isfinite(self.price) or self.price <= 0:
            raise ValueError(f"{self.ticker}: price must be positive, got {self.price!r}.")
        self.price = float(self.price)

        metrics: Dict[Category, MetricInput] = {}
        for key, block in self.metrics.items():
            metrics[Category(key) if isinstance(key, str) else key] = block
        for category in Category:
            metrics.setdefault(category, Qualitative(""))
        self.metrics = metrics

    def metric(self, category: Category) -> MetricInput:
        return self.metrics[category]


@dataclass(frozen=True)
class Holding:
    """A position in one stock with its dollar-weighted cost basis."""
    stock: Stock
    shares: float
    purchase_price: float
    purchase_date: str

    @property
    def ticker(self) -> str:
        return self.stock.ticker

    @property
    def value(self) -> float:
        # Read lazily so external price updates are reflected immediately.
        return self.shares * self.stock.price

    @property
    def cost_basis(self) -> float:
        return self.shares * self.purchase_price

    @property
    def unrealized_gain(self) -> float:
        return self.value - self.cost_basis


@dataclass(frozen=True)
class Portfolio:
    """
    Cash plus at most one :class:`Holding` per ticker.  Reducers store
    ``holdings`` as a read-only mapping.

    ``version`` and ``last_updated`` are bumped by every committed buy/sell
    so observers can detect change by comparing the pair.
    """
    cash: float
    holdings: Mapping[str, Holding]
    version: int
    last_updated: datetime

    @property
    def portfolio_value(self) -> float:
        return sum(h.value for h in self.holdings.values())

    @property
    def total_value(self) -> float:
        return self.cash + self.portfolio_value

    @property
    def is_empty(self) -> bool:
        return not self.holdings


# ---------------------------------------------------------------------------
# Scores
# ---------------------------------------------------------------------------

@dataclass(frozen=True)
class CategoryScoreSet:
    """Four category scores plus the composite quality score, all in [0, 100]."""
    performance: int
    stability: int
    value: int
    momentum: int
    quality_score: int

    @classmethod
    def zero(cls) -> "CategoryScoreSet":
        return cls(0, 0, 0, 0, 0)

    def get(self, category: Category) -> int:
        return getattr(self, category.value)

    def as_dict(self) -> dict:
        return {
            "performance":   self.performance,
            "stability":     self.stability,
            "value":         self.value,
            "momentum":      self.momentum,
            "quality_score": self.quality_score,
        }


@dataclass(frozen=True)
class ScoreDelta:
    """Signed change between two score sets, one decimal place."""
    performance: float
    stability: float
    value: float
    momentum: float
    quality_score: float

    def get(self, category: Category) -> float:
        return getattr(self, category.value)

    def as_dict(self) -> dict:
        return {
            "performance":   self.performance,
            "stability":     self.stability,
            "value":         self.value,
            "momentum":      self.momentum,
            "quality_score": self.quality_score,
        }


@dataclass(frozen=True)
class IndustryShift:
    current_percent: float
    new_percent: float


@dataclass(frozen=True)
class ImpactResult:
    """Before/after view of a candidate buy, as produced by ``ImpactSimulator``."""
    current_metrics: CategoryScoreSet
    new_metrics: CategoryScoreSet
    delta: ScoreDelta
    industry_allocation: Dict[str, IndustryShift]
    dollar_amount: float
    projected_shares: float
    within_cash: bool

    def to_dict(self) -> dict:
        return {
            "current_metrics": self.current_metrics.as_dict(),
            "new_metrics":     self.new_metrics.as_dict(),
            "delta":           self.delta.as_dict(),
            "industry_allocation": {
                industry: {
                    "current_percent": shift.current_percent,
                    "new_percent":     shift.new_percent,
                }
                for industry, shift in self.industry_allocation.items()
            },
            "dollar_amount":    self.dollar_amount,
            "projected_shares": self.projected_shares,
            "within_cash":      self.within_cash,
        }


# ---------------------------------------------------------------------------
# Ledger outputs
# ---------------------------------------------------------------------------

@dataclass(frozen=True)
class PortfolioSnapshot:
    """Read-only view handed to observers."""
    cash: float
    holdings: Tuple[Holding, ...]
    portfolio_value: float
    total_value: float
    version: int
    last_updated: datetime
    portfolio_metrics: CategoryScoreSet

    def to_dict(self) -> dict:
        return {
            "cash": self.cash,
            "holdings": [
                {
                    "ticker":         h.ticker,
                    "name":           h.stock.name,
                    "industry":       h.stock.industry,
                    "shares":         h.shares,
                    "value":          h.value,
                    "purchase_price": h.purchase_price,
                    "purchase_date":  h.purchase_date,
                }
                for h in self.holdings
            ],
            "portfolio_value":   self.portfolio_value,
            "total_value":       self.total_value,
            "version":           self.version,
            "last_updated":      self.last_updated.isoformat(),
            "portfolio_metrics": self.portfolio_metrics.as_dict(),
        }


@dataclass(frozen=True)
class TradeResult:
    """Outcome of one ledger command.  ``snapshot`` is the post-command state."""
    ok: bool
    action: TradeAction
    ticker: str
    message: str
    snapshot: PortfolioSnapshot
    error_kind: Optional[TradeErrorKind] = None
