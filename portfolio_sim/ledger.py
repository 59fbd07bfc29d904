"""
portfolio_sim/ledger.py
-----------------------
Cash and holdings bookkeeping for one simulated portfolio.

Two layers:

* Reducers — ``open_portfolio``, ``apply_buy``, ``apply_sell`` — take a
  :class:`Portfolio` and return a new one.  They validate everything before
  building the result, raise a :class:`TradeError` subclass on any rule
  violation, and stamp ``version`` / ``last_updated`` themselves.
* :class:`HoldingLedger` — the single writer that owns the current
  portfolio, applies reducers, and turns rejections into ``TradeResult``
  failures at its boundary.

``merge_purchase`` is the one place the average-cost arithmetic lives; the
impact simulator calls it too, so a preview predicts the committed state.
"""

from __future__ import annotations

import dataclasses
import logging
import math
import numbers
from datetime import datetime, timezone
from types import MappingProxyType
from typing import Callable, Optional, Tuple

from portfolio_sim.config import DEFAULT_INITIAL_CASH, SHARE_EPSILON
from portfolio_sim.enums import TradeAction
from portfolio_sim.errors import (
    InsufficientFundsError,
    InsufficientSharesError,
    InvalidAmountError,
    InvalidPriceError,
    StockNotFoundError,
    TradeError,
)
from portfolio_sim.models import Holding, Portfolio, PortfolioSnapshot, Stock, TradeResult
from portfolio_sim.portfolio_engine import PortfolioAggregator

logger = logging.getLogger(__name__)


# ---------------------------------------------------------------------------
# Reducers
# ---------------------------------------------------------------------------

def open_portfolio(
    initial_cash: float = DEFAULT_INITIAL_CASH,
    now: Optional[datetime] = None,
) -> Portfolio:
    """Create an empty portfolio at version 0."""
    if not _is_number(initial_cash) or not math.isfinite(initial_cash) or initial_cash < 0:
        raise InvalidAmountError(
            f"Initial cash must be a non-negative number (got {initial_cash!r})."
        )
    return Portfolio(
        cash=float(initial_cash),
        holdings=MappingProxyType({}),
        version=0,
        last_updated=now or _utcnow(),
    )


def merge_purchase(
    existing: Optional[Holding],
    stock: Stock,
    dollar_amount: float,
    purchase_date: str,
) -> Holding:
    """
    Return the holding that results from spending *dollar_amount* on *stock*.

    Formula::

        new_shares = dollar_amount / price
        shares     = old_shares + new_shares
        avg_price  = (old_shares · old_avg + dollar_amount) / shares

    A first purchase records ``price`` as the cost basis and *purchase_date*
    as the opening date; later purchases keep the original date.  The
    holding always references the *stock* snapshot passed in.

    No validation happens here; callers check amount and price first.
    """
    new_shares = dollar_amount / stock.price

    if existing is None:
        return Holding(
            stock=stock,
            shares=new_shares,
            purchase_price=stock.price,
            purchase_date=purchase_date,
        )

    total_shares = existing.shares + new_shares
    total_cost = existing.shares * existing.purchase_price + dollar_amount
    return Holding(
        stock=stock,
        shares=total_shares,
        purchase_price=total_cost / total_shares,
        purchase_date=existing.purchase_date,
    )


def apply_buy(
    portfolio: Portfolio,
    stock: Stock,
    dollar_amount: float,
    now: Optional[datetime] = None,
) -> Portfolio:
    """
    Spend *dollar_amount* of cash on *stock*.

    Raises
    ------
    InvalidAmountError
        *dollar_amount* is not a positive finite number.
    InvalidPriceError
        ``stock.price`` is not a positive finite number.
    InsufficientFundsError
        *dollar_amount* exceeds ``portfolio.cash``.
    """
    _require_positive(dollar_amount, "Buy amount")
    _require_tradable_price(stock)
    if dollar_amount > portfolio.cash:
        raise InsufficientFundsError(
            f"Cannot spend ${dollar_amount:,.2f} on {stock.ticker}: "
            f"only ${portfolio.cash:,.2f} cash available."
        )

    stamp = _next_stamp(portfolio, now)
    holdings = dict(portfolio.holdings)
    holdings[stock.ticker] = merge_purchase(
        holdings.get(stock.ticker), stock, dollar_amount, stamp.date().isoformat()
    )

    return Portfolio(
        cash=portfolio.cash - dollar_amount,
        holdings=MappingProxyType(holdings),
        version=portfolio.version + 1,
        last_updated=stamp,
    )


def apply_sell(
    portfolio: Portfolio,
    ticker: str,
    shares: float,
    now: Optional[datetime] = None,
) -> Portfolio:
    """
    Sell *shares* of *ticker* at the stock's current price.

    A request up to ``held + SHARE_EPSILON`` is accepted.  When the
    remainder would drop below ``SHARE_EPSILON`` the holding is removed.
    Only the shares actually sold (capped at the held quantity) are credited.

    Raises
    ------
    StockNotFoundError
        The portfolio holds no *ticker*.
    InvalidAmountError
        *shares* is not a positive finite number.
    InsufficientSharesError
        *shares* exceeds the held quantity beyond ``SHARE_EPSILON``.
    InvalidPriceError
        The stock's current price is not a positive finite number.
    """
    key = _ticker_key(ticker)
    holding = portfolio.holdings.get(key)
    if holding is None:
        raise StockNotFoundError(f"No holding for ticker '{key}'.")

    _require_positive(shares, "Sell quantity")
    if shares > holding.shares + SHARE_EPSILON:
        raise InsufficientSharesError(
            f"Cannot sell {shares:g} shares of {key}: only {holding.shares:g} held."
        )
    _require_tradable_price(holding.stock)

    holdings = dict(portfolio.holdings)
    remaining = holding.shares - shares
    sold = min(float(shares), holding.shares)
    if remaining < SHARE_EPSILON:
        del holdings[key]
    else:
        holdings[key] = dataclasses.replace(holding, shares=remaining)

    return Portfolio(
        cash=portfolio.cash + sold * holding.stock.price,
        holdings=MappingProxyType(holdings),
        version=portfolio.version + 1,
        last_updated=_next_stamp(portfolio, now),
    )


# ---------------------------------------------------------------------------
# HoldingLedger
# ---------------------------------------------------------------------------

class HoldingLedger:
    """
    Owns the committed :class:`Portfolio` and is the only way to change it.

    Usage
    -----
    ::

        ledger = HoldingLedger(initial_cash=100.0)
        result = ledger.buy(stock, 50.0)
        if not result.ok:
            print(result.error_kind, result.message)
        snap = ledger.snapshot()

    Parameters
    ----------
    initial_cash : float
        Opening cash balance.
    clock : callable, optional
        Zero-argument callable returning a timezone-aware UTC ``datetime``.
        Defaults to ``datetime.now(timezone.utc)``.
    """

    def __init__(
        self,
        initial_cash: float = DEFAULT_INITIAL_CASH,
        clock: Optional[Callable[[], datetime]] = None,
    ):
        self._clock = clock or _utcnow
        self._portfolio = open_portfolio(initial_cash, now=self._clock())

    # ------------------------------------------------------------------ #
    # Read access
    # ------------------------------------------------------------------ #

    @property
    def portfolio(self) -> Portfolio:
        return self._portfolio

    @property
    def cash(self) -> float:
        return self._portfolio.cash

    @property
    def holdings(self) -> Tuple[Holding, ...]:
        return tuple(self._portfolio.holdings.values())

    @property
    def version(self) -> int:
        return self._portfolio.version

    @property
    def last_updated(self) -> datetime:
        return self._portfolio.last_updated

    def holding(self, ticker: str) -> Optional[Holding]:
        return self._portfolio.holdings.get(_ticker_key(ticker))

    def snapshot(self) -> PortfolioSnapshot:
        p = self._portfolio
        return PortfolioSnapshot(
            cash=p.cash,
            holdings=tuple(p.holdings.values()),
            portfolio_value=p.portfolio_value,
            total_value=p.total_value,
            version=p.version,
            last_updated=p.last_updated,
            portfolio_metrics=PortfolioAggregator.metrics(p.holdings),
        )

    def has_changed_since(self, version: int, last_updated: datetime) -> bool:
        """True when a commit happened after the observer's ``(version, last_updated)``."""
        return (self._portfolio.version, self._portfolio.last_updated) != (version, last_updated)

    # ------------------------------------------------------------------ #
    # Commands
    # ------------------------------------------------------------------ #

    def buy(self, stock: Stock, dollar_amount: float) -> TradeResult:
        return self._commit(
            TradeAction.BUY,
            stock.ticker,
            lambda: apply_buy(self._portfolio, stock, dollar_amount, now=self._clock()),
        )

    def sell(self, ticker: str, shares: float) -> TradeResult:
        return self._commit(
            TradeAction.SELL,
            _ticker_key(ticker),
            lambda: apply_sell(self._portfolio, ticker, shares, now=self._clock()),
        )

    def sell_all(self, ticker: str) -> TradeResult:
        """Close the whole position in *ticker*."""
        held = self.holding(ticker)
        return self.sell(ticker, held.shares if held is not None else 0.0)

    def _commit(self, action: TradeAction, ticker: str, reducer) -> TradeResult:
        before = self._portfolio
        try:
            updated = reducer()
        except TradeError as exc:
            logger.warning("Rejected %s %s: %s", action.value, ticker, exc.message)
            return TradeResult(
                ok=False,
                action=action,
                ticker=ticker,
                message=exc.message,
                snapshot=self.snapshot(),
                error_kind=exc.kind,
            )

        self._portfolio = updated
        message = (
            f"{action.value} {ticker}: cash ${before.cash:,.2f} → ${updated.cash:,.2f}"
        )
        logger.info("Committed %s (version %d)", message, updated.version)
        return TradeResult(
            ok=True,
            action=action,
            ticker=ticker,
            message=message,
            snapshot=self.snapshot(),
        )


# ---------------------------------------------------------------------------
# Helpers
# ---------------------------------------------------------------------------

def _utcnow() -> datetime:
    return datetime.now(timezone.utc)


def _next_stamp(portfolio: Portfolio, now: Optional[datetime]) -> datetime:
    # Never step backwards, even if the clock does.
    return max(now or _utcnow(), portfolio.last_updated)


def _ticker_key(ticker: str) -> str:
    return str(ticker).strip().upper()


def _is_number(value) -> bool:
    return isinstance(value, numbers.Real) and not isinstance(value, bool)


def _require_positive(value, label: str) -> None:
    if not _is_number(value) or not math.isfinite(value) or value <= 0:
        raise InvalidAmountError(f"{label} must be a positive number (got {value!r}).")


def _require_tradable_price(stock: Stock) -> None:
    price = stock.price
    if not _is_number(price) or not math.isfinite(price) or price <= 0:
        raise InvalidPriceError(
            f"{stock.ticker} has no tradable price (got {price!r})."
        )
