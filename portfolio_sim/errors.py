"""
portfolio_sim/errors.py
-----------------------
Business-rule failures raised by the ledger reducers.

Every error is raised *before* a new portfolio is built, so a rejected
command never leaves partial state behind.  ``HoldingLedger`` catches
:class:`TradeError` at its boundary and reports it as a structured
``TradeResult`` (kind + message) instead of letting it escape.
"""

from __future__ import annotations

from portfolio_sim.enums import TradeErrorKind


class TradeError(Exception):
    """Base class for rejected buy / sell commands."""

    kind: TradeErrorKind = TradeErrorKind.INVALID_AMOUNT

    def __init__(self, message: str):
        super().__init__(message)
        self.message = message


class InvalidAmountError(TradeError):
    """Non-positive or non-finite dollar amount or share count."""
    kind = TradeErrorKind.INVALID_AMOUNT


class InsufficientFundsError(TradeError):
    """Buy amount exceeds available cash."""
    kind = TradeErrorKind.INSUFFICIENT_FUNDS


class InsufficientSharesError(TradeError):
    """Sell quantity exceeds the shares held."""
    kind = TradeErrorKind.INSUFFICIENT_SHARES


class StockNotFoundError(TradeError):
    """Sell on a ticker the portfolio does not hold."""
    kind = TradeErrorKind.STOCK_NOT_FOUND


class InvalidPriceError(TradeError):
    """The stock's current price cannot be traded at (zero, negative, NaN)."""
    kind = TradeErrorKind.INVALID_PRICE
