from __future__ import annotations

import logging
import math
import numbers
from typing import Dict, Iterable, Mapping

import pandas as pd

from portfolio_sim.constants import DEFAULT_INDUSTRY
from portfolio_sim.enums import Category
from portfolio_sim.fundamentals_engine import FundamentalsScorer
from portfolio_sim.models import Numeric, Qualitative, Stock

logger = logging.getLogger(__name__)


class StockLoader:
    """
    Turns raw market-data provider records into :class:`Stock` values.

    The engine does not fetch or cache provider data; this class only checks
    types and ranges and converts each metric block into a ``MetricInput``.

    Record layout::

        {
            "ticker":   "SYK",
            "name":     "Stryker Corporation",
            "industry": "Healthcare",
            "price":    345.68,
            "metrics": {
                "performance": "Strong",                       # label
                "stability":   72,                             # 0-100 score
                "value":       {"value": "Fair"},              # wrapped label
                "momentum":    {"details": {"rsi": 55, ...}},  # fundamentals
            },
        }
    """

    # ------------------------------------------------------------------
    # Single record
    # ------------------------------------------------------------------

    @staticmethod
    def from_record(record: Mapping) -> Stock:
        """
        Build a :class:`Stock` from one provider record.

        Raises
        ------
        ValueError
            If the ticker or price is missing or invalid, or a metric block
            cannot be parsed.
        """
        if record.get("ticker") is None or record.get("price") is None:
            raise ValueError(f"Record is missing 'ticker' or 'price': {dict(record)!r}")

        ticker = str(record["ticker"]).strip().upper()
        industry = str(record.get("industry") or DEFAULT_INDUSTRY)
        raw_metrics = record.get("metrics") or {}
        if not isinstance(raw_metrics, Mapping):
            raise ValueError(f"{ticker}: 'metrics' must be a mapping.")

        metrics = {}
        for key, raw in raw_metrics.items():
            try:
                category = Category(str(key).lower())
            except ValueError:
                raise ValueError(f"{ticker}: unknown metric category '{key}'.") from None
            metrics[category] = StockLoader.parse_metric(raw, category, industry)

        return Stock(
            ticker=ticker,
            name=str(record.get("name") or ticker),
            industry=industry,
            price=record["price"],
            metrics=metrics,
        )

    @staticmethod
    def parse_metric(raw, category: Category, industry: str):
        """
        Convert one raw metric block into ``Numeric`` or ``Qualitative``.

        * ``Numeric`` / ``Qualitative`` — returned as is
        * ``str``                       — rating label
        * ``int`` / ``float``           — score on the 0-100 scale
        * mapping with ``details``      — fundamentals, scored against the
          industry by :class:`FundamentalsScorer`
        * mapping with ``value``        — the value is parsed recursively
        """
        if isinstance(raw, (Numeric, Qualitative)):
            return raw
        if isinstance(raw, str):
            return Qualitative(raw)
        if isinstance(raw, bool):
            raise ValueError(f"{category.value}: boolean is not a metric value.")
        if isinstance(raw, numbers.Real):
            return Numeric(float(raw))
        if isinstance(raw, Mapping):
            details = raw.get("details")
            if isinstance(details, Mapping):
                return Numeric(float(FundamentalsScorer.score(category, details, industry)))
            if "value" in raw:
                return StockLoader.parse_metric(raw["value"], category, industry)
        raise ValueError(f"{category.value}: unsupported metric block {raw!r}.")

    # ------------------------------------------------------------------
    # Batches
    # ------------------------------------------------------------------

    @staticmethod
    def from_records(records: Iterable[Mapping]) -> Dict[str, Stock]:
        """
        Load many records into ``{ticker: Stock}``.

        Invalid records are skipped with a warning; a repeated ticker keeps
        the last record.
        """
        stocks: Dict[str, Stock] = {}
        for record in records:
            try:
                stock = StockLoader.from_record(record)
            except ValueError as exc:
                logger.warning("Skipping stock record: %s", exc)
                continue
            stocks[stock.ticker] = stock
        return stocks

    @staticmethod
    def from_frame(df: pd.DataFrame) -> Dict[str, Stock]:
        """
        Load a flat DataFrame with columns ``ticker``, ``name``, ``industry``,
        ``price`` and one column per category (labels or 0-100 numbers).

        Missing cells (NaN / None) leave that category neutral.
        """
        required = {"ticker", "price"}
        missing = required - set(df.columns)
        if missing:
            raise ValueError(f"Stock frame is missing columns: {sorted(missing)}")

        categories = [c.value for c in Category if c.value in df.columns]
        records = []
        for row in df.to_dict(orient="records"):
            metrics = {
                name: row[name] for name in categories if not _is_missing(row[name])
            }
            records.append({
                "ticker":   None if _is_missing(row["ticker"]) else row["ticker"],
                "name":     None if _is_missing(row.get("name")) else row.get("name"),
                "industry": None if _is_missing(row.get("industry")) else row.get("industry"),
                "price":    row["price"],
                "metrics":  metrics,
            })
        return StockLoader.from_records(records)


def _is_missing(value) -> bool:
    if value is None:
        return True
    return isinstance(value, float) and math.isnan(value)
