from __future__ import annotations

import logging
from datetime import datetime, timezone

from stockdrop.schemas.screener import FilterCriteria, ScreenMeta, ScreenResult
from stockdrop.services.providers.base import MarketDataProvider
from stockdrop.services.providers.fmp_provider import FMPProvider
from stockdrop.services.ranking import build_records, merge_records, rank, select

logger = logging.getLogger(__name__)

# criteria attribute -> provider query parameter
SCREENER_PARAMS = (
    ("min_market_cap", "marketCapMoreThan"),
    ("max_market_cap", "marketCapLowerThan"),
    ("min_price", "priceMoreThan"),
    ("max_price", "priceLowerThan"),
    ("min_beta", "betaMoreThan"),
    ("max_beta", "betaLowerThan"),
    ("min_volume", "volumeMoreThan"),
    ("max_volume", "volumeLowerThan"),
    ("min_change", "changeMoreThan"),
    ("max_change", "changeLowerThan"),
    ("min_dividend", "dividendMoreThan"),
    ("max_dividend", "dividendLowerThan"),
    ("sector", "sector"),
    ("industry", "industry"),
    ("exchange", "exchange"),
    ("country", "country"),
    ("is_etf", "isEtf"),
    ("is_fund", "isFund"),
    ("is_actively_trading", "isActivelyTrading"),
)


def _param_value(value) -> str:
    if isinstance(value, bool):
        return "true" if value else "false"
    if isinstance(value, float) and value.is_integer():
        return str(int(value))
    return str(value)


class ScreenerService:
    CANDIDATE_LIMIT = 200
    MAX_QUOTE_SYMBOLS = 100

    def __init__(self, provider: MarketDataProvider | None = None) -> None:
        self.provider = provider or FMPProvider()

    def screener_params(self, criteria: FilterCriteria, bounds: dict | None = None) -> dict:
        params: dict[str, str] = {}
        for attr, name in SCREENER_PARAMS:
            value = getattr(criteria, attr)
            if value is not None:
                params[name] = _param_value(value)
        # Preset bounds only fill what the caller left open
        for name, value in (bounds or {}).items():
            params.setdefault(name, _param_value(value))
        params["limit"] = str(self.CANDIDATE_LIMIT)
        params["includeAllShareClasses"] = _param_value(criteria.include_all_share_classes)
        return params

    def candidate_symbols(self, screener_rows: list[dict]) -> list[str]:
        symbols: list[str] = []
        seen: set[str] = set()
        for row in screener_rows:
            symbol = str(row.get("symbol") or "").strip()
            if not symbol or symbol in seen:
                continue
            seen.add(symbol)
            symbols.append(symbol)
            if len(symbols) >= self.MAX_QUOTE_SYMBOLS:
                break
        return symbols

    def _empty(self, criteria: FilterCriteria, generation: int | None, candidates: int = 0) -> ScreenResult:
        meta = ScreenMeta(
            mode=criteria.mode,
            candidates=candidates,
            generation=generation,
            fetched_at=datetime.now(timezone.utc),
        )
        return ScreenResult(items=(), meta=meta)

    async def run(
        self,
        criteria: FilterCriteria,
        bounds: dict | None = None,
        generation: int | None = None,
    ) -> ScreenResult:
        screener_rows = await self.provider.get_screener(self.screener_params(criteria, bounds))
        if not screener_rows:
            logger.info("Screener returned no candidates (mode=%s)", criteria.mode.value)
            return self._empty(criteria, generation)

        symbols = self.candidate_symbols(screener_rows)
        if not symbols:
            return self._empty(criteria, generation, candidates=len(screener_rows))

        quote_rows = await self.provider.get_quotes(symbols)
        merged = merge_records(screener_rows, quote_rows)
        selected = select(build_records(merged), criteria)
        ranked = rank(selected, criteria)[: criteria.limit]

        logger.debug(
            "Pipeline mode=%s candidates=%d quoted=%d merged=%d returned=%d",
            criteria.mode.value,
            len(screener_rows),
            len(quote_rows),
            len(merged),
            len(ranked),
        )
        meta = ScreenMeta(
            mode=criteria.mode,
            candidates=len(screener_rows),
            quoted=len(quote_rows),
            merged=len(merged),
            matched=len(selected),
            returned=len(ranked),
            generation=generation,
            fetched_at=datetime.now(timezone.utc),
        )
        return ScreenResult(items=tuple(ranked), meta=meta)
