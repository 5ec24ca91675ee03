"""Price fetching, manual overrides and cache management (CoinGecko API)."""

from __future__ import annotations

import logging
from datetime import datetime
from typing import Any, Callable, Dict, Iterable, Mapping, Optional

import requests

from dca_tracker.config.constants import (
    COINGECKO_API_URL,
    PRICE_CACHE_MAX_AGE_MINUTES,
    REQUEST_TIMEOUT,
    VS_CURRENCY,
)

logger = logging.getLogger(__name__)

COINGECKO_ASSET_IDS = {
    "BTC": "bitcoin",
    "ETH": "ethereum",
    "SOL": "solana",
    "SUI": "sui",
    "HYPE": "hyperliquid",
}

CACHE_TIMESTAMP_FORMAT = "%Y-%m-%d %H:%M:%S"


def coin_id_for(asset: str) -> Optional[str]:
    """Return the CoinGecko id for an asset symbol, or None if it has no public price."""
    return COINGECKO_ASSET_IDS.get((asset or "").upper())


def apply_manual_overrides(prices: Dict[str, float], manual: Optional[Mapping[str, float]]) -> Dict[str, float]:
    """Overwrite fetched prices with manual ones (presale tokens). Modifies prices in place and returns it."""
    for asset, price in (manual or {}).items():
        prices[asset] = price
    return prices


def fetch_prices(
    assets: Iterable[str],
    manual: Optional[Mapping[str, float]] = None,
    vs_currency: str = VS_CURRENCY,
) -> Dict[str, float]:
    """
    Fetch current prices for a list of assets in a single CoinGecko request.

    Assets without a known CoinGecko id are skipped. Manual overrides always
    take precedence. Network or decoding failures are logged and yield an
    empty (or override-only) mapping instead of raising.

    Returns:
        Dict of asset symbol -> price in `vs_currency`.
    """
    assets = list(assets)
    ids = {asset: coin_id_for(asset) for asset in assets}
    query = sorted({coin_id for coin_id in ids.values() if coin_id})
    prices: Dict[str, float] = {}
    if query:
        try:
            response = requests.get(
                COINGECKO_API_URL,
                params={"ids": ",".join(query), "vs_currencies": vs_currency},
                timeout=REQUEST_TIMEOUT,
            )
            response.raise_for_status()
            data = response.json()
            for asset, coin_id in ids.items():
                if coin_id and vs_currency in (data.get(coin_id) or {}):
                    prices[asset] = float(data[coin_id][vs_currency])
        except (requests.RequestException, ValueError, TypeError, AttributeError) as exc:
            logger.warning("Failed to fetch prices from CoinGecko: %s", exc)
    return apply_manual_overrides(prices, manual)


def _cached_price(entry: Any) -> Optional[float]:
    """Price stored in a cache entry, or None if the entry is not a usable number."""
    if not isinstance(entry, dict):
        return None
    price = entry.get("price")
    if isinstance(price, bool) or not isinstance(price, (int, float)):
        return None
    return float(price)


def _cached_time(entry: Any) -> Optional[datetime]:
    if not isinstance(entry, dict):
        return None
    try:
        return datetime.strptime(entry["timestamp"], CACHE_TIMESTAMP_FORMAT)
    except (KeyError, TypeError, ValueError):
        return None


def get_cached_prices(
    assets: Iterable[str],
    cache: Mapping[str, Any],
    max_age_minutes: float = PRICE_CACHE_MAX_AGE_MINUTES,
) -> Dict[str, float]:
    """Return cached prices younger than max_age_minutes; stale or unreadable entries are left out."""
    fresh: Dict[str, float] = {}
    now = datetime.now()
    for asset in assets:
        entry = cache.get(asset)
        price = _cached_price(entry)
        cache_time = _cached_time(entry)
        if price is None or cache_time is None:
            continue
        if (now - cache_time).total_seconds() / 60 < max_age_minutes:
            fresh[asset] = price
    return fresh


def prices_as_of(assets: Iterable[str], cache: Mapping[str, Any]) -> Optional[datetime]:
    """Timestamp of the newest cached price among assets, or None if none is cached."""
    stamps = [
        _cached_time(cache.get(asset))
        for asset in assets
        if _cached_price(cache.get(asset)) is not None
    ]
    stamps = [s for s in stamps if s is not None]
    return max(stamps) if stamps else None


def refresh_prices(
    assets: Iterable[str],
    cache: Dict[str, Any],
    save_cache: Callable[[Dict[str, Any]], None],
    manual: Optional[Mapping[str, float]] = None,
    fetch: Optional[Callable[..., Dict[str, float]]] = None,
) -> Dict[str, float]:
    """
    Fetch prices for all given assets and store them in the cache.

    Calls save_cache only when at least one price was fetched. Manual
    overrides are applied to the result but never written to the cache.
    """
    fetched = (fetch or fetch_prices)(assets)
    if fetched:
        stamp = datetime.now().strftime(CACHE_TIMESTAMP_FORMAT)
        for asset, price in fetched.items():
            cache[asset] = {"price": price, "timestamp": stamp}
        save_cache(cache)
        logger.info("Refreshed %d price(s)", len(fetched))
    return apply_manual_overrides(dict(fetched), manual)


def get_prices(
    assets: Iterable[str],
    cache: Dict[str, Any],
    save_cache: Callable[[Dict[str, Any]], None],
    manual: Optional[Mapping[str, float]] = None,
    max_age_minutes: float = PRICE_CACHE_MAX_AGE_MINUTES,
    fetch: Optional[Callable[..., Dict[str, float]]] = None,
) -> Dict[str, float]:
    """
    Get prices from cache (if fresh) or API, falling back to any cached value
    when the API has nothing. Manual overrides win over both.
    """
    assets = list(assets)
    prices = get_cached_prices(assets, cache, max_age_minutes)
    missing = [a for a in assets if a not in prices and coin_id_for(a)]
    if missing:
        prices.update(refresh_prices(missing, cache, save_cache, fetch=fetch))
    for asset in missing:
        stale = _cached_price(cache.get(asset))
        if asset not in prices and stale is not None:
            prices[asset] = stale
    return apply_manual_overrides(prices, manual)
