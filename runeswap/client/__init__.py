"""Client-side data layer for the RuneSwap routes (search, quotes, USD values)."""

from .api import ApiClientError, RunesApiClient
from .assets import BTC_ASSET, Asset
from .quotes import QuoteFetcher, QuoteState, friendly_quote_error
from .search import AssetSearch
from .state import Preferences, PreferencesStore
from .timing import Debouncer, RequestSequence, Throttle
from .values import UsdValues, compute_usd_values

__all__ = [
    "ApiClientError",
    "Asset",
    "AssetSearch",
    "BTC_ASSET",
    "Debouncer",
    "Preferences",
    "PreferencesStore",
    "QuoteFetcher",
    "QuoteState",
    "RequestSequence",
    "RunesApiClient",
    "Throttle",
    "UsdValues",
    "compute_usd_values",
    "friendly_quote_error",
]
