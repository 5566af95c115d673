from .client import StoreInfoClient
from .config import FetcherConfig
from .errors import GenericFetchError, MalformedUrl, NetworkUnavailable, StoreInfoError
from .fetcher import PageInfoFetcher
from .tags import Tag
from .types import ListingInfo, ListingInfoBuilder

__all__ = [
    "FetcherConfig",
    "GenericFetchError",
    "ListingInfo",
    "ListingInfoBuilder",
    "MalformedUrl",
    "NetworkUnavailable",
    "PageInfoFetcher",
    "StoreInfoClient",
    "StoreInfoError",
    "Tag",
]
