from dataclasses import dataclass


DEFAULT_STORE_URL = "https://play.google.com/store/apps/details"
DEFAULT_REFERRER = "http://www.google.com"
DEFAULT_TIMEOUT = 5.0
DEFAULT_USER_AGENT = "storeinfo/1.0 (+https://example.com; contact: storeinfo@example.com)"


@dataclass(frozen=True)
class FetcherConfig:
    store_url: str = DEFAULT_STORE_URL
    timeout: float = DEFAULT_TIMEOUT
    referrer: str = DEFAULT_REFERRER
    user_agent: str = DEFAULT_USER_AGENT
    max_connections: int = 4
    max_workers: int = 4
    strict_validation: bool = False
