import functools
import logging
from typing import Callable, Optional, Tuple, TypeVar, Union

from bs4 import BeautifulSoup

from .config import FetcherConfig
from .errors import GenericFetchError, NetworkUnavailable
from .metrics import Metrics
from .net import AssumeConnected, HttpClient
from .parsing import Extractor, ListingUrl, attribute_selector
from .tags import Tag
from .types import ConnectivityProtocol, HttpClientProtocol, ListingInfo, ListingInfoBuilder


logger = logging.getLogger(__name__)

CHANGELOG_SELECTOR = ".recent-change"
HTTP_OK = 200

F = TypeVar("F", bound=Callable[..., ListingInfo])


def _tracked(operation: str) -> Callable[[F], F]:
    def decorate(fn: F) -> F:
        @functools.wraps(fn)
        def wrapper(self: "PageInfoFetcher", *args, **kwargs) -> ListingInfo:
            try:
                info = fn(self, *args, **kwargs)
            except Exception:
                self.metrics.record_outcome(operation, ok=False)
                raise
            self.metrics.record_outcome(operation, ok=True)
            return info

        return wrapper  # type: ignore[return-value]

    return decorate


class PageInfoFetcher:
    """Scrapes single fields from a store listing page.

    Every public method performs one request and returns one ListingInfo, or
    raises: NetworkUnavailable when the connectivity collaborator reports no
    network, MalformedUrl when the listing URL cannot be built, GenericFetchError
    when the page lacks the requested element. Transport errors from urllib3
    propagate untouched. Nothing is retried.
    """

    def __init__(
        self,
        config: FetcherConfig | None = None,
        http_client: HttpClientProtocol | None = None,
        connectivity: ConnectivityProtocol | None = None,
        metrics: Metrics | None = None,
    ):
        self.config = config or FetcherConfig()
        self.metrics = metrics or Metrics()
        self.http = http_client or HttpClient(
            self.config.user_agent, self.config.timeout, self.config.max_connections, metrics=self.metrics
        )
        self.connectivity = connectivity or AssumeConnected()

    def listing_url(self, identifier: str) -> str:
        return ListingUrl.build(self.config.store_url, identifier)

    def _ensure_connected(self) -> None:
        if not self.connectivity.is_connected():
            raise NetworkUnavailable("network is not available")

    def _load(self, url: str) -> BeautifulSoup:
        result = self.http.fetch(url, referrer=self.config.referrer)
        if result.status >= 400:
            logger.debug("%s answered %d; parsing body anyway", url, result.status)
        return Extractor.parse(result.text)

    def _scrape_first(self, identifier: str, selector: str) -> Tuple[ListingInfoBuilder, str]:
        url = self.listing_url(identifier)
        self._ensure_connected()
        soup = self._load(url)
        value = Extractor.select_first_text(soup, selector)
        if value is None:
            raise GenericFetchError(f"no element matching {selector} on {url}")
        return ListingInfoBuilder(identifier, url), value

    @_tracked("validate")
    def validate(self, identifier: str) -> ListingInfo:
        url = self.listing_url(identifier)
        self._ensure_connected()
        connection = self.http.open(url)
        try:
            is_valid = connection.status == HTTP_OK
            if not is_valid and self.config.strict_validation:
                raise GenericFetchError(f"{url} answered {connection.status}")
        finally:
            connection.close()
        return ListingInfoBuilder(identifier, url).set_is_url_valid(is_valid).build()

    @_tracked("fetch_field")
    def fetch_field(self, identifier: str, tag: Union[Tag, str]) -> ListingInfo:
        """Read ``div[itemprop=<tag>]`` into the field mapped to ``tag``.

        A Tag member selects on its constant value; a plain string is used as
        the itemprop value exactly as passed, and only picks the output field
        through Tag.resolve. Strings that resolve to no Tag still succeed on a
        match, with no field populated.
        """
        resolved: Optional[Tag] = Tag.resolve(tag)
        selector_value = tag.value if isinstance(tag, Tag) else tag
        builder, value = self._scrape_first(identifier, attribute_selector("div", "itemprop", selector_value))
        if resolved is None:
            logger.debug("tag %r maps to no listing field; ignoring %r", tag, value)
            return builder.build()
        return builder.set_tag(resolved, value).build()

    @_tracked("fetch_rating")
    def fetch_rating(self, identifier: str) -> ListingInfo:
        builder, value = self._scrape_first(identifier, attribute_selector("div", "class", Tag.APP_RATING.value))
        return builder.set_app_rating(value).build()

    @_tracked("fetch_rating_count")
    def fetch_rating_count(self, identifier: str) -> ListingInfo:
        builder, value = self._scrape_first(
            identifier, attribute_selector("span", "class", Tag.APP_RATING_COUNT.value)
        )
        # the count is stored in app_rating, not app_rating_count
        return builder.set_app_rating(value).build()

    @_tracked("fetch_changelog")
    def fetch_changelog(self, identifier: str) -> ListingInfo:
        url = self.listing_url(identifier)
        self._ensure_connected()
        entries = Extractor.select_all_text(self._load(url), CHANGELOG_SELECTOR)
        if not entries:
            logger.debug("no changelog entries on %s", url)
        return ListingInfoBuilder(identifier, url).set_changelog_entries(entries).build()
