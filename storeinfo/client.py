from concurrent.futures import Future, ThreadPoolExecutor
from typing import Dict, Iterable, Union

from .config import FetcherConfig
from .fetcher import PageInfoFetcher
from .tags import Tag
from .types import ListingInfo


class StoreInfoClient:
    """Runs PageInfoFetcher operations on a worker pool.

    Each call returns a Future that resolves once, to a ListingInfo or to the
    exception the fetcher raised.
    """

    def __init__(self, fetcher: PageInfoFetcher | None = None, config: FetcherConfig | None = None):
        self.fetcher = fetcher or PageInfoFetcher(config)
        self._executor = ThreadPoolExecutor(
            max_workers=max(1, self.fetcher.config.max_workers), thread_name_prefix="storeinfo"
        )

    def __enter__(self) -> "StoreInfoClient":
        return self

    def __exit__(self, *exc) -> None:
        self.close()

    def close(self) -> None:
        self._executor.shutdown(wait=True)

    def validate(self, identifier: str) -> "Future[ListingInfo]":
        return self._executor.submit(self.fetcher.validate, identifier)

    def fetch_field(self, identifier: str, tag: Union[Tag, str]) -> "Future[ListingInfo]":
        return self._executor.submit(self.fetcher.fetch_field, identifier, tag)

    def fetch_rating(self, identifier: str) -> "Future[ListingInfo]":
        return self._executor.submit(self.fetcher.fetch_rating, identifier)

    def fetch_rating_count(self, identifier: str) -> "Future[ListingInfo]":
        return self._executor.submit(self.fetcher.fetch_rating_count, identifier)

    def fetch_changelog(self, identifier: str) -> "Future[ListingInfo]":
        return self._executor.submit(self.fetcher.fetch_changelog, identifier)

    def version(self, identifier: str) -> "Future[ListingInfo]":
        return self.fetch_field(identifier, Tag.VERSION)

    def downloads(self, identifier: str) -> "Future[ListingInfo]":
        return self.fetch_field(identifier, Tag.DOWNLOADS)

    def published_date(self, identifier: str) -> "Future[ListingInfo]":
        return self.fetch_field(identifier, Tag.LAST_PUBLISHED_DATE)

    def os_requirements(self, identifier: str) -> "Future[ListingInfo]":
        return self.fetch_field(identifier, Tag.OS_REQUIREMENTS)

    def content_rating(self, identifier: str) -> "Future[ListingInfo]":
        return self.fetch_field(identifier, Tag.CONTENT_RATING)

    def fetch_many(self, identifier: str, tags: Iterable[Union[Tag, str]]) -> Dict[Union[Tag, str], "Future[ListingInfo]"]:
        """Submit one fetch_field per distinct tag.

        Tag members compare equal to their selector value, so Tag.VERSION and
        "softwareVersion" count as the same tag.
        """
        futures: Dict[Union[Tag, str], "Future[ListingInfo]"] = {}
        for tag in tags:
            if tag not in futures:
                futures[tag] = self.fetch_field(identifier, tag)
        return futures
