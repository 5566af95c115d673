from dataclasses import asdict, dataclass, replace
from typing import Any, Dict, Iterable, Optional, Protocol, Tuple

from .tags import Tag


@dataclass(frozen=True)
class FetchResult:
    status: int
    content_type: str
    text: str
    size_bytes: int


class ConnectionProtocol(Protocol):
    status: int

    def close(self) -> None: ...


class HttpClientProtocol(Protocol):
    def fetch(self, url: str, referrer: Optional[str] = None) -> FetchResult: ...

    def open(self, url: str) -> ConnectionProtocol: ...


class ConnectivityProtocol(Protocol):
    def is_connected(self) -> bool: ...


@dataclass(frozen=True)
class ListingInfo:
    identifier: str
    source_url: str
    is_url_valid: bool = False
    version: Optional[str] = None
    downloads: Optional[str] = None
    published_date: Optional[str] = None
    os_requirements: Optional[str] = None
    content_rating: Optional[str] = None
    app_rating: Optional[str] = None
    app_rating_count: Optional[str] = None
    changelog_entries: Tuple[str, ...] = ()

    def to_dict(self) -> Dict[str, Any]:
        record = asdict(self)
        record["changelog_entries"] = list(self.changelog_entries)
        return record


class ListingInfoBuilder:
    """Accumulates fields for one fetch; ``build`` freezes them into a ListingInfo."""

    def __init__(self, identifier: str, source_url: str):
        self._info = ListingInfo(identifier=identifier, source_url=source_url)

    def _set(self, **fields: Any) -> "ListingInfoBuilder":
        self._info = replace(self._info, **fields)
        return self

    def set_is_url_valid(self, valid: bool) -> "ListingInfoBuilder":
        return self._set(is_url_valid=valid)

    def set_version(self, value: str) -> "ListingInfoBuilder":
        return self._set(version=value)

    def set_downloads(self, value: str) -> "ListingInfoBuilder":
        return self._set(downloads=value)

    def set_published_date(self, value: str) -> "ListingInfoBuilder":
        return self._set(published_date=value)

    def set_os_requirements(self, value: str) -> "ListingInfoBuilder":
        return self._set(os_requirements=value)

    def set_content_rating(self, value: str) -> "ListingInfoBuilder":
        return self._set(content_rating=value)

    def set_app_rating(self, value: str) -> "ListingInfoBuilder":
        return self._set(app_rating=value)

    def set_app_rating_count(self, value: str) -> "ListingInfoBuilder":
        return self._set(app_rating_count=value)

    def set_changelog_entries(self, entries: Iterable[str]) -> "ListingInfoBuilder":
        return self._set(changelog_entries=tuple(entries))

    def set_tag(self, tag: Tag, value: str) -> "ListingInfoBuilder":
        return self._set(**{tag.field_name: value})

    def build(self) -> ListingInfo:
        return self._info
