import pytest
from urllib3.exceptions import ReadTimeoutError

from storeinfo.config import FetcherConfig
from storeinfo.errors import GenericFetchError, MalformedUrl, NetworkUnavailable
from storeinfo.fetcher import PageInfoFetcher
from storeinfo.metrics import OperationCounts
from storeinfo.tags import Tag
from storeinfo.types import FetchResult, HttpClientProtocol


LISTING_HTML = """
<html><body>
  <div itemprop="softwareVersion"> 1.2.3 </div>
  <div itemprop="numDownloads">1,000,000+ <span>installs</span></div>
  <div itemprop="customThing">hello</div>
  <div class="score">4.5</div>
  <span class="reviews-num">12,345</span>
  <div class="recent-change">Fixed crash on launch</div>
  <div class="recent-change">New <b>dark</b> mode</div>
  <div class="recent-change">Faster sync</div>
</body></html>
"""

SCALAR_FIELDS = (
    "version",
    "downloads",
    "published_date",
    "os_requirements",
    "content_rating",
    "app_rating",
    "app_rating_count",
)


class StubConnection:
    def __init__(self, status: int):
        self.status = status
        self.close_calls = 0

    def close(self) -> None:
        self.close_calls += 1


class StubHttp(HttpClientProtocol):
    def __init__(self, html: str = LISTING_HTML, status: int = 200, error: Exception | None = None):
        self.html = html
        self.status = status
        self.error = error
        self.calls: list[tuple[str, str, str | None]] = []
        self.connections: list[StubConnection] = []

    def fetch(self, url: str, referrer: str | None = None) -> FetchResult:
        self.calls.append(("fetch", url, referrer))
        if self.error:
            raise self.error
        return FetchResult(status=self.status, content_type="text/html", text=self.html, size_bytes=len(self.html))

    def open(self, url: str) -> StubConnection:
        self.calls.append(("open", url, None))
        if self.error:
            raise self.error
        conn = StubConnection(self.status)
        self.connections.append(conn)
        return conn


class Offline:
    def is_connected(self) -> bool:
        return False


def populated(info):
    return {name for name in SCALAR_FIELDS if getattr(info, name) is not None}


def make(http=None, **config):
    return PageInfoFetcher(FetcherConfig(**config), http_client=http or StubHttp())


def test_validate_ok():
    http = StubHttp(status=200)
    info = make(http).validate("com.example.app")
    assert info.is_url_valid is True
    assert info.source_url == "https://play.google.com/store/apps/details?id=com.example.app"
    assert populated(info) == set()
    assert [c.close_calls for c in http.connections] == [1]


@pytest.mark.parametrize("status", [201, 204, 301, 404, 500, 503])
def test_validate_non_ok_status_is_not_a_failure(status):
    http = StubHttp(status=status)
    info = make(http).validate("com.example.app")
    assert info.is_url_valid is False
    assert [c.close_calls for c in http.connections] == [1]


def test_validate_strict_raises_and_still_closes():
    http = StubHttp(status=404)
    with pytest.raises(GenericFetchError):
        make(http, strict_validation=True).validate("com.example.app")
    assert [c.close_calls for c in http.connections] == [1]


def test_validate_transport_error_propagates():
    err = ReadTimeoutError(None, "https://play.google.com", "timed out")
    with pytest.raises(ReadTimeoutError):
        make(StubHttp(error=err)).validate("com.example.app")


@pytest.mark.parametrize(
    "call",
    [
        lambda f: f.validate("com.example.app"),
        lambda f: f.fetch_field("com.example.app", Tag.VERSION),
        lambda f: f.fetch_rating("com.example.app"),
        lambda f: f.fetch_rating_count("com.example.app"),
        lambda f: f.fetch_changelog("com.example.app"),
    ],
)
def test_offline_fails_before_any_request(call):
    http = StubHttp()
    fetcher = PageInfoFetcher(http_client=http, connectivity=Offline())
    with pytest.raises(NetworkUnavailable):
        call(fetcher)
    assert http.calls == []


def test_malformed_identifier_fails_before_any_request():
    http = StubHttp()
    with pytest.raises(MalformedUrl):
        make(http).fetch_field("com example", Tag.VERSION)
    with pytest.raises(MalformedUrl):
        make(http).validate("")
    assert http.calls == []


@pytest.mark.parametrize("tag", [Tag.VERSION, "softwareVersion"])
def test_fetch_field_version(tag):
    http = StubHttp()
    info = make(http).fetch_field("com.example.app", tag)
    assert info.version == "1.2.3"
    assert populated(info) == {"version"}
    assert info.changelog_entries == ()
    assert http.calls == [("fetch", info.source_url, "http://www.google.com")]


def test_fetch_field_string_tag_is_used_as_passed():
    http = StubHttp(html='<div itemprop="VERSION">1.2.3</div>')
    info = make(http).fetch_field("com.example.app", "VERSION")
    assert info.version == "1.2.3"
    assert populated(info) == {"version"}


def test_fetch_field_member_name_does_not_match_constant_itemprop():
    with pytest.raises(GenericFetchError):
        make().fetch_field("com.example.app", "VERSION")


def test_fetch_field_member_selects_on_constant_value():
    with pytest.raises(GenericFetchError):
        make(StubHttp(html='<div itemprop="VERSION">1.2.3</div>')).fetch_field("com.example.app", Tag.VERSION)


def test_fetch_field_uses_own_text():
    info = make().fetch_field("com.example.app", Tag.DOWNLOADS)
    assert info.downloads == "1,000,000+"
    assert populated(info) == {"downloads"}


def test_fetch_field_missing_element_is_generic_error():
    with pytest.raises(GenericFetchError):
        make().fetch_field("com.example.app", Tag.CONTENT_RATING)


def test_fetch_field_unmapped_tag_found_leaves_fields_unset():
    info = make().fetch_field("com.example.app", "customThing")
    assert populated(info) == set()
    assert info.is_url_valid is False
    assert info.identifier == "com.example.app"


def test_fetch_field_parses_error_pages():
    info = make(StubHttp(status=404)).fetch_field("com.example.app", Tag.VERSION)
    assert info.version == "1.2.3"


def test_fetch_field_transport_error_propagates():
    err = ReadTimeoutError(None, "https://play.google.com", "timed out")
    with pytest.raises(ReadTimeoutError):
        make(StubHttp(error=err)).fetch_field("com.example.app", Tag.VERSION)


def test_fetch_rating():
    info = make().fetch_rating("com.example.app")
    assert info.app_rating == "4.5"
    assert populated(info) == {"app_rating"}


def test_fetch_rating_count_writes_rating_field():
    info = make().fetch_rating_count("com.example.app")
    assert info.app_rating == "12,345"
    assert info.app_rating_count is None


def test_fetch_rating_missing_widget():
    with pytest.raises(GenericFetchError):
        make(StubHttp(html="<html></html>")).fetch_rating("com.example.app")
    with pytest.raises(GenericFetchError):
        make(StubHttp(html="<html></html>")).fetch_rating_count("com.example.app")


def test_fetch_changelog_in_document_order():
    info = make().fetch_changelog("com.example.app")
    assert info.changelog_entries == ("Fixed crash on launch", "New mode", "Faster sync")
    assert populated(info) == set()


def test_fetch_changelog_empty_page():
    info = make(StubHttp(html="<html><body><p>nothing</p></body></html>")).fetch_changelog("com.example.app")
    assert info.changelog_entries == ()


def test_custom_store_url_and_referrer():
    http = StubHttp()
    fetcher = make(http, store_url="https://store.example.com/details", referrer="https://search.example.com")
    info = fetcher.fetch_changelog("com.example.app")
    assert info.source_url == "https://store.example.com/details?id=com.example.app"
    assert http.calls[0][2] == "https://search.example.com"


def test_outcomes_are_recorded():
    fetcher = make()
    fetcher.fetch_rating("com.example.app")
    with pytest.raises(GenericFetchError):
        fetcher.fetch_field("com.example.app", Tag.OS_REQUIREMENTS)
    totals = fetcher.metrics.snapshot()
    assert totals.operations == {
        "fetch_rating": OperationCounts(ok=1),
        "fetch_field": OperationCounts(failed=1),
    }
