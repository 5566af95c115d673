import pytest

from storeinfo.errors import MalformedUrl
from storeinfo.parsing import Extractor, ListingUrl, attribute_selector


STORE = "https://play.google.com/store/apps/details"


def test_listing_url_build():
    assert ListingUrl.build(STORE, "com.example.app") == STORE + "?id=com.example.app"
    assert ListingUrl.build(STORE, "a&b=c").endswith("?id=a%26b%3Dc")


@pytest.mark.parametrize("identifier", ["", "   ", "com.example app", "com.example\tapp"])
def test_listing_url_rejects_bad_identifiers(identifier):
    with pytest.raises(MalformedUrl):
        ListingUrl.build(STORE, identifier)


def test_listing_url_rejects_non_http_store():
    with pytest.raises(MalformedUrl):
        ListingUrl.build("ftp://example.com/details", "com.example.app")
    with pytest.raises(MalformedUrl):
        ListingUrl.build("not a store", "com.example.app")


def test_own_text_excludes_descendants_and_comments():
    soup = Extractor.parse('<div id="x">  Varies <b>with</b> device <!-- hidden -->\n</div>')
    assert Extractor.own_text(soup.select_one("#x")) == "Varies device"


def test_select_first_and_all():
    html = """
    <div itemprop="softwareVersion">1.2.3</div>
    <div itemprop="softwareVersion">9.9.9</div>
    <div class="recent-change">one</div>
    <div class="recent-change">two <i>extra</i></div>
    """
    soup = Extractor.parse(html)
    assert Extractor.select_first_text(soup, attribute_selector("div", "itemprop", "softwareVersion")) == "1.2.3"
    assert Extractor.select_first_text(soup, attribute_selector("div", "itemprop", "missing")) is None
    assert Extractor.select_all_text(soup, ".recent-change") == ["one", "two"]
    assert Extractor.select_all_text(soup, ".absent") == []


def test_attribute_selector_matches_whole_class_value():
    soup = Extractor.parse('<div class="score big">5</div><div class="score">4.1</div>')
    assert Extractor.select_first_text(soup, attribute_selector("div", "class", "score")) == "4.1"


def test_attribute_selector_escapes_quotes():
    assert attribute_selector("div", "itemprop", 'a"b') == 'div[itemprop="a\\"b"]'
