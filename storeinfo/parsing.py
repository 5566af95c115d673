from typing import List, Optional
from urllib.parse import quote

from bs4 import BeautifulSoup
from bs4.element import NavigableString, PreformattedString, Tag as Element
from urllib3.util import parse_url
from urllib3.exceptions import LocationParseError

from .errors import MalformedUrl


class ListingUrl:
    @staticmethod
    def build(store_url: str, identifier: str) -> str:
        """Return the canonical listing URL for ``identifier``.

        Raises MalformedUrl for blank identifiers, identifiers containing
        whitespace, and store URLs that do not parse to an http(s) host.
        """
        if not identifier or not identifier.strip() or any(c.isspace() for c in identifier):
            raise MalformedUrl(f"invalid listing identifier: {identifier!r}")
        url = f"{store_url}?id={quote(identifier, safe='')}"
        try:
            parsed = parse_url(url)
        except LocationParseError as e:
            raise MalformedUrl(f"cannot build listing url for {identifier!r}: {e}") from e
        if parsed.scheme not in ("http", "https") or not parsed.host:
            raise MalformedUrl(f"listing url is not http(s): {url}")
        return url


class Extractor:
    @staticmethod
    def parse(html: str) -> BeautifulSoup:
        return BeautifulSoup(html, "html.parser")

    @staticmethod
    def own_text(element: Element) -> str:
        # direct text nodes only (comments, CDATA excluded), whitespace collapsed
        parts = [
            str(child)
            for child in element.children
            if isinstance(child, NavigableString) and not isinstance(child, PreformattedString)
        ]
        return " ".join("".join(parts).split())

    @staticmethod
    def select_first_text(soup: BeautifulSoup, selector: str) -> Optional[str]:
        element = soup.select_one(selector)
        if element is None:
            return None
        return Extractor.own_text(element)

    @staticmethod
    def select_all_text(soup: BeautifulSoup, selector: str) -> List[str]:
        return [Extractor.own_text(el) for el in soup.select(selector)]


def attribute_selector(element: str, attribute: str, value: str) -> str:
    escaped = value.replace("\\", "\\\\").replace('"', '\\"')
    return f'{element}[{attribute}="{escaped}"]'
