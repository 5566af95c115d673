from enum import Enum
from typing import Dict, Optional, Union


class Tag(str, Enum):
    """Listing fields addressable by selector.

    The value is the attribute value used in the page selector (itemprop for the
    scalar fields, class for the rating widgets).
    """

    VERSION = "softwareVersion"
    DOWNLOADS = "numDownloads"
    LAST_PUBLISHED_DATE = "datePublished"
    OS_REQUIREMENTS = "operatingSystems"
    CONTENT_RATING = "contentRating"
    APP_RATING = "score"
    APP_RATING_COUNT = "reviews-num"

    @classmethod
    def resolve(cls, value: Union["Tag", str]) -> Optional["Tag"]:
        """Map a Tag, a member name or a selector value onto a Tag; None if unknown."""
        if isinstance(value, cls):
            return value
        if value in cls.__members__:
            return cls.__members__[value]
        try:
            return cls(value)
        except ValueError:
            return None

    @property
    def field_name(self) -> str:
        return FIELD_BY_TAG[self]


FIELD_BY_TAG: Dict[Tag, str] = {
    Tag.VERSION: "version",
    Tag.DOWNLOADS: "downloads",
    Tag.LAST_PUBLISHED_DATE: "published_date",
    Tag.OS_REQUIREMENTS: "os_requirements",
    Tag.CONTENT_RATING: "content_rating",
    Tag.APP_RATING: "app_rating",
    Tag.APP_RATING_COUNT: "app_rating_count",
}
