"""
Provider title schemas
The provider is loose about shapes: genres may be a list or a single
string, people and languages may be a list or a single object. Those
fields are normalized to lists here, once, so card builders only ever see
lists.

Only id and primaryTitle are required. An optional field holding a value
of the wrong shape is read as missing instead of rejecting the record.
"""
from pydantic import BaseModel, ConfigDict, field_validator
from typing import Any, List, Optional
import math


def as_list(value: Any) -> List[Any]:
    """Wrap a single value in a list; None becomes an empty list"""
    if value is None:
        return []
    if isinstance(value, (list, tuple)):
        return list(value)
    return [value]


def as_number(value: Any) -> Optional[float]:
    """Numbers and numeric strings pass through as numbers, anything else is None"""
    if isinstance(value, bool):
        return None
    if isinstance(value, str):
        try:
            value = float(value)
        except ValueError:
            return None
    if isinstance(value, (int, float)) and math.isfinite(value):
        return value
    return None


def as_whole_number(value: Any) -> Optional[int]:
    number = as_number(value)
    return int(number) if number is not None else None


def as_text(value: Any) -> Optional[str]:
    return value if isinstance(value, str) else None


def as_object(value: Any) -> Optional[dict]:
    return value if isinstance(value, dict) else None


class TitleImage(BaseModel):
    model_config = ConfigDict(extra="ignore")

    url: Optional[str] = None
    width: Optional[int] = None
    height: Optional[int] = None

    @field_validator("url", mode="before")
    @classmethod
    def lenient_url(cls, v):
        return as_text(v)

    @field_validator("width", "height", mode="before")
    @classmethod
    def lenient_size(cls, v):
        return as_whole_number(v)


class TitleRating(BaseModel):
    model_config = ConfigDict(extra="ignore")

    aggregateRating: Optional[float] = None  # 0-10
    voteCount: Optional[int] = None

    @field_validator("aggregateRating", mode="before")
    @classmethod
    def lenient_rating(cls, v):
        return as_number(v)

    @field_validator("voteCount", mode="before")
    @classmethod
    def lenient_votes(cls, v):
        return as_whole_number(v)


class TitleRecord(BaseModel):
    """One title as returned by /titles, /titles/{id} or /search/titles"""
    model_config = ConfigDict(extra="ignore")

    id: str
    primaryTitle: str
    type: Optional[str] = None
    primaryImage: Optional[TitleImage] = None
    genres: List[str] = []
    startYear: Optional[int] = None
    rating: Optional[TitleRating] = None
    runtimeSeconds: Optional[float] = None
    plot: Optional[str] = None
    directors: List[Any] = []
    stars: List[Any] = []
    spokenLanguages: List[Any] = []

    @field_validator("genres", mode="before")
    @classmethod
    def genre_names(cls, v):
        return [genre for genre in as_list(v) if isinstance(genre, str)]

    @field_validator("directors", "stars", "spokenLanguages", mode="before")
    @classmethod
    def normalize_one_or_many(cls, v):
        return as_list(v)

    @field_validator("type", "plot", mode="before")
    @classmethod
    def lenient_text(cls, v):
        return as_text(v)

    @field_validator("primaryImage", "rating", mode="before")
    @classmethod
    def lenient_object(cls, v):
        return as_object(v)

    @field_validator("startYear", mode="before")
    @classmethod
    def lenient_year(cls, v):
        return as_whole_number(v)

    @field_validator("runtimeSeconds", mode="before")
    @classmethod
    def lenient_runtime(cls, v):
        return as_number(v)

    @property
    def image_url(self) -> Optional[str]:
        return self.primaryImage.url if self.primaryImage else None

    @property
    def aggregate_rating(self) -> Optional[float]:
        return self.rating.aggregateRating if self.rating else None
