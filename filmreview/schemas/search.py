"""
Title search form schema
The provider keeps free-text title search apart from filter search, so a
form either carries a title or a set of filters, never both.
"""
from pydantic import BaseModel, Field, field_validator, ConfigDict
from typing import Optional


class TitleSearchForm(BaseModel):
    """Fields posted by the search page"""
    model_config = ConfigDict(str_strip_whitespace=True)

    title: str = Field(default="", max_length=200, description="Free-text title query")
    genre: str = Field(default="", max_length=50, description="Provider genre name, e.g. 'Drama'")
    year: Optional[int] = Field(None, ge=1870, le=2100, description="Start year")
    rating: Optional[float] = Field(None, ge=0, le=5, description="Minimum rating (0-5 stars)")

    @field_validator("title", "genre", mode="before")
    @classmethod
    def none_to_blank(cls, v):
        return "" if v is None else v

    @field_validator("year", "rating", mode="before")
    @classmethod
    def blank_to_none(cls, v):
        """HTML forms send empty strings for untouched inputs"""
        if isinstance(v, str) and not v.strip():
            return None
        return v

    @property
    def by_title(self) -> bool:
        return len(self.title) > 0

    def to_query_params(self) -> dict:
        """
        Convert the filters to /titles query parameters
        The star rating is doubled onto the provider's 0-10 scale.
        """
        params = {"types": "MOVIE"}

        if self.genre:
            params["genres"] = self.genre

        if self.year:
            params["startYear"] = self.year

        if self.rating:
            params["minAggregateRating"] = self.rating * 2

        return params
