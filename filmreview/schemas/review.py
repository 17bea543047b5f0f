"""
Review form schemas - validation and sanitization of user written text
"""
from pydantic import BaseModel, Field, field_validator, ConfigDict
from typing import Optional
import re
import bleach

# Markup a review may keep
ALLOWED_TAGS = ['b', 'i', 'u', 'em', 'strong', 'p', 'br']

SCRIPT_PATTERNS = [
    r'<script[^>]*>',
    r'javascript:',
    r'<[^>]*\bon\w+\s*=',  # event handler attribute inside a tag
    r'<iframe',
]


class ReviewTextMixin:
    """Shared cleaning for free text typed by the user"""

    @staticmethod
    def reject_scripts(value: Optional[str]) -> Optional[str]:
        if not value:
            return value
        for pattern in SCRIPT_PATTERNS:
            if re.search(pattern, value, re.IGNORECASE):
                raise ValueError("Invalid characters detected")
        return value

    @staticmethod
    def strip_markup(value: Optional[str]) -> Optional[str]:
        if not value:
            return value
        return bleach.clean(value, tags=ALLOWED_TAGS, strip=True)


class ReviewFields(BaseModel, ReviewTextMixin):
    """Editable review columns"""
    model_config = ConfigDict(str_strip_whitespace=True)

    title: str = Field(..., min_length=1, max_length=255, description="Review headline")
    content: str = Field(default="", max_length=5000)
    rating: float = Field(..., ge=0, le=5, description="Star rating (0-5)")
    author: Optional[str] = Field(None, max_length=255)

    @field_validator("title", "author")
    @classmethod
    def clean_plain(cls, v):
        return cls.reject_scripts(v)

    @field_validator("content")
    @classmethod
    def clean_content(cls, v):
        v = cls.reject_scripts(v)
        return cls.strip_markup(v)

    @field_validator("author", mode="before")
    @classmethod
    def blank_author(cls, v):
        if isinstance(v, str) and not v.strip():
            return None
        return v


class ReviewCreate(ReviewFields):
    """
    Review posted from the detail page
    The page also echoes back the title data it displayed so the cache row
    can be written without another provider call.
    """
    movie_title: Optional[str] = Field(None, max_length=500)
    plot: Optional[str] = Field(None, max_length=10000)
    image: Optional[str] = Field(None, max_length=1000)


class ReviewUpdate(ReviewFields):
    """Review edited on the review page"""
    pass
