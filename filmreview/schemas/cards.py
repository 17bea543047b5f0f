"""
Card schemas - flat, display-ready objects handed to the templates
"""
from pydantic import BaseModel
from datetime import datetime
from typing import List, Optional, Union


class LandingCard(BaseModel):
    """A stored review on the landing page"""
    id: str  # link path, e.g. "review/12"
    title: Optional[str] = None
    image: Optional[str] = None
    rating: Optional[float] = None


class SearchCard(BaseModel):
    """A provider title in the search results"""
    id: str  # link path, e.g. "/detail/tt0111161"
    title: str
    image: Optional[str] = None
    genre: Optional[str] = None
    year: Optional[int] = None
    rating: Optional[int] = None  # 0-5


class DetailCard(BaseModel):
    """A provider title on the detail page"""
    id: str
    title: str
    image: Optional[str] = None
    genre: List[str] = []
    year: Optional[int] = None
    rating: Optional[float] = None  # 0-5, unrounded
    time: Optional[int] = None  # minutes
    director: List[Optional[str]] = []
    stars: List[Optional[str]] = []
    language: List[Optional[str]] = []
    plot: Optional[str] = None


class ReviewCard(BaseModel):
    """A stored review with its cached title, on the review page"""
    id: int
    reviewTitle: Optional[str] = None
    content: Optional[str] = None
    cacheTitle: Optional[str] = None
    image: Optional[str] = None
    rating: Optional[float] = None
    plot: Optional[str] = None
    author: Optional[str] = None
    date: Optional[Union[datetime, str]] = None
