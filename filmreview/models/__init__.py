"""
Import all models to ensure they are registered with SQLAlchemy
"""
from filmreview.models.title_cache import TitleCache
from filmreview.models.review import Review

__all__ = [
    "TitleCache",
    "Review",
]
