"""
Card builders
=============
Pure functions turning provider title records and joined review rows into
the flat cards the templates render.

Provider records are loosely shaped. A search result that cannot be read
is dropped from the list, so the user only ever sees a shorter list, never
half a card.
"""
from typing import Any, Iterable, List, Mapping, Optional
import math
import logging

from pydantic import ValidationError

from filmreview.schemas.cards import DetailCard, LandingCard, ReviewCard, SearchCard
from filmreview.schemas.title import TitleRecord, as_list

logger = logging.getLogger(__name__)


def round_half_up(value: Optional[float]) -> Optional[int]:
    """Round .5 away from zero for positive numbers (3.5 -> 4, 2.5 -> 3)"""
    if value is None:
        return None
    return int(math.floor(value + 0.5))


def get_inner_attributes(value: Any, attribute: str) -> List[Any]:
    """
    Pull one attribute out of a single object or a list of objects.

    {"displayName": "A"}                        -> ["A"]
    [{"displayName": "A"}, {"displayName": "B"}] -> ["A", "B"]
    [{"displayName": "A"}, "B"]                 -> ["A"]
    None                                        -> []
    """
    if value is None:
        logger.info(f"Unable to parse None[{attribute}]")
        return []

    attributes = []
    for item in as_list(value):
        try:
            attributes.append(item.get(attribute))
        except (AttributeError, TypeError) as e:
            logger.info(f"Unable to parse {item!r}[{attribute}]: {e}")
    return attributes


# ============================================
# Provider titles
# ============================================

def build_search_card(raw: Mapping[str, Any]) -> SearchCard:
    """Raises ValidationError when the record is missing required data"""
    movie = TitleRecord.model_validate(raw)
    aggregate = movie.aggregate_rating

    return SearchCard(
        id=f"/detail/{movie.id}",
        title=movie.primaryTitle,
        image=movie.image_url,
        genre=movie.genres[0] if movie.genres else None,
        year=movie.startYear,
        rating=round_half_up(aggregate / 2) if aggregate is not None else None,
    )


def build_search_cards(titles: Iterable[Any]) -> List[SearchCard]:
    cards = []
    for raw in titles:
        try:
            cards.append(build_search_card(raw))
        except (ValidationError, TypeError, ValueError) as e:
            # some titles come back without the data a card needs
            logger.warning(f"Skipped search card: {e}")
    return cards


def build_detail_card(raw: Mapping[str, Any]) -> DetailCard:
    """Raises ValidationError when the record has no id or title"""
    movie = TitleRecord.model_validate(raw)
    aggregate = movie.aggregate_rating
    runtime = movie.runtimeSeconds

    return DetailCard(
        id=movie.id,
        title=movie.primaryTitle,
        image=movie.image_url,
        genre=movie.genres,
        year=movie.startYear,
        rating=aggregate / 2 if aggregate is not None else None,
        time=round_half_up(runtime / 60) if runtime is not None else None,
        director=get_inner_attributes(movie.directors, "displayName"),
        stars=get_inner_attributes(movie.stars, "displayName"),
        language=get_inner_attributes(movie.spokenLanguages, "name"),
        plot=movie.plot,
    )


# ============================================
# Stored reviews
# ============================================

def build_landing_card(row: Mapping[str, Any]) -> LandingCard:
    return LandingCard(
        id=f"review/{row['id']}",
        title=row["review_title"],
        image=row["image"],
        rating=row["rating"],
    )


def build_landing_cards(rows: Iterable[Mapping[str, Any]]) -> List[LandingCard]:
    cards = []
    for row in rows:
        try:
            cards.append(build_landing_card(row))
        except (KeyError, ValidationError) as e:
            logger.warning(f"Skipped review card: {e}")
    return cards


def build_review_card(row: Mapping[str, Any]) -> ReviewCard:
    return ReviewCard(
        id=row["id"],
        reviewTitle=row["review_title"],
        content=row["content"],
        cacheTitle=row["cache_title"],
        image=row["image"],
        rating=row["rating"],
        plot=row["plot"],
        author=row["author"],
        date=row["date"],
    )
