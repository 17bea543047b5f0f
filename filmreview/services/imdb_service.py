import requests
import os
from typing import Dict, Optional
from pydantic import ValidationError
from filmreview.schemas.search import TitleSearchForm
import logging

logger = logging.getLogger(__name__)


# IMDb API service (https://imdbapi.dev), read-only and keyless
class IMDbService:
    BASE_URL = os.getenv("IMDB_API_URL", "https://api.imdbapi.dev")
    TIMEOUT = float(os.getenv("IMDB_API_TIMEOUT", 10))

    # Internal method to make GET requests to the IMDb API
    @classmethod
    def _make_request(cls, endpoint: str, params: Dict = None) -> Optional[Dict]:
        """
        Make one HTTP GET request to the IMDb API.

        Args:
            endpoint: API endpoint (e.g., "/titles/tt0111161")
            params: Query parameters

        Returns:
            Decoded JSON body, or None if the API is unreachable, answers
            with a non-2xx status, or sends something that is not JSON.
            Nothing is retried.
        """
        url = f"{cls.BASE_URL}{endpoint}"

        try:
            response = requests.get(url, params=params or {}, timeout=cls.TIMEOUT)
            response.raise_for_status()
            logger.debug(f"IMDb API request successful: {endpoint}")
            return response.json()
        except requests.exceptions.RequestException as e:
            logger.error(f"Unable to retrieve titles at {url} {params or ''}: {str(e)}")
            return None
        except ValueError as e:
            logger.error(f"IMDb API sent an undecodable body for {endpoint}: {str(e)}")
            return None

    @classmethod
    def search_titles(cls, query: str) -> Optional[Dict]:
        """Search titles by free text, e.g. /search/titles?query=alien"""
        return cls._make_request("/search/titles", {"query": query})

    @classmethod
    def list_titles(
        cls,
        genre: str = "",
        year: Optional[int] = None,
        rating: Optional[float] = None,
    ) -> Optional[Dict]:
        """
        List movies matching the given filters,
        e.g. /titles?types=MOVIE&genres=Drama&startYear=1994&minAggregateRating=8
        The rating is on the 0-5 star scale. Out of range filters are
        logged and give None without a request.
        """
        try:
            form = TitleSearchForm(genre=genre, year=year, rating=rating)
        except ValidationError as e:
            logger.error(f"Invalid title filters genre={genre!r} year={year!r} rating={rating!r}: {e}")
            return None
        return cls._make_request("/titles", form.to_query_params())

    @classmethod
    def get_title(cls, title_id: str) -> Optional[Dict]:
        """Get one title with its credits, e.g. /titles/tt0111161"""
        return cls._make_request(f"/titles/{title_id}")

    @classmethod
    def find_titles(cls, search: TitleSearchForm) -> Optional[Dict]:
        """
        Pick the query the provider can answer.
        Title search cannot be combined with filters, so a non-empty title
        wins and the filters are ignored.
        """
        if search.by_title:
            return cls.search_titles(search.title)
        return cls.list_titles(search.genre, search.year, search.rating)
