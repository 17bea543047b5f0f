"""
Review Service - all reads and writes against the review and cache tables
Every operation runs on the caller's session and either returns its result
or raises a typed error; the routes decide what the user sees.
"""

from contextlib import contextmanager
from typing import List, Optional
import logging

from sqlalchemy import delete, func, select, update
from sqlalchemy.dialects import postgresql, sqlite
from sqlalchemy.engine import RowMapping
from sqlalchemy.exc import SQLAlchemyError
from sqlalchemy.orm import Session

from filmreview.models.review import Review
from filmreview.models.title_cache import TitleCache
from filmreview.schemas.review import ReviewCreate

logger = logging.getLogger(__name__)


class StoreError(Exception):
    """A database statement failed; the session has been rolled back"""

    def __init__(self, operation: str, cause: Exception):
        super().__init__(f"{operation} failed: {cause}")
        self.operation = operation
        self.cause = cause


class ReviewNotFoundError(Exception):
    def __init__(self, review_id: int):
        super().__init__(f"Review {review_id} not found")
        self.review_id = review_id


# Columns of a review joined with its cached title
REVIEW_COLUMNS = (
    Review.id,
    Review.rating,
    Review.title.label("review_title"),
    Review.content,
    Review.author,
    Review.date,
    TitleCache.title_id,
    TitleCache.title.label("cache_title"),
    TitleCache.plot,
    TitleCache.image,
)


def _joined_reviews():
    return select(*REVIEW_COLUMNS).join(TitleCache, Review.cache_id == TitleCache.id)


class ReviewService:
    """Service for review and title cache operations"""

    @staticmethod
    @contextmanager
    def _statement(db: Session, operation: str, commit: bool = False):
        """Run one unit of work; roll back and raise StoreError on failure"""
        try:
            yield
            if commit:
                db.commit()
            logger.debug(f"{operation}() executed successfully")
        except SQLAlchemyError as e:
            db.rollback()
            logger.error(f"{operation}() error: {str(e)}")
            raise StoreError(operation, e) from e

    @staticmethod
    def _insert_for(db: Session):
        """INSERT construct that understands ON CONFLICT for the bound dialect"""
        if db.get_bind().dialect.name == "postgresql":
            return postgresql.insert
        return sqlite.insert

    # ==================== WRITES ====================

    @staticmethod
    def _upsert_cache(db: Session, title_id: str, title: Optional[str],
                      plot: Optional[str], image: Optional[str]) -> int:
        insert = ReviewService._insert_for(db)
        stmt = insert(TitleCache).values(
            title_id=title_id,
            title=title,
            plot=plot,
            image=image,
        )
        stmt = stmt.on_conflict_do_update(
            index_elements=[TitleCache.title_id],
            set_={
                "title": stmt.excluded.title,
                "plot": stmt.excluded.plot,
                "image": stmt.excluded.image,
            },
        ).returning(TitleCache.id)
        return db.execute(stmt).scalar_one()

    @staticmethod
    def _insert_review(db: Session, cache_id: int, rating: Optional[float], title: Optional[str],
                       content: Optional[str], author: Optional[str] = None) -> int:
        review = Review(
            cache_id=cache_id,
            rating=rating,
            title=title,
            content=content,
            author=author,
        )
        db.add(review)
        db.flush()
        return review.id

    @staticmethod
    def upsert_cache(db: Session, title_id: str, title: Optional[str],
                     plot: Optional[str], image: Optional[str]) -> int:
        """
        Insert or refresh the cache row for a provider title

        Returns:
            id of the new or updated row; the same id for every call with
            the same title_id
        """
        with ReviewService._statement(db, "upsert_cache", commit=True):
            cache_id = ReviewService._upsert_cache(db, title_id, title, plot, image)
        return cache_id

    @staticmethod
    def insert_review(db: Session, cache_id: int, rating: Optional[float], title: Optional[str],
                      content: Optional[str], author: Optional[str] = None) -> int:
        """Insert a review for an existing cache row and return its id"""
        with ReviewService._statement(db, "insert_review", commit=True):
            review_id = ReviewService._insert_review(db, cache_id, rating, title, content, author)
        return review_id

    @staticmethod
    def submit_review(db: Session, title_id: str, review: ReviewCreate) -> int:
        """
        Cache the reviewed title and store the review in one transaction,
        so a failed review insert never leaves a half-written submission.

        Returns:
            id of the new review
        """
        with ReviewService._statement(db, "submit_review", commit=True):
            cache_id = ReviewService._upsert_cache(
                db, title_id, review.movie_title, review.plot, review.image
            )
            review_id = ReviewService._insert_review(
                db, cache_id, review.rating, review.title, review.content, review.author
            )
        logger.info(f"Stored review {review_id} for {title_id} (cache {cache_id})")
        return review_id

    @staticmethod
    def update_review(db: Session, review_id: int, title: Optional[str], content: Optional[str],
                      author: Optional[str], rating: Optional[float]) -> int:
        """
        Overwrite every editable column and stamp the date

        Returns:
            number of rows changed (0 when the id does not exist)
        """
        with ReviewService._statement(db, "update_review", commit=True):
            result = db.execute(
                update(Review)
                .where(Review.id == review_id)
                .values(title=title, content=content, author=author, rating=rating, date=func.now())
                .execution_options(synchronize_session=False)
            )
            changed = result.rowcount
        return changed

    @staticmethod
    def delete_review(db: Session, review_id: int) -> int:
        """Delete one review; its cache row stays. Returns rows removed."""
        with ReviewService._statement(db, "delete_review", commit=True):
            result = db.execute(
                delete(Review)
                .where(Review.id == review_id)
                .execution_options(synchronize_session=False)
            )
            changed = result.rowcount
        return changed

    # ==================== READS ====================

    @staticmethod
    def list_reviews(db: Session) -> List[RowMapping]:
        with ReviewService._statement(db, "list_reviews"):
            rows = db.execute(_joined_reviews().order_by(Review.id)).mappings().all()
        return list(rows)

    @staticmethod
    def get_review(db: Session, review_id: int) -> RowMapping:
        """
        Raises:
            ReviewNotFoundError: no review has this id
        """
        with ReviewService._statement(db, "get_review"):
            row = db.execute(_joined_reviews().where(Review.id == review_id)).mappings().first()
        if row is None:
            raise ReviewNotFoundError(review_id)
        return row

    @staticmethod
    def filter_reviews_by_title(db: Session, text: str) -> List[RowMapping]:
        """Reviews whose title contains text, using the database's LIKE rules"""
        with ReviewService._statement(db, "filter_reviews_by_title"):
            rows = db.execute(
                _joined_reviews()
                .where(Review.title.like(f"%{text}%"))
                .order_by(Review.id)
            ).mappings().all()
        return list(rows)
