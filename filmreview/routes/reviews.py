"""
Review Routes - the server-rendered pages
Browse provider titles, write reviews, and read, edit or delete stored ones
"""

from fastapi import APIRouter, Depends, Form, Path, Query, Request, status
from fastapi.responses import RedirectResponse
from pydantic import ValidationError
from sqlalchemy.orm import Session
from typing import Optional
import logging

from filmreview.database import get_db
from filmreview.schemas.review import ReviewCreate, ReviewUpdate
from filmreview.schemas.search import TitleSearchForm
from filmreview.services import card_builder
from filmreview.services.imdb_service import IMDbService
from filmreview.services.review_service import ReviewService
from filmreview.utils.templates import GENERIC_ERROR, render, render_error

logger = logging.getLogger(__name__)

router = APIRouter(tags=["Reviews"])


def redirect(url: str) -> RedirectResponse:
    """Post/redirect/get: the browser follows with a GET"""
    return RedirectResponse(url, status_code=status.HTTP_303_SEE_OTHER)


def describe_errors(exc: ValidationError) -> str:
    """First validation problem in words a form user understands"""
    first = exc.errors()[0]
    field = ".".join(str(part) for part in first.get("loc", ())) or "input"
    return f"Please check the {field} field: {first.get('msg', 'invalid value')}"


# ==================== STORED REVIEWS ====================

@router.get("/")
def landing(request: Request, db: Session = Depends(get_db)):
    """All stored reviews"""
    rows = ReviewService.list_reviews(db)
    return render(request, "index.html", cards=card_builder.build_landing_cards(rows))


@router.get("/find")
def find_reviews(
    request: Request,
    searchString: str = Query("", max_length=200, description="Text the review title contains"),
    db: Session = Depends(get_db),
):
    """Landing page narrowed to reviews whose title contains searchString"""
    rows = ReviewService.filter_reviews_by_title(db, searchString)
    return render(
        request,
        "index.html",
        cards=card_builder.build_landing_cards(rows),
        search_string=searchString,
    )


@router.get("/review/{review_id}")
def show_review(
    request: Request,
    review_id: int = Path(..., description="Review ID"),
    db: Session = Depends(get_db),
):
    """One review with its cached title; unknown ids raise ReviewNotFoundError"""
    row = ReviewService.get_review(db, review_id)
    return render(request, "review.html", card=card_builder.build_review_card(row))


@router.post("/update/{review_id}")
def update_review(
    request: Request,
    review_id: int = Path(..., description="Review ID"),
    reviewTitle: str = Form(""),
    content: str = Form(""),
    reviewAuth: Optional[str] = Form(None),
    rating: str = Form(""),
    db: Session = Depends(get_db),
):
    try:
        changes = ReviewUpdate(title=reviewTitle, content=content, author=reviewAuth, rating=rating)
    except ValidationError as e:
        return render_error(request, status.HTTP_400_BAD_REQUEST, describe_errors(e))

    updated = ReviewService.update_review(
        db, review_id, changes.title, changes.content, changes.author, changes.rating
    )
    if not updated:
        logger.info(f"Update skipped, review {review_id} does not exist")

    return redirect(f"/review/{review_id}")


@router.post("/delete/{review_id}")
def delete_review(
    review_id: int = Path(..., description="Review ID"),
    db: Session = Depends(get_db),
):
    deleted = ReviewService.delete_review(db, review_id)
    logger.info(f"Deleted review {review_id} ({deleted} row(s))")
    return redirect("/")


# ==================== PROVIDER TITLES ====================

@router.get("/search")
def search_page(request: Request):
    return render(request, "search.html")


@router.post("/search")
def search_titles(
    request: Request,
    title: str = Form(""),
    genre: str = Form(""),
    year: str = Form(""),
    rating: str = Form(""),
):
    """
    Search the provider by title, or by genre/year/rating when no title is given
    """
    try:
        search = TitleSearchForm(title=title, genre=genre, year=year, rating=rating)
    except ValidationError as e:
        return render(
            request, "search.html", status_code=status.HTTP_400_BAD_REQUEST, error=describe_errors(e)
        )

    response = IMDbService.find_titles(search)

    # None when the provider is unavailable; a body without a titles list is no better
    titles = response.get("titles") if isinstance(response, dict) else None
    if not isinstance(titles, list):
        return render(
            request, "search.html", status_code=status.HTTP_500_INTERNAL_SERVER_ERROR, error=GENERIC_ERROR
        )

    return render(request, "search.html", cards=card_builder.build_search_cards(titles), search=search)


@router.get("/detail/{title_id}")
def title_detail(request: Request, title_id: str = Path(..., description="Provider title ID")):
    """Full provider record for one title, with the review writer"""
    movie = IMDbService.get_title(title_id)
    if movie is None:
        logger.warning(f"No provider data for {title_id}, back to landing")
        return redirect("/")

    try:
        card = card_builder.build_detail_card(movie)
    except (ValidationError, TypeError) as e:
        logger.warning(f"Unreadable provider record for {title_id}: {e}")
        return redirect("/")

    return render(request, "detail.html", card=card)


@router.post("/review/{title_id}")
def submit_review(
    request: Request,
    title_id: str = Path(..., description="Provider title ID"),
    rating: str = Form(""),
    title: str = Form(""),
    content: str = Form(""),
    author: Optional[str] = Form(None),
    movieTitle: Optional[str] = Form(None),
    plot: Optional[str] = Form(None),
    image: Optional[str] = Form(None),
    db: Session = Depends(get_db),
):
    """Cache the title shown on the detail page and store the review for it"""
    try:
        review = ReviewCreate(
            rating=rating,
            title=title,
            content=content,
            author=author,
            movie_title=movieTitle,
            plot=plot,
            image=image,
        )
    except ValidationError as e:
        return render_error(request, status.HTTP_400_BAD_REQUEST, describe_errors(e))

    ReviewService.submit_review(db, title_id, review)
    return redirect("/")
