import pytest
from sqlalchemy.exc import OperationalError

from conftest import title_record
from filmreview.models.review import Review
from filmreview.models.title_cache import TitleCache
from filmreview.services import review_service
from filmreview.services.review_service import ReviewService


def seed_review(db, title="Hope is a good thing", title_id="tt0111161", rating=4.0, author="Red"):
    cache_id = ReviewService.upsert_cache(
        db, title_id, "The Shawshank Redemption", "Two imprisoned men bond.", "https://img/shawshank.jpg"
    )
    return ReviewService.insert_review(db, cache_id, rating, title, "Still holds up.", author)


REVIEW_FORM = {
    "rating": "4",
    "title": "Hope is a good thing",
    "content": "Still <b>holds</b> up. <marquee>Forever</marquee>",
    "movieTitle": "The Shawshank Redemption",
    "plot": "Two imprisoned men bond.",
    "image": "https://img/shawshank.jpg",
}


# ==================== LANDING & FIND ====================

def test_landing_lists_reviews(client, db_session):
    review_id = seed_review(db_session)

    response = client.get("/")

    assert response.status_code == 200
    assert "Hope is a good thing" in response.text
    assert f'href="/review/{review_id}"' in response.text


def test_landing_without_reviews(client, db_session):
    response = client.get("/")

    assert response.status_code == 200
    assert "No reviews yet" in response.text


def test_find_filters_by_review_title(client, db_session):
    seed_review(db_session, "Hope is a good thing")
    seed_review(db_session, "Get busy living")

    response = client.get("/find", params={"searchString": "busy"})

    assert response.status_code == 200
    assert "Get busy living" in response.text
    assert "Hope is a good thing" not in response.text


def test_find_without_match_renders_empty_list(client, db_session):
    seed_review(db_session)

    response = client.get("/find", params={"searchString": "nothing like this"})

    assert response.status_code == 200
    assert "No reviews yet" in response.text


def test_store_failure_renders_error_page(client, db_session, monkeypatch):
    def broken_select():
        raise OperationalError("SELECT", {}, Exception("connection lost"))

    monkeypatch.setattr(review_service, "_joined_reviews", broken_select)

    response = client.get("/")

    assert response.status_code == 500
    assert "Oops. Something went wrong." in response.text


# ==================== SEARCH ====================

def test_search_page_renders_form(client):
    response = client.get("/search")

    assert response.status_code == 200
    assert 'action="/search"' in response.text


def test_search_by_title_builds_cards(client, fake_provider):
    fake_provider["body"] = {
        "titles": [
            title_record("tt0111161", rating={"aggregateRating": 7}),
            {"id": "tt0000002"},
        ]
    }

    response = client.post("/search", data={"title": "shawshank", "genre": "", "year": "", "rating": ""})

    assert response.status_code == 200
    assert fake_provider["calls"] == [("/search/titles", {"query": "shawshank"})]
    assert 'href="/detail/tt0111161"' in response.text
    assert "4 / 5" in response.text
    assert "tt0000002" not in response.text


def test_search_keeps_title_with_object_genres(client, fake_provider):
    fake_provider["body"] = {"titles": [title_record("tt0111161", genres=[{"id": "x"}])]}

    response = client.post("/search", data={"title": "shawshank"})

    assert response.status_code == 200
    assert 'href="/detail/tt0111161"' in response.text
    assert "No titles matched." not in response.text


def test_search_by_filters_doubles_rating(client, fake_provider):
    fake_provider["body"] = {"titles": []}

    response = client.post("/search", data={"title": "", "genre": "Drama", "year": "1994", "rating": "4"})

    assert response.status_code == 200
    endpoint, params = fake_provider["calls"][0]
    assert endpoint == "/titles"
    assert params == {"types": "MOVIE", "genres": "Drama", "startYear": 1994, "minAggregateRating": 8}


def test_search_provider_outage_is_500(client, fake_provider):
    fake_provider["body"] = None

    response = client.post("/search", data={"title": "alien"})

    assert response.status_code == 500
    assert "Oops. Something went wrong." in response.text


def test_search_body_without_titles_list_is_500(client, fake_provider):
    fake_provider["body"] = {"titles": {"id": "tt0078748"}}

    response = client.post("/search", data={"title": "", "genre": "Horror"})

    assert response.status_code == 500
    assert "Oops. Something went wrong." in response.text


def test_search_with_invalid_filter_is_400(client, fake_provider):
    response = client.post("/search", data={"title": "", "year": "soon"})

    assert response.status_code == 400
    assert fake_provider["calls"] == []


# ==================== DETAIL ====================

def test_detail_renders_title(client, fake_provider):
    fake_provider["body"] = title_record()

    response = client.get("/detail/tt0111161")

    assert response.status_code == 200
    assert fake_provider["calls"] == [("/titles/tt0111161", None)]
    assert "Frank Darabont" in response.text
    assert "Tim Robbins, Morgan Freeman" in response.text
    assert "142 min" in response.text
    assert 'action="/review/tt0111161"' in response.text


def test_detail_renders_fractional_runtime(client, fake_provider):
    fake_provider["body"] = title_record(runtimeSeconds=8520.5)

    response = client.get("/detail/tt0111161", follow_redirects=False)

    assert response.status_code == 200
    assert "142 min" in response.text


def test_detail_provider_failure_redirects_home(client, fake_provider):
    fake_provider["body"] = None

    response = client.get("/detail/tt0111161", follow_redirects=False)

    assert response.status_code == 303
    assert response.headers["location"] == "/"


def test_detail_unreadable_record_redirects_home(client, fake_provider):
    fake_provider["body"] = {"message": "title not found"}

    response = client.get("/detail/tt9999999", follow_redirects=False)

    assert response.status_code == 303
    assert response.headers["location"] == "/"


# ==================== WRITE / READ / UPDATE / DELETE ====================

def test_submit_review_stores_cache_and_review(client, db_session):
    response = client.post("/review/tt0111161", data=REVIEW_FORM, follow_redirects=False)

    assert response.status_code == 303
    assert response.headers["location"] == "/"

    db_session.expire_all()
    cache = db_session.query(TitleCache).one()
    review = db_session.query(Review).one()
    assert cache.title_id == "tt0111161"
    assert review.cache_id == cache.id
    assert review.rating == 4.0
    assert "<marquee>" not in review.content
    assert "<b>holds</b>" in review.content


def test_submit_review_with_script_is_rejected(client, db_session):
    response = client.post(
        "/review/tt0111161", data={**REVIEW_FORM, "content": "nice<script>alert(1)</script>"}
    )

    assert response.status_code == 400
    db_session.expire_all()
    assert db_session.query(Review).count() == 0


def test_submit_review_with_equals_sign_in_prose(client, db_session):
    response = client.post(
        "/review/tt0111161", data={**REVIEW_FORM, "content": "reasonable = fine"}, follow_redirects=False
    )

    assert response.status_code == 303
    db_session.expire_all()
    assert db_session.query(Review).one().content == "reasonable = fine"


def test_edit_form_shows_content_as_typed(client, db_session):
    client.post("/review/tt0111161", data={**REVIEW_FORM, "content": "Rock & roll < jazz"})
    db_session.expire_all()
    review_id = db_session.query(Review).one().id

    response = client.get(f"/review/{review_id}")

    # one level of escaping, which the browser turns back into the typed text
    assert "Rock &amp; roll &lt; jazz</textarea>" in response.text
    assert "&amp;amp;" not in response.text
    assert "&amp;lt;" not in response.text


def test_submit_review_twice_reuses_cache(client, db_session):
    client.post("/review/tt0111161", data=REVIEW_FORM)
    client.post("/review/tt0111161", data={**REVIEW_FORM, "title": "Second look", "plot": "Newer plot"})

    db_session.expire_all()
    assert db_session.query(TitleCache).count() == 1
    assert db_session.query(TitleCache).one().plot == "Newer plot"
    assert db_session.query(Review).count() == 2


def test_submit_review_with_out_of_range_rating_is_rejected(client, db_session):
    response = client.post("/review/tt0111161", data={**REVIEW_FORM, "rating": "9"})

    assert response.status_code == 400
    db_session.expire_all()
    assert db_session.query(TitleCache).count() == 0
    assert db_session.query(Review).count() == 0


def test_review_page(client, db_session):
    review_id = seed_review(db_session)

    response = client.get(f"/review/{review_id}")

    assert response.status_code == 200
    assert "Hope is a good thing" in response.text
    assert "The Shawshank Redemption" in response.text
    assert f'action="/update/{review_id}"' in response.text
    assert f'action="/delete/{review_id}"' in response.text


def test_missing_review_page_is_404(client, db_session):
    response = client.get("/review/404")

    assert response.status_code == 404
    assert "That review does not exist." in response.text


@pytest.mark.parametrize("method,path", [
    ("get", "/review/abc"),
    ("post", "/update/abc"),
    ("post", "/delete/abc"),
])
def test_malformed_review_id_renders_error_page(client, db_session, method, path):
    response = getattr(client, method)(path)

    assert response.status_code == 422
    assert response.headers["content-type"].startswith("text/html")
    assert "That request could not be understood." in response.text


def test_overlong_find_string_renders_error_page(client, db_session):
    response = client.get("/find", params={"searchString": "x" * 201})

    assert response.status_code == 422
    assert response.headers["content-type"].startswith("text/html")


def test_unknown_path_renders_error_page(client):
    response = client.get("/no-such-page")

    assert response.status_code == 404
    assert response.headers["content-type"].startswith("text/html")
    assert "Page not found." in response.text


def test_update_review_redirects_to_review(client, db_session):
    review_id = seed_review(db_session)

    response = client.post(
        f"/update/{review_id}",
        data={"reviewTitle": "Rewritten", "content": "New thoughts", "reviewAuth": "Andy", "rating": "2.5"},
        follow_redirects=False,
    )

    assert response.status_code == 303
    assert response.headers["location"] == f"/review/{review_id}"

    db_session.expire_all()
    review = db_session.get(Review, review_id)
    assert (review.title, review.content, review.author, review.rating) == ("Rewritten", "New thoughts", "Andy", 2.5)


def test_update_with_blank_title_is_rejected(client, db_session):
    review_id = seed_review(db_session)

    response = client.post(f"/update/{review_id}", data={"reviewTitle": "", "rating": "3"})

    assert response.status_code == 400
    db_session.expire_all()
    assert db_session.get(Review, review_id).title == "Hope is a good thing"


def test_delete_review_keeps_cache(client, db_session):
    review_id = seed_review(db_session)

    response = client.post(f"/delete/{review_id}", follow_redirects=False)

    assert response.status_code == 303
    assert response.headers["location"] == "/"
    db_session.expire_all()
    assert db_session.query(Review).count() == 0
    assert db_session.query(TitleCache).count() == 1


# ==================== AMBIENT ====================

def test_health(client):
    response = client.get("/health")

    assert response.status_code == 200
    assert response.json()["status"] == "healthy"


def test_pages_carry_security_headers(client, db_session):
    response = client.get("/")

    assert response.headers["X-Frame-Options"] == "DENY"
    assert response.headers["X-Content-Type-Options"] == "nosniff"
    assert "img-src 'self' https:" in response.headers["Content-Security-Policy"]
