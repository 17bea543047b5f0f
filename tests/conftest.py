import os
import pytest
from fastapi.testclient import TestClient
from sqlalchemy import create_engine
from sqlalchemy.orm import sessionmaker
from sqlalchemy.pool import StaticPool

# Keep the application engine off any real database during tests
os.environ.setdefault("DATABASE_URL", "sqlite://")
os.environ.setdefault("AUTO_CREATE_TABLES", "false")

from filmreview.database import Base, get_db  # noqa: E402
from filmreview.main import app  # noqa: E402
from filmreview.services.imdb_service import IMDbService  # noqa: E402

SQLALCHEMY_DATABASE_URL = "sqlite://"

engine = create_engine(
    SQLALCHEMY_DATABASE_URL,
    connect_args={"check_same_thread": False},
    poolclass=StaticPool,
)

TestingSessionLocal = sessionmaker(autocommit=False, autoflush=False, bind=engine)


@pytest.fixture
def db_session():
    """Provide a clean database session for each test."""
    Base.metadata.drop_all(bind=engine)
    Base.metadata.create_all(bind=engine)
    session = TestingSessionLocal()
    try:
        yield session
    finally:
        session.close()


@pytest.fixture
def client(db_session):
    """FastAPI test client with the database dependency overridden."""

    def override_get_db():
        test_db = TestingSessionLocal()
        try:
            yield test_db
        finally:
            test_db.close()

    app.dependency_overrides[get_db] = override_get_db

    with TestClient(app) as test_client:
        yield test_client

    app.dependency_overrides.pop(get_db, None)


@pytest.fixture
def fake_provider(monkeypatch):
    """
    Replace IMDb API calls with canned bodies.
    Set provider["body"] to the JSON the API should answer with (None for an
    outage); every call is recorded in provider["calls"].
    """
    provider = {"body": None, "calls": []}

    def fake_request(cls, endpoint, params=None):
        provider["calls"].append((endpoint, params))
        return provider["body"]

    monkeypatch.setattr(IMDbService, "_make_request", classmethod(fake_request))
    return provider


def title_record(title_id="tt0111161", **overrides):
    """A provider title shaped like imdbapi.dev answers"""
    record = {
        "id": title_id,
        "type": "movie",
        "primaryTitle": "The Shawshank Redemption",
        "primaryImage": {"url": "https://m.media-amazon.com/images/shawshank.jpg", "width": 1200, "height": 1800},
        "genres": ["Drama"],
        "startYear": 1994,
        "runtimeSeconds": 8520,
        "rating": {"aggregateRating": 9.3, "voteCount": 3000000},
        "plot": "Two imprisoned men bond over a number of years.",
        "directors": [{"id": "nm0001104", "displayName": "Frank Darabont"}],
        "stars": [
            {"id": "nm0000209", "displayName": "Tim Robbins"},
            {"id": "nm0000151", "displayName": "Morgan Freeman"},
        ],
        "spokenLanguages": [{"code": "eng", "name": "English"}],
    }
    record.update(overrides)
    return record
