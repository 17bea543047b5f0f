from fastapi import FastAPI, Request
from fastapi.exceptions import RequestValidationError
from fastapi.staticfiles import StaticFiles
from starlette.exceptions import HTTPException as StarletteHTTPException
from contextlib import asynccontextmanager
from datetime import datetime, timezone
from dotenv import load_dotenv
from filmreview.database import Base, engine
from filmreview.middleware.security import SecurityHeadersMiddleware
from filmreview.routes import reviews
from filmreview.services.review_service import ReviewNotFoundError, StoreError
from filmreview.services.imdb_service import IMDbService
from filmreview.utils.templates import GENERIC_ERROR, STATIC_DIR, render_error
import filmreview.models  # noqa: F401  registers the tables on Base
import os
import logging

# Load environment variables
load_dotenv()

# Configure logging
logging.basicConfig(
    level=os.getenv("LOG_LEVEL", "INFO").upper(),
    format="%(asctime)s %(levelname)s [%(name)s] %(message)s",
    datefmt="%Y-%m-%d %H:%M:%S",
)
logger = logging.getLogger(__name__)


# ============================================
# Application Lifespan Management
# ============================================

@asynccontextmanager
async def lifespan(app: FastAPI):
    """
    Startup: create the cache and review tables unless AUTO_CREATE_TABLES=false
    Shutdown: return pooled connections
    """
    logger.info("=" * 60)
    logger.info("Film Review starting...")
    logger.info(f"   Title provider: {IMDbService.BASE_URL}")
    logger.info("=" * 60)

    if os.getenv("AUTO_CREATE_TABLES", "true").lower() == "true":
        try:
            Base.metadata.create_all(bind=engine)
        except Exception as e:
            logger.error(f"Failed to create tables: {str(e)}")

    yield

    logger.info("Film Review shutting down...")
    engine.dispose()


app = FastAPI(
    title="Film Review",
    description="Browse IMDb titles and keep your own reviews",
    version="1.0.0",
    lifespan=lifespan,
)

app.add_middleware(SecurityHeadersMiddleware)
app.mount("/static", StaticFiles(directory=str(STATIC_DIR)), name="static")


# ============================================
# Exception Handlers
# ============================================

@app.exception_handler(StoreError)
async def store_error_handler(request: Request, exc: StoreError):
    """The database failed; the page cannot be built"""
    logger.error(f"Store failure on {request.url.path}: {exc}")
    return render_error(request, 500)


@app.exception_handler(ReviewNotFoundError)
async def review_not_found_handler(request: Request, exc: ReviewNotFoundError):
    return render_error(request, 404, "That review does not exist.")


HTTP_ERROR_MESSAGES = {
    404: "Page not found.",
    405: "That action is not available here.",
}


@app.exception_handler(StarletteHTTPException)
async def http_exception_handler(request: Request, exc: StarletteHTTPException):
    """Unknown paths and wrong methods get the error page, not JSON"""
    response = render_error(request, exc.status_code, HTTP_ERROR_MESSAGES.get(exc.status_code, GENERIC_ERROR))
    if exc.headers:
        response.headers.update(exc.headers)
    return response


@app.exception_handler(RequestValidationError)
async def request_validation_handler(request: Request, exc: RequestValidationError):
    """Malformed path or query values, e.g. /review/abc"""
    logger.info(f"Rejected request {request.url.path}: {exc.errors()}")
    return render_error(request, 422, "That request could not be understood.")


@app.exception_handler(Exception)
async def general_exception_handler(request: Request, exc: Exception):
    logger.error(f"Unhandled exception: {str(exc)}", exc_info=True)
    return render_error(request, 500)


# ============================================
# Routes
# ============================================

@app.get("/health", tags=["Health"])
async def health_check():
    """Basic health check for monitoring"""
    return {
        "status": "healthy",
        "api_version": "1.0.0",
        "timestamp": datetime.now(timezone.utc).isoformat(),
    }

app.include_router(reviews.router)

if __name__ == "__main__":
    import uvicorn
    uvicorn.run(
        app,
        host=os.getenv("HOST", "0.0.0.0"),
        port=int(os.getenv("PORT", 3000)),
        log_level="info"
    )
