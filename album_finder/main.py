# ============================================================================
# FILE: album_finder/main.py
# ============================================================================
from contextlib import asynccontextmanager
from typing import Optional
from fastapi import FastAPI, Request
from fastapi.exceptions import RequestValidationError
from fastapi.middleware.cors import CORSMiddleware
from fastapi.responses import JSONResponse
from sqlalchemy.exc import SQLAlchemyError, TimeoutError as PoolTimeoutError
from starlette.exceptions import HTTPException as StarletteHTTPException
from album_finder.api.router import api_router
from album_finder.core.cache import RedisCache
from album_finder.core.exceptions import AppError
from album_finder.core.logging import setup_logging
from album_finder.core.spotify_client import SpotifyClient
from album_finder.config import Settings, settings as default_settings
from album_finder.db.session import Database
from album_finder.services.album_service import AlbumService
from album_finder.services.user_service import UserService
import logging
import uvicorn

logger = logging.getLogger(__name__)


def _error_response(status_code: int, message: str, error: Optional[str] = None, **extra) -> JSONResponse:
    content = {"success": False, "message": message}
    if error is not None:
        content["error"] = error
    content.update(extra)
    headers = {"WWW-Authenticate": "Bearer"} if status_code == 401 else None
    return JSONResponse(status_code=status_code, content=content, headers=headers)


def _validation_message(err: dict) -> str:
    # Custom validators raise ValueError; show its text without pydantic's prefix
    ctx_error = (err.get("ctx") or {}).get("error")
    return str(ctx_error) if ctx_error is not None else err.get("msg", "Invalid value")


def register_exception_handlers(app: FastAPI) -> None:
    """Map every failure to the {success: false, message, error?} shape"""

    def internal_detail(exc: Exception) -> str:
        return str(exc) if app.state.settings.DEBUG else "Internal server error"

    @app.exception_handler(AppError)
    async def app_error_handler(request: Request, exc: AppError):
        return _error_response(exc.status_code, exc.message)

    @app.exception_handler(RequestValidationError)
    async def validation_error_handler(request: Request, exc: RequestValidationError):
        errors = [
            {
                "field": ".".join(str(part) for part in err.get("loc", ())[1:]) or "body",
                "message": _validation_message(err),
            }
            for err in exc.errors()
        ]
        message = errors[0]["message"] if errors else "Validation failed"
        return _error_response(400, message, errors=errors)

    @app.exception_handler(StarletteHTTPException)
    async def http_error_handler(request: Request, exc: StarletteHTTPException):
        if exc.status_code == 404:
            return _error_response(404, "Route not found")
        return _error_response(exc.status_code, str(exc.detail))

    @app.exception_handler(PoolTimeoutError)
    async def pool_timeout_handler(request: Request, exc: PoolTimeoutError):
        logger.error(f"Timed out waiting for a database connection: {exc}")
        return _error_response(500, "Database unavailable", internal_detail(exc))

    @app.exception_handler(SQLAlchemyError)
    async def database_error_handler(request: Request, exc: SQLAlchemyError):
        logger.error(f"Database error on {request.method} {request.url.path}: {exc}")
        return _error_response(500, "Database error", internal_detail(exc))

    @app.exception_handler(Exception)
    async def unhandled_error_handler(request: Request, exc: Exception):
        logger.exception(f"Unhandled error on {request.method} {request.url.path}")
        return _error_response(500, "Something went wrong!", internal_detail(exc))


def create_app(settings: Optional[Settings] = None) -> FastAPI:
    """Build the FastAPI application around an explicit Settings object"""
    settings = settings or default_settings
    setup_logging(settings.LOG_LEVEL)

    @asynccontextmanager
    async def lifespan(app: FastAPI):
        logger.info(f"Starting {settings.APP_NAME}")
        database = Database(settings)
        try:
            await database.create_all()
        except (SQLAlchemyError, OSError) as e:
            # Keep serving; /api/health reports the store as down
            logger.error(f"Database connection failed: {e}")

        cache = RedisCache(settings.REDIS_URL)
        await cache.connect()
        spotify = SpotifyClient(
            settings.SPOTIFY_CLIENT_ID,
            settings.SPOTIFY_CLIENT_SECRET,
            cache,
            market=settings.SPOTIFY_MARKET,
        )

        app.state.db = database
        app.state.cache = cache
        app.state.album_service = AlbumService(spotify, cache, settings.CACHE_EXPIRE_SECONDS)
        try:
            yield
        finally:
            logger.info(f"Shutting down {settings.APP_NAME}")
            await spotify.close()
            await cache.close()
            await database.dispose()

    # Create FastAPI app instance
    app = FastAPI(
        title=settings.APP_NAME,
        description="User accounts and favorite albums for the Spotify album finder",
        version=settings.VERSION,
        lifespan=lifespan,
    )
    app.state.settings = settings
    app.state.user_service = UserService(settings)

    # CORS middleware
    app.add_middleware(
        CORSMiddleware,
        allow_origins=settings.allowed_origins,
        allow_credentials=True,
        allow_methods=["*"],
        allow_headers=["*"],
    )

    if settings.DEBUG:
        @app.middleware("http")
        async def log_requests(request: Request, call_next):
            logger.info(f"{request.method} {request.url.path}")
            return await call_next(request)

    register_exception_handlers(app)

    # Include API router
    app.include_router(api_router, prefix="/api")

    @app.get("/")
    async def root():
        return {
            "message": settings.APP_NAME,
            "version": settings.VERSION,
            "endpoints": {
                "health": "GET /api/health",
                "register": "POST /api/auth/register",
                "login": "POST /api/auth/login",
                "profile": "GET /api/auth/profile",
                "favorites": "GET /api/favorites",
                "addFavorite": "POST /api/favorites",
                "removeFavorite": "DELETE /api/favorites/:albumId",
                "searchAlbums": "GET /api/albums/search?q=",
            },
        }

    return app


app = create_app()


def run() -> None:
    """Console entry point: serve the app with uvicorn"""
    uvicorn.run(
        "album_finder.main:app",
        host=default_settings.HOST,
        port=default_settings.PORT,
        log_level=default_settings.LOG_LEVEL.lower(),
    )
