"""
FastAPI application entry point.

Run with: uvicorn api.main:app --reload
"""
import logging
from contextlib import asynccontextmanager
from pathlib import Path
from typing import Optional

from dotenv import load_dotenv
from fastapi import FastAPI, Request
from fastapi.responses import JSONResponse
from fastapi.staticfiles import StaticFiles
from fastapi.templating import Jinja2Templates
from starlette.middleware.sessions import SessionMiddleware

# Load environment variables from backend/.env (optional) before other imports that read env
env_path = Path(__file__).resolve().parent.parent / ".env"
load_dotenv(env_path)

from api.dependencies import PageError, render_error
from api.routes import auth, books, likes, pages
from repositories import new_dao
from repositories.base import BookDAO, DAOError
from settings import Settings, settings as default_settings

logger = logging.getLogger(__name__)

SESSION_COOKIE = "user-session"


@asynccontextmanager
async def lifespan(app: FastAPI):
    """Open the configured store unless one was handed to create_app."""
    owns_dao = app.state.dao is None
    if owns_dao:
        app.state.settings.validate()
        app.state.dao = new_dao(app.state.settings)
    app.state.dao.ping()
    try:
        yield
    finally:
        if owns_dao:
            app.state.dao.close()
            app.state.dao = None


def create_app(settings: Optional[Settings] = None, dao: Optional[BookDAO] = None) -> FastAPI:
    settings = settings or default_settings

    app = FastAPI(
        title="Home Library",
        description="Catalogue and browse a personal book collection",
        version="0.1.0",
        lifespan=lifespan,
    )
    app.state.settings = settings
    app.state.dao = dao
    app.state.templates = Jinja2Templates(directory=settings.TEMPLATE_DIR)

    app.add_middleware(
        SessionMiddleware,
        secret_key=settings.SESSION_SECRET,
        session_cookie=SESSION_COOKIE,
        https_only=settings.SESSION_HTTPS_ONLY,
    )

    # Mount static files for the pages' css/js
    assets_path = Path(settings.ASSETS_DIR)
    if assets_path.is_dir():
        app.mount("/assets", StaticFiles(directory=str(assets_path)), name="assets")

    app.include_router(pages.router, tags=["pages"])
    app.include_router(books.router, tags=["books"])
    app.include_router(likes.router, prefix="/api", tags=["likes"])
    app.include_router(auth.router, tags=["auth"])

    @app.exception_handler(PageError)
    async def page_error_handler(request: Request, exc: PageError):
        return render_error(request, exc.message, status_code=exc.status_code)

    @app.get("/health")
    def health(request: Request):
        """Health check endpoint."""
        try:
            request.app.state.dao.ping()
        except DAOError as e:
            logger.error("health check failed: %s", e)
            return JSONResponse(status_code=503, content={"status": "unhealthy"})
        return {"status": "healthy"}

    return app


app = create_app()


def run() -> None:
    """Console entry point: validate settings and serve with uvicorn."""
    import uvicorn

    logging.basicConfig(
        level=default_settings.LOG_LEVEL,
        format="%(asctime)s %(levelname)s %(name)s: %(message)s",
    )
    default_settings.validate()
    logger.info("Listening on port %s", default_settings.PORT)
    uvicorn.run(app, host="0.0.0.0", port=default_settings.PORT)


if __name__ == "__main__":
    run()
