# main.py
# Entry point for the portfolio backend service.
# - Builds the FastAPI app and its storage repository
# - Registers API routes (profiles, projects, search, skills)
# - Provides root health-check endpoints
# - Run with: uvicorn main:app --reload  (from backend/src)
import logging
import os
import sys
from contextlib import asynccontextmanager
from pathlib import Path
from typing import Optional

from fastapi import FastAPI, Request
from fastapi.middleware.cors import CORSMiddleware

sys.path.insert(0, str(Path(__file__).parent))
from api.profile_routes import router as profile_router
from api.project_routes import router as project_router
from api.search_routes import router as search_router
from api.errors import register_error_handlers
from config.settings import Settings, load_settings
from storage import build_repository
from storage.repository import ProfileRepository

logger = logging.getLogger(__name__)


def create_app(
    settings: Optional[Settings] = None,
    repository: Optional[ProfileRepository] = None,
) -> FastAPI:
    """Build the application.

    The repository is created when the app starts (unless one is passed in)
    and closed when it shuts down; handlers reach it through ``app.state``.
    """
    settings = settings or load_settings()
    logging.basicConfig(
        level=settings.log_level,
        format="%(asctime)s %(levelname)s %(name)s: %(message)s",
    )

    @asynccontextmanager
    async def lifespan(app: FastAPI):
        owned = repository is None
        app.state.repository = build_repository(settings) if owned else repository
        logger.info("Storage backend: %s", app.state.repository.name)
        try:
            yield
        finally:
            if owned:
                app.state.repository.close()

    app = FastAPI(
        title="Portfolio Backend API",
        description="Profiles, projects and work history with search and skill ranking",
        version="1.0.0",
        lifespan=lifespan,
    )
    app.state.settings = settings

    app.add_middleware(
        CORSMiddleware,
        allow_origins=settings.cors_origins,
        allow_credentials=True,
        allow_methods=["*"],
        allow_headers=["*"],
    )
    register_error_handlers(app)

    @app.get("/")
    def root():
        return {"status": "healthy", "message": "Backend API is running"}

    @app.get("/health")
    def health_check(request: Request):
        return {"status": "ok", "storage": request.app.state.repository.name}

    # Register API routes
    app.include_router(profile_router)
    app.include_router(project_router)
    app.include_router(search_router)
    return app


app = create_app()

if __name__ == "__main__":
    import uvicorn

    uvicorn.run("main:app", host="0.0.0.0", port=int(os.getenv("PORT", "8000")), reload=False)
