"""
AI Video Survey API: FastAPI app factory.

Use: uvicorn survey_server.app:app
Or:  from survey_server import app
"""

import logging

from fastapi import FastAPI
from fastapi.middleware.cors import CORSMiddleware

from .config import get_config
from .routes import register_routes
from .state import get_state

logger = logging.getLogger(__name__)


def create_app() -> FastAPI:
    """Build FastAPI app with logging, CORS, routes, and startup."""
    config = get_config()
    logging.basicConfig(
        level=getattr(logging, config.log_level, logging.INFO),
        format="%(asctime)s %(levelname)s %(name)s %(message)s",
    )

    app = FastAPI(
        title="AI Video Survey API",
        description="Personalized video recommendations with interaction analytics",
        version="1.0.0",
    )
    app.add_middleware(
        CORSMiddleware,
        allow_origins=["*"],
        allow_credentials=True,
        allow_methods=["*"],
        allow_headers=["*"],
    )
    register_routes(app)

    @app.on_event("startup")
    def _startup_logging():
        state = get_state()
        ok, errors = state.config.validate()
        for error in errors:
            logger.warning("[startup] config: %s", error)
        logger.info("[startup] AI Video Survey API starting (config valid=%s)", ok)
        logger.info("[startup] Recommendation service: %s", state.config.recommender_url)
        logger.info("[startup] Data source: %s (%s)", state.config.data_source, state.config.data_dir)
        logger.info("[startup] Catalog videos: %d", state.catalog.count())

    return app


app = create_app()
