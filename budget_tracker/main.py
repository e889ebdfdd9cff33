import logging
from typing import Optional

from fastapi import FastAPI
from fastapi.middleware.cors import CORSMiddleware

from .config import Settings, settings as default_settings
from .core.errors import install_error_handlers
from .database import Database
from .routers import budgets as budgets_router
from .routers import insights as insights_router
from .routers import transactions as transactions_router


logger = logging.getLogger(__name__)


def create_app(config: Optional[Settings] = None) -> FastAPI:
    config = config or default_settings
    # Missing DATABASE_URL is fatal before anything else starts
    database_url = config.require_database_url()

    logging.basicConfig(
        level=config.log_level,
        format="%(asctime)s %(levelname)s %(name)s: %(message)s",
    )

    app = FastAPI(title="Budget Tracker – Backend", version="0.1.0")
    app.state.settings = config
    app.state.database = Database(database_url, echo=config.sql_echo)

    app.add_middleware(
        CORSMiddleware,
        allow_origins=config.cors_origins,
        allow_credentials=True,
        allow_methods=["*"],
        allow_headers=["*"],
    )
    install_error_handlers(app)

    @app.on_event("startup")
    def on_startup():
        try:
            app.state.database.connect()
        except Exception:
            # Requests retry the connection; keep serving /health meanwhile.
            logger.exception("Database unavailable at startup")

    @app.on_event("shutdown")
    def on_shutdown():
        app.state.database.dispose()

    @app.get("/health")
    def health():
        return {"status": "ok"}

    app.include_router(transactions_router.router)
    app.include_router(budgets_router.router)
    app.include_router(insights_router.router)

    return app


app = create_app()
