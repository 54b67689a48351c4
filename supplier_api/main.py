from __future__ import annotations

from contextlib import asynccontextmanager
import logging

from fastapi import FastAPI

from supplier_api.abac import PolicyEvaluator, default_policy_config, load_policy_config
from supplier_api.db.init_db import init_db
from supplier_api.logging_config import configure_app_logging
from supplier_api.routers import admin, health, suppliers
from supplier_api.settings import Settings, get_settings

logger = logging.getLogger(__name__)


def build_policy_evaluator(settings: Settings) -> PolicyEvaluator:
    """Evaluator with the YAML policy document from settings, or the built-in defaults."""

    path = settings.resolved_policy_path()
    if path is None:
        return PolicyEvaluator(default_policy_config())

    config = load_policy_config(path)
    logger.info("Loaded ABAC policy document: %s", path)
    return PolicyEvaluator(config)


def create_app(settings: Settings | None = None, evaluator: PolicyEvaluator | None = None) -> FastAPI:
    """
    Build the app. Explicit ``settings`` are also what request dependencies see
    through ``get_settings``; without them the environment-backed settings apply.
    """

    explicit_settings = settings is not None
    settings = settings or get_settings()

    @asynccontextmanager
    async def lifespan(app: FastAPI):
        logger.info("App startup beginning")
        init_db()
        logger.info("Database initialized (tables ensured + seed if needed)")
        yield

    configure_app_logging(settings.log_level)

    app = FastAPI(title="supplier-api", lifespan=lifespan)
    app.state.policy_evaluator = evaluator or build_policy_evaluator(settings)
    if explicit_settings:
        app.dependency_overrides[get_settings] = lambda: settings

    app.include_router(health.router)
    app.include_router(admin.router)
    app.include_router(suppliers.router)

    return app


app = create_app()
