import logging
from contextlib import asynccontextmanager
from typing import Optional

import uvicorn
from fastapi import FastAPI
from fastapi.middleware.cors import CORSMiddleware

from cms import database
from cms.config import Settings, settings as default_settings
from cms.exception_handlers import register_exception_handlers
from cms.middleware.logging import StructuredLoggingMiddleware, configure_logging
from cms.plugins.manager import PluginSystem
from cms.routes import plugin_surfaces, site
from cms.routes import plugins as plugins_admin

logger = logging.getLogger(__name__)


def create_app(settings: Optional[Settings] = None, plugin_system: Optional[PluginSystem] = None) -> FastAPI:
    """Create the FastAPI application."""
    settings = settings or default_settings
    plugin_system = plugin_system or PluginSystem.from_settings(settings)

    @asynccontextmanager
    async def lifespan(app: FastAPI):
        logger.info("Starting up the application...")
        if settings.auto_create_tables:
            await database.create_tables()
        await plugin_system.startup()
        yield
        await plugin_system.shutdown()
        logger.info("Shutting down the application...")

    app = FastAPI(
        title=settings.app_name,
        description="A CMS backend with runtime-toggleable plugins",
        debug=settings.debug,
        version=settings.app_version,
        lifespan=lifespan,
    )
    app.state.settings = settings
    app.state.plugins = plugin_system

    app.add_middleware(
        CORSMiddleware,
        allow_origins=settings.allowed_origins,
        allow_credentials=True,
        allow_methods=["*"],
        allow_headers=["*"],
    )
    app.add_middleware(StructuredLoggingMiddleware)
    register_exception_handlers(app)

    # Include routers; the public catch-all must stay last
    app.include_router(site.router)
    app.include_router(plugins_admin.router, prefix="/api/admin/plugins")
    app.include_router(plugin_surfaces.api_router, prefix="/api/p")
    app.include_router(plugin_surfaces.admin_router, prefix="/admin/p")
    app.include_router(plugin_surfaces.public_router)

    if settings.debug:
        logger.info("Running in %s mode", settings.environment)
        logging.getLogger("sqlalchemy.engine").setLevel(logging.INFO)

    return app


configure_logging(default_settings.log_level, default_settings.log_json)
app = create_app()


if __name__ == "__main__":
    uvicorn.run("main:app", host="0.0.0.0", port=8000, reload=default_settings.debug)
