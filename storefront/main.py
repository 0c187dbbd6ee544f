from contextlib import asynccontextmanager
from typing import Optional

from fastapi import FastAPI
from fastapi.middleware.cors import CORSMiddleware
from sqlalchemy.engine import Engine

from storefront.bootstrap import build_order_service, configure_logging
from storefront.config import Settings, settings as default_settings
from storefront.database import build_engine, create_db_and_tables
from storefront.routes import admin_orders, cron, health, orders
from storefront.services.email_service import EmailNotifier
from storefront.services.order_service import OrderService


def create_app(
    settings: Optional[Settings] = None,
    engine: Optional[Engine] = None,
    notifier: Optional[EmailNotifier] = None,
    order_service: Optional[OrderService] = None,
) -> FastAPI:
    settings = settings or default_settings
    engine = engine or build_engine(settings.database_url)

    @asynccontextmanager
    async def lifespan(app: FastAPI):
        # Run DB creation ONLY in local
        if settings.ENV == "local":
            create_db_and_tables(engine)
        yield
        engine.dispose()

    app = FastAPI(title="Sweets by Bella API", lifespan=lifespan)
    app.state.settings = settings
    app.state.order_service = order_service or build_order_service(settings, engine, notifier)

    allow_origins = [
        "http://localhost:5173",
        "http://localhost:3000",
        "http://127.0.0.1:5173",
    ]
    if settings.FRONTEND_URL:
        allow_origins.append(settings.FRONTEND_URL)

    app.add_middleware(
        CORSMiddleware,
        allow_origins=allow_origins,
        allow_origin_regex=r"^https://sweets-by-bella.*\.vercel\.app$",
        allow_credentials=True,
        allow_methods=["*"],
        allow_headers=["*"],
    )

    app.include_router(health.router, tags=["Health"])
    app.include_router(orders.router, tags=["Orders"])
    app.include_router(cron.router, tags=["Cron"])
    app.include_router(admin_orders.router, prefix="/admin/orders", tags=["Admin Orders"])

    return app


configure_logging(default_settings.LOG_LEVEL)
app = create_app()
