import logging
from fastapi import FastAPI
from fastapi.middleware.cors import CORSMiddleware
from app.api.exceptions import register_error_handler
from app.api.v1.routes import auth, events, seats
from app.core.config import Settings
from app.core.database import create_engine, create_sessionmaker
from app.core.logging_config import setup_logging
from app.core.middleware.http_ctx import HttpContextMiddleware
from app.core.middleware.request_id import RequestIdMiddleware
from app.core.redis import create_redis
from app.services.auth_service import build_operator_account

logger = logging.getLogger("app")


async def lifespan(app: FastAPI):
    settings: Settings = app.state.settings
    engine = create_engine(settings.database_url)
    app.state.sessionmaker = create_sessionmaker(engine)

    r = await create_redis(settings.redis_url) if settings.redis_url else None
    app.state.redis = r
    if r is None:
        logger.warning("REDIS_URL not set; audit events are not recorded")

    logger.info("Seat booking API started (timezone=%s)", settings.venue_timezone)
    try:
        yield
    finally:
        if r is not None:
            await r.aclose()
        await engine.dispose()


def create_app(settings: Settings | None = None) -> FastAPI:
    settings = settings or Settings.from_env()
    setup_logging(settings.log_level)

    app = FastAPI(title="Seat Booking API", lifespan=lifespan)
    app.state.settings = settings
    app.state.operator = build_operator_account(settings)
    app.state.redis = None

    app.add_middleware(HttpContextMiddleware)
    app.add_middleware(
        CORSMiddleware,
        allow_origins=list(settings.cors_origins),
        allow_credentials=True,
        allow_methods=["*"],
        allow_headers=["*"],
    )
    app.add_middleware(RequestIdMiddleware, header_name="X-Request-ID")
    register_error_handler(app)

    app.include_router(auth.router)
    app.include_router(events.router)
    app.include_router(seats.router)
    return app
