from contextlib import asynccontextmanager

from fastapi import FastAPI
from fastapi.middleware.cors import CORSMiddleware

from finpipe.application.use_cases.activity import ActivityAggregator
from finpipe.application.use_cases.notifications import (
    LifecycleCoordinator,
    NotificationDispatcher,
)
from finpipe.config import NotificationConfig, Settings, get_settings
from finpipe.domain.ports import DeliveryChannel, RecordStore
from finpipe.infrastructure.database import SessionLocal, engine, initialize_database
from finpipe.infrastructure.email import build_delivery_channel
from finpipe.infrastructure.logging_config import configure_logging
from finpipe.infrastructure.repositories import SqlAlchemyRecordStore
from finpipe.interfaces.api.routes import register_routes


def create_app(
    settings: Settings | None = None,
    *,
    store: RecordStore | None = None,
    channel: DeliveryChannel | None = None,
) -> FastAPI:
    """Build the FastAPI application and wire its collaborators.

    ``store`` and ``channel`` replace the SQLAlchemy store and the
    configured delivery channel; the database is only initialized when
    the default store is used.
    """

    settings = settings or get_settings()
    config = NotificationConfig.from_settings(settings)
    uses_database = store is None

    @asynccontextmanager
    async def lifespan(app: FastAPI):
        configure_logging(settings)
        if uses_database:
            initialize_database()
        yield
        if uses_database:
            engine.dispose()

    app = FastAPI(title="finpipe", lifespan=lifespan)

    app.add_middleware(
        CORSMiddleware,
        allow_origins=["*"],
        allow_credentials=False,
        allow_methods=["*"],
        allow_headers=["*"],
    )

    record_store = store if store is not None else SqlAlchemyRecordStore(SessionLocal)
    dispatcher = NotificationDispatcher(channel or build_delivery_channel(config), config)

    app.state.store = record_store
    app.state.aggregator = ActivityAggregator(
        record_store, limit=settings.activity_fetch_limit
    )
    app.state.coordinator = LifecycleCoordinator(dispatcher)

    register_routes(app)
    return app


app = create_app()
