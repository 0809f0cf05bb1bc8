# chat_triggers/main.py
import logging
import sys
from contextlib import asynccontextmanager

from fastapi import FastAPI, Request
from fastapi.responses import JSONResponse
from sqlalchemy.ext.asyncio import AsyncEngine, create_async_engine

from chat_triggers.api import notifications, triggers
from chat_triggers.config import AppConfig
from chat_triggers.domain.exceptions import InvocationRejected
from chat_triggers.gateways.chat_gateway import ChatGateway
from chat_triggers.gateways.message_gateway import MessageGateway
from chat_triggers.gateways.story_gateway import StoryGateway
from chat_triggers.gateways.user_gateway import UserGateway
from chat_triggers.infrastructure.database import create_database
from chat_triggers.infrastructure.document_store import SqlDocumentStore
from chat_triggers.infrastructure.event_dispatcher import EventDispatcher
from chat_triggers.infrastructure.event_handlers import (
    ChatWrittenHandler,
    MessageCreatedHandler,
    StorySweepHandler,
)
from chat_triggers.infrastructure.push_senders import HttpPushSender, RedisPushSender
from chat_triggers.infrastructure.scheduler import TriggerScheduler
from chat_triggers.infrastructure.security import SecurityService
from chat_triggers.interactors.chat_purge_interactor import ChatPurgeInteractor
from chat_triggers.interactors.notification_dispatcher import NotificationDispatcher
from chat_triggers.interactors.notification_interactor import NotificationInteractor
from chat_triggers.interactors.recipient_resolver import RecipientResolver
from chat_triggers.interactors.story_sweep_interactor import StorySweepInteractor


class Application:
    def __init__(
        self,
        config: AppConfig,
        engine: AsyncEngine | None = None,
        push_sender: RedisPushSender | HttpPushSender | None = None,
    ):
        self.config = config
        self.logger = self.setup_logger()
        engine = engine or create_async_engine(config.DATABASE_URL, echo=False)
        self.database = create_database(engine)
        self.store = SqlDocumentStore(self.database)
        self.push_sender = push_sender or self.create_push_sender()
        self.security_service = SecurityService(config)

        user_gateway = UserGateway(self.store)
        chat_gateway = ChatGateway(self.store)

        self.notification_interactor = NotificationInteractor(
            RecipientResolver(
                user_gateway,
                chat_gateway,
                self.logger,
                default_sender_name=config.DEFAULT_SENDER_NAME,
                default_group_title=config.DEFAULT_GROUP_TITLE,
            ),
            NotificationDispatcher(
                user_gateway,
                self.push_sender,
                self.logger,
                click_action=config.PUSH_CLICK_ACTION,
            ),
            self.logger,
            test_title=config.TEST_NOTIFICATION_TITLE,
            default_test_message=config.DEFAULT_TEST_MESSAGE,
        )
        self.purge_interactor = ChatPurgeInteractor(
            chat_gateway,
            MessageGateway(self.store),
            self.logger,
            page_size=config.PURGE_PAGE_SIZE,
        )
        self.sweep_interactor = StorySweepInteractor(
            StoryGateway(self.store),
            self.logger,
            page_size=config.STORY_SWEEP_PAGE_SIZE,
        )

        # Register event handlers
        self.event_dispatcher = EventDispatcher(self.logger)
        self.event_dispatcher.register_handler(
            MessageCreatedHandler(self.notification_interactor)
        )
        self.event_dispatcher.register_handler(ChatWrittenHandler(self.purge_interactor))
        self.event_dispatcher.register_handler(StorySweepHandler(self.sweep_interactor))

        self.scheduler = TriggerScheduler(
            self.event_dispatcher, self.logger, timezone=config.SCHEDULER_TIMEZONE
        )
        self.scheduler.schedule_story_sweep(config.STORY_SWEEP_INTERVAL_MINUTES)

    def create_push_sender(self) -> RedisPushSender | HttpPushSender:
        if self.config.PUSH_BACKEND == "http":
            return HttpPushSender(
                self.config.PUSH_ENDPOINT,
                self.logger,
                api_key=self.config.PUSH_API_KEY,
                timeout=self.config.PUSH_TIMEOUT_SECONDS,
            )
        return RedisPushSender(
            self.config.REDIS_HOST,
            self.config.REDIS_PORT,
            self.config.PUSH_QUEUE_KEY,
            self.logger,
        )

    @asynccontextmanager
    async def lifespan(self, app: FastAPI):
        await self.database.connect()
        await self.push_sender.connect()
        if self.config.SCHEDULER_ENABLED:
            self.scheduler.start()
        yield
        self.scheduler.shutdown()
        await self.push_sender.disconnect()
        await self.database.disconnect()

    def setup_logger(self):
        logger = logging.getLogger("ChatTriggers")
        logger.setLevel(self.config.LOG_LEVEL)

        if not logger.handlers:
            c_handler = logging.StreamHandler(sys.stdout)
            formatter = logging.Formatter(
                "%(asctime)s - %(name)s - %(levelname)s - %(message)s"
            )
            c_handler.setFormatter(formatter)
            logger.addHandler(c_handler)

        return logger

    def create_app(self) -> FastAPI:
        app = FastAPI(
            title=self.config.PROJECT_NAME,
            version=self.config.PROJECT_VERSION,
            description=self.config.PROJECT_DESCRIPTION,
            openapi_url=f"{self.config.API_V1_STR}/openapi.json",
            lifespan=self.lifespan,
        )

        app.state.security_service = self.security_service
        app.state.event_dispatcher = self.event_dispatcher
        app.state.notification_interactor = self.notification_interactor
        app.state.logger = self.logger

        app.include_router(
            triggers.router,
            prefix=f"{self.config.API_V1_STR}/triggers",
            tags=["triggers"],
        )
        app.include_router(
            notifications.router,
            prefix=f"{self.config.API_V1_STR}/notifications",
            tags=["notifications"],
        )

        @app.exception_handler(InvocationRejected)
        async def invocation_rejected_handler(request: Request, exc: InvocationRejected):
            self.logger.error(f"Direct invocation rejected: {exc.reason}")
            return JSONResponse(status_code=400, content={"detail": exc.reason})

        @app.exception_handler(Exception)
        async def global_exception_handler(request: Request, exc: Exception):
            return JSONResponse(
                status_code=500,
                content={"message": f"An unexpected error occurred: {str(exc)}"},
            )

        @app.get("/")
        async def root():
            return {"message": "Welcome to the Chat Triggers service"}

        return app


def create():
    config = AppConfig()
    application = Application(config)
    app = application.create_app()
    application.logger.info("Application created and configured")

    return app


if __name__ == "__main__":
    import uvicorn

    uvicorn.run(create(), host="127.0.0.1", port=8000)
