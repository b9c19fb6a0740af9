import logging
from dataclasses import dataclass

from fastapi import Request
from sqlalchemy.engine import Engine
from sqlalchemy.orm import sessionmaker

from db.database import create_db_engine, create_session_factory
from service.notification_service import NotificationDispatcher
from settings import Settings
from utils.mail_config_utils import build_mailer
from utils.token import PasswordHasher, TokenService
from utils.upload_utils import AttachmentStorage

logger = logging.getLogger(__name__)

MAILER_FROM_SETTINGS = object()


@dataclass(frozen=True)
class Container:
    settings: Settings
    engine: Engine
    session_factory: sessionmaker

    token_service: TokenService
    password_hasher: PasswordHasher
    dispatcher: NotificationDispatcher
    attachments: AttachmentStorage

    def close(self) -> None:
        self.engine.dispose()
        logger.info("Database connections closed")


def build_container(settings: Settings, *, mailer=MAILER_FROM_SETTINGS) -> Container:
    """Wire every long-lived service handle once at startup.

    ``mailer`` overrides the fastapi-mail transport built from settings;
    passing None disables notifications.
    """
    engine = create_db_engine(settings.database_url)
    session_factory = create_session_factory(engine)

    if mailer is MAILER_FROM_SETTINGS:
        mailer = build_mailer(settings)

    return Container(
        settings=settings,
        engine=engine,
        session_factory=session_factory,
        token_service=TokenService(
            settings.jwt_secret_key,
            algorithm=settings.jwt_algorithm,
            expires_in=settings.jwt_expires_in,
        ),
        password_hasher=PasswordHasher(rounds=settings.bcrypt_rounds),
        dispatcher=NotificationDispatcher(mailer),
        attachments=AttachmentStorage(settings.upload_dir, max_size=settings.max_upload_size),
    )


def get_container(request: Request) -> Container:
    return request.app.state.container
