"""Create the schema and seed the default admin account.

Run with ``python -m db.migrate``.
"""
import logging
from typing import Optional

from sqlalchemy.engine import Engine
from sqlalchemy.orm import sessionmaker

from db.database import Base, create_db_engine, create_session_factory
from model import leave_model, usermodels  # noqa: F401  registers tables on Base.metadata
from model.usermodels import User, UserRole
from settings import Settings, get_settings
from utils.token import PasswordHasher

logger = logging.getLogger(__name__)


def create_tables(engine: Engine) -> None:
    Base.metadata.create_all(bind=engine)


def seed_default_admin(session_factory: sessionmaker, hasher: PasswordHasher, email: str, password: str) -> bool:
    """Insert the default admin unless a user with that email exists. Returns True when created."""
    db = session_factory()
    try:
        if db.query(User).filter(User.email == email).first() is not None:
            return False
        db.add(User(
            email=email,
            password=hasher.hash(password),
            first_name="Admin",
            last_name="User",
            role=UserRole.admin,
        ))
        db.commit()
        return True
    except Exception:
        db.rollback()
        raise
    finally:
        db.close()


def run_migration(settings: Optional[Settings] = None) -> None:
    settings = settings or get_settings()
    engine = create_db_engine(settings.database_url)
    try:
        logger.info("Running migrations...")
        create_tables(engine)
        created = seed_default_admin(
            create_session_factory(engine),
            PasswordHasher(rounds=settings.bcrypt_rounds),
            settings.default_admin_email,
            settings.default_admin_password,
        )
        if created:
            logger.info(f"Default admin user created: {settings.default_admin_email}")
        logger.info("Migration completed successfully")
    finally:
        engine.dispose()


if __name__ == "__main__":
    logging.basicConfig(level=logging.INFO)
    run_migration()
