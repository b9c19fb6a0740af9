from db.database import create_db_engine, create_session_factory
from db.migrate import create_tables, seed_default_admin
from model.usermodels import User, UserRole
from utils.token import PasswordHasher


def test_seed_default_admin_is_idempotent():
    engine = create_db_engine("sqlite://")
    create_tables(engine)
    session_factory = create_session_factory(engine)
    hasher = PasswordHasher(rounds=4)

    assert seed_default_admin(session_factory, hasher, "admin@company.com", "admin123") is True
    assert seed_default_admin(session_factory, hasher, "admin@company.com", "admin123") is False

    db = session_factory()
    try:
        admins = db.query(User).filter(User.email == "admin@company.com").all()
        assert len(admins) == 1
        assert admins[0].role == UserRole.admin
        assert hasher.verify("admin123", admins[0].password)
    finally:
        db.close()
        engine.dispose()
