# app/db/session.py
import logging

from sqlalchemy import create_engine, text
from sqlalchemy.exc import SQLAlchemyError
from sqlalchemy.orm import sessionmaker

from app.core.settings import settings

logger = logging.getLogger(__name__)

engine = create_engine(
    settings.SQLALCHEMY_DATABASE_URL,
    pool_pre_ping=True,
    pool_recycle=1800,
)

SessionLocal = sessionmaker(bind=engine, autoflush=False, autocommit=False)

def get_db():
    db = SessionLocal()
    try:
        yield db
    finally:
        db.close()


def check_connection(bind=None) -> bool:
    """Round-trip a trivial query. Logs and returns False on failure."""
    bind = bind or engine
    try:
        with bind.connect() as conn:
            version = conn.execute(text("SELECT version()")).scalar_one()
        logger.info("Database connection successful: %s", version)
        return True
    except SQLAlchemyError as exc:
        logger.error("Database connection failed: %s", exc)
        return False


def tables_exist(bind=None) -> bool:
    """True once the provisioner has created the documents table."""
    bind = bind or engine
    with bind.connect() as conn:
        found = conn.execute(text("SELECT to_regclass('public.documents')")).scalar()
    return found is not None
