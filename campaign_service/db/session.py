# campaign_service/db/session.py

from sqlalchemy import create_engine
from sqlalchemy.orm import sessionmaker

from campaign_service.core.config import settings

_connect_args = (
    {"check_same_thread": False} if settings.DATABASE_URL.startswith("sqlite") else {}
)

# Entry point to the database; handles connection pooling.
engine = create_engine(
    settings.DATABASE_URL, pool_pre_ping=True, connect_args=_connect_args
)

SessionLocal = sessionmaker(autocommit=False, autoflush=False, bind=engine)


def get_db():
    db = SessionLocal()
    try:
        yield db
    finally:
        db.close()
