import uuid

from sqlalchemy import create_engine
from sqlalchemy.orm import sessionmaker, declarative_base

from usermgmt.core.config import get_settings

DATABASE_URL = get_settings().database_url

# SQLite needs check_same_thread, Postgres must NOT have it
connect_args = {"check_same_thread": False} if DATABASE_URL.startswith("sqlite") else {}

engine = create_engine(DATABASE_URL, connect_args=connect_args)

SessionLocal = sessionmaker(autocommit=False, autoflush=False, bind=engine)

Base = declarative_base()


def get_db():
    db = SessionLocal()
    try:
        yield db
    finally:
        db.close()


def new_id() -> str:
    return uuid.uuid4().hex
