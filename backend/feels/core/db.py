from sqlalchemy import event
from sqlalchemy.engine import Engine
from sqlmodel import SQLModel, create_engine

from feels.core.config import settings

# Import models so their tables are registered on SQLModel.metadata
from feels import models  # noqa: F401


def _connect_args(url: str) -> dict:
    if url.startswith("sqlite"):
        return {"check_same_thread": False}
    return {}


engine = create_engine(
    settings.SQLALCHEMY_DATABASE_URI,
    connect_args=_connect_args(settings.SQLALCHEMY_DATABASE_URI),
    pool_pre_ping=True,
)


@event.listens_for(Engine, "connect")
def _enable_sqlite_foreign_keys(dbapi_connection, connection_record) -> None:
    # SQLite ignores ON DELETE CASCADE unless foreign keys are switched on per connection.
    if dbapi_connection.__class__.__module__.startswith("sqlite3"):
        cursor = dbapi_connection.cursor()
        cursor.execute("PRAGMA foreign_keys=ON")
        cursor.close()


def init_db(bind: Engine = engine) -> None:
    SQLModel.metadata.create_all(bind)
