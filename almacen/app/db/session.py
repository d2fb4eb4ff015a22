from sqlalchemy import create_engine, event
from sqlalchemy.engine import Engine
from sqlalchemy.orm import sessionmaker

from almacen.app.core.config import settings


def build_engine(url: str, *, echo: bool = False, production: bool = False) -> Engine:
    connect_args = {}
    if url.startswith("sqlite"):
        # pool compartido entre hilos del threadpool de FastAPI
        connect_args = {"check_same_thread": False, "timeout": 30}
    elif production and url.startswith("postgresql"):
        # Managed Postgres (Railway & co) requires TLS
        connect_args["sslmode"] = "require"

    engine = create_engine(url, pool_pre_ping=True, echo=echo, connect_args=connect_args)

    if engine.dialect.name == "sqlite":
        @event.listens_for(engine, "connect")
        def _enable_sqlite_fk(dbapi_connection, connection_record):
            cursor = dbapi_connection.cursor()
            cursor.execute("PRAGMA foreign_keys=ON")
            cursor.close()

    return engine


engine = build_engine(
    settings.database_url,
    echo=settings.database_echo,
    production=settings.is_production,
)
# expire_on_commit=False: las respuestas usan los valores de la propia transacción
SessionLocal = sessionmaker(bind=engine, autoflush=False, autocommit=False, expire_on_commit=False)
