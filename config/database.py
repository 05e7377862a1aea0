import logging

from sqlalchemy import create_engine, text
from sqlalchemy.engine import Engine, make_url
from sqlalchemy.orm import sessionmaker

# Import models to register them with SQLAlchemy
from models.base_model import base
from models.category import CategoryModel  # noqa
from models.product import ProductModel  # noqa
from utils.logging_utils import get_sanitized_logger

logger = get_sanitized_logger(__name__)


# =======================================================
# 🔥 Engine
# =======================================================
def build_engine(database_url: str, timeout: float = 5.0) -> Engine:
    """
    Build the single engine the whole process shares.

    Every store call is bounded by ``timeout`` seconds: waiting for a pooled
    connection, connecting, and (on PostgreSQL) running a statement.
    SQLite uses it as its busy timeout.
    """
    url = make_url(database_url)
    backend = url.get_backend_name()

    logger.info(f"📌 Using database: {url.render_as_string(hide_password=True)}")

    if backend == "sqlite":
        return create_engine(
            url,
            connect_args={"check_same_thread": False, "timeout": timeout},
            echo=False,
            future=True,
        )

    connect_args = {}
    if backend == "postgresql":
        connect_args = {
            "connect_timeout": max(1, int(timeout)),
            "options": f"-c statement_timeout={int(timeout * 1000)}",
        }

    return create_engine(
        url,
        connect_args=connect_args,
        pool_pre_ping=True,
        pool_size=10,
        max_overflow=20,
        pool_timeout=timeout,
        pool_recycle=3600,
        echo=False,
        future=True,
    )


def build_session_factory(engine: Engine) -> sessionmaker:
    return sessionmaker(autocommit=False, autoflush=False, expire_on_commit=False, bind=engine)


# =======================================================
# 🔥 Crear tablas
# =======================================================
def create_tables(engine: Engine) -> None:
    try:
        base.metadata.create_all(engine)
        logger.info("🟢 Tables created successfully.")
    except Exception as e:
        logger.error(f"❌ Error creating tables: {e}")
        raise


# =======================================================
# 🔥 Comprobar conexión
# =======================================================
def check_connection(engine: Engine) -> bool:
    try:
        with engine.connect() as connection:
            connection.execute(text("SELECT 1"))
        logger.info("🟢 Database connection OK.")
        return True
    except Exception as e:
        logger.error(f"❌ DB connection failed: {e}")
        return False
