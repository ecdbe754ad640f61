import logging
from dataclasses import dataclass

from sqlalchemy import inspect, text
from sqlalchemy.engine import Engine

from pokedex_api.models.base import Base
from pokedex_api.models.core import OPTIONAL_METADATA_COLUMNS, Pokemon

logger = logging.getLogger(__name__)


@dataclass(frozen=True)
class SchemaCapabilities:
    custom_metadata: bool


def _has_column(engine: Engine, table_name: str, column_name: str) -> bool:
    inspector = inspect(engine)
    columns = inspector.get_columns(table_name)
    return any(column["name"] == column_name for column in columns)


def _add_column_if_missing(engine: Engine, table_name: str, column_name: str, definition_sql: str) -> None:
    if _has_column(engine, table_name, column_name):
        return
    with engine.begin() as connection:
        connection.execute(text(f"ALTER TABLE {table_name} ADD COLUMN {column_name} {definition_sql}"))
    logger.info("Added missing column %s.%s", table_name, column_name)


def ensure_runtime_schema(engine: Engine) -> None:
    Base.metadata.create_all(bind=engine, checkfirst=True)
    if not engine.dialect.name.startswith("sqlite"):
        return

    _add_column_if_missing(engine, Pokemon.__tablename__, "is_custom", "BOOLEAN")
    _add_column_if_missing(engine, Pokemon.__tablename__, "created_by", "VARCHAR(120)")


def detect_schema_capabilities(engine: Engine) -> SchemaCapabilities:
    inspector = inspect(engine)
    if Pokemon.__tablename__ not in set(inspector.get_table_names()):
        return SchemaCapabilities(custom_metadata=False)
    columns = {column["name"] for column in inspector.get_columns(Pokemon.__tablename__)}
    supported = set(OPTIONAL_METADATA_COLUMNS).issubset(columns)
    if not supported:
        logger.warning("Table %s lacks %s; custom metadata will not be stored", Pokemon.__tablename__, OPTIONAL_METADATA_COLUMNS)
    return SchemaCapabilities(custom_metadata=supported)
