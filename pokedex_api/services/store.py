from __future__ import annotations

import logging
from collections.abc import Iterator
from contextlib import contextmanager
from dataclasses import dataclass
from typing import Any

from sqlalchemy import delete, func, insert, or_, select
from sqlalchemy.dialects.postgresql import insert as postgresql_insert
from sqlalchemy.dialects.sqlite import insert as sqlite_insert
from sqlalchemy.exc import IntegrityError, SQLAlchemyError
from sqlalchemy.orm import Session, undefer

from pokedex_api.enums import SortOption
from pokedex_api.models.core import Pokemon
from pokedex_api.services.errors import ConflictError, StoreFailure
from pokedex_api.services.schema import SchemaCapabilities

logger = logging.getLogger(__name__)

_SORT_COLUMNS = {
    SortOption.pokemon_id_asc: (Pokemon.pokemon_id, False),
    SortOption.pokemon_id_desc: (Pokemon.pokemon_id, True),
    SortOption.name_asc: (Pokemon.name, False),
    SortOption.name_desc: (Pokemon.name, True),
    SortOption.hp_asc: (Pokemon.hp, False),
    SortOption.hp_desc: (Pokemon.hp, True),
    SortOption.attack_asc: (Pokemon.attack, False),
    SortOption.attack_desc: (Pokemon.attack, True),
    SortOption.defense_asc: (Pokemon.defense, False),
    SortOption.defense_desc: (Pokemon.defense, True),
    SortOption.speed_asc: (Pokemon.speed, False),
    SortOption.speed_desc: (Pokemon.speed, True),
}


@dataclass(frozen=True)
class PokemonFilters:
    search: str = ""
    type: str | None = None


def _escape_like(value: str) -> str:
    return value.replace("\\", "\\\\").replace("%", "\\%").replace("_", "\\_")


class PokemonStore:
    """Queries against the ``pokemons`` table.

    The optional metadata columns are only read or written when ``capabilities``
    says the deployed table has them.
    """

    def __init__(self, db: Session, capabilities: SchemaCapabilities) -> None:
        self.db = db
        self.capabilities = capabilities

    def _select(self):
        stmt = select(Pokemon)
        if self.capabilities.custom_metadata:
            stmt = stmt.options(undefer(Pokemon.is_custom), undefer(Pokemon.created_by))
        return stmt

    @staticmethod
    def _apply_filters(stmt, filters: PokemonFilters):
        if filters.search:
            pattern = f"%{_escape_like(filters.search.lower())}%"
            stmt = stmt.where(Pokemon.name.ilike(pattern, escape="\\"))
        if filters.type:
            stmt = stmt.where(or_(Pokemon.type_primary == filters.type, Pokemon.type_secondary == filters.type))
        return stmt

    def count(self, filters: PokemonFilters | None = None) -> int:
        stmt = self._apply_filters(select(func.count()).select_from(Pokemon), filters or PokemonFilters())
        return int(self.db.scalar(stmt) or 0)

    def list_page(self, filters: PokemonFilters, sort: SortOption, *, offset: int, limit: int) -> list[Pokemon]:
        column, descending = _SORT_COLUMNS[sort]
        order = [column.desc() if descending else column.asc()]
        if column is not Pokemon.pokemon_id:
            order.append(Pokemon.pokemon_id.asc())
        stmt = self._apply_filters(self._select(), filters).order_by(*order).offset(offset).limit(limit)
        return list(self.db.scalars(stmt))

    def search_by_name(self, query: str, *, limit: int) -> list[Pokemon]:
        stmt = self._apply_filters(self._select(), PokemonFilters(search=query))
        return list(self.db.scalars(stmt.order_by(Pokemon.pokemon_id.asc()).limit(limit)))

    def get(self, pokemon_id: int) -> Pokemon | None:
        return self.db.scalar(self._select().where(Pokemon.pokemon_id == pokemon_id))

    def id_exists(self, pokemon_id: int) -> bool:
        return self.db.scalar(select(Pokemon.pokemon_id).where(Pokemon.pokemon_id == pokemon_id)) is not None

    def name_exists(self, name: str) -> bool:
        stmt = select(Pokemon.pokemon_id).where(func.lower(Pokemon.name) == name.strip().lower()).limit(1)
        return self.db.scalar(stmt) is not None

    def insert(self, values: dict[str, Any], *, metadata: dict[str, Any] | None = None) -> Pokemon:
        row = dict(values)
        if metadata and self.capabilities.custom_metadata:
            row.update(metadata)
        try:
            self.db.execute(insert(Pokemon).values(**row))
            self.db.flush()
        except IntegrityError as exc:
            raise ConflictError("A Pokémon with the same id or name already exists") from exc
        record = self.get(row["pokemon_id"])
        if record is None:
            raise StoreFailure(f"Inserted Pokémon {row['pokemon_id']} could not be read back")
        return record

    def upsert_many(self, rows: list[dict[str, Any]]) -> int:
        if not rows:
            return 0
        dialect = self.db.get_bind().dialect.name
        if dialect == "sqlite":
            stmt = sqlite_insert(Pokemon.__table__).values(rows)
        elif dialect == "postgresql":
            stmt = postgresql_insert(Pokemon.__table__).values(rows)
        else:
            raise StoreFailure(f"Upsert is not supported on dialect {dialect}")
        update_columns = {name: stmt.excluded[name] for name in rows[0] if name != "pokemon_id"}
        stmt = stmt.on_conflict_do_update(index_elements=[Pokemon.__table__.c.pokemon_id], set_=update_columns)
        self.db.execute(stmt)
        return len(rows)

    def delete_all(self) -> int:
        result = self.db.execute(delete(Pokemon))
        return int(result.rowcount or 0)

    def delete(self, pokemon_id: int) -> int:
        result = self.db.execute(delete(Pokemon).where(Pokemon.pokemon_id == pokemon_id))
        return int(result.rowcount or 0)

    def serialize(self, record: Pokemon) -> dict[str, Any]:
        metadata_loaded = self.capabilities.custom_metadata
        return {
            "pokemonId": record.pokemon_id,
            "name": record.name,
            "image": record.image,
            "hp": record.hp,
            "attack": record.attack,
            "defense": record.defense,
            "speed": record.speed,
            "height": record.height,
            "weight": record.weight,
            "type": record.types,
            "is_custom": record.is_custom_record(metadata_loaded=metadata_loaded),
            "created_by": record.created_by if metadata_loaded else None,
        }


@contextmanager
def translate_store_errors(action: str) -> Iterator[None]:
    try:
        yield
    except SQLAlchemyError as exc:
        logger.exception("Store failure while %s", action)
        raise StoreFailure(f"Storage error while {action}") from exc
