import logging

from sqlalchemy import select
from sqlalchemy.exc import SQLAlchemyError
from sqlalchemy.orm import Session

from pokedex_api.constants import POKEMON_TYPE_SET, POKEMON_TYPES
from pokedex_api.models.core import PokemonType
from pokedex_api.services.connectors.base import PokemonCatalog

logger = logging.getLogger(__name__)


def list_types(db: Session, catalog: PokemonCatalog) -> list[str]:
    stored = list(db.scalars(select(PokemonType.name)))
    if stored:
        return sorted(stored, key=_vocabulary_order)

    logger.info("Type table empty; fetching types from %s", catalog.name)
    names = [name for name in catalog.fetch_type_names() if name in POKEMON_TYPE_SET]
    names = sorted(set(names), key=_vocabulary_order)
    if not names:
        return []

    try:
        db.add_all([PokemonType(name=name) for name in names])
        db.commit()
    except SQLAlchemyError as exc:
        db.rollback()
        logger.warning("Could not store fetched types: %s", exc)
    return names


def _vocabulary_order(name: str) -> int:
    return POKEMON_TYPES.index(name) if name in POKEMON_TYPE_SET else len(POKEMON_TYPES)
