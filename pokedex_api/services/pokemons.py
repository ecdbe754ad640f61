from __future__ import annotations

import logging
import math
import random
from dataclasses import dataclass
from typing import Any

from sqlalchemy.orm import Session

from pokedex_api.constants import (
    CUSTOM_ID_ALLOCATION_ATTEMPTS,
    CUSTOM_ID_MAX,
    CUSTOM_ID_MIN,
    DEFAULT_PAGE,
    DEFAULT_PAGE_SIZE,
    MAX_PAGE_SIZE,
    ORIGINAL_MAX_POKEMON_ID,
    SEARCH_BY_NAME_LIMIT,
)
from pokedex_api.enums import SortOption
from pokedex_api.services.connectors.base import NormalizedPokemon, PokemonCatalog
from pokedex_api.services.errors import (
    ConflictError,
    ForbiddenError,
    NotFoundError,
    RateLimitError,
    UpstreamNotFound,
    ValidationError,
)
from pokedex_api.services.rate_limit import RateLimiter
from pokedex_api.services.seeding import Seeder
from pokedex_api.services.store import PokemonFilters, PokemonStore, translate_store_errors
from pokedex_api.services.validation import (
    is_integer_text,
    normalize_search,
    normalize_type_filter,
    parse_positive_int,
    resolve_sort,
    validate_pokemon_input,
)

logger = logging.getLogger(__name__)


@dataclass(frozen=True)
class CollectionQuery:
    page: int
    page_size: int
    filters: PokemonFilters
    sort: SortOption
    refresh: bool


@dataclass(frozen=True)
class Pagination:
    page: int
    page_size: int
    total: int
    total_pages: int
    has_next_page: bool
    has_prev_page: bool

    @property
    def offset(self) -> int:
        return (self.page - 1) * self.page_size


def parse_collection_query(
    *,
    page: str | None,
    page_size: str | None,
    search: str | None,
    type_filter: str | None,
    sort: str | None,
    refresh: str | None,
) -> CollectionQuery:
    return CollectionQuery(
        page=parse_positive_int(page, DEFAULT_PAGE),
        page_size=parse_positive_int(page_size, DEFAULT_PAGE_SIZE, maximum=MAX_PAGE_SIZE),
        filters=PokemonFilters(search=normalize_search(search), type=normalize_type_filter(type_filter)),
        sort=resolve_sort(sort),
        refresh=(refresh or "").strip().lower() == "true",
    )


def paginate(total: int, requested_page: int, page_size: int) -> Pagination:
    total_pages = math.ceil(total / page_size) if total > 0 else 0
    page = min(max(requested_page, 1), total_pages) if total_pages else 1
    return Pagination(
        page=page,
        page_size=page_size,
        total=total,
        total_pages=total_pages,
        has_next_page=page < total_pages,
        has_prev_page=page > 1,
    )


def enforce_refresh_rate_limit(rate_limiter: RateLimiter, *, bucket: str, client_id: str) -> None:
    decision = rate_limiter.consume(f"{bucket}:{client_id}")
    if not decision.allowed:
        logger.warning("Refresh rate limit hit for %s", client_id)
        raise RateLimitError(
            "Too many refresh requests. Please try again later.",
            retry_after_seconds=decision.retry_after_seconds,
        )


def list_pokemons(
    db: Session,
    store: PokemonStore,
    seeder: Seeder,
    query: CollectionQuery,
) -> tuple[list[dict[str, Any]], Pagination]:
    """Return one page of Pokémon, seeding the store first when it is empty.

    ``query.refresh`` must only be set once the caller has been authorized and
    rate limited; it forces a full re-seed before the page is read.
    """
    if query.refresh or store.count() == 0:
        seeder.seed(db, store.capabilities, force_refresh=query.refresh)

    total = store.count(query.filters)
    pagination = paginate(total, query.page, query.page_size)
    if total == 0:
        return [], pagination
    records = store.list_page(query.filters, query.sort, offset=pagination.offset, limit=pagination.page_size)
    return [store.serialize(record) for record in records], pagination


def allocate_custom_id(store: PokemonStore, *, rng: random.Random | None = None) -> int:
    generator = rng or random.SystemRandom()
    for _ in range(CUSTOM_ID_ALLOCATION_ATTEMPTS):
        candidate = generator.randint(CUSTOM_ID_MIN, CUSTOM_ID_MAX)
        if not store.id_exists(candidate):
            return candidate
    logger.warning("Gave up allocating a Pokémon id after %d attempts", CUSTOM_ID_ALLOCATION_ATTEMPTS)
    raise ConflictError("Could not allocate a unique Pokémon id. Please retry.")


def create_pokemon(
    store: PokemonStore,
    payload: Any,
    *,
    created_by: str | None = None,
    rng: random.Random | None = None,
) -> dict[str, Any]:
    validated = validate_pokemon_input(payload)
    with translate_store_errors("creating a Pokémon"):
        pokemon_id = allocate_custom_id(store, rng=rng)
        if store.name_exists(validated.name):
            raise ConflictError(f"A Pokémon named '{validated.name}' already exists")

        values = {
            "pokemon_id": pokemon_id,
            "name": validated.name,
            "image": validated.image,
            "hp": validated.hp,
            "attack": validated.attack,
            "defense": validated.defense,
            "speed": validated.speed,
            "height": validated.height,
            "weight": validated.weight,
            "type_primary": validated.type[0],
            "type_secondary": validated.type[1] if len(validated.type) > 1 else None,
        }
        metadata = {"is_custom": True, "created_by": (created_by or "").strip() or None}
        record = store.insert(values, metadata=metadata)
        logger.info("Created custom Pokémon %s (%d)", record.name, record.pokemon_id)
        return store.serialize(record)


def parse_pokemon_id(raw: str | None, *, positive: bool = False) -> int:
    value = (raw or "").strip()
    if not value:
        raise ValidationError("Pokemon ID is required")
    if not is_integer_text(value):
        raise ValidationError("Invalid Pokemon ID")
    pokemon_id = int(value)
    if positive and pokemon_id < 1:
        raise ValidationError("Invalid Pokemon ID")
    return pokemon_id


def delete_pokemon(store: PokemonStore, raw_id: str | None) -> int:
    pokemon_id = parse_pokemon_id(raw_id, positive=True)
    if pokemon_id <= ORIGINAL_MAX_POKEMON_ID:
        raise ForbiddenError("Cannot delete original Pokemon")
    with translate_store_errors(f"deleting Pokémon {pokemon_id}"):
        record = store.get(pokemon_id)
        if record is None:
            raise NotFoundError("Pokemon not found")
        if not record.is_custom_record(metadata_loaded=store.capabilities.custom_metadata):
            raise ForbiddenError("Cannot delete original Pokemon")
        affected = store.delete(pokemon_id)
    if affected == 0:
        raise NotFoundError("Pokemon not found")
    logger.info("Deleted custom Pokémon %d", pokemon_id)
    return pokemon_id


def catalog_payload(detail: NormalizedPokemon) -> dict[str, Any]:
    return {
        "pokemonId": detail.pokemon_id,
        "name": detail.name,
        "image": detail.image,
        "hp": detail.hp,
        "attack": detail.attack,
        "defense": detail.defense,
        "speed": detail.speed,
        "height": detail.height,
        "weight": detail.weight,
        "type": list(detail.type),
        "is_custom": detail.pokemon_id > ORIGINAL_MAX_POKEMON_ID,
        "created_by": None,
    }


def get_pokemon(store: PokemonStore, catalog: PokemonCatalog, raw_id: str) -> dict[str, Any]:
    pokemon_id = parse_pokemon_id(raw_id)
    with translate_store_errors(f"reading Pokémon {pokemon_id}"):
        record = store.get(pokemon_id)
    if record is not None:
        return store.serialize(record)

    try:
        detail = catalog.fetch_detail_by_id(pokemon_id)
    except UpstreamNotFound as exc:
        raise NotFoundError("Pokemon not found") from exc
    return catalog_payload(detail)


def search_pokemons(store: PokemonStore, catalog: PokemonCatalog, name: str | None) -> list[dict[str, Any]]:
    query = normalize_search(name)
    if not query:
        raise ValidationError("Name parameter is required")
    with translate_store_errors("searching Pokémon"):
        records = store.search_by_name(query, limit=SEARCH_BY_NAME_LIMIT)
    if records:
        return [store.serialize(record) for record in records]

    try:
        detail = catalog.fetch_detail_by_name(query)
    except UpstreamNotFound as exc:
        raise NotFoundError("Pokemon not found") from exc
    return [catalog_payload(detail)]
