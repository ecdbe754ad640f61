import json
import logging

from fastapi import APIRouter, Depends, Header, Query, Request
from fastapi.concurrency import run_in_threadpool
from sqlalchemy.orm import Session

from pokedex_api.api.deps import (
    client_identity,
    get_catalog,
    get_rate_limiter,
    get_seeder,
    get_store,
    to_http_exception,
)
from pokedex_api.config import Settings, get_settings
from pokedex_api.constants import ADMIN_HEADER_NAME, CREATOR_HEADER_NAME, REFRESH_RATE_LIMIT_BUCKET
from pokedex_api.database import get_db
from pokedex_api.schemas import (
    CreatePokemonResponse,
    MessageResponse,
    PaginationResponse,
    PokemonPageResponse,
    PokemonResponse,
)
from pokedex_api.services.auth import require_admin_key
from pokedex_api.services.connectors.base import PokemonCatalog
from pokedex_api.services.errors import MalformedBodyError, ServiceError
from pokedex_api.services.pokemons import (
    create_pokemon,
    delete_pokemon,
    enforce_refresh_rate_limit,
    get_pokemon,
    list_pokemons,
    parse_collection_query,
    search_pokemons,
)
from pokedex_api.services.rate_limit import RateLimiter
from pokedex_api.services.seeding import Seeder
from pokedex_api.services.store import PokemonStore

logger = logging.getLogger(__name__)

router = APIRouter(prefix="/pokemons", tags=["pokemons"])


@router.get("", response_model=PokemonPageResponse)
def list_collection(
    request: Request,
    page: str | None = Query(default=None),
    page_size: str | None = Query(default=None, alias="pageSize"),
    search: str | None = Query(default=None),
    type_filter: str | None = Query(default=None, alias="type"),
    sort: str | None = Query(default=None),
    refresh: str | None = Query(default=None),
    admin_key: str | None = Header(default=None, alias=ADMIN_HEADER_NAME),
    db: Session = Depends(get_db),
    store: PokemonStore = Depends(get_store),
    seeder: Seeder = Depends(get_seeder),
    rate_limiter: RateLimiter = Depends(get_rate_limiter),
    settings: Settings = Depends(get_settings),
) -> PokemonPageResponse:
    try:
        query = parse_collection_query(
            page=page,
            page_size=page_size,
            search=search,
            type_filter=type_filter,
            sort=sort,
            refresh=refresh,
        )
        if query.refresh:
            require_admin_key(admin_key, settings.admin_api_key, route=request.url.path)
            enforce_refresh_rate_limit(
                rate_limiter,
                bucket=REFRESH_RATE_LIMIT_BUCKET,
                client_id=client_identity(request),
            )
        records, pagination = list_pokemons(db, store, seeder, query)
    except ServiceError as exc:
        db.rollback()
        raise to_http_exception(exc) from exc
    return PokemonPageResponse(
        data=[PokemonResponse(**record) for record in records],
        pagination=PaginationResponse(
            page=pagination.page,
            page_size=pagination.page_size,
            total=pagination.total,
            total_pages=pagination.total_pages,
            has_next_page=pagination.has_next_page,
            has_prev_page=pagination.has_prev_page,
        ),
    )


@router.post("", status_code=201, response_model=CreatePokemonResponse)
async def create_collection_item(
    request: Request,
    admin_key: str | None = Header(default=None, alias=ADMIN_HEADER_NAME),
    created_by: str | None = Header(default=None, alias=CREATOR_HEADER_NAME),
    store: PokemonStore = Depends(get_store),
    settings: Settings = Depends(get_settings),
) -> CreatePokemonResponse:
    try:
        require_admin_key(admin_key, settings.admin_api_key, route=request.url.path)
        raw_body = await request.body()
        try:
            payload = json.loads(raw_body)
        except (json.JSONDecodeError, UnicodeDecodeError) as exc:
            raise MalformedBodyError("Malformed JSON body") from exc
        pokemon = await run_in_threadpool(create_pokemon, store, payload, created_by=created_by)
        await run_in_threadpool(store.db.commit)
    except ServiceError as exc:
        await run_in_threadpool(store.db.rollback)
        raise to_http_exception(exc) from exc
    return CreatePokemonResponse(message="Pokemon created successfully", pokemon=PokemonResponse(**pokemon))


@router.delete("", response_model=MessageResponse)
def delete_collection_item(
    request: Request,
    pokemon_id: str | None = Query(default=None, alias="id"),
    admin_key: str | None = Header(default=None, alias=ADMIN_HEADER_NAME),
    db: Session = Depends(get_db),
    store: PokemonStore = Depends(get_store),
    settings: Settings = Depends(get_settings),
) -> MessageResponse:
    try:
        require_admin_key(admin_key, settings.admin_api_key, route=request.url.path)
        delete_pokemon(store, pokemon_id)
    except ServiceError as exc:
        db.rollback()
        raise to_http_exception(exc) from exc
    db.commit()
    return MessageResponse(message="Pokemon deleted successfully")


@router.get("/search", response_model=list[PokemonResponse])
def search_by_name(
    name: str | None = Query(default=None),
    store: PokemonStore = Depends(get_store),
    catalog: PokemonCatalog = Depends(get_catalog),
) -> list[PokemonResponse]:
    try:
        results = search_pokemons(store, catalog, name)
    except ServiceError as exc:
        raise to_http_exception(exc) from exc
    return [PokemonResponse(**item) for item in results]


@router.get("/{pokemon_id}", response_model=PokemonResponse)
def fetch_pokemon(
    pokemon_id: str,
    store: PokemonStore = Depends(get_store),
    catalog: PokemonCatalog = Depends(get_catalog),
) -> PokemonResponse:
    try:
        payload = get_pokemon(store, catalog, pokemon_id)
    except ServiceError as exc:
        if exc.status_code >= 500:
            logger.error("Failed to fetch Pokémon %s: %s", pokemon_id, exc)
        raise to_http_exception(exc) from exc
    return PokemonResponse(**payload)
