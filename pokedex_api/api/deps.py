from fastapi import Depends, HTTPException, Request
from sqlalchemy.orm import Session

from pokedex_api.database import get_db
from pokedex_api.services.connectors.base import PokemonCatalog
from pokedex_api.services.errors import ServiceError
from pokedex_api.services.rate_limit import RateLimiter
from pokedex_api.services.schema import SchemaCapabilities
from pokedex_api.services.seeding import Seeder
from pokedex_api.services.store import PokemonStore


def get_capabilities(request: Request) -> SchemaCapabilities:
    return request.app.state.schema_capabilities


def get_catalog(request: Request) -> PokemonCatalog:
    return request.app.state.catalog


def get_seeder(request: Request) -> Seeder:
    return request.app.state.seeder


def get_rate_limiter(request: Request) -> RateLimiter:
    return request.app.state.refresh_rate_limiter


def get_store(
    db: Session = Depends(get_db),
    capabilities: SchemaCapabilities = Depends(get_capabilities),
) -> PokemonStore:
    return PokemonStore(db, capabilities)


def client_identity(request: Request) -> str:
    forwarded = request.headers.get("x-forwarded-for", "")
    if forwarded.strip():
        return forwarded.split(",")[0].strip()
    real_ip = request.headers.get("x-real-ip", "").strip()
    if real_ip:
        return real_ip
    return request.client.host if request.client else "unknown"


def to_http_exception(exc: ServiceError) -> HTTPException:
    return HTTPException(status_code=exc.status_code, detail=str(exc), headers=exc.headers)
