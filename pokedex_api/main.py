from contextlib import asynccontextmanager
from datetime import UTC, datetime

from fastapi import FastAPI

from pokedex_api.api.routes import health, pokemons, types
from pokedex_api.config import get_settings
from pokedex_api.database import engine
from pokedex_api.logging_setup import configure_logging
from pokedex_api.services.connectors.base import PokemonCatalog
from pokedex_api.services.connectors.pokeapi import PokeApiCatalog
from pokedex_api.services.rate_limit import FixedWindowRateLimiter, RateLimiter
from pokedex_api.services.schema import detect_schema_capabilities, ensure_runtime_schema
from pokedex_api.services.seeding import Seeder


@asynccontextmanager
async def lifespan(app: FastAPI):
    ensure_runtime_schema(engine)
    app.state.schema_capabilities = detect_schema_capabilities(engine)
    yield


def create_app(
    *,
    catalog: PokemonCatalog | None = None,
    refresh_rate_limiter: RateLimiter | None = None,
) -> FastAPI:
    settings = get_settings()
    configure_logging(settings.log_level)

    app = FastAPI(
        title="Pokédex API",
        version="0.1.0",
        description="Paginated Pokémon catalog backed by a relational store and lazily seeded from PokeAPI.",
        lifespan=lifespan,
    )

    catalog = catalog or PokeApiCatalog(
        settings.pokeapi_base_url,
        roster_size=settings.roster_size,
        timeout=settings.pokeapi_timeout_seconds,
    )
    app.state.catalog = catalog
    app.state.seeder = Seeder(
        catalog,
        fetch_batch_size=settings.seed_fetch_batch_size,
        insert_batch_size=settings.seed_insert_batch_size,
        max_workers=settings.seed_max_workers,
    )
    app.state.refresh_rate_limiter = refresh_rate_limiter or FixedWindowRateLimiter(
        settings.refresh_rate_limit_max,
        settings.refresh_rate_limit_window_seconds,
    )

    app.include_router(health.router)
    app.include_router(pokemons.router)
    app.include_router(types.router)

    @app.get("/meta")
    def meta() -> dict:
        return {
            "service": settings.service_name,
            "version": "0.1.0",
            "catalog": catalog.name,
            "timestamp": datetime.now(UTC).isoformat(),
        }

    return app


app = create_app()
