import argparse

from pokedex_api.config import get_settings
from pokedex_api.database import SessionLocal, engine
from pokedex_api.logging_setup import configure_logging
from pokedex_api.services.connectors.pokeapi import PokeApiCatalog
from pokedex_api.services.schema import detect_schema_capabilities, ensure_runtime_schema
from pokedex_api.services.seeding import Seeder
from pokedex_api.services.store import PokemonStore


def parse_args(argv: list[str] | None = None) -> argparse.Namespace:
    parser = argparse.ArgumentParser(description="Seed the Pokédex store from PokeAPI")
    parser.add_argument("--refresh", action="store_true", help="Delete every stored Pokémon before seeding")
    parser.add_argument("--if-empty", action="store_true", help="Skip seeding when the store already has rows")
    return parser.parse_args(argv)


def main(argv: list[str] | None = None) -> int:
    settings = get_settings()
    configure_logging(settings.log_level)
    args = parse_args(argv)

    ensure_runtime_schema(engine)
    capabilities = detect_schema_capabilities(engine)
    catalog = PokeApiCatalog(
        settings.pokeapi_base_url,
        roster_size=settings.roster_size,
        timeout=settings.pokeapi_timeout_seconds,
    )
    seeder = Seeder(
        catalog,
        fetch_batch_size=settings.seed_fetch_batch_size,
        insert_batch_size=settings.seed_insert_batch_size,
        max_workers=settings.seed_max_workers,
    )

    with SessionLocal() as db:
        existing = PokemonStore(db, capabilities).count()
        if args.if_empty and existing > 0 and not args.refresh:
            print(f"store already holds {existing} pokemon; nothing to do")
            return 0
        report = seeder.seed(db, capabilities, force_refresh=args.refresh)

    if report is None:
        return 1
    print(
        f"requested={report.requested} fetched={report.fetched} "
        f"inserted={report.inserted} failed_batches={report.failed_batches}"
    )
    return 0 if report.inserted > 0 else 1


if __name__ == "__main__":
    raise SystemExit(main())
