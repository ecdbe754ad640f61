"""Populate the store from the external catalog.

Detail fetches inside a batch run concurrently on a thread pool; batches run
one after another so at most ``fetch_batch_size`` upstream calls are in flight.
Individual fetch failures and failed insert batches are logged and skipped, so
a seed routinely ends with fewer rows than the roster lists.
"""

from __future__ import annotations

import logging
import threading
from concurrent.futures import ThreadPoolExecutor
from dataclasses import dataclass

from sqlalchemy.exc import SQLAlchemyError
from sqlalchemy.orm import Session

from pokedex_api.services.connectors.base import NormalizedPokemon, PokemonCatalog, RosterEntry
from pokedex_api.services.schema import SchemaCapabilities
from pokedex_api.services.store import PokemonStore

logger = logging.getLogger(__name__)


@dataclass
class SeedReport:
    requested: int
    fetched: int
    inserted: int
    failed_batches: int
    deleted: int = 0


def _chunks(items: list, size: int) -> list[list]:
    return [items[index : index + size] for index in range(0, len(items), size)]


class Seeder:
    def __init__(
        self,
        catalog: PokemonCatalog,
        *,
        fetch_batch_size: int = 25,
        insert_batch_size: int = 50,
        max_workers: int = 8,
    ) -> None:
        self.catalog = catalog
        self.fetch_batch_size = fetch_batch_size
        self.insert_batch_size = insert_batch_size
        self.max_workers = max_workers
        self._lock = threading.Lock()

    @property
    def in_progress(self) -> bool:
        return self._lock.locked()

    def seed(self, db: Session, capabilities: SchemaCapabilities, *, force_refresh: bool = False) -> SeedReport | None:
        """Run one seed, or wait for the one already running.

        Returns ``None`` when this call joined a seed started by another caller.
        """
        if not self._lock.acquire(blocking=False):
            logger.info("Seed already in progress; waiting for it to finish")
            with self._lock:
                return None
        try:
            return self._run(db, capabilities, force_refresh=force_refresh)
        finally:
            self._lock.release()

    def _run(self, db: Session, capabilities: SchemaCapabilities, *, force_refresh: bool) -> SeedReport:
        store = PokemonStore(db, capabilities)
        deleted = 0
        if force_refresh:
            deleted = store.delete_all()
            db.commit()
            logger.info("Refresh requested; deleted %d existing Pokémon", deleted)

        roster = self.catalog.fetch_roster()
        fetched = self._fetch_details(roster)
        inserted, failed_batches = self._insert(db, store, fetched, capabilities)

        report = SeedReport(
            requested=len(roster),
            fetched=len(fetched),
            inserted=inserted,
            failed_batches=failed_batches,
            deleted=deleted,
        )
        logger.info(
            "Seed finished: %d requested, %d fetched, %d inserted, %d failed batches",
            report.requested,
            report.fetched,
            report.inserted,
            report.failed_batches,
        )
        return report

    def _fetch_one(self, entry: RosterEntry) -> NormalizedPokemon | None:
        try:
            detail = self.catalog.fetch_detail(entry.url)
        except Exception as exc:
            logger.warning("Skipping Pokémon %s: %s", entry.name, exc)
            return None
        detail.name = entry.name
        return detail

    def _fetch_details(self, roster: list[RosterEntry]) -> list[NormalizedPokemon]:
        batches = _chunks(roster, self.fetch_batch_size)
        results: list[NormalizedPokemon] = []
        workers = max(1, min(self.max_workers, self.fetch_batch_size))
        with ThreadPoolExecutor(max_workers=workers) as executor:
            for number, batch in enumerate(batches, start=1):
                logger.info("Fetching Pokémon batch %d/%d", number, len(batches))
                for detail in executor.map(self._fetch_one, batch):
                    if detail is not None:
                        results.append(detail)
        return results

    def _insert(
        self,
        db: Session,
        store: PokemonStore,
        details: list[NormalizedPokemon],
        capabilities: SchemaCapabilities,
    ) -> tuple[int, int]:
        rows = [detail.as_row() for detail in details]
        if capabilities.custom_metadata:
            for row in rows:
                row["is_custom"] = False
        batches = _chunks(rows, self.insert_batch_size)
        inserted = 0
        failed_batches = 0
        for number, batch in enumerate(batches, start=1):
            logger.info("Upserting Pokémon batch %d/%d", number, len(batches))
            try:
                inserted += store.upsert_many(batch)
                db.commit()
            except SQLAlchemyError as exc:
                db.rollback()
                failed_batches += 1
                logger.error("Upsert failed for batch %d/%d: %s", number, len(batches), exc)
        return inserted, failed_batches
