import threading

from sqlalchemy import func, select

from pokedex_api.models.core import Pokemon
from pokedex_api.services.connectors.base import RosterEntry
from pokedex_api.services import seeding
from pokedex_api.services.seeding import Seeder
from pokedex_api.services.store import PokemonStore
from tests.helpers import FakeCatalog, insert_pokemon


def _count(db) -> int:
    return int(db.scalar(select(func.count()).select_from(Pokemon)))


def test_seed_populates_store_in_batches(db_session, capabilities):
    catalog = FakeCatalog.with_roster(30)
    seeder = Seeder(catalog, fetch_batch_size=7, insert_batch_size=4)

    report = seeder.seed(db_session, capabilities)

    assert report.requested == 30
    assert report.fetched == 30
    assert report.inserted == 30
    assert report.failed_batches == 0
    assert _count(db_session) == 30
    bulbasaur = PokemonStore(db_session, capabilities).get(1)
    assert bulbasaur.name == "bulbasaur"
    assert bulbasaur.types == ["grass", "poison"]
    assert bulbasaur.is_custom is False


def test_seed_is_idempotent(db_session, capabilities):
    seeder = Seeder(FakeCatalog.with_roster(12))
    seeder.seed(db_session, capabilities)
    seeder.seed(db_session, capabilities)
    assert _count(db_session) == 12


def test_failed_detail_fetches_are_skipped(db_session, capabilities):
    catalog = FakeCatalog.with_roster(10)
    catalog.failing_ids = {2, 5}
    report = Seeder(catalog, fetch_batch_size=3).seed(db_session, capabilities)

    assert report.fetched == 8
    assert report.inserted == 8
    ids = set(db_session.scalars(select(Pokemon.pokemon_id)))
    assert 2 not in ids and 5 not in ids


def test_failing_insert_batch_does_not_abort_the_rest(db_session, capabilities):
    insert_pokemon(db_session, 500000, "charmander", types=("fire",), is_custom=True)
    catalog = FakeCatalog.with_roster(12)
    report = Seeder(catalog, insert_batch_size=3).seed(db_session, capabilities)

    # Batch holding id 4 ("charmander") collides with the custom record's name.
    assert report.failed_batches == 1
    assert report.inserted == 9
    assert _count(db_session) == 10


def test_force_refresh_replaces_existing_rows(db_session, capabilities):
    insert_pokemon(db_session, 123456, "sparky", types=("electric",), is_custom=True)
    report = Seeder(FakeCatalog.with_roster(5)).seed(db_session, capabilities, force_refresh=True)

    assert report.deleted == 1
    assert _count(db_session) == 5
    assert PokemonStore(db_session, capabilities).get(123456) is None


def test_seed_uses_roster_name(db_session, capabilities):
    class RenamingCatalog(FakeCatalog):
        def fetch_roster(self):
            return [RosterEntry(name="roster-name", url=entry.url) for entry in super().fetch_roster()[:1]]

    Seeder(RenamingCatalog.with_roster(1)).seed(db_session, capabilities)
    assert db_session.scalar(select(Pokemon.name)) == "roster-name"


def test_concurrent_callers_share_one_seed(db_session, capabilities, monkeypatch):
    release = threading.Event()
    started = threading.Event()
    waiting = threading.Event()

    class _LoggerSpy:
        def info(self, message, *args):
            if message.startswith("Seed already in progress"):
                waiting.set()

        def __getattr__(self, name):
            return lambda *args, **kwargs: None

    monkeypatch.setattr(seeding, "logger", _LoggerSpy())

    class SlowCatalog(FakeCatalog):
        def fetch_roster(self):
            started.set()
            release.wait(timeout=5)
            return super().fetch_roster()

    catalog = SlowCatalog.with_roster(3)
    seeder = Seeder(catalog)
    results = {}

    def first_caller():
        results["first"] = seeder.seed(db_session, capabilities)

    worker = threading.Thread(target=first_caller)
    worker.start()
    assert started.wait(timeout=5)
    assert seeder.in_progress

    def second_caller():
        results["second"] = seeder.seed(db_session, capabilities)

    joiner = threading.Thread(target=second_caller)
    joiner.start()
    assert waiting.wait(timeout=5)
    release.set()
    worker.join(timeout=5)
    joiner.join(timeout=5)

    assert results["first"].inserted == 3
    assert results["second"] is None
    assert catalog.roster_calls == 1
