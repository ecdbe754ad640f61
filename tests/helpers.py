import threading

from sqlalchemy import insert

from pokedex_api.models.core import Pokemon
from pokedex_api.services.connectors.base import NormalizedPokemon, PokemonCatalog, RosterEntry
from pokedex_api.services.errors import UpstreamFailure, UpstreamNotFound

ADMIN_KEY = "test-admin-key"
BASE_URL = "https://catalog.test/api/v2"

ROSTER_NAMES = [
    "bulbasaur",
    "ivysaur",
    "venusaur",
    "charmander",
    "charmeleon",
    "charizard",
    "squirtle",
    "wartortle",
    "blastoise",
    "caterpie",
    "metapod",
    "butterfree",
]


def types_for(pokemon_id: int) -> list[str]:
    if pokemon_id % 3 == 0:
        return ["steel"]
    if pokemon_id % 3 == 1:
        return ["grass", "poison"]
    return ["fire"]


def detail_url(pokemon_id: int) -> str:
    return f"{BASE_URL}/pokemon/{pokemon_id}/"


def build_detail(pokemon_id: int, name: str) -> NormalizedPokemon:
    return NormalizedPokemon(
        pokemon_id=pokemon_id,
        name=name,
        image=f"https://img.test/{pokemon_id}.png",
        hp=40 + pokemon_id,
        attack=50 + pokemon_id,
        defense=30 + pokemon_id,
        speed=60 + pokemon_id,
        height=7,
        weight=69,
        type=types_for(pokemon_id),
    )


class FakeCatalog(PokemonCatalog):
    name = "fake"

    def __init__(self, details: dict[int, NormalizedPokemon]) -> None:
        self.details = details
        self.failing_ids: set[int] = set()
        self.roster_calls = 0
        self.detail_calls = 0
        self.type_names = ["normal", "fire", "steel", "unknown", "shadow", "grass"]
        self._lock = threading.Lock()

    @classmethod
    def with_roster(cls, size: int) -> "FakeCatalog":
        details = {}
        for index in range(size):
            base = ROSTER_NAMES[index % len(ROSTER_NAMES)]
            name = base if index < len(ROSTER_NAMES) else f"{base}-{index + 1}"
            details[index + 1] = build_detail(index + 1, name)
        return cls(details)

    def fetch_roster(self) -> list[RosterEntry]:
        self.roster_calls += 1
        return [RosterEntry(name=detail.name, url=detail_url(pokemon_id)) for pokemon_id, detail in sorted(self.details.items())]

    def fetch_detail(self, url: str) -> NormalizedPokemon:
        pokemon_id = int(url.rstrip("/").rsplit("/", 1)[-1])
        return self.fetch_detail_by_id(pokemon_id)

    def fetch_detail_by_id(self, pokemon_id: int) -> NormalizedPokemon:
        with self._lock:
            self.detail_calls += 1
        if pokemon_id in self.failing_ids:
            raise UpstreamFailure(f"catalog unavailable for {pokemon_id}")
        detail = self.details.get(pokemon_id)
        if detail is None:
            raise UpstreamNotFound(f"no pokemon {pokemon_id}")
        return NormalizedPokemon(**{**detail.__dict__, "type": list(detail.type)})

    def fetch_detail_by_name(self, name: str) -> NormalizedPokemon:
        for pokemon_id, detail in self.details.items():
            if detail.name == name.strip().lower():
                return self.fetch_detail_by_id(pokemon_id)
        raise UpstreamNotFound(f"no pokemon named {name}")

    def fetch_type_names(self) -> list[str]:
        return list(self.type_names)


def insert_pokemon(db, pokemon_id: int, name: str, *, types=("normal",), is_custom=None, **stats) -> None:
    values = {
        "pokemon_id": pokemon_id,
        "name": name,
        "image": None,
        "type_primary": types[0],
        "type_secondary": types[1] if len(types) > 1 else None,
        "is_custom": is_custom,
    }
    values.update(stats)
    db.execute(insert(Pokemon).values(**values))
    db.commit()


def custom_payload(name: str = "sparky", **overrides) -> dict:
    payload = {
        "name": name,
        "image": "https://img.test/sparky.png",
        "hp": 45,
        "attack": 60,
        "defense": 40,
        "speed": 90,
        "height": 4,
        "weight": 60,
        "type": ["electric"],
    }
    payload.update(overrides)
    return payload
