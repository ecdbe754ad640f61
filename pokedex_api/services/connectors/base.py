from abc import ABC, abstractmethod
from dataclasses import dataclass, field


@dataclass(frozen=True)
class RosterEntry:
    name: str
    url: str


@dataclass
class NormalizedPokemon:
    pokemon_id: int
    name: str
    image: str
    hp: int = 0
    attack: int = 0
    defense: int = 0
    speed: int = 0
    height: int = 0
    weight: int = 0
    type: list[str] = field(default_factory=list)

    def as_row(self) -> dict:
        return {
            "pokemon_id": self.pokemon_id,
            "name": self.name,
            "image": self.image,
            "hp": self.hp,
            "attack": self.attack,
            "defense": self.defense,
            "speed": self.speed,
            "height": self.height,
            "weight": self.weight,
            "type_primary": self.type[0],
            "type_secondary": self.type[1] if len(self.type) > 1 else None,
        }


class PokemonCatalog(ABC):
    """Read-only access to an external Pokémon catalog."""

    name: str

    @abstractmethod
    def fetch_roster(self) -> list[RosterEntry]:
        """Return the fixed catalog page of ``{name, url}`` entries."""

    @abstractmethod
    def fetch_detail(self, url: str) -> NormalizedPokemon:
        """Fetch one catalog entry and normalize it into the local record shape."""

    @abstractmethod
    def fetch_detail_by_id(self, pokemon_id: int) -> NormalizedPokemon:
        pass

    @abstractmethod
    def fetch_detail_by_name(self, name: str) -> NormalizedPokemon:
        pass

    @abstractmethod
    def fetch_type_names(self) -> list[str]:
        pass
