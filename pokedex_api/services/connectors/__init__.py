"""External catalog connectors."""

from pokedex_api.services.connectors.base import NormalizedPokemon, PokemonCatalog, RosterEntry
from pokedex_api.services.connectors.pokeapi import PokeApiCatalog

__all__ = ["NormalizedPokemon", "PokeApiCatalog", "PokemonCatalog", "RosterEntry"]
