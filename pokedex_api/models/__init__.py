from pokedex_api.models.core import Pokemon, PokemonType

__all__ = [
    "Pokemon",
    "PokemonType",
]
