from enum import Enum


class SortOption(str, Enum):
    pokemon_id_asc = "pokemonId_asc"
    pokemon_id_desc = "pokemonId_desc"
    name_asc = "name_asc"
    name_desc = "name_desc"
    hp_asc = "hp_asc"
    hp_desc = "hp_desc"
    attack_asc = "attack_asc"
    attack_desc = "attack_desc"
    defense_asc = "defense_asc"
    defense_desc = "defense_desc"
    speed_asc = "speed_asc"
    speed_desc = "speed_desc"


class HealthStatus(str, Enum):
    ok = "ok"
    degraded = "degraded"


class DatabaseHealth(str, Enum):
    healthy = "healthy"
    unhealthy = "unhealthy"
