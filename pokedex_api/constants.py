POKEMON_TYPES = (
    "normal",
    "fighting",
    "flying",
    "poison",
    "ground",
    "rock",
    "bug",
    "ghost",
    "steel",
    "fire",
    "water",
    "grass",
    "electric",
    "psychic",
    "ice",
    "dragon",
    "dark",
    "fairy",
)
POKEMON_TYPE_SET = frozenset(POKEMON_TYPES)

# Ids at or below this value come from the seeded catalog and are never deletable.
ORIGINAL_MAX_POKEMON_ID = 151

CUSTOM_ID_MIN = 100000
CUSTOM_ID_MAX = 999999
CUSTOM_ID_ALLOCATION_ATTEMPTS = 7

NAME_MAX_LENGTH = 40
NAME_PATTERN = r"^[a-zA-Z\s-]+$"
IMAGE_URL_PATTERN = r"^https?://\S+$"
IMAGE_DATA_URI_PATTERN = r"^data:image/(png|svg\+xml);base64,[A-Za-z0-9+/]+={0,2}$"

BATTLE_STAT_FIELDS = ("hp", "attack", "defense", "speed")
BODY_STAT_FIELDS = ("height", "weight")
STAT_BOUNDS = {
    "hp": (0, 255),
    "attack": (0, 255),
    "defense": (0, 255),
    "speed": (0, 255),
    "height": (0, 5000),
    "weight": (0, 5000),
}
MAX_TYPES_PER_POKEMON = 2

DEFAULT_PAGE = 1
DEFAULT_PAGE_SIZE = 18
MAX_PAGE_SIZE = 100
SEARCH_MAX_LENGTH = 60
SEARCH_BY_NAME_LIMIT = 50

# Upstream stat array layout: hp, attack, defense, special-attack, special-defense, speed.
POSITIONAL_STAT_INDEXES = {"hp": 0, "attack": 1, "defense": 2, "speed": 5}

OFFICIAL_ARTWORK_FALLBACK_URL = (
    "https://raw.githubusercontent.com/PokeAPI/sprites/master/sprites/pokemon/other/official-artwork/{pokemon_id}.png"
)

ADMIN_HEADER_NAME = "x-admin-key"
CREATOR_HEADER_NAME = "x-user-id"
REFRESH_RATE_LIMIT_BUCKET = "pokemons-refresh"
