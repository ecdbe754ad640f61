"""Input validation for Pokémon payloads and collection query parameters.

Creation payloads are strict: the first failing rule raises ``ValidationError``
with a message meant for the caller. Query parameters on read paths are
permissive and fall back to defaults, except the type filter which must be a
known type.
"""

import re
from dataclasses import dataclass, field
from typing import Any

from pokedex_api.constants import (
    IMAGE_DATA_URI_PATTERN,
    IMAGE_URL_PATTERN,
    MAX_TYPES_PER_POKEMON,
    NAME_MAX_LENGTH,
    NAME_PATTERN,
    POKEMON_TYPE_SET,
    SEARCH_MAX_LENGTH,
    STAT_BOUNDS,
)
from pokedex_api.enums import SortOption
from pokedex_api.services.errors import ValidationError

_NAME_RE = re.compile(NAME_PATTERN)
_IMAGE_URL_RE = re.compile(IMAGE_URL_PATTERN)
_IMAGE_DATA_URI_RE = re.compile(IMAGE_DATA_URI_PATTERN)
_INTEGER_RE = re.compile(r"[+-]?[0-9]+")


@dataclass(frozen=True)
class ValidatedPokemonInput:
    name: str
    image: str | None = None
    hp: int = 0
    attack: int = 0
    defense: int = 0
    speed: int = 0
    height: int = 0
    weight: int = 0
    type: list[str] = field(default_factory=list)

    def as_payload(self) -> dict[str, Any]:
        return {
            "name": self.name,
            "image": self.image,
            "hp": self.hp,
            "attack": self.attack,
            "defense": self.defense,
            "speed": self.speed,
            "height": self.height,
            "weight": self.weight,
            "type": list(self.type),
        }


def require(condition: bool, message: str) -> None:
    if not condition:
        raise ValidationError(message)


def is_integer_text(raw: str) -> bool:
    """ASCII digits with an optional sign; rejects ``1_0`` and non-ASCII numerals."""
    return _INTEGER_RE.fullmatch(raw.strip()) is not None


def _is_blank(value: Any) -> bool:
    return value is None or (isinstance(value, str) and not value.strip())


def validate_name(raw: Any) -> str:
    require(isinstance(raw, str), "name is required")
    name = raw.strip().lower()
    require(bool(name), "name is required")
    require(len(name) <= NAME_MAX_LENGTH, f"name must be at most {NAME_MAX_LENGTH} characters")
    require(bool(_NAME_RE.match(name)), "name may only contain letters, spaces and hyphens")
    return name


def validate_image(raw: Any) -> str | None:
    if _is_blank(raw):
        return None
    require(isinstance(raw, str), "image must be an http(s) URL or a base64 PNG/SVG data URI")
    image = raw.strip()
    if _IMAGE_URL_RE.match(image) or _IMAGE_DATA_URI_RE.match(image):
        return image
    raise ValidationError("image must be an http(s) URL or a base64 PNG/SVG data URI")


def validate_stat(field_name: str, raw: Any) -> int:
    if _is_blank(raw):
        return 0
    if isinstance(raw, bool):
        raise ValidationError(f"{field_name} must be an integer")
    if isinstance(raw, int):
        value = raw
    elif isinstance(raw, float) and raw.is_integer():
        value = int(raw)
    elif isinstance(raw, str) and is_integer_text(raw):
        value = int(raw.strip())
    else:
        raise ValidationError(f"{field_name} must be an integer")
    low, high = STAT_BOUNDS[field_name]
    require(low <= value <= high, f"{field_name} must be between {low} and {high}.")
    return value


def validate_types(raw: Any) -> list[str]:
    values = raw if isinstance(raw, (list, tuple)) else [raw]
    types: list[str] = []
    for value in values:
        if value is None:
            continue
        normalized = str(value).strip().lower()
        if normalized and normalized not in types:
            types.append(normalized)
    require(
        1 <= len(types) <= MAX_TYPES_PER_POKEMON,
        f"type must contain between 1 and {MAX_TYPES_PER_POKEMON} values",
    )
    for value in types:
        require(value in POKEMON_TYPE_SET, f"Invalid type: {value}")
    return types


def validate_pokemon_input(payload: Any) -> ValidatedPokemonInput:
    require(isinstance(payload, dict), "Payload must be a JSON object")
    name = validate_name(payload.get("name"))
    image = validate_image(payload.get("image"))
    stats = {field_name: validate_stat(field_name, payload.get(field_name)) for field_name in STAT_BOUNDS}
    types = validate_types(payload.get("type"))
    return ValidatedPokemonInput(name=name, image=image, type=types, **stats)


def parse_positive_int(raw: str | None, default: int, *, maximum: int | None = None) -> int:
    if raw is None or not is_integer_text(raw):
        return default
    value = int(raw.strip())
    if value < 1:
        return default
    if maximum is not None:
        value = min(value, maximum)
    return value


def normalize_search(raw: str | None) -> str:
    if not raw:
        return ""
    return raw.strip()[:SEARCH_MAX_LENGTH]


def normalize_type_filter(raw: str | None) -> str | None:
    if raw is None:
        return None
    value = raw.strip().lower()
    if value in {"", "all"}:
        return None
    require(value in POKEMON_TYPE_SET, f"Invalid type filter: {raw}")
    return value


def resolve_sort(raw: str | None) -> SortOption:
    try:
        return SortOption(raw)
    except ValueError:
        return SortOption.pokemon_id_asc

