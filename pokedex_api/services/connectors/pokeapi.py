from __future__ import annotations

import json
import logging
from typing import Any
from urllib.error import HTTPError, URLError
from urllib.parse import quote, urlencode
from urllib.request import Request, urlopen

from pokedex_api.constants import OFFICIAL_ARTWORK_FALLBACK_URL, POSITIONAL_STAT_INDEXES
from pokedex_api.services.connectors.base import NormalizedPokemon, PokemonCatalog, RosterEntry
from pokedex_api.services.errors import UpstreamFailure, UpstreamNotFound

logger = logging.getLogger(__name__)


def _as_int(value: Any) -> int:
    try:
        return int(value or 0)
    except (TypeError, ValueError):
        return 0


def resolve_image(pokemon_id: int, sprites: dict[str, Any] | None) -> str:
    sprites = sprites or {}
    other = sprites.get("other") or {}
    candidates = [
        (other.get("official-artwork") or {}).get("front_default"),
        (other.get("home") or {}).get("front_default"),
        (other.get("dream_world") or {}).get("front_default"),
        sprites.get("front_default"),
    ]
    for candidate in candidates:
        if candidate:
            return str(candidate)
    return OFFICIAL_ARTWORK_FALLBACK_URL.format(pokemon_id=pokemon_id)


def extract_stats(stats: list[dict[str, Any]] | None) -> dict[str, int]:
    """Map the upstream stat array onto hp/attack/defense/speed.

    Entries are matched by ``stat.name`` when every entry carries one. Otherwise
    the fixed upstream positions are used.
    """
    stats = stats or []
    named: dict[str, int] = {}
    for entry in stats:
        stat_name = ((entry or {}).get("stat") or {}).get("name")
        if not stat_name:
            named = {}
            break
        named[str(stat_name)] = _as_int(entry.get("base_stat"))
    if named:
        return {field_name: named.get(field_name, 0) for field_name in POSITIONAL_STAT_INDEXES}

    extracted: dict[str, int] = {}
    for field_name, index in POSITIONAL_STAT_INDEXES.items():
        entry = stats[index] if index < len(stats) else None
        extracted[field_name] = _as_int((entry or {}).get("base_stat"))
    return extracted


def extract_types(types: list[dict[str, Any]] | None) -> list[str]:
    names: list[str] = []
    for entry in types or []:
        type_name = ((entry or {}).get("type") or {}).get("name")
        if type_name:
            names.append(str(type_name))
    return names


def normalize_pokemon_detail(payload: dict[str, Any], *, name: str | None = None) -> NormalizedPokemon:
    pokemon_id = _as_int(payload.get("id"))
    if pokemon_id < 1:
        raise UpstreamFailure("Catalog entry is missing a numeric id")
    types = extract_types(payload.get("types"))
    if not types:
        raise UpstreamFailure(f"Catalog entry {pokemon_id} has no types")
    return NormalizedPokemon(
        pokemon_id=pokemon_id,
        name=str(name or payload.get("name") or "unknown"),
        image=resolve_image(pokemon_id, payload.get("sprites")),
        height=_as_int(payload.get("height")),
        weight=_as_int(payload.get("weight")),
        type=types,
        **extract_stats(payload.get("stats")),
    )


class PokeApiCatalog(PokemonCatalog):
    name = "pokeapi"

    def __init__(self, base_url: str, *, roster_size: int = 151, timeout: int = 10) -> None:
        self.base_url = base_url.rstrip("/")
        self.roster_size = roster_size
        self.timeout = timeout

    def _fetch_json(self, url: str) -> Any:
        request = Request(url, headers={"User-Agent": "pokedex-api/0.1", "Accept": "application/json"})
        try:
            with urlopen(request, timeout=self.timeout) as response:  # noqa: S310
                raw = response.read().decode("utf-8", errors="ignore")
        except HTTPError as exc:
            if exc.code == 404:
                raise UpstreamNotFound(f"Catalog entry not found: {url}") from exc
            raise UpstreamFailure(f"Catalog returned HTTP {exc.code} for {url}") from exc
        except (URLError, TimeoutError, OSError) as exc:
            raise UpstreamFailure(f"Catalog request failed for {url}: {exc}") from exc
        try:
            return json.loads(raw)
        except json.JSONDecodeError as exc:
            raise UpstreamFailure(f"Catalog returned invalid JSON for {url}") from exc

    def fetch_roster(self) -> list[RosterEntry]:
        params = urlencode({"limit": str(self.roster_size)})
        payload = self._fetch_json(f"{self.base_url}/pokemon?{params}")
        results = payload.get("results", []) if isinstance(payload, dict) else []
        if not isinstance(results, list):
            raise UpstreamFailure("Catalog roster has an unexpected shape")
        roster: list[RosterEntry] = []
        for item in results:
            url = str((item or {}).get("url") or "").strip()
            if not url:
                continue
            roster.append(RosterEntry(name=str(item.get("name") or "unknown"), url=url))
        logger.info("Fetched catalog roster with %d entries", len(roster))
        return roster

    def fetch_detail(self, url: str) -> NormalizedPokemon:
        payload = self._fetch_json(url)
        if not isinstance(payload, dict):
            raise UpstreamFailure(f"Catalog detail has an unexpected shape: {url}")
        return normalize_pokemon_detail(payload)

    def fetch_detail_by_id(self, pokemon_id: int) -> NormalizedPokemon:
        return self.fetch_detail(f"{self.base_url}/pokemon/{pokemon_id}")

    def fetch_detail_by_name(self, name: str) -> NormalizedPokemon:
        return self.fetch_detail(f"{self.base_url}/pokemon/{quote(name.strip().lower())}")

    def fetch_type_names(self) -> list[str]:
        payload = self._fetch_json(f"{self.base_url}/type")
        results = payload.get("results", []) if isinstance(payload, dict) else []
        return [str(item["name"]) for item in results if isinstance(item, dict) and item.get("name")]
