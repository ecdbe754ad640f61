import json
from io import BytesIO
from urllib.error import HTTPError, URLError

import pytest

from pokedex_api.services.connectors import pokeapi
from pokedex_api.services.connectors.pokeapi import (
    PokeApiCatalog,
    extract_stats,
    normalize_pokemon_detail,
    resolve_image,
)
from pokedex_api.services.errors import UpstreamFailure, UpstreamNotFound

STAT_NAMES = ["hp", "attack", "defense", "special-attack", "special-defense", "speed"]


def _stats(values, *, named=True):
    return [
        {"base_stat": value, "stat": {"name": name}} if named else {"base_stat": value}
        for name, value in zip(STAT_NAMES, values)
    ]


def _detail(**overrides):
    payload = {
        "id": 25,
        "name": "pikachu",
        "height": 4,
        "weight": 60,
        "sprites": {
            "front_default": "https://sprites.test/front/25.png",
            "other": {
                "official-artwork": {"front_default": "https://sprites.test/artwork/25.png"},
                "home": {"front_default": "https://sprites.test/home/25.png"},
                "dream_world": {"front_default": None},
            },
        },
        "stats": _stats([35, 55, 40, 50, 50, 90]),
        "types": [{"slot": 1, "type": {"name": "electric"}}],
    }
    payload.update(overrides)
    return payload


class _Response(BytesIO):
    def __enter__(self):
        return self

    def __exit__(self, *exc):
        self.close()
        return False


def test_normalize_maps_fields():
    detail = normalize_pokemon_detail(_detail())
    assert detail.pokemon_id == 25
    assert detail.name == "pikachu"
    assert detail.image == "https://sprites.test/artwork/25.png"
    assert (detail.hp, detail.attack, detail.defense, detail.speed) == (35, 55, 40, 90)
    assert (detail.height, detail.weight) == (4, 60)
    assert detail.type == ["electric"]


def test_image_resolution_order():
    sprites = {
        "front_default": "front",
        "other": {"official-artwork": {}, "home": {"front_default": ""}, "dream_world": {"front_default": "dream"}},
    }
    assert resolve_image(1, sprites) == "dream"
    assert resolve_image(1, {"front_default": "front"}) == "front"
    assert resolve_image(7, None).endswith("/official-artwork/7.png")


def test_stats_match_by_name_regardless_of_order():
    stats = list(reversed(_stats([35, 55, 40, 50, 50, 90])))
    assert extract_stats(stats) == {"hp": 35, "attack": 55, "defense": 40, "speed": 90}


def test_stats_fall_back_to_positions_without_names():
    stats = _stats([35, 55, 40, 50, 50, 90], named=False)
    assert extract_stats(stats) == {"hp": 35, "attack": 55, "defense": 40, "speed": 90}
    assert extract_stats(stats[:3]) == {"hp": 35, "attack": 55, "defense": 40, "speed": 0}
    assert extract_stats(None) == {"hp": 0, "attack": 0, "defense": 0, "speed": 0}


def test_normalize_rejects_entries_without_types():
    with pytest.raises(UpstreamFailure):
        normalize_pokemon_detail(_detail(types=[]))


def test_fetch_roster_builds_entries(monkeypatch):
    body = {"results": [{"name": "bulbasaur", "url": "https://catalog.test/pokemon/1/"}, {"name": "x", "url": ""}]}
    requested = []

    def fake_urlopen(request, timeout):
        requested.append(request.full_url)
        return _Response(json.dumps(body).encode("utf-8"))

    monkeypatch.setattr(pokeapi, "urlopen", fake_urlopen)
    roster = PokeApiCatalog("https://catalog.test/", roster_size=151).fetch_roster()
    assert requested == ["https://catalog.test/pokemon?limit=151"]
    assert [entry.name for entry in roster] == ["bulbasaur"]


def test_fetch_detail_maps_http_404_to_not_found(monkeypatch):
    def fake_urlopen(request, timeout):
        raise HTTPError(request.full_url, 404, "Not Found", hdrs=None, fp=None)

    monkeypatch.setattr(pokeapi, "urlopen", fake_urlopen)
    with pytest.raises(UpstreamNotFound):
        PokeApiCatalog("https://catalog.test").fetch_detail_by_id(9999)


def test_fetch_detail_maps_other_failures(monkeypatch):
    def fake_urlopen(request, timeout):
        raise URLError("connection refused")

    monkeypatch.setattr(pokeapi, "urlopen", fake_urlopen)
    with pytest.raises(UpstreamFailure) as exc_info:
        PokeApiCatalog("https://catalog.test").fetch_detail_by_id(25)
    assert not isinstance(exc_info.value, UpstreamNotFound)


def test_fetch_detail_parses_payload(monkeypatch):
    monkeypatch.setattr(pokeapi, "urlopen", lambda request, timeout: _Response(json.dumps(_detail()).encode("utf-8")))
    detail = PokeApiCatalog("https://catalog.test").fetch_detail_by_name("Pikachu")
    assert detail.pokemon_id == 25
    assert detail.speed == 90
