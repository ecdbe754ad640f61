from datetime import datetime

from pydantic import BaseModel, ConfigDict, Field


class PokemonResponse(BaseModel):
    model_config = ConfigDict(populate_by_name=True)

    pokemon_id: int = Field(alias="pokemonId")
    name: str
    image: str | None = None
    hp: int = 0
    attack: int = 0
    defense: int = 0
    speed: int = 0
    height: int = 0
    weight: int = 0
    type: list[str]
    is_custom: bool = False
    created_by: str | None = None


class PaginationResponse(BaseModel):
    model_config = ConfigDict(populate_by_name=True)

    page: int
    page_size: int = Field(alias="pageSize")
    total: int
    total_pages: int = Field(alias="totalPages")
    has_next_page: bool = Field(alias="hasNextPage")
    has_prev_page: bool = Field(alias="hasPrevPage")


class PokemonPageResponse(BaseModel):
    data: list[PokemonResponse]
    pagination: PaginationResponse


class CreatePokemonResponse(BaseModel):
    message: str
    pokemon: PokemonResponse


class MessageResponse(BaseModel):
    message: str


class HealthResponse(BaseModel):
    model_config = ConfigDict(populate_by_name=True)

    status: str
    service: str
    database: str
    checked_at: datetime = Field(alias="checkedAt")
    latency_ms: int = Field(alias="latencyMs")
