from sqlalchemy import Boolean, Index, Integer, String, Text, UniqueConstraint
from sqlalchemy.orm import Mapped, mapped_column

from pokedex_api.constants import ORIGINAL_MAX_POKEMON_ID
from pokedex_api.models.base import Base, CreatedAtMixin

# Columns an older deployment of the table may lack. Mapped as deferred so plain
# selects never reference them; the store undefers them when the schema has them.
OPTIONAL_METADATA_COLUMNS = ("is_custom", "created_by")


class Pokemon(Base, CreatedAtMixin):
    __tablename__ = "pokemons"
    __table_args__ = (
        UniqueConstraint("name", name="uq_pokemons_name"),
        Index("ix_pokemons_type_primary", "type_primary"),
        Index("ix_pokemons_type_secondary", "type_secondary"),
    )

    pokemon_id: Mapped[int] = mapped_column(Integer, primary_key=True, autoincrement=False)
    name: Mapped[str] = mapped_column(String(40), nullable=False)
    image: Mapped[str | None] = mapped_column(Text, nullable=True)
    hp: Mapped[int] = mapped_column(Integer, nullable=False, default=0)
    attack: Mapped[int] = mapped_column(Integer, nullable=False, default=0)
    defense: Mapped[int] = mapped_column(Integer, nullable=False, default=0)
    speed: Mapped[int] = mapped_column(Integer, nullable=False, default=0)
    height: Mapped[int] = mapped_column(Integer, nullable=False, default=0)
    weight: Mapped[int] = mapped_column(Integer, nullable=False, default=0)
    type_primary: Mapped[str] = mapped_column(String(20), nullable=False)
    type_secondary: Mapped[str | None] = mapped_column(String(20), nullable=True)
    is_custom: Mapped[bool | None] = mapped_column(Boolean, nullable=True, deferred=True)
    created_by: Mapped[str | None] = mapped_column(String(120), nullable=True, deferred=True)

    @property
    def types(self) -> list[str]:
        return [value for value in (self.type_primary, self.type_secondary) if value]

    def is_custom_record(self, *, metadata_loaded: bool) -> bool:
        if metadata_loaded and self.is_custom is not None:
            return bool(self.is_custom)
        return self.pokemon_id > ORIGINAL_MAX_POKEMON_ID


class PokemonType(Base):
    __tablename__ = "pokemon_types"

    name: Mapped[str] = mapped_column(String(20), primary_key=True)
