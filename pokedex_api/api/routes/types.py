from fastapi import APIRouter, Depends
from sqlalchemy.orm import Session

from pokedex_api.api.deps import get_catalog, to_http_exception
from pokedex_api.database import get_db
from pokedex_api.services.connectors.base import PokemonCatalog
from pokedex_api.services.errors import ServiceError
from pokedex_api.services.pokemon_types import list_types

router = APIRouter(prefix="/types", tags=["types"])


@router.get("", response_model=list[str])
def get_types(
    db: Session = Depends(get_db),
    catalog: PokemonCatalog = Depends(get_catalog),
) -> list[str]:
    try:
        return list_types(db, catalog)
    except ServiceError as exc:
        raise to_http_exception(exc) from exc
