from typing import Annotated

from fastapi import Depends, Query
from pydantic import BaseModel

from cleanops.config import settings


class PageParams(BaseModel):
    page: int
    limit: int


def get_page_params(
    page: int = Query(1, ge=1, description="Numéro de page (à partir de 1)"),
    limit: int = Query(settings.DEFAULT_PAGE_SIZE, ge=1, description="Nombre d'éléments par page"),
) -> PageParams:
    # Plafonner plutôt que rejeter, comme l'ancien helper de pagination
    return PageParams(page=page, limit=min(limit, settings.MAX_PAGE_SIZE))


PageParamsDep = Annotated[PageParams, Depends(get_page_params)]
