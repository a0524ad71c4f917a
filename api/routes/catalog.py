"""
api/routes/catalog.py -- Public creature lookup.

Routes:
  GET /pokemon/{name} -- proxy the external catalog record for name

The handler is a plain def: CatalogClient uses blocking requests calls, so
FastAPI runs it in the threadpool instead of on the event loop.
"""

from fastapi import APIRouter, Request

from api.models import CatalogResponse
from core.catalog import CatalogClient

# Auth policy:
# - GET /pokemon/{name}: public -- catalog data is public upstream too
router = APIRouter()


@router.get("/pokemon/{name}", response_model=CatalogResponse)
def get_pokemon(request: Request, name: str) -> CatalogResponse:
    """Return the catalog record for name.

    404 when the catalog does not know the name; 500 when the catalog cannot
    be reached or errors (both raised by CatalogClient as CatchdexErrors).
    """
    catalog: CatalogClient = request.app.state.catalog
    return CatalogResponse(data=catalog.fetch_creature(name))
