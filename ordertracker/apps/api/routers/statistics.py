from typing import Any, Dict, List

from fastapi import APIRouter, Query

from ordertracker.apps.api.dependencies import ServicesDep
from ordertracker.apps.api.schemas import VisitCount
from ordertracker.core.cache import describe

router = APIRouter(prefix="/api/statistics", tags=["statistics"])


@router.get("", response_model=Dict[str, int])
async def all_visit_counts(services: ServicesDep):
    return services.visits.all_counts()


@router.get("/single-stat", response_model=VisitCount)
async def visit_count(services: ServicesDep, url: str = Query(...)):
    return VisitCount(url=url, count=services.visits.get_count(url))


@router.get("/top-visited")
async def top_visited(services: ServicesDep) -> Dict[str, Any]:
    top = services.visits.most_visited()
    if top is None:
        return {"message": "No visits recorded yet"}
    url, count = top
    return {"url": url, "count": count}


@router.get("/cache")
async def cache_stats(services: ServicesDep) -> List[Dict[str, Any]]:
    return describe(services.caches)
