from fastapi import APIRouter, Depends

from jobflow.api.jobs import get_gateway
from jobflow.services.gateway import JobsGateway

router = APIRouter()


@router.get("/stats")
async def cache_stats(gateway: JobsGateway = Depends(get_gateway)):
    return gateway.cache.get_stats()


@router.delete("")
async def clear_cache(gateway: JobsGateway = Depends(get_gateway)):
    cleared = len(gateway.cache)
    gateway.cache.clear()
    return {"cleared": cleared}
