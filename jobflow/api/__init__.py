from fastapi import APIRouter
from jobflow.api import cache, jobs

api_router = APIRouter(prefix="/api")
api_router.include_router(jobs.router, prefix="/jobs", tags=["jobs"])
api_router.include_router(cache.router, prefix="/cache", tags=["cache"])
