"""
Remote Data Gateway - read-only client for the upstream job API

Every operation consults the response cache under its logical key first
and only goes to the network on a miss:

    get_all_jobs()          GET /jobs                  key: all_jobs
    get_paginated_jobs(n)   GET /jobs/paginated?page=n key: paginated_jobs_{n}
    get_random_job()        GET /jobs/random           key: random_job
    get_random_jobs(n)      GET /jobs/random/{n}       key: random_jobs_{n}

Any non-2xx status, transport error, undecodable body or payload of the
wrong shape raises FetchFailure naming the operation. Only parsed results
are stored, so a rejected payload is never served from the cache. There
is no automatic retry; callers retry by invoking the operation again.
"""

import logging
import time
from typing import Any, Callable, List, Optional

import httpx
from pydantic import ValidationError

from jobflow.config import get_settings
from jobflow.errors import FetchFailure
from jobflow.middleware.metrics import record_fetch_failure, record_upstream_latency
from jobflow.schemas import Job, PaginatedJobs
from jobflow.services.cache import ResponseCache, cache_key

logger = logging.getLogger(__name__)

ALL_JOBS = "all_jobs"
PAGINATED_JOBS = "paginated_jobs"
RANDOM_JOB = "random_job"
RANDOM_JOBS = "random_jobs"


def parse_jobs(payload: Any) -> List[Job]:
    """
    Convert a JSON array into Job models.

    Nulls and missing fields take the Job defaults. Only items that are
    not objects, have no id or carry a value of the wrong type are skipped
    with a warning; the rest of the collection is kept.
    """
    if not isinstance(payload, list):
        logger.warning(f"Expected a list of jobs, got {type(payload).__name__}")
        return []

    jobs = []
    for item in payload:
        try:
            jobs.append(Job.model_validate(item))
        except ValidationError as e:
            logger.warning(f"Skipping malformed job record: {e.error_count()} error(s)")
    return jobs


class JobsGateway:
    """
    Cached client for the upstream job API.

    Attributes:
        cache: ResponseCache owned by this gateway
        client: httpx.AsyncClient bound to the API base URL
    """

    def __init__(
        self,
        base_url: Optional[str] = None,
        cache: Optional[ResponseCache] = None,
        client: Optional[httpx.AsyncClient] = None,
        timeout: Optional[float] = None,
    ):
        settings = get_settings()
        self.base_url = (base_url or settings.api_base_url).rstrip("/")
        self.cache = cache if cache is not None else ResponseCache(ttl=settings.cache_ttl_seconds)
        self._owns_client = client is None
        self.client = client or httpx.AsyncClient(
            base_url=self.base_url,
            timeout=timeout or settings.request_timeout,
            headers={"Accept": "application/json"},
        )

    async def __aenter__(self) -> "JobsGateway":
        return self

    async def __aexit__(self, *exc_info) -> None:
        await self.aclose()

    async def aclose(self) -> None:
        if self._owns_client:
            await self.client.aclose()

    async def _get_json(self, operation: str, path: str, params: Optional[dict] = None) -> Any:
        """
        Do one HTTP GET and decode the JSON body.

        Raises:
            FetchFailure: on transport error, non-2xx status or bad JSON
        """
        start = time.perf_counter()
        try:
            response = await self.client.get(path, params=params)
            response.raise_for_status()
            data = response.json()
        except httpx.HTTPStatusError as e:
            record_fetch_failure(operation)
            logger.error(f"Upstream {operation} returned HTTP {e.response.status_code}")
            raise FetchFailure(operation, status_code=e.response.status_code) from e
        except httpx.HTTPError as e:
            record_fetch_failure(operation)
            logger.error(f"Upstream {operation} transport error: {e}")
            raise FetchFailure(operation, reason=str(e) or type(e).__name__) from e
        except ValueError as e:
            record_fetch_failure(operation)
            logger.error(f"Upstream {operation} returned invalid JSON: {e}")
            raise FetchFailure(operation, reason="invalid JSON") from e
        finally:
            record_upstream_latency(operation, time.perf_counter() - start)

        return data

    async def _cached(
        self,
        key: str,
        operation: str,
        path: str,
        parse: Callable[[Any], Any],
        params: Optional[dict] = None,
    ) -> Any:
        """
        Serve key from the cache, or fetch, parse and store it.

        parse runs before anything is stored, so a payload with the wrong
        shape raises FetchFailure and leaves the cache untouched; the
        next call goes back to the network.
        """
        cached = self.cache.get(key)
        if cached is not None:
            logger.debug(f"Cache hit: {key}")
            return cached

        data = await self._get_json(operation, path, params)
        result = parse(data)
        self.cache.put(key, result)
        return result

    @staticmethod
    def _shape_error(operation: str, reason: str) -> FetchFailure:
        record_fetch_failure(operation)
        logger.error(f"Upstream {operation} returned {reason}")
        return FetchFailure(operation, reason=reason)

    def _job_list(self, operation: str) -> Callable[[Any], List[Job]]:
        def parse(data: Any) -> List[Job]:
            if not isinstance(data, list):
                raise self._shape_error(operation, "unexpected payload")
            return parse_jobs(data)
        return parse

    def _envelope(self, data: Any) -> PaginatedJobs:
        if not isinstance(data, dict):
            raise self._shape_error(PAGINATED_JOBS, "unexpected envelope")
        envelope = dict(data)
        envelope["data"] = parse_jobs(envelope.get("data") or [])
        try:
            return PaginatedJobs.model_validate(envelope)
        except ValidationError as e:
            raise self._shape_error(PAGINATED_JOBS, "unexpected envelope") from e

    def _single_job(self, data: Any) -> Job:
        try:
            return Job.model_validate(data)
        except ValidationError as e:
            raise self._shape_error(RANDOM_JOB, "unexpected job shape") from e

    # ==================== Public API ====================

    async def get_all_jobs(self) -> List[Job]:
        """
        Fetch the full job collection.

        Raises:
            FetchFailure: on HTTP/transport errors or a body that is not a list
        """
        jobs = await self._cached(cache_key(ALL_JOBS), ALL_JOBS, "/jobs", self._job_list(ALL_JOBS))
        logger.info(f"Loaded {len(jobs)} jobs")
        return jobs

    async def get_paginated_jobs(self, page: int = 1) -> PaginatedJobs:
        """
        Fetch one upstream page with its pagination envelope.

        Args:
            page: 1-based page number

        Returns:
            PaginatedJobs envelope
        """
        return await self._cached(
            cache_key(PAGINATED_JOBS, page),
            PAGINATED_JOBS,
            "/jobs/paginated",
            self._envelope,
            params={"page": page},
        )

    async def get_random_job(self) -> Job:
        return await self._cached(cache_key(RANDOM_JOB), RANDOM_JOB, "/jobs/random", self._single_job)

    async def get_random_jobs(self, count: int) -> List[Job]:
        return await self._cached(
            cache_key(RANDOM_JOBS, count),
            RANDOM_JOBS,
            f"/jobs/random/{count}",
            self._job_list(RANDOM_JOBS),
        )
