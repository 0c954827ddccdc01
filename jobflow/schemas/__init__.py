from jobflow.schemas.job import (
    Job,
    PageLink,
    PaginatedJobs,
    JobDetailResponse,
    JobListResponse,
    FilterOptionsResponse,
    parse_timestamp,
)
from jobflow.schemas.filters import FilterSpec, SortOption, SORT_LABELS

__all__ = [
    "Job",
    "PageLink",
    "PaginatedJobs",
    "JobDetailResponse",
    "JobListResponse",
    "FilterOptionsResponse",
    "parse_timestamp",
    "FilterSpec",
    "SortOption",
    "SORT_LABELS",
]
