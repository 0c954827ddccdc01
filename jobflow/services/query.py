"""
Query Engine - in-memory filter, search and sort over the job collection

Pure and synchronous: apply() never mutates its inputs and always returns
a new list, so identical inputs give identical ordered output.

Pipeline:
    jobs ─→ [filter: every active predicate must pass] ─→ [stable sort] ─→ result

Filter predicates (AND-combined, neutral values disable a predicate):
    - search:          substring of title/company/description/category (case-insensitive)
    - location:        exact match on the city token ("Austin, TX" → "Austin")
    - employment_type: membership in the selected set
    - job_category:    exact match
    - is_remote:       0/1 flag compared to the tri-state selection
    - salary_min:      salary_from >= bound
    - salary_max:      salary_to <= bound
    - min_openings:    number_of_opening >= bound
    - created_within:  created_at >= now - N days

Sort keys:
    newest / oldest  - created_at instant, desc / asc
    salary_high      - salary_to desc
    salary_low       - salary_from asc
    most_openings    - number_of_opening desc

Python's sort is stable, so ties keep their original relative order.
"""

import json
import logging
from collections import Counter
from datetime import datetime, timedelta, timezone
from typing import Callable, Dict, Iterable, List, Optional, Sequence, Tuple

from jobflow.errors import MalformedPayload
from jobflow.schemas import FilterSpec, Job, SortOption

logger = logging.getLogger(__name__)

ALL_CATEGORIES = "All Categories"


def city_token(location: str) -> str:
    """Text before the first comma of a location, trimmed."""
    return (location or "").split(",", 1)[0].strip()


def _decode_qualifications(raw: str) -> List[str]:
    try:
        value = json.loads(raw)
    except (TypeError, ValueError) as e:
        raise MalformedPayload("qualifications", str(raw)) from e
    if not isinstance(value, list):
        raise MalformedPayload("qualifications", str(raw))
    return [item if isinstance(item, str) else str(item) for item in value if item is not None]


def parse_qualifications(raw: Optional[str]) -> List[str]:
    """
    Decode a job's qualifications field into a list of requirement strings.

    Anything that is not a JSON array degrades to an empty list.

    Examples:
        >>> parse_qualifications('["Python", "SQL"]')
        ['Python', 'SQL']
        >>> parse_qualifications("{bad json")
        []
    """
    try:
        return _decode_qualifications(raw)
    except MalformedPayload as e:
        logger.debug(str(e))
        return []


# ==================== Predicates ====================

def matches_search(job: Job, term: str) -> bool:
    if not term:
        return True
    needle = term.lower()
    return (
        needle in job.title.lower()
        or needle in job.company.lower()
        or needle in job.description.lower()
        or needle in job.job_category.lower()
    )


def matches_remote(job: Job, is_remote: Optional[bool]) -> bool:
    if is_remote is None:
        return True
    remote = job.is_remote_work == 1
    on_site = job.is_remote_work == 0
    return remote if is_remote else on_site


def created_cutoff(days: int, now: datetime) -> datetime:
    return now - timedelta(days=days)


def matches(job: Job, spec: FilterSpec, now: datetime) -> bool:
    """True when job passes every active predicate of spec."""
    if not matches_search(job, spec.search):
        return False
    if spec.location and city_token(job.location) != spec.location:
        return False
    if spec.employment_type and job.employment_type not in spec.employment_type:
        return False
    if spec.job_category and job.job_category != spec.job_category:
        return False
    if not matches_remote(job, spec.is_remote):
        return False
    if spec.salary_min is not None and job.salary_from < spec.salary_min:
        return False
    if spec.salary_max is not None and job.salary_to > spec.salary_max:
        return False
    if spec.min_openings is not None and job.number_of_opening < spec.min_openings:
        return False
    if spec.created_within is not None:
        if job.created_instant < created_cutoff(spec.created_within, now):
            return False
    return True


# ==================== Sorting ====================

# sort option -> (key function, descending)
SORT_KEYS: Dict[SortOption, Tuple[Callable[[Job], object], bool]] = {
    SortOption.NEWEST: (lambda job: job.created_instant, True),
    SortOption.OLDEST: (lambda job: job.created_instant, False),
    SortOption.SALARY_HIGH: (lambda job: job.salary_to, True),
    SortOption.SALARY_LOW: (lambda job: job.salary_from, False),
    SortOption.MOST_OPENINGS: (lambda job: job.number_of_opening, True),
}


def sort_jobs(jobs: Iterable[Job], sort_by: SortOption) -> List[Job]:
    """
    Return a new list ordered by sort_by.

    sorted(reverse=True) keeps equal keys in their original order, so the
    result is stable in both directions.
    """
    key, descending = SORT_KEYS[SortOption(sort_by)]
    return sorted(jobs, key=key, reverse=descending)


def apply(jobs: Sequence[Job], spec: FilterSpec, now: Optional[datetime] = None) -> List[Job]:
    """
    Filter and sort jobs according to spec.

    Args:
        jobs: Full job collection (not modified)
        spec: Current FilterSpec
        now: Reference time for the created_within filter (defaults to UTC now)

    Returns:
        New ordered list of matching jobs; empty when nothing matches
    """
    now = now or datetime.now(timezone.utc)
    if now.tzinfo is None:
        now = now.replace(tzinfo=timezone.utc)
    filtered = [job for job in jobs if matches(job, spec, now)]
    return sort_jobs(filtered, spec.sort_by)


# ==================== Derived Queries ====================

def unique_categories(jobs: Iterable[Job]) -> List[str]:
    """Sorted distinct categories, prefixed with the "All Categories" sentinel."""
    return [ALL_CATEGORIES, *sorted({job.job_category for job in jobs})]


def unique_employment_types(jobs: Iterable[Job]) -> List[str]:
    return sorted({job.employment_type for job in jobs})


def unique_locations(jobs: Iterable[Job]) -> List[str]:
    """Sorted distinct non-empty city tokens."""
    return sorted({city for city in (city_token(job.location) for job in jobs) if city})


def category_counts(jobs: Iterable[Job]) -> List[Tuple[str, int]]:
    """
    Categories with their job counts, most common first.

    Ties keep first-seen order.
    """
    return Counter(job.job_category for job in jobs).most_common()


def popular_categories(jobs: Iterable[Job], limit: int = 5) -> List[str]:
    return [category for category, _ in category_counts(jobs)[:limit]]


def featured_jobs(jobs: Sequence[Job], limit: int = 6) -> List[Job]:
    return list(jobs[:limit])


def find_job(jobs: Iterable[Job], job_id: str) -> Optional[Job]:
    return next((job for job in jobs if job.id == job_id), None)
