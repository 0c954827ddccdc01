import json
import logging
from datetime import datetime, timezone
from functools import lru_cache
from typing import Any, Optional

from pydantic import BaseModel, Field, ValidationInfo, field_validator

logger = logging.getLogger(__name__)

EPOCH = datetime(1970, 1, 1, tzinfo=timezone.utc)


@lru_cache(maxsize=4096)
def parse_timestamp(value: str) -> datetime:
    """
    Parse an upstream ISO-8601-like timestamp into an aware datetime.

    Accepts "2024-01-05T10:00:00.000000Z", "2024-01-05 10:00:00" and
    plain dates. Naive values are read as UTC; unparseable ones sort as
    the epoch.
    """
    text = (value or "").strip()
    if text.endswith("Z"):
        text = text[:-1] + "+00:00"
    try:
        parsed = datetime.fromisoformat(text)
    except ValueError:
        logger.debug(f"Unparseable timestamp {value!r}, using epoch")
        return EPOCH
    if parsed.tzinfo is None:
        parsed = parsed.replace(tzinfo=timezone.utc)
    return parsed


class Job(BaseModel):
    """
    One job posting as served by the upstream API. Never mutated.

    Only id is required. Upstream nulls fall back to the field default and
    a qualifications array is kept as its JSON text, so a sloppy record
    still reaches filtering, export and detail lookup.
    """

    id: str
    title: str = ""
    description: str = ""
    company: str = ""
    location: str = ""
    salary_from: int = 0
    salary_to: int = 0
    employment_type: str = ""
    job_category: str = ""
    is_remote_work: int = 0
    number_of_opening: int = Field(1, ge=1)
    application_deadline: str = ""
    contact: str = ""
    qualifications: str = "[]"
    created_at: str = ""
    updated_at: str = ""

    class Config:
        frozen = True
        extra = "ignore"
        coerce_numbers_to_str = True

    @field_validator("*", mode="before")
    @classmethod
    def null_to_default(cls, value: Any, info: ValidationInfo) -> Any:
        if value is None and info.field_name != "id":
            return cls.model_fields[info.field_name].default
        return value

    @field_validator("qualifications", mode="before")
    @classmethod
    def keep_raw_qualifications(cls, value: Any) -> Any:
        if value is None:
            return "[]"
        if isinstance(value, (list, dict)):
            return json.dumps(value)
        return value

    @property
    def created_instant(self) -> datetime:
        return parse_timestamp(self.created_at)


class PageLink(BaseModel):
    url: Optional[str] = None
    label: str
    active: bool = False


class PaginatedJobs(BaseModel):
    """Upstream paginated envelope for GET /jobs/paginated."""

    data: list[Job]
    current_page: int
    last_page: int
    per_page: int
    total: int
    next_page_url: Optional[str] = None
    prev_page_url: Optional[str] = None
    from_: Optional[int] = Field(None, alias="from")
    to: Optional[int] = None
    links: list[PageLink] = []

    class Config:
        populate_by_name = True


class JobDetailResponse(BaseModel):
    job: Job
    requirements: list[str]
    salary_range: str
    posted: str


class JobListResponse(BaseModel):
    jobs: list[Job]
    total: int
    filtered_total: int
    view: str
    page: int
    total_pages: int
    per_page: int
    pages: list[int | str]
    visible_count: int
    has_more: bool
    all_shown: bool


class FilterOptionsResponse(BaseModel):
    categories: list[str]
    employment_types: list[str]
    locations: list[str]
    popular_categories: list[str]
    sort_options: list[dict[str, str]]
