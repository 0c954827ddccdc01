from enum import Enum
from typing import FrozenSet, Optional

from pydantic import BaseModel, field_validator


class SortOption(str, Enum):
    NEWEST = "newest"
    OLDEST = "oldest"
    SALARY_HIGH = "salary_high"
    SALARY_LOW = "salary_low"
    MOST_OPENINGS = "most_openings"

    @property
    def label(self) -> str:
        return SORT_LABELS[self]


SORT_LABELS = {
    SortOption.NEWEST: "Newest First",
    SortOption.OLDEST: "Oldest First",
    SortOption.SALARY_HIGH: "Salary: High to Low",
    SortOption.SALARY_LOW: "Salary: Low to High",
    SortOption.MOST_OPENINGS: "Most Openings",
}


class FilterSpec(BaseModel):
    """
    The user's complete query: every constraint plus the sort order.

    Each field always carries a value; "no constraint" is the neutral
    value ("" / None / empty set). Edits go through replace(), which
    returns a new spec.
    """

    search: str = ""
    location: str = ""
    employment_type: FrozenSet[str] = frozenset()
    job_category: str = ""
    is_remote: Optional[bool] = None
    salary_min: Optional[int] = None
    salary_max: Optional[int] = None
    min_openings: Optional[int] = None
    created_within: Optional[int] = None
    sort_by: SortOption = SortOption.NEWEST

    class Config:
        frozen = True

    @field_validator("search", "location", "job_category", mode="before")
    @classmethod
    def _none_to_empty(cls, value):
        return "" if value is None else value

    @field_validator("employment_type", mode="before")
    @classmethod
    def _none_to_empty_set(cls, value):
        return frozenset() if value is None else value

    def replace(self, **changes) -> "FilterSpec":
        """Return a new spec with the given fields changed (validated)."""
        data = self.model_dump()
        data.update(changes)
        return FilterSpec(**data)

    @property
    def is_neutral(self) -> bool:
        """True when no filter is active (sort order is ignored)."""
        return self.replace(sort_by=SortOption.NEWEST) == FilterSpec()
