"""
Job Browser - application state for one job-listing view

Owns everything the presentation layer needs between user events:

    JobBrowser
    ├── jobs          full collection (loaded once via the gateway)
    ├── filters       current FilterSpec (replaced wholesale on every edit)
    ├── view_mode     pagination | infinite
    ├── paginator     current page for pagination mode
    ├── window        visible prefix for infinite mode
    └── search_input  text typed so far (committed to filters after debounce)

results is memoized on (jobs, filters) so the query engine only reruns
when one of them changes. Every filter change resets both windowing
strategies to their initial state.
"""

import logging
from datetime import datetime
from typing import Any, List, Mapping, Optional, Tuple, Union

from jobflow.config import get_settings
from jobflow.errors import FetchFailure
from jobflow.schemas import FilterSpec, Job
from jobflow.services import query
from jobflow.services.cache import cache_key
from jobflow.services.debounce import Debouncer
from jobflow.services.gateway import ALL_JOBS, JobsGateway
from jobflow.services.windowing import InfiniteWindow, Paginator, ViewMode

logger = logging.getLogger(__name__)

LOAD_ERROR_MESSAGE = "Failed to load jobs. Please try again."


class JobBrowser:
    """
    State object behind the job listing page.

    Attributes:
        gateway: Source of the job collection
        jobs: Loaded collection (empty until load() succeeds)
        filters: Current FilterSpec
        loading: True until the first load() finishes
        error: User-visible error message, None when healthy
    """

    def __init__(
        self,
        gateway: JobsGateway,
        filters: Optional[FilterSpec] = None,
        page_size: Optional[int] = None,
        search_delay: Optional[float] = None,
        clock=None,
    ):
        settings = get_settings()
        size = page_size or settings.page_size

        self.gateway = gateway
        self.jobs: List[Job] = []
        self.filters = filters or FilterSpec()
        self.search_input = self.filters.search
        self.view_mode = ViewMode.PAGINATION
        self.paginator = Paginator(size)
        self.window = InfiniteWindow(size)
        self.loading = True
        self.error: Optional[str] = None
        self._clock = clock
        self._memo: Optional[Tuple[List[Job], FilterSpec, List[Job]]] = None
        self._search_debouncer = Debouncer(
            self._commit_search,
            delay=search_delay if search_delay is not None else settings.search_debounce_ms / 1000,
        )

    @classmethod
    def from_query_params(cls, gateway: JobsGateway, params: Mapping[str, str], **kwargs) -> "JobBrowser":
        """Seed search, location and category from URL query parameters."""
        filters = FilterSpec(
            search=params.get("search") or "",
            location=params.get("location") or "",
            job_category=params.get("category") or "",
        )
        return cls(gateway, filters=filters, **kwargs)

    # ==================== Loading ====================

    async def load(self) -> None:
        """
        Fetch the full collection.

        A FetchFailure becomes a user-visible error state; the collection
        stays empty until a later load() succeeds.
        """
        self.error = None
        try:
            self.jobs = await self.gateway.get_all_jobs()
        except FetchFailure as e:
            logger.error(f"Failed to fetch jobs: {e}")
            self.error = LOAD_ERROR_MESSAGE
        finally:
            self.loading = False

    def set_jobs(self, jobs: List[Job]) -> None:
        """Use an already fetched collection."""
        self.jobs = jobs
        self.loading = False
        self.error = None

    async def retry(self) -> None:
        """Drop the cached collection and load again."""
        self.gateway.cache.invalidate(cache_key(ALL_JOBS))
        self.loading = True
        await self.load()

    # ==================== Filters ====================

    def set_filters(self, filters: FilterSpec) -> None:
        """Replace the FilterSpec and reset both windowing strategies."""
        self.filters = filters
        self.paginator.reset()
        self.window.reset()

    def update_filter(self, **changes: Any) -> None:
        self.set_filters(self.filters.replace(**changes))

    def toggle_employment_type(self, employment_type: str) -> None:
        selected = set(self.filters.employment_type)
        selected ^= {employment_type}
        self.update_filter(employment_type=frozenset(selected))

    def clear_filters(self) -> None:
        self._search_debouncer.cancel()
        self.search_input = ""
        self.set_filters(FilterSpec())

    def type_search(self, text: str) -> None:
        """Record typed text now; commit it to the filters after the debounce delay."""
        self.search_input = text
        self._search_debouncer.trigger(text)

    def flush_search(self) -> None:
        self._search_debouncer.flush()

    @property
    def search_pending(self) -> bool:
        return self._search_debouncer.pending

    def _commit_search(self, text: str) -> None:
        if text != self.filters.search:
            self.update_filter(search=text)

    # ==================== Results ====================

    def _now(self) -> Optional[datetime]:
        return self._clock() if self._clock else None

    @property
    def results(self) -> List[Job]:
        """Filtered and sorted jobs for the current filters (memoized)."""
        if self._memo is not None:
            jobs, filters, cached = self._memo
            if jobs is self.jobs and filters == self.filters:
                return cached
        result = query.apply(self.jobs, self.filters, now=self._now())
        self._memo = (self.jobs, self.filters, result)
        return result

    @property
    def is_empty_result(self) -> bool:
        return not self.loading and self.error is None and not self.results

    @property
    def total_pages(self) -> int:
        return self.paginator.total_pages(len(self.results))

    @property
    def visible_count(self) -> int:
        return self.window.shown(len(self.results))

    @property
    def has_more(self) -> bool:
        return self.view_mode == ViewMode.INFINITE and self.window.has_more(len(self.results))

    @property
    def all_shown(self) -> bool:
        """Infinite mode has revealed every result of a multi-page set."""
        return self.view_mode == ViewMode.INFINITE and self.window.all_shown(len(self.results))

    @property
    def visible_jobs(self) -> List[Job]:
        if self.view_mode == ViewMode.INFINITE:
            return self.window.window(self.results)
        return self.paginator.current(self.results)

    def visible_pages(self) -> List[Union[int, str]]:
        return self.paginator.visible_pages(len(self.results))

    # ==================== Windowing ====================

    def set_page(self, page: int) -> int:
        return self.paginator.go_to(page, len(self.results))

    def reveal_more(self) -> int:
        if self.view_mode != ViewMode.INFINITE:
            return self.visible_count
        self.window.reveal_more(len(self.results))
        return self.visible_count

    def set_view_mode(self, mode: ViewMode) -> None:
        mode = ViewMode(mode)
        if mode == ViewMode.INFINITE:
            self.window.reset()
        else:
            self.paginator.reset()
        self.view_mode = mode

    def toggle_view_mode(self) -> ViewMode:
        target = ViewMode.INFINITE if self.view_mode == ViewMode.PAGINATION else ViewMode.PAGINATION
        self.set_view_mode(target)
        return self.view_mode

    # ==================== Filter options ====================

    def options(self) -> dict:
        settings = get_settings()
        return {
            "categories": query.unique_categories(self.jobs),
            "employment_types": query.unique_employment_types(self.jobs),
            "locations": query.unique_locations(self.jobs),
            "popular_categories": query.popular_categories(self.jobs, settings.popular_tags_limit),
        }
