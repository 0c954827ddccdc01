from datetime import date
from typing import List, Optional

from fastapi import APIRouter, Depends, HTTPException, Query, Request
from fastapi.responses import HTMLResponse, Response

from jobflow.config import get_settings
from jobflow.schemas import (
    FilterOptionsResponse,
    FilterSpec,
    Job,
    JobDetailResponse,
    JobListResponse,
    PaginatedJobs,
    SortOption,
)
from jobflow.services import export, query
from jobflow.services.browser import JobBrowser
from jobflow.services.formatting import days_ago, format_salary_range
from jobflow.services.gateway import JobsGateway
from jobflow.services.windowing import ViewMode

router = APIRouter()


def get_gateway(request: Request) -> JobsGateway:
    return request.app.state.gateway


def get_filters(
    search: str = Query(""),
    location: str = Query(""),
    employment_type: List[str] = Query([]),
    category: str = Query(""),
    is_remote: Optional[bool] = Query(None),
    salary_min: Optional[int] = Query(None, ge=0),
    salary_max: Optional[int] = Query(None, ge=0),
    min_openings: Optional[int] = Query(None, ge=1),
    created_within: Optional[int] = Query(None, ge=0),
    sort_by: SortOption = Query(SortOption.NEWEST),
) -> FilterSpec:
    return FilterSpec(
        search=search,
        location=location,
        employment_type=frozenset(employment_type),
        job_category=category,
        is_remote=is_remote,
        salary_min=salary_min,
        salary_max=salary_max,
        min_openings=min_openings,
        created_within=created_within,
        sort_by=sort_by,
    )


async def get_browser(
    filters: FilterSpec = Depends(get_filters),
    gateway: JobsGateway = Depends(get_gateway),
) -> JobBrowser:
    browser = JobBrowser(gateway, filters=filters)
    browser.set_jobs(await gateway.get_all_jobs())
    return browser


@router.get("", response_model=JobListResponse)
async def list_jobs(
    view: ViewMode = Query(ViewMode.PAGINATION),
    page: int = Query(1, ge=1),
    visible: Optional[int] = Query(None, ge=1),
    browser: JobBrowser = Depends(get_browser),
):
    browser.set_view_mode(view)
    if view == ViewMode.INFINITE:
        target = visible or browser.window.page_size
        while browser.has_more and browser.visible_count < target:
            browser.reveal_more()
    else:
        browser.set_page(page)

    return JobListResponse(
        jobs=browser.visible_jobs,
        total=len(browser.jobs),
        filtered_total=len(browser.results),
        view=browser.view_mode.value,
        page=browser.paginator.current_page,
        total_pages=browser.total_pages,
        per_page=browser.paginator.page_size,
        pages=browser.visible_pages(),
        visible_count=browser.visible_count,
        has_more=browser.has_more,
        all_shown=browser.all_shown,
    )


@router.get("/options", response_model=FilterOptionsResponse)
async def filter_options(gateway: JobsGateway = Depends(get_gateway)):
    browser = JobBrowser(gateway)
    browser.set_jobs(await gateway.get_all_jobs())
    return FilterOptionsResponse(
        **browser.options(),
        sort_options=[{"value": option.value, "label": option.label} for option in SortOption],
    )


@router.get("/featured", response_model=List[Job])
async def featured(gateway: JobsGateway = Depends(get_gateway)):
    jobs = await gateway.get_all_jobs()
    return query.featured_jobs(jobs, get_settings().featured_limit)


@router.get("/paginated", response_model=PaginatedJobs)
async def paginated(
    page: int = Query(1, ge=1),
    gateway: JobsGateway = Depends(get_gateway),
):
    return await gateway.get_paginated_jobs(page)


@router.get("/random", response_model=Job)
async def random_job(gateway: JobsGateway = Depends(get_gateway)):
    return await gateway.get_random_job()


@router.get("/random/{count}", response_model=List[Job])
async def random_jobs(count: int, gateway: JobsGateway = Depends(get_gateway)):
    if count < 1:
        raise HTTPException(status_code=422, detail="count must be positive")
    return await gateway.get_random_jobs(count)


@router.get("/export.csv")
async def export_csv(browser: JobBrowser = Depends(get_browser)):
    filename = export.export_filename(date.today())
    return Response(
        content=export.to_csv(browser.results),
        media_type="text/csv; charset=utf-8",
        headers={"Content-Disposition": f'attachment; filename="{filename}"'},
    )


@router.get("/export.html", response_class=HTMLResponse)
async def export_html(browser: JobBrowser = Depends(get_browser)):
    return export.render_print_document(browser.results, browser.filters)


@router.get("/{job_id}", response_model=JobDetailResponse)
async def get_job(job_id: str, gateway: JobsGateway = Depends(get_gateway)):
    job = query.find_job(await gateway.get_all_jobs(), job_id)
    if not job:
        raise HTTPException(status_code=404, detail="Job not found")

    return JobDetailResponse(
        job=job,
        requirements=query.parse_qualifications(job.qualifications),
        salary_range=format_salary_range(job.salary_from, job.salary_to),
        posted=days_ago(job.created_at),
    )
