import itertools
from datetime import datetime, timezone

import pytest

from jobflow.schemas import Job

_ids = itertools.count(1)


def build_job(**overrides) -> Job:
    """Job with sensible defaults; override any field by keyword."""
    n = next(_ids)
    data = {
        "id": f"job-{n}",
        "title": "Python Developer",
        "description": "Build APIs with FastAPI",
        "company": "Acme Corp",
        "location": "Austin, TX",
        "salary_from": 60000,
        "salary_to": 90000,
        "employment_type": "Full-time Developer",
        "job_category": "Back-end Developer",
        "is_remote_work": 0,
        "number_of_opening": 1,
        "application_deadline": "2024-02-01",
        "contact": "hr@acme.test",
        "qualifications": '["Python", "SQL"]',
        "created_at": "2024-01-01T00:00:00.000000Z",
        "updated_at": "2024-01-01T00:00:00.000000Z",
    }
    data.update(overrides)
    return Job(**data)


@pytest.fixture
def make_job():
    return build_job


@pytest.fixture
def now():
    return datetime(2024, 1, 10, tzinfo=timezone.utc)


@pytest.fixture
def sample_jobs():
    """A small mixed collection covering every filterable field."""
    return [
        build_job(
            id="1", title="Senior Python Engineer", company="Acme Corp",
            location="Austin, TX", salary_from=90000, salary_to=130000,
            employment_type="Full-time Developer", job_category="Back-end Developer",
            is_remote_work=1, number_of_opening=3, created_at="2024-01-08T09:00:00Z",
        ),
        build_job(
            id="2", title="React Developer", company="Globex",
            description="Frontend work with TypeScript",
            location="Austin Heights, CA", salary_from=50000, salary_to=70000,
            employment_type="Part-time Developer", job_category="Front-end Developer",
            is_remote_work=0, number_of_opening=1, created_at="2024-01-02T09:00:00Z",
        ),
        build_job(
            id="3", title="Data Scientist", company="Initech",
            description="Machine learning models",
            location="Denver, CO", salary_from=80000, salary_to=150000,
            employment_type="Contract Developer", job_category="Data Scientist",
            is_remote_work=1, number_of_opening=2, created_at="2024-01-05T09:00:00Z",
        ),
        build_job(
            id="4", title="QA Engineer", company="Acme Labs",
            description="Test automation",
            location="Austin, TX", salary_from=40000, salary_to=60000,
            employment_type="Full-time Developer", job_category="QA Engineer",
            is_remote_work=0, number_of_opening=5, created_at="2023-12-20T09:00:00Z",
            qualifications="{bad json",
        ),
    ]
