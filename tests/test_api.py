"""
Tests for the HTTP surface.

The app's gateway is swapped for one backed by httpx.MockTransport
before the TestClient starts the lifespan.

Run with: pytest tests/test_api.py -v
"""

import httpx
import pytest
from fastapi.testclient import TestClient

from jobflow.main import create_app
from jobflow.services.cache import ResponseCache
from jobflow.services.gateway import JobsGateway

BASE_URL = "https://jobs.test"


def job_payload(i: int, **overrides) -> dict:
    data = {
        "id": f"job-{i}",
        "title": f"Developer {i}",
        "description": "Build things",
        "company": "Acme" if i % 2 else "Globex",
        "location": "Austin, TX" if i % 3 else "Denver, CO",
        "salary_from": 40000 + i * 1000,
        "salary_to": 60000 + i * 1000,
        "employment_type": "Full-time Developer",
        "job_category": "Back-end Developer" if i % 2 else "QA Engineer",
        "is_remote_work": i % 2,
        "number_of_opening": 1 + i % 4,
        "application_deadline": "2030-01-01",
        "qualifications": '["Python", "Docker"]' if i else "{bad json",
        "contact": "jobs@acme.test",
        "created_at": f"2024-01-{1 + i % 28:02d}T09:00:00Z",
        "updated_at": "2024-01-01T09:00:00Z",
    }
    data.update(overrides)
    return data


JOBS = [job_payload(i) for i in range(30)]


class Upstream:
    def __init__(self, status: int = 200):
        self.status = status
        self.calls = 0

    def __call__(self, request: httpx.Request) -> httpx.Response:
        self.calls += 1
        if self.status != 200:
            return httpx.Response(self.status, json={})
        if request.url.path == "/jobs":
            return httpx.Response(200, json=JOBS)
        if request.url.path == "/jobs/random":
            return httpx.Response(200, json=JOBS[0])
        if request.url.path.startswith("/jobs/random/"):
            count = int(request.url.path.rsplit("/", 1)[1])
            return httpx.Response(200, json=JOBS[:count])
        return httpx.Response(404, json={})


def make_client(upstream: Upstream) -> TestClient:
    app = create_app()
    app.state.gateway = JobsGateway(
        base_url=BASE_URL,
        cache=ResponseCache(),
        client=httpx.AsyncClient(base_url=BASE_URL, transport=httpx.MockTransport(upstream)),
    )
    return TestClient(app)


@pytest.fixture
def upstream():
    return Upstream()


@pytest.fixture
def client(upstream):
    with make_client(upstream) as c:
        yield c


class TestHealth:
    def test_health(self, client):
        assert client.get("/health").json() == {"status": "healthy"}


class TestListJobs:
    """Tests for GET /api/jobs."""

    def test_first_page(self, client):
        data = client.get("/api/jobs").json()

        assert data["total"] == 30
        assert data["filtered_total"] == 30
        assert data["page"] == 1
        assert data["total_pages"] == 3
        assert data["per_page"] == 12
        assert len(data["jobs"]) == 12
        assert data["pages"] == [1, 2, 3]
        assert data["view"] == "pagination"
        assert data["all_shown"] is False

    def test_page_is_clamped(self, client):
        data = client.get("/api/jobs", params={"page": 9}).json()
        assert data["page"] == 3
        assert len(data["jobs"]) == 6

    def test_filters_and_sort(self, client):
        data = client.get(
            "/api/jobs",
            params={"is_remote": "true", "sort_by": "salary_high", "location": "Austin"},
        ).json()

        salaries = [job["salary_to"] for job in data["jobs"]]
        assert salaries == sorted(salaries, reverse=True)
        assert all(job["is_remote_work"] == 1 for job in data["jobs"])
        assert all(job["location"].startswith("Austin") for job in data["jobs"])
        assert data["filtered_total"] < 30

    def test_repeated_employment_type(self, client):
        data = client.get(
            "/api/jobs",
            params=[("employment_type", "Full-time Developer"), ("employment_type", "Consultant")],
        ).json()
        assert data["filtered_total"] == 30

    def test_empty_result(self, client):
        data = client.get("/api/jobs", params={"search": "no such role"}).json()
        assert data["jobs"] == []
        assert data["filtered_total"] == 0
        assert data["total_pages"] == 0

    def test_infinite_view(self, client):
        data = client.get("/api/jobs", params={"view": "infinite", "visible": 20}).json()
        assert data["view"] == "infinite"
        assert data["visible_count"] == 24
        assert len(data["jobs"]) == 24
        assert data["has_more"] is True

    def test_infinite_view_clamps_to_results(self, client):
        data = client.get("/api/jobs", params={"view": "infinite", "visible": 500}).json()
        assert data["visible_count"] == 30
        assert data["all_shown"] is True
        assert data["has_more"] is False

    def test_invalid_sort_rejected(self, client):
        assert client.get("/api/jobs", params={"sort_by": "random"}).status_code == 422

    def test_collection_fetched_once(self, client, upstream):
        client.get("/api/jobs")
        client.get("/api/jobs", params={"page": 2})
        client.get("/api/jobs/options")
        assert upstream.calls == 1


class TestOtherEndpoints:
    """Tests for options, detail, featured, random and export endpoints."""

    def test_options(self, client):
        data = client.get("/api/jobs/options").json()
        assert data["categories"] == ["All Categories", "Back-end Developer", "QA Engineer"]
        assert data["locations"] == ["Austin", "Denver"]
        assert data["employment_types"] == ["Full-time Developer"]
        assert data["sort_options"][0] == {"value": "newest", "label": "Newest First"}
        assert len(data["popular_categories"]) == 2

    def test_job_detail(self, client):
        data = client.get("/api/jobs/job-3").json()
        assert data["job"]["id"] == "job-3"
        assert data["requirements"] == ["Python", "Docker"]
        assert data["salary_range"] == "$43,000 – $63,000"

    def test_job_detail_malformed_qualifications(self, client):
        data = client.get("/api/jobs/job-0").json()
        assert data["requirements"] == []

    def test_job_not_found(self, client):
        assert client.get("/api/jobs/missing").status_code == 404

    def test_featured(self, client):
        data = client.get("/api/jobs/featured").json()
        assert [job["id"] for job in data] == [f"job-{i}" for i in range(6)]

    def test_random(self, client):
        assert client.get("/api/jobs/random").json()["id"] == "job-0"
        assert len(client.get("/api/jobs/random/3").json()) == 3

    def test_export_csv(self, client):
        response = client.get("/api/jobs/export.csv", params={"category": "QA Engineer"})

        assert response.status_code == 200
        assert response.headers["content-type"].startswith("text/csv")
        assert "attachment; filename=\"job_results_" in response.headers["content-disposition"]
        lines = response.text.split("\n")
        assert lines[0].startswith("Title,Company")
        assert len(lines) == 16

    def test_export_html(self, client):
        response = client.get("/api/jobs/export.html", params={"min_openings": 4})
        assert response.status_code == 200
        assert "Min Openings: 4" in response.text

    def test_cache_stats(self, client):
        client.get("/api/jobs")
        client.get("/api/jobs")
        stats = client.get("/api/cache/stats").json()
        assert stats["hits"] == 1
        assert stats["misses"] == 1

    def test_clear_cache(self, client, upstream):
        client.get("/api/jobs")
        assert client.delete("/api/cache").json() == {"cleared": 1}
        client.get("/api/jobs")
        assert upstream.calls == 2


class TestUpstreamFailure:
    """FetchFailure surfaces as 502 naming the operation."""

    def test_list_jobs_502(self):
        with make_client(Upstream(status=500)) as client:
            response = client.get("/api/jobs")

        assert response.status_code == 502
        assert response.json()["operation"] == "all_jobs"

    def test_random_502(self):
        with make_client(Upstream(status=503)) as client:
            response = client.get("/api/jobs/random")

        assert response.json()["operation"] == "random_job"


class TestMetrics:
    def test_metrics_exposes_upstream_counters(self, client):
        client.get("/api/jobs")
        body = client.get("/metrics").text

        assert "http_requests_total" in body
        assert 'upstream_request_seconds_count{operation="all_jobs"}' in body
        assert 'cache_misses_total{layer="response"}' in body

    def test_unknown_paths_share_one_label(self, client):
        client.get("/nowhere/1")
        client.get("/nowhere/2")
        body = client.get("/metrics").text

        assert 'endpoint="<unmatched>"' in body
        assert "/nowhere/1" not in body

    def test_health_checks_are_not_counted(self, client):
        client.get("/health")
        assert 'endpoint="/health"' not in client.get("/metrics").text
