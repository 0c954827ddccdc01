"""
Tests for the Job and FilterSpec models.
"""

from datetime import datetime, timezone

import pytest
from pydantic import ValidationError

from jobflow.schemas import FilterSpec, Job, SortOption, parse_timestamp
from jobflow.schemas.job import EPOCH


class TestParseTimestamp:
    """Tests for upstream timestamp parsing."""

    def test_zulu_with_microseconds(self):
        assert parse_timestamp("2024-01-05T10:00:00.000000Z") == datetime(2024, 1, 5, 10, tzinfo=timezone.utc)

    def test_naive_is_utc(self):
        assert parse_timestamp("2024-01-05 10:00:00") == datetime(2024, 1, 5, 10, tzinfo=timezone.utc)

    def test_date_only(self):
        assert parse_timestamp("2024-01-05") == datetime(2024, 1, 5, tzinfo=timezone.utc)

    def test_offset_is_kept(self):
        parsed = parse_timestamp("2024-01-05T12:00:00+02:00")
        assert parsed == datetime(2024, 1, 5, 10, tzinfo=timezone.utc)

    def test_garbage_sorts_as_epoch(self):
        assert parse_timestamp("not a date") == EPOCH


class TestJob:
    """Tests for the Job record."""

    def test_is_immutable(self, make_job):
        job = make_job()
        with pytest.raises(ValidationError):
            job.title = "changed"

    def test_numeric_id_becomes_string(self, make_job):
        assert make_job(id=42).id == "42"

    def test_remote_flag_stays_integer(self, make_job):
        assert make_job(is_remote_work=1).is_remote_work == 1

    def test_openings_minimum_one(self, make_job):
        with pytest.raises(ValidationError):
            make_job(number_of_opening=0)

    def test_nulls_fall_back_to_defaults(self):
        job = Job.model_validate({
            "id": "n1",
            "title": None,
            "description": None,
            "location": None,
            "contact": None,
            "salary_from": None,
            "is_remote_work": None,
            "number_of_opening": None,
            "created_at": None,
        })
        assert job.title == ""
        assert job.location == ""
        assert job.contact == ""
        assert job.salary_from == 0
        assert job.is_remote_work == 0
        assert job.number_of_opening == 1
        assert job.qualifications == "[]"
        assert job.created_instant == EPOCH

    def test_qualifications_list_kept_as_json_text(self, make_job):
        assert make_job(qualifications=["Python", "SQL"]).qualifications == '["Python", "SQL"]'

    def test_id_is_required(self):
        with pytest.raises(ValidationError):
            Job.model_validate({"id": None, "title": "No id"})

    def test_created_instant(self, make_job):
        job = make_job(created_at="2024-01-05T00:00:00Z")
        assert job.created_instant == datetime(2024, 1, 5, tzinfo=timezone.utc)

    def test_malformed_qualifications_are_accepted(self, make_job):
        assert make_job(qualifications="{bad json").qualifications == "{bad json"


class TestFilterSpec:
    """Tests for the FilterSpec value object."""

    def test_defaults_are_neutral(self):
        spec = FilterSpec()
        assert spec.search == ""
        assert spec.location == ""
        assert spec.employment_type == frozenset()
        assert spec.job_category == ""
        assert spec.is_remote is None
        assert spec.salary_min is None
        assert spec.salary_max is None
        assert spec.min_openings is None
        assert spec.created_within is None
        assert spec.sort_by == SortOption.NEWEST
        assert spec.is_neutral

    def test_replace_returns_new_instance(self):
        spec = FilterSpec()
        changed = spec.replace(search="python")

        assert changed is not spec
        assert changed.search == "python"
        assert spec.search == ""

    def test_replace_validates(self):
        with pytest.raises(ValidationError):
            FilterSpec().replace(sort_by="random")

    def test_is_frozen(self):
        with pytest.raises(ValidationError):
            FilterSpec().search = "x"

    def test_none_becomes_neutral(self):
        spec = FilterSpec(search=None, employment_type=None)
        assert spec.search == ""
        assert spec.employment_type == frozenset()

    def test_sort_only_is_still_neutral(self):
        assert FilterSpec(sort_by=SortOption.SALARY_LOW).is_neutral
        assert not FilterSpec(min_openings=2).is_neutral

    def test_value_equality(self):
        a = FilterSpec(employment_type=frozenset({"Consultant"}))
        b = FilterSpec(employment_type=["Consultant"])
        assert a == b

    def test_sort_labels(self):
        assert SortOption.SALARY_HIGH.label == "Salary: High to Low"
