"""Tests for project metadata loading."""

import json

import pytest

from git_cohorts.exceptions import InvalidConfigError, InvalidPathError
from git_cohorts.histogram import TimeBin
from git_cohorts.meta import AggregatePattern, DomainMeta, ProjectMeta

GNOME = {
    "name": "GNOME",
    "first_year": 1998,
    "last_year": 2020,
    "domains": [
        {
            "name": "redhat.com",
            "aggregate_emails": [
                {"pattern": "*@gnome.org", "begin": {"year": 2003, "month": 0}},
                {"pattern": "*@ximian.com", "end": {"year": 2004}},
            ],
        },
        {"name": "github.com", "show": False},
    ],
    "markers": [{"time": {"year": 2011, "month": 3}, "row": 0, "text": "3.0"}],
}


class TestProjectMeta:
    def test_from_file(self, tmp_path):
        path = tmp_path / "gnome.json"
        path.write_text(json.dumps(GNOME))
        meta = ProjectMeta.from_file(path)

        assert meta.name == "GNOME"
        assert (meta.first_year, meta.last_year) == (1998, 2020)
        assert [d.name for d in meta.domains] == ["redhat.com", "github.com"]
        assert meta.domains[1].show is False
        assert meta.domains[0].show is None
        assert meta.domains[0].aggregate_emails[0].begin == TimeBin(2003, 0)
        assert meta.markers[0].time == TimeBin(2011, 3)
        assert meta.markers[0].text == "3.0"

    def test_minimal(self):
        meta = ProjectMeta.from_dict({})
        assert meta.domains == []
        assert meta.first_year is None

    def test_missing_file(self, tmp_path):
        with pytest.raises(InvalidPathError):
            ProjectMeta.from_file(tmp_path / "absent.json")

    def test_invalid_json(self, tmp_path):
        path = tmp_path / "bad.json"
        path.write_text("{not json")
        with pytest.raises(InvalidConfigError):
            ProjectMeta.from_file(path)

    def test_malformed_entries(self, tmp_path):
        path = tmp_path / "bad.json"
        path.write_text(json.dumps({"markers": [{"row": 1}]}))
        with pytest.raises(InvalidConfigError):
            ProjectMeta.from_file(path)


class TestSelectors:
    """Test SQL predicates built from domain rules."""

    def test_pattern_only(self):
        assert AggregatePattern("*@gnome.org").selector() == (
            "(author_email GLOB ?)",
            ["*@gnome.org"],
        )

    def test_pattern_with_range(self):
        sql, params = AggregatePattern(
            "*@gnome.org", begin=TimeBin(2003, 0), end=TimeBin(2004)
        ).selector()
        assert sql == "(author_email GLOB ? AND author_time >= ? AND author_time < ?)"
        # 2003-01-01 and 2005-01-01 UTC
        assert params == ["*@gnome.org", 1041379200, 1104537600]

    def test_domain_combines_patterns(self):
        domain = DomainMeta(
            name="redhat.com",
            aggregate_emails=[AggregatePattern("*@gnome.org"), AggregatePattern("*@ximian.com")],
        )
        sql, params = domain.emails_selector()
        assert sql == "(author_email GLOB ?) OR (author_email GLOB ?)"
        assert params == ["*@gnome.org", "*@ximian.com"]

    def test_domain_without_patterns(self):
        assert DomainMeta(name="github.com", show=False).emails_selector() == ("", [])
