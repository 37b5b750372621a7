"""Project metadata: plotted year range, domain rules and timeline markers.

Metadata lives in a JSON file passed with ``--meta``::

    {
      "name": "GNOME",
      "first_year": 1998,
      "last_year": 2020,
      "domains": [
        {"name": "redhat.com", "aggregate_emails": [
            {"pattern": "*@gnome.org", "begin": {"year": 2003, "month": 0}}
        ]},
        {"name": "users.noreply.github.com", "show": false}
      ],
      "markers": [{"time": {"year": 2011, "month": 3}, "row": 0, "text": "3.0"}]
    }
"""

from __future__ import annotations

import json
from dataclasses import dataclass, field
from pathlib import Path
from typing import Any, Optional

from .exceptions import InvalidConfigError, InvalidPathError
from .histogram import TimeBin


@dataclass(frozen=True)
class AggregatePattern:
    """E-mail glob, optionally limited to a date range, mapped onto a domain."""

    pattern: str
    begin: Optional[TimeBin] = None
    end: Optional[TimeBin] = None

    def selector(
        self, email_field: str = "author_email", time_field: str = "author_time"
    ) -> tuple[str, list[Any]]:
        """SQL predicate and parameters matching this pattern."""
        clauses = [f"{email_field} GLOB ?"]
        params: list[Any] = [self.pattern]
        if self.begin is not None:
            clauses.append(f"{time_field} >= ?")
            params.append(self.begin.begin_timestamp())
        if self.end is not None:
            clauses.append(f"{time_field} < ?")
            params.append(self.end.end_timestamp())
        return "(" + " AND ".join(clauses) + ")", params

    @classmethod
    def from_dict(cls, data: dict[str, Any]) -> AggregatePattern:
        return cls(
            pattern=data["pattern"],
            begin=TimeBin.from_dict(data["begin"]) if data.get("begin") else None,
            end=TimeBin.from_dict(data["end"]) if data.get("end") else None,
        )


@dataclass(frozen=True)
class DomainMeta:
    name: str
    show: Optional[bool] = None
    aggregate_emails: list[AggregatePattern] = field(default_factory=list)

    def emails_selector(self) -> tuple[str, list[Any]]:
        """OR of all aggregate patterns; empty string when there are none."""
        clauses = []
        params: list[Any] = []
        for pattern in self.aggregate_emails:
            clause, clause_params = pattern.selector()
            clauses.append(clause)
            params.extend(clause_params)
        return " OR ".join(clauses), params

    @classmethod
    def from_dict(cls, data: dict[str, Any]) -> DomainMeta:
        return cls(
            name=data["name"],
            show=data.get("show"),
            aggregate_emails=[
                AggregatePattern.from_dict(p) for p in data.get("aggregate_emails") or []
            ],
        )


@dataclass(frozen=True)
class Marker:
    """A labelled event drawn over the histogram at ``time``, stacked by ``row``."""

    time: TimeBin
    row: int
    text: str

    @classmethod
    def from_dict(cls, data: dict[str, Any]) -> Marker:
        return cls(time=TimeBin.from_dict(data["time"]), row=int(data["row"]), text=data["text"])


@dataclass(frozen=True)
class ProjectMeta:
    name: Optional[str] = None
    first_year: Optional[int] = None
    last_year: Optional[int] = None
    domains: list[DomainMeta] = field(default_factory=list)
    markers: list[Marker] = field(default_factory=list)

    @classmethod
    def from_dict(cls, data: dict[str, Any]) -> ProjectMeta:
        return cls(
            name=data.get("name"),
            first_year=data.get("first_year"),
            last_year=data.get("last_year"),
            domains=[DomainMeta.from_dict(d) for d in data.get("domains") or []],
            markers=[Marker.from_dict(m) for m in data.get("markers") or []],
        )

    @classmethod
    def from_file(cls, path: Path) -> ProjectMeta:
        if not path.is_file():
            raise InvalidPathError(path, "metadata file does not exist")
        try:
            data = json.loads(path.read_text(encoding="utf-8"))
            return cls.from_dict(data)
        except json.JSONDecodeError as e:
            raise InvalidConfigError("meta", str(path), f"invalid JSON: {e}")
        except (KeyError, TypeError, ValueError, AttributeError) as e:
            raise InvalidConfigError("meta", str(path), f"malformed metadata: {e}")
