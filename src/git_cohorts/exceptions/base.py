"""Root of the git-cohorts exception hierarchy for configuration and histogram errors.

Failures of the ingest/store/aggregate/render pipeline use the coded
:class:`~git_cohorts.exceptions.taxonomy.CohortError` instead.
"""

from typing import Any, Dict, Mapping, Optional


class GitCohortsError(Exception):
    """A user-facing error with an optional ``reason`` and key/value details.

    ``str()`` reads ``"<message>: <reason> (key=value, ...)"``; the
    ``reason`` detail is lifted out of the parentheses.
    """

    def __init__(self, message: str, details: Optional[Mapping[str, Any]] = None):
        super().__init__(message)
        self.message = message
        self.details: Dict[str, str] = {k: str(v) for k, v in (details or {}).items()}

    @property
    def reason(self) -> Optional[str]:
        return self.details.get("reason")

    def __str__(self) -> str:
        text = self.message
        if self.reason:
            text = f"{text}: {self.reason}"
        extra = [f"{k}={v}" for k, v in self.details.items() if k != "reason"]
        if extra:
            text = f"{text} ({', '.join(extra)})"
        return text
