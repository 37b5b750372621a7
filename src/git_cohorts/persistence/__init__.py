"""SQLite event store for ingested commits."""

from .database import CommitDB
from .domains import email_to_domain

__all__ = ["CommitDB", "email_to_domain"]
