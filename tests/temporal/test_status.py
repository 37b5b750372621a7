"""Tests for ingestion progress reporting."""

import io

from rich.console import Console

from conftest import make_commit, ts
from git_cohorts.temporal import IngestStatus, has_promisor


def quiet_console():
    return Console(file=io.StringIO(), width=120)


class TestIngestStatus:
    def test_counts_commits_per_repo(self):
        with IngestStatus(console=quiet_console()) as status:
            status.begin_repo("glib")
            for month in (1, 2, 2):
                status.log_commit(make_commit("A", ts(2020, month)))
            assert status.n_commits == 3
            assert status.describe() == "glib: 2020-02 (3 commits)"
            status.end_repo()

            status.begin_repo("gtk")
            assert status.n_commits == 0
            assert status.describe() == "gtk: 0 commits"

    def test_month_shown_in_author_offset(self):
        with IngestStatus(console=quiet_console()) as status:
            status.begin_repo("glib")
            status.log_commit(make_commit("A", ts(2019, 12, 31) + 23 * 3600 + 1800, offset=3600))
            assert status.describe() == "glib: 2020-01 (1 commits)"

    def test_undated_commits_are_counted(self):
        with IngestStatus(console=quiet_console()) as status:
            status.begin_repo("glib")
            status.log_commit(make_commit("A", None))
            assert status.describe() == "glib: 1 commits"

    def test_warn_names_repo(self):
        console = quiet_console()
        with IngestStatus(console=console) as status:
            status.begin_repo("glib")
            status.warn("promisor remote")
        assert "glib: promisor remote" in console.file.getvalue()


def test_plain_directory_is_not_promisor(tmp_path):
    assert has_promisor(tmp_path) is False
