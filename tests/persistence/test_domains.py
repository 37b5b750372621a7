"""Tests for persistence/domains.py."""

import pytest

from git_cohorts.persistence import email_to_domain


@pytest.mark.parametrize(
    "email, domain",
    [
        ("jane@example.org", "example.org"),
        ("Jane@Mail.Example.ORG", "example.org"),
        ("joe@cs.ox.ac.uk", "ox.ac.uk"),
        ("kim@mail.unsw.edu.au", "unsw.edu.au"),
        ("x@users.noreply.github.com", "github.com"),
        ("root@localhost", "localhost"),
        ("no-at-sign.example.com", "example.com"),
        ("", ""),
    ],
)
def test_email_to_domain(email, domain):
    assert email_to_domain(email) == domain
