from __future__ import annotations

import pytest

from account_service.domain.validation import (
    is_valid_email,
    is_valid_name,
    is_valid_password,
    normalize_email,
)


@pytest.mark.parametrize("name", ["A", "Ada", "Mary-Jane", "O'Neil", "Jean Luc", "Zoë", "St. John"])
def test_valid_names(name):
    assert is_valid_name(name)


@pytest.mark.parametrize("name", ["", " ", "-Ada", "R2D2", "Ada!", "x" * 101, None])
def test_invalid_names(name):
    assert not is_valid_name(name)


@pytest.mark.parametrize("email", ["a@b.com", "first.last+tag@mail.co.uk"])
def test_valid_emails(email):
    assert is_valid_email(email)


@pytest.mark.parametrize("email", ["", "plain", "a@", "@b.com", "a b@c.com", "a@b", None])
def test_invalid_emails(email):
    assert not is_valid_email(email)


def test_normalize_email_trims_and_lowercases():
    assert normalize_email("  Ada@Lovelace.ORG ") == "ada@lovelace.org"


@pytest.mark.parametrize("password", ["Str0ng!pass", "Abcdefg1", "Ünïcödé9x"])
def test_strong_passwords(password):
    assert is_valid_password(password)


@pytest.mark.parametrize(
    "password",
    [
        "Sh0rt",
        "alllowercase1",
        "ALLUPPERCASE1",
        "NoDigitsHere",
        "Aa1" + "x" * 70,
        None,
        12345678,
    ],
)
def test_weak_passwords(password):
    assert not is_valid_password(password)
