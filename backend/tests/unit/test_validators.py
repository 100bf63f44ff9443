import pytest

from profile_analyzer.core.exceptions import ValidationError
from profile_analyzer.utils.validators import (
    MAX_USERNAME_LENGTH,
    normalize_username,
    validate_username,
)


def test_normalize_username():
    assert normalize_username("  Octocat ") == "octocat"
    assert normalize_username("octocat") == "octocat"


def test_validate_username_accepts_valid_logins():
    valid = ["a", "octocat", "Dhruv-Gajera", "a1-b2-c3", "x" * MAX_USERNAME_LENGTH]

    for username in valid:
        assert validate_username(username) == username.lower(), f"Failed for: {username}"


def test_validate_username_trims_whitespace():
    assert validate_username("  OctoCat  ") == "octocat"


@pytest.mark.parametrize("username", [None, "", "   "])
def test_validate_username_missing(username):
    with pytest.raises(ValidationError) as exc_info:
        validate_username(username)

    assert exc_info.value.message == "Username is required"
    assert exc_info.value.status_code == 400


@pytest.mark.parametrize(
    "username",
    [
        "-octocat",
        "octocat-",
        "octo--cat",
        "octo_cat",
        "octo.cat",
        "octo cat",
        "x" * (MAX_USERNAME_LENGTH + 1),
    ],
)
def test_validate_username_invalid(username):
    with pytest.raises(ValidationError) as exc_info:
        validate_username(username)

    assert exc_info.value.message == "Invalid GitHub username format"
