import pytest

from app.core.errors import InvalidNameError
from app.features.games.names import normalize_player_name, preview_player_name


@pytest.mark.parametrize(
    "raw, expected",
    [
        ("jane doe", "Jane Doe"),
        ("  JANE    doe  ", "Jane Doe"),
        ("o'brien", "O'brien"),
        ("mary-kate", "Mary-kate"),
        ("j. r. r. tolkien", "J. R. R. Tolkien"),
        ("a", "A"),
        ("jane\tdoe", "Jane Doe"),
    ],
)
def test_normalize_accepts_and_formats(raw, expected):
    assert normalize_player_name(raw) == expected


@pytest.mark.parametrize(
    "raw",
    [
        "",
        "   ",
        "x" * 51,
        "---",
        "'. -",
        "jane99",
        "jane_doe",
        "zoë",
        "<script>",
    ],
)
def test_normalize_rejects(raw):
    with pytest.raises(InvalidNameError):
        normalize_player_name(raw)


def test_length_is_checked_after_trimming():
    padded = "   " + "a" * 50 + "   "
    assert normalize_player_name(padded) == "A" + "a" * 49


def test_non_string_is_rejected():
    with pytest.raises(InvalidNameError):
        normalize_player_name(42)


@pytest.mark.parametrize("raw", ["jane doe", "  McDONALD  ", "o'neil-smith jr.", "A B  C"])
def test_normalize_is_idempotent(raw):
    once = normalize_player_name(raw)
    assert normalize_player_name(once) == once


def test_preview_returns_none_instead_of_raising():
    assert preview_player_name("jane doe") == "Jane Doe"
    assert preview_player_name("1234") is None
