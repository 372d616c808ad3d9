import pytest

from features.semver import Version, intersects_below, min_version, parse_version, valid_range


@pytest.mark.parametrize(
    "text, expected",
    [
        ("6.0.0", Version(6, 0, 0)),
        ("v8.10.1", Version(8, 10, 1)),
        ("10.0.0-rc.1", Version(10, 0, 0, ("rc", "1"))),
        ("7.0.0+build.5", Version(7, 0, 0)),
        ("6", None),
        ("6.0", None),
        ("01.0.0", None),
    ],
)
def test_parse_version(text, expected):
    assert parse_version(text) == expected


def test_prerelease_sorts_below_its_release():
    ordered = ["6.0.0-alpha", "6.0.0-alpha.1", "6.0.0-alpha.beta", "6.0.0-beta", "6.0.0-beta.2", "6.0.0-beta.11", "6.0.0"]
    keys = [parse_version(text).precedence() for text in ordered]
    assert keys == sorted(keys)
    assert len(set(keys)) == len(keys)
    assert parse_version("5.9.9").precedence() < parse_version("6.0.0-alpha").precedence()


@pytest.mark.parametrize(
    "range_text, expected",
    [
        (">=6.0.0", Version(6, 0, 0)),
        (">6.0.0", Version(6, 0, 1)),
        (">6", Version(7, 0, 0)),
        ("^4.2.0", Version(4, 2, 0)),
        ("~0.12", Version(0, 12, 0)),
        ("6.x", Version(6, 0, 0)),
        ("*", Version(0, 0, 0)),
        ("<8", Version(0, 0, 0)),
        ("4.0.0 - 6.0.0", Version(4, 0, 0)),
        (">=8 || >=6.5 <7", Version(6, 5, 0)),
        (">= 7.6.0", Version(7, 6, 0)),
        (">=6.0.0-beta", Version(6, 0, 0, ("beta",))),
        (">6.0.0-beta", Version(6, 0, 0, ("beta", "0"))),
        (">=6.0.0 || >=6.0.0-rc.1", Version(6, 0, 0, ("rc", "1"))),
    ],
)
def test_min_version(range_text, expected):
    assert min_version(range_text) == expected


@pytest.mark.parametrize("text", ["banana", ">=six", "6.0.0 -", ">=6.0.0-", None, 6])
def test_invalid_ranges(text):
    assert valid_range(text) is None


def test_valid_range_normalizes_alternatives():
    assert valid_range(">=8||6.x") == ">=8 || 6.x"
    assert valid_range("") == "*"
    assert valid_range(">=6.0.0-beta") == ">=6.0.0-beta"


def test_min_version_rejects_invalid_range():
    with pytest.raises(ValueError):
        min_version("not a range")


def test_intersects_below():
    assert intersects_below(">=4.0.0", "6.0.0")
    assert not intersects_below(">=6.0.0", "6.0.0")
    assert not intersects_below(">=7.0.0", "6.0.0")
    assert intersects_below(">=7 || 5.x", "6.0.0")


def test_prerelease_range_intersects_below_its_release():
    assert intersects_below(">=6.0.0-beta", "6.0.0")
    assert intersects_below(">6.0.0-beta", "6.0.0")
    assert not intersects_below(">=6.0.0-beta", "5.0.0")


def test_intersects_below_rejects_invalid_threshold():
    with pytest.raises(ValueError):
        intersects_below(">=6.0.0", "6")
