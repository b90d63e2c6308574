import pytest

from feedback.sections import (
    SectionMatcher,
    canonical_student_section,
    matches,
    normalize_section,
    parse_section,
    section_variants,
    year_to_semester,
)


@pytest.mark.parametrize("student", ["2B", "b", "  ", "", None, "02B"])
def test_empty_targets_never_match(student):
    assert matches(student, []) is False
    assert matches(student, None) is False


@pytest.mark.parametrize("targets", [["2B"], ["B", "1B"], ["", "  "]])
def test_blank_student_section_never_matches(targets):
    assert matches("", targets) is False
    assert matches("   ", targets) is False
    assert matches(None, targets) is False


@pytest.mark.parametrize(
    "student, targets, expected",
    [
        ("2B", ["2B", "2C"], True),
        ("2b", ["2B", "2C"], True),
        (" 2b ", ["2B", "2C"], True),
        ("2B", ["2b", "2c"], True),
        ("B", ["2B", "2C"], True),
        ("2A", ["2B", "2C"], False),
        ("1B", ["2B", "2C"], False),
        ("02B", ["2B"], True),
        ("2B", ["02B"], True),
        ("2B", ["B"], True),
        ("C", ["2B", "4C"], True),
        ("B", ["5B"], False),
        ("12B", ["12B"], True),
        ("12B", ["B"], True),
        ("12B", ["2B"], False),
        ("2AB", ["2AB"], True),
        ("2AB", ["2A"], False),
        ("2A", ["2AB"], False),
    ],
)
def test_matches(student, targets, expected):
    assert matches(student, targets) is expected


def test_multi_digit_prefix_keeps_letter_suffix():
    assert section_variants("12B", year_prefixes=("1",)) == {"12B", "12b", "B", "b"}


def test_matching_leaves_targets_untouched():
    targets = [" 2b ", "02C", None, "B"]
    before = list(targets)

    assert matches("2C", targets) is True
    assert SectionMatcher().matches("b", targets) is True
    assert targets == before


def test_bare_letter_uses_configured_prefixes(settings):
    settings.FEEDBACK_SECTION_YEAR_PREFIXES = ("1",)
    assert matches("B", ["2B"]) is False
    assert matches("B", ["1B"]) is True


def test_explicit_prefixes_override_settings():
    matcher = SectionMatcher(year_prefixes=["1", "2"])
    assert matcher.matches("B", ["2B"]) is True
    assert matcher.matches("B", ["3B"]) is False
    assert repr(matcher) == "SectionMatcher(year_prefixes=('1', '2'))"


def test_non_string_input_is_coerced():
    assert matches(2, ["2"]) is True
    assert matches("2B", [None, "2B"]) is True


def test_variants_for_bare_letter():
    variants = section_variants("b", year_prefixes=("1", "2"))
    assert {"B", "1B", "2B", "b", "1b", "2b"} == variants


def test_variants_for_zero_padded_section():
    variants = section_variants("02B", year_prefixes=("1",))
    assert {"02B", "2B", "B"} <= variants


def test_variants_of_blank_are_empty():
    assert section_variants("   ") == set()


def test_normalize_section():
    assert normalize_section("  2b ") == "2B"
    assert normalize_section(None) == ""


@pytest.mark.parametrize(
    "value, expected",
    [("2b", (2, "B")), ("4D", (4, "D")), ("2E", None), ("B", None), ("12B", None), ("", None)],
)
def test_parse_section(value, expected):
    assert parse_section(value) == expected


def test_year_to_semester():
    assert [year_to_semester(y) for y in (1, 2, 3, 4)] == [1, 3, 5, 7]


@pytest.mark.parametrize(
    "section, semester, expected",
    [("b", 1, "1B"), ("B", 4, "2B"), ("c", None, "1C"), (" 3a ", 5, "3A"), ("X", 3, "X")],
)
def test_canonical_student_section(section, semester, expected):
    assert canonical_student_section(section, semester) == expected
