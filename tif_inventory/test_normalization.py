"""
Tests for the value_normalizer module.
"""
import sys
from pathlib import Path

# Add parent directory to path for imports when running directly
sys.path.insert(0, str(Path(__file__).parent.parent))

from tif_inventory.value_normalizer import Tag, normalize_tag_value, normalize_scalar, first_value


def test_absent_tags():
    """Missing tags and missing values normalize to '-'."""
    print("=" * 60)
    print("ABSENT TAG TEST")
    print("=" * 60)

    assert normalize_tag_value(None) == '-'
    assert normalize_tag_value(Tag()) == '-'
    assert normalize_tag_value(Tag(None)) == '-'
    assert normalize_tag_value(object()) == '-'  # no `value` attribute

    print("[PASS] Absent tag test passed")


def test_string_values():
    """Strings lose NUL padding and surrounding whitespace."""
    print("\n" + "=" * 60)
    print("STRING VALUE TEST")
    print("=" * 60)

    test_cases = [
        ("Nikon", "Nikon"),
        ("  Nikon  ", "Nikon"),
        ("Nikon\x00\x00\x00", "Nikon"),
        ("\x00APPL", "APPL"),
        ("Nikon\x00Scan", "Nikon Scan"),
        ("", "-"),
        ("   ", "-"),
        ("\x00\x00\x00\x00", "-"),
        ("2021:06:15 10:30:00", "2021:06:15 10:30:00"),
    ]

    for raw, expected in test_cases:
        result = normalize_scalar(raw)
        print(f"  {raw!r} -> {result!r}")
        assert result == expected, f"{raw!r}: expected {expected!r}, got {result!r}"

    print("[PASS] String value test passed")


def test_numeric_values():
    """Zero is '0'; any other number keeps its exact decimal form."""
    print("\n" + "=" * 60)
    print("NUMERIC VALUE TEST")
    print("=" * 60)

    test_cases = [
        (0, "0"),
        (0.0, "0"),
        (float('nan'), "0"),
        (1, "1"),
        (-7, "-7"),
        (4096, "4096"),
        (2.5, "2.5"),
        (3.0, "3"),
        (10 ** 20, "100000000000000000000"),
    ]

    for raw, expected in test_cases:
        result = normalize_scalar(raw)
        print(f"  {raw!r} -> {result!r}")
        assert result == expected, f"{raw!r}: expected {expected!r}, got {result!r}"

    print("[PASS] Numeric value test passed")


def test_other_values():
    """Anything that isn't a string or a number is '-'."""
    for raw in (None, b"bytes", {"a": 1}, object(), True):
        assert normalize_scalar(raw) == '-', f"{raw!r} should normalize to '-'"
    print("[PASS] Other value test passed")


def test_list_values_first_wins():
    """Only the first element of a list value is used."""
    print("\n" + "=" * 60)
    print("LIST VALUE TEST")
    print("=" * 60)

    assert normalize_tag_value(Tag([2048, 1024])) == "2048"
    assert normalize_tag_value(Tag(["  first ", "second"])) == "first"
    assert normalize_tag_value(Tag([0, 5])) == "0"
    assert normalize_tag_value(Tag(["", "second"])) == "-"
    assert normalize_tag_value(Tag([])) == "-"
    assert normalize_tag_value(Tag((8, 8, 8))) == "8"
    assert first_value([]) is None

    print("[PASS] List value test passed")


def test_totality_and_idempotence():
    """Every input maps to a string, and normalized strings are fixed points."""
    inputs = [None, "", " x ", "\x00", 0, 1, -1.5, [], [None], ["a"], [[1]], b"", {}, float('inf')]
    for raw in inputs:
        result = normalize_tag_value(Tag(raw))
        assert isinstance(result, str), f"{raw!r} produced {result!r}"
        assert normalize_scalar(result) == result, f"{result!r} is not stable"

    for already_clean in ["Nikon", "Scan 2.0", "-", "0", "tiff"]:
        assert normalize_tag_value(Tag(already_clean)) == already_clean

    print("[PASS] Totality and idempotence test passed")


if __name__ == "__main__":
    tests = [
        test_absent_tags,
        test_string_values,
        test_numeric_values,
        test_other_values,
        test_list_values_first_wins,
        test_totality_and_idempotence,
    ]

    failed = 0
    for test in tests:
        try:
            test()
        except AssertionError as e:
            print(f"[FAIL] {test.__name__}: {e}")
            failed += 1

    print(f"\nTotal: {len(tests) - failed} passed, {failed} failed")
    sys.exit(1 if failed else 0)
