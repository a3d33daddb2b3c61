import pytest

from badge_merge.normalize import LabelKind, classify_label, is_main_number, label_level, normalize_id


def test_normalize_id_equates_label_renderings():
    assert normalize_id("2(a)") == normalize_id("2a") == normalize_id("2a.") == "2a"


def test_normalize_id_collapses_whitespace_and_case():
    assert normalize_id("  4A1   Triathlon  Option ") == "4a1 triathlon option"
    assert normalize_id("2d[1]") == "2d1"
    assert normalize_id("") == ""


@pytest.mark.parametrize("raw", ["2(a).", "5 Option A(1)", "6a  Avian", "x..", "[b] . ", "1a. ."])
def test_normalize_id_is_idempotent(raw):
    once = normalize_id(raw)
    assert normalize_id(once) == once


@pytest.mark.parametrize(
    "label,description,kind",
    [
        ("1", "", LabelKind.MAIN_NUMBER),
        ("20", "", LabelKind.MAIN_NUMBER),
        ("(1)", "", LabelKind.SUB_NUMBER),
        ("[2]", "", LabelKind.SUB_NUMBER),
        ("(a)", "", LabelKind.LETTER),
        ("b.", "", LabelKind.LETTER),
        ("4a1", "", LabelKind.COMPOSITE),
        ("25", "", LabelKind.COMPOSITE),
        ("", "Avian Option", LabelKind.NAMED_OPTION),
        ("", "Do the following:", LabelKind.UNLABELED),
        ("Opt A", "", LabelKind.UNKNOWN),
    ],
)
def test_classify_label(label, description, kind):
    assert classify_label(label, description) is kind


def test_label_level_bands():
    assert label_level("3") == 0
    assert label_level("", "Triathlon Option") == 1
    assert label_level("(c)") == 2
    assert label_level("(2)") == 3
    assert label_level("4a1") == 3
    assert label_level("4a") == 2
    assert label_level("", "Complete the following") == 0


def test_main_number_excludes_wrapped_and_large():
    assert is_main_number("7")
    assert not is_main_number("(7)")
    assert not is_main_number("21")
    assert is_main_number("21", main_max=30)
