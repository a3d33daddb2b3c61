import pytest

from badge_merge.config import DEFAULT_OPTION_MAPPINGS, MergeConfig
from badge_merge.options import OptionContextTracker, extract_option_name
from badge_merge.schema import ScrapedRequirement


@pytest.mark.parametrize(
    "description,expected",
    [
        ("Option A—Sprinting", "a"),
        ("Option B - Distance", "b"),
        ("Option 2", "2"),
        ("Beef Cattle Option", "beef"),
        ("Poultry Option", "avian"),
        ("Inline Skating", "line"),
        ("Snowshoeing", "shoe"),
        ("Llama Option", "llama"),
        ("Describe the practice field", None),
        ("", None),
    ],
)
def test_extract_option_name(description, expected):
    assert extract_option_name(description, DEFAULT_OPTION_MAPPINGS) == expected


def _item(label="", description="", checkbox=False):
    return ScrapedRequirement(display_label=label, description=description, has_checkbox=checkbox)


def test_tracker_sets_and_resets_option():
    tracker = OptionContextTracker()

    assert tracker.observe(_item("6", "Do one of the following options")).option is None
    assert tracker.observe(_item("", "Avian Option")).option == "avian"
    assert tracker.observe(_item("(a)", "Raise birds", checkbox=True)).option == "avian"

    position = tracker.observe(_item("7", "Next requirement"))
    assert position.option is None
    assert position.main_req == "7"


def test_tracker_wrapped_number_does_not_reset():
    tracker = OptionContextTracker()
    tracker.observe(_item("", "Ice Skating"))
    assert tracker.observe(_item("(1)", "Skate forward")).option == "ice"


def test_tracker_letter_header_state():
    tracker = OptionContextTracker()
    tracker.observe(_item("2", "Do the following"))

    header = tracker.observe(_item("(d)", "Choose two", checkbox=False))
    assert header.letter == "d"
    assert header.letter_is_header is True

    leaf = tracker.observe(_item("(e)", "Explain", checkbox=True))
    assert leaf.letter == "e"
    assert leaf.letter_is_header is False


def test_option_header_clears_letter():
    tracker = OptionContextTracker()
    tracker.observe(_item("(a)", "Header letter"))
    position = tracker.observe(_item("", "Option B—Swimming"))
    assert position.option == "b"
    assert position.letter is None
    assert position.letter_is_header is False


def test_stale_option_persists_without_reset_marker():
    tracker = OptionContextTracker()
    tracker.observe(_item("", "Horse Option"))
    tracker.observe(_item("(a)", "Groom", checkbox=True))
    # No main number row in between; context is carried forward unchanged.
    assert tracker.observe(_item("(b)", "Unrelated", checkbox=True)).option == "horse"


def test_tracker_uses_configured_mappings():
    config = MergeConfig(option_mappings={"goat": "gt"})
    tracker = OptionContextTracker(config)
    assert tracker.observe(_item("", "Dairy Goat Raising")).option == "gt"
