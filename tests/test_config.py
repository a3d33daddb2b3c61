from pathlib import Path

import pytest

from badge_merge.config import (
    DEFAULT_CONFIG,
    DEFAULT_OPTION_MAPPINGS,
    load_merge_config,
    merge_config_from_dict,
)


def test_defaults():
    assert DEFAULT_CONFIG.main_requirement_max == 20
    assert DEFAULT_CONFIG.source == "merge_csv_with_ui.py"
    assert DEFAULT_CONFIG.is_eagle_required("  camping ")
    assert not DEFAULT_CONFIG.is_eagle_required("Archery")
    assert DEFAULT_OPTION_MAPPINGS["beef cattle"] == "beef"


def test_override_mappings_take_precedence():
    config = merge_config_from_dict({"option_mappings": {"Beef Cattle": "cattle", "Alpaca": "alp"}})

    keys = list(config.option_mappings)
    assert keys[:2] == ["beef cattle", "alpaca"]
    assert config.option_mappings["beef cattle"] == "cattle"
    assert config.option_mappings["avian"] == DEFAULT_OPTION_MAPPINGS["avian"]


def test_replace_mappings_drops_builtins():
    config = merge_config_from_dict({"option_mappings": {"alpaca": "alp"}, "replace_option_mappings": True})
    assert dict(config.option_mappings) == {"alpaca": "alp"}


def test_scalar_fields_and_flags():
    config = merge_config_from_dict(
        {
            "eagle_required": "Archery",
            "source": "nightly",
            "main_requirement_max": "25",
            "report_unmatched_checkboxes": "yes",
            "report_orphan_scrapes": False,
        }
    )
    assert config.eagle_required == ("Archery",)
    assert config.source == "nightly"
    assert config.main_requirement_max == 25
    assert config.report_unmatched_checkboxes is True
    assert config.report_orphan_scrapes is False


@pytest.mark.parametrize(
    "data",
    [
        {"option_mappings": ["avian"]},
        {"eagle_required": 3},
        {"main_requirement_max": "many"},
        {"report_orphan_scrapes": "sometimes"},
    ],
)
def test_invalid_values_raise(data):
    with pytest.raises(ValueError):
        merge_config_from_dict(data)


def test_unknown_key_warns(caplog):
    with caplog.at_level("WARNING"):
        config = merge_config_from_dict({"colour": "blue"})
    assert config == DEFAULT_CONFIG
    assert "colour" in caplog.text


def test_load_merge_config_from_yaml(tmp_path: Path):
    path = tmp_path / "merge.yaml"
    path.write_text("source: weekly\noption_mappings:\n  alpaca: alp\n", encoding="utf-8")

    config = load_merge_config(path)

    assert config.source == "weekly"
    assert config.option_mappings["alpaca"] == "alp"


def test_load_merge_config_errors(tmp_path: Path):
    with pytest.raises(FileNotFoundError):
        load_merge_config(tmp_path / "missing.yaml")

    bad = tmp_path / "bad.yaml"
    bad.write_text("source: [unterminated\n", encoding="utf-8")
    with pytest.raises(ValueError):
        load_merge_config(bad)

    listy = tmp_path / "list.yaml"
    listy.write_text("- a\n- b\n", encoding="utf-8")
    with pytest.raises(ValueError):
        load_merge_config(listy)

    empty = tmp_path / "empty.yaml"
    empty.write_text("", encoding="utf-8")
    assert load_merge_config(empty) is DEFAULT_CONFIG


def test_example_config_loads():
    example = Path(__file__).resolve().parents[1] / "config" / "merge_config.example.yaml"
    config = load_merge_config(example)
    assert config.option_mappings["dairy goat"] == "goat"
    assert config.option_mappings["beef cattle"] == "beef"
    assert config.report_orphan_scrapes is False
