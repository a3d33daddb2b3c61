import zipfile
from pathlib import Path

from badge_merge.export import (
    DISCREPANCY_COLUMNS,
    REQUIREMENT_COLUMNS,
    discrepancies_frame,
    flatten_canonical,
    sanitize_for_excel,
    write_review_workbook,
)
from badge_merge.merger import merge

CSV_DATA = {
    "badges": [
        {"badgeName": "Camping", "versionYear": 2025, "requirementIds": ["1", "2a(1)", "9"]},
        {"badgeName": "Hiking", "versionYear": 2024, "requirementIds": ["1"]},
    ]
}
SCRAPED = {
    "badges": [
        {
            "badgeName": "Camping",
            "versionYear": 2025,
            "requirements": [
                {"displayLabel": "1", "description": "=Explain", "hasCheckbox": True},
                {"displayLabel": "2", "description": "Do the following"},
                {"displayLabel": "2a(1)", "description": "Pitch a tent", "parentNumber": "2", "hasCheckbox": True},
            ],
        }
    ]
}


def test_sanitize_for_excel():
    assert sanitize_for_excel("=SUM(A1)") == "'=SUM(A1)"
    assert sanitize_for_excel("-list") == "'-list"
    assert sanitize_for_excel(None) == ""
    assert sanitize_for_excel(3) == "3"


def test_flatten_canonical_rows_in_tree_order():
    canonical, _ = merge(CSV_DATA, SCRAPED, generated_at="now")

    frame = flatten_canonical(canonical)

    assert list(frame.columns) == REQUIREMENT_COLUMNS
    camping = frame[frame["Badge"] == "Camping"]
    assert list(camping["Scoutbook_ID"]) == ["1", "header_0_2", "2a(1)"]
    assert list(camping["Depth"]) == [0, 0, 1]
    leaf = camping.iloc[2]
    assert leaf["Display_Number"] == "2a1"
    assert leaf["Base_Number"] == "2"
    assert leaf["Parent_Scoutbook_ID"] == "header_0_2"
    assert camping.iloc[1]["Display_Number"] == ""


def test_discrepancies_frame():
    _, report = merge(CSV_DATA, SCRAPED, generated_at="now")

    frame = discrepancies_frame(report)

    assert list(frame.columns) == DISCREPANCY_COLUMNS
    assert sorted(frame["Type"]) == ["badge_not_accessible", "csv_not_in_ui"]
    assert frame[frame["Type"] == "csv_not_in_ui"].iloc[0]["Scoutbook_ID"] == "9"


def test_write_review_workbook(tmp_path: Path):
    canonical, report = merge(CSV_DATA, SCRAPED, generated_at="now")

    out = write_review_workbook(canonical, report, tmp_path / "review" / "merge.xlsx")

    assert out.exists()
    with zipfile.ZipFile(out) as archive:
        workbook_xml = archive.read("xl/workbook.xml").decode("utf-8")
        shared = archive.read("xl/sharedStrings.xml").decode("utf-8")
    for sheet in ("Summary", "Requirements", "Discrepancies"):
        assert f'name="{sheet}"' in workbook_xml
    assert "'=Explain" in shared


def test_number_columns_for_option_and_legacy_ids():
    csv_data = {"badges": [{"badgeName": "Multisport", "versionYear": 2025, "requirementIds": ["6A(a)(1)", "9b2", "4a1 Triathlon Option"]}]}
    canonical, _ = merge(csv_data, None, generated_at="now")

    frame = flatten_canonical(canonical).set_index("Scoutbook_ID")

    option = frame.loc["6A(a)(1)"]
    assert option["Display_Number"] == "6Aa1"
    assert option["Parent_Number"] == "6A(a)"
    assert option["Option_Letter"] == "A"
    assert bool(option["Is_Option"]) is True
    assert option["Number_Depth"] == 3

    legacy = frame.loc["9b2"]
    assert legacy["Scoutbook_Number"] == "9b(2)"
    assert legacy["Display_Number"] == "9b2"
    assert legacy["Parent_Number"] == "9b"
    assert bool(legacy["Is_Option"]) is False

    assert frame.loc["4a1 Triathlon Option"]["Display_Number"] == "4a1 Triathlon Option"


def test_discrepancies_sorted_by_badge_then_requirement_number():
    csv_data = {
        "badges": [
            {"badgeName": "Camping", "versionYear": 2025, "requirementIds": ["10", "2", "9b"]},
            {"badgeName": "Archery", "versionYear": 2025, "requirementIds": ["1"]},
        ]
    }
    scraped = {"badges": [{"badgeName": "Camping", "versionYear": 2025, "requirements": []}]}
    _, report = merge(csv_data, scraped, generated_at="now")

    frame = discrepancies_frame(report)

    assert list(frame["Badge"]) == ["Archery", "Camping", "Camping", "Camping"]
    assert list(frame["Scoutbook_ID"]) == ["", "2", "9b", "10"]
