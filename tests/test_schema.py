import pytest

from badge_merge.schema import (
    CanonicalOutput,
    CsvBadgeVersion,
    CsvData,
    Discrepancy,
    DiscrepancyReport,
    DiscrepancyType,
    ScrapedData,
)


def test_csv_badge_version_dedupes_ids_keeping_first():
    entry = CsvBadgeVersion.from_dict(
        {"badgeName": "Camping", "versionYear": "2025", "requirementIds": ["1", "2a", "1", 3], "totalOccurrences": 9}
    )
    assert entry.version_year == 2025
    assert entry.requirement_ids == ("1", "2a", "3")
    assert entry.to_dict()["totalOccurrences"] == 9


def test_csv_data_requires_badges_list():
    with pytest.raises(ValueError):
        CsvData.from_dict({})
    with pytest.raises(ValueError):
        CsvData.from_dict({"badges": {"Camping": []}})
    with pytest.raises(ValueError):
        CsvData.from_dict({"badges": [{"badgeName": "Camping", "versionYear": "soon"}]})


def test_scraped_data_defaults():
    data = ScrapedData.from_dict(
        {
            "badges": [
                {
                    "badgeName": "Archery",
                    "versionYear": 2024,
                    "requirements": [
                        {"displayLabel": None, "description": "Intro", "parentNumber": ""},
                        {
                            "displayLabel": "(a)",
                            "parentNumber": 1,
                            "hasCheckbox": True,
                            "links": [{"url": "https://example.org", "text": "site"}],
                        },
                    ],
                }
            ]
        }
    )
    intro, leaf = data.badges[0].requirements
    assert intro.display_label == ""
    assert intro.parent_number is None
    assert leaf.parent_number == "1"
    assert leaf.has_checkbox is True
    assert leaf.links[0].type == "external"


def test_discrepancy_omits_unset_optionals():
    found = Discrepancy(
        type=DiscrepancyType.BADGE_NOT_ACCESSIBLE,
        badge_name="Camping",
        version_year=2025,
        description="missing",
        suggested_action="scrape it",
    )
    assert found.to_dict() == {
        "type": "badge_not_accessible",
        "badgeName": "Camping",
        "versionYear": 2025,
        "description": "missing",
        "suggestedAction": "scrape it",
    }


def test_report_counts_by_type():
    items = [
        Discrepancy(DiscrepancyType.CSV_NOT_IN_UI, "A", 2025, "d", "s", scoutbook_id="1"),
        Discrepancy(DiscrepancyType.CSV_NOT_IN_UI, "A", 2025, "d", "s", scoutbook_id="2"),
        Discrepancy(DiscrepancyType.BADGE_NOT_ACCESSIBLE, "B", 2024, "d", "s"),
    ]
    report = DiscrepancyReport.from_discrepancies(items, "now")

    assert report.total_discrepancies == 3
    assert report.by_type == {"csv_not_in_ui": 2, "badge_not_accessible": 1}
    assert report.to_dict()["discrepancies"][1]["scoutbookId"] == "2"


def test_canonical_output_reads_back_what_it_writes():
    payload = {
        "generated_at": "now",
        "source": "merge_csv_with_ui.py",
        "merit_badges": [
            {
                "code": "camping",
                "name": "Camping",
                "category": None,
                "is_eagle_required": True,
                "is_active": True,
                "versions": [
                    {
                        "version_year": 2025,
                        "requirements": [
                            {
                                "scoutbook_id": "header_0_2",
                                "requirement_number": "2",
                                "description": "Do the following",
                                "is_header": True,
                                "display_order": 0,
                                "parent_scoutbook_id": None,
                                "links": [],
                                "children": [
                                    {
                                        "scoutbook_id": "2a",
                                        "requirement_number": "(a)",
                                        "description": "Pitch",
                                        "is_header": False,
                                        "display_order": 1,
                                        "parent_scoutbook_id": "header_0_2",
                                        "links": [{"url": "u", "text": "t", "type": "video"}],
                                        "children": [],
                                    }
                                ],
                            }
                        ],
                    }
                ],
            }
        ],
    }
    assert CanonicalOutput.from_dict(payload).to_dict() == payload


def test_scraped_per_item_fields_default_instead_of_raising():
    entry = ScrapedData.from_dict(
        {
            "badges": [
                {
                    "badgeName": "Archery",
                    "versionYear": 2024,
                    "requirements": [{"displayLabel": "1", "links": [{"text": "no url"}, 7], "visualDepth": None}],
                },
                {"badgeName": "Cooking", "versionYear": 2024, "requirements": "oops"},
            ]
        }
    )
    archery, cooking = entry.badges
    (req,) = archery.requirements
    assert req.visual_depth == 0
    assert [(l.url, l.text) for l in req.links] == [("", "no url")]
    assert cooking.requirements == ()
