"""Flat tabular views of a merge run for spreadsheet review."""

from __future__ import annotations

import logging
from functools import cmp_to_key
from pathlib import Path
from typing import Any, Dict, List, Union

import pandas as pd

from .hierarchy import iter_requirements
from .requirement_number import (
    compare_requirement_numbers,
    extract_base_number,
    is_option_requirement,
    normalize_to_scoutbook,
    parent_requirement_number,
    parse_requirement_number,
    to_display_format,
)
from .schema import CanonicalOutput, CanonicalRequirement, DiscrepancyReport

REQUIREMENT_COLUMNS = [
    "Badge",
    "Code",
    "Version_Year",
    "Scoutbook_ID",
    "Requirement_Number",
    "Display_Number",
    "Scoutbook_Number",
    "Base_Number",
    "Parent_Number",
    "Option_Letter",
    "Is_Option",
    "Number_Depth",
    "Is_Header",
    "Depth",
    "Parent_Scoutbook_ID",
    "Display_Order",
    "Link_Count",
    "Description",
]

DISCREPANCY_COLUMNS = [
    "Type",
    "Badge",
    "Version_Year",
    "Scoutbook_ID",
    "UI_Label",
    "Description",
    "Suggested_Action",
]


def sanitize_for_excel(val: Any) -> str:
    """Prevent formula injection in Excel."""
    if val is None:
        return ""
    s = str(val)
    if s.startswith(("=", "+", "-", "@")):
        return "'" + s
    return s


def _number_columns(req: CanonicalRequirement) -> Dict[str, Any]:
    """Structural breakdown of a completable requirement id; blank for headers."""
    if req.is_header:
        return {
            "Display_Number": "",
            "Scoutbook_Number": "",
            "Parent_Number": "",
            "Option_Letter": "",
            "Is_Option": False,
            "Number_Depth": 0,
        }
    scoutbook = normalize_to_scoutbook(req.scoutbook_id)
    parts = parse_requirement_number(scoutbook)
    return {
        "Display_Number": to_display_format(scoutbook),
        "Scoutbook_Number": scoutbook,
        "Parent_Number": parent_requirement_number(scoutbook) or "",
        "Option_Letter": parts.option_letter or "",
        "Is_Option": is_option_requirement(scoutbook),
        "Number_Depth": parts.depth,
    }


def flatten_canonical(canonical: CanonicalOutput) -> pd.DataFrame:
    """One row per requirement, pre-order within each badge version."""
    rows: List[Dict[str, Any]] = []
    for badge in canonical.merit_badges:
        for version in badge.versions:
            for req, depth in iter_requirements(version.requirements):
                number = req.requirement_number or req.scoutbook_id
                row = {
                    "Badge": badge.name,
                    "Code": badge.code,
                    "Version_Year": version.version_year,
                    "Scoutbook_ID": req.scoutbook_id,
                    "Requirement_Number": req.requirement_number,
                    "Base_Number": extract_base_number(number),
                    "Is_Header": req.is_header,
                    "Depth": depth,
                    "Parent_Scoutbook_ID": req.parent_scoutbook_id or "",
                    "Display_Order": req.display_order,
                    "Link_Count": len(req.links),
                    "Description": req.description,
                }
                row.update(_number_columns(req))
                rows.append(row)
    return pd.DataFrame(rows, columns=REQUIREMENT_COLUMNS)


def discrepancies_frame(report: DiscrepancyReport) -> pd.DataFrame:
    """Discrepancies grouped by badge, newest version first, ids in requirement order."""
    by_number = cmp_to_key(compare_requirement_numbers)
    ordered = sorted(
        report.discrepancies,
        key=lambda d: (d.badge_name.lower(), -d.version_year, by_number(d.scoutbook_id or "")),
    )
    rows = [
        {
            "Type": d.type.value,
            "Badge": d.badge_name,
            "Version_Year": d.version_year,
            "Scoutbook_ID": d.scoutbook_id or "",
            "UI_Label": d.ui_label or "",
            "Description": d.description,
            "Suggested_Action": d.suggested_action,
        }
        for d in ordered
    ]
    return pd.DataFrame(rows, columns=DISCREPANCY_COLUMNS)


def write_review_workbook(
    canonical: CanonicalOutput,
    report: DiscrepancyReport,
    output_path: Union[str, Path],
) -> Path:
    """Write Summary / Requirements / Discrepancies sheets to an .xlsx file."""
    output_path = Path(output_path)
    output_path.parent.mkdir(parents=True, exist_ok=True)

    req_df = flatten_canonical(canonical)
    disc_df = discrepancies_frame(report)

    counts = {
        "Badges": len(canonical.merit_badges),
        "Versions": sum(len(b.versions) for b in canonical.merit_badges),
        "Requirements": len(req_df),
        "Headers": int(req_df["Is_Header"].sum()) if not req_df.empty else 0,
        "Discrepancies": report.total_discrepancies,
    }
    for dtype, count in sorted(report.by_type.items()):
        counts[f"  {dtype}"] = count

    with pd.ExcelWriter(output_path, engine="xlsxwriter") as writer:
        workbook = writer.book
        fmt_header = workbook.add_format({"bold": True, "bg_color": "#D3D3D3", "border": 1})

        summary_df = pd.DataFrame(list(counts.items()), columns=["Metric", "Count"])
        summary_df.to_excel(writer, sheet_name="Summary", index=False)
        ws_summary = writer.sheets["Summary"]
        ws_summary.set_column("A:A", 28)
        ws_summary.set_column("B:B", 12)
        ws_summary.write_url("D2", "internal:'Requirements'!A1", string="Go to Requirements")
        ws_summary.write_url("D3", "internal:'Discrepancies'!A1", string="Go to Discrepancies")

        for sheet_name, frame in (("Requirements", req_df), ("Discrepancies", disc_df)):
            safe = frame.map(sanitize_for_excel) if not frame.empty else frame
            safe.to_excel(writer, sheet_name=sheet_name, index=False)
            ws = writer.sheets[sheet_name]
            for col_idx, col_name in enumerate(frame.columns):
                ws.write(0, col_idx, col_name, fmt_header)
            ws.freeze_panes(1, 0)
            if len(frame.columns):
                ws.autofilter(0, 0, max(len(frame), 1), len(frame.columns) - 1)

    logging.info(f"Wrote review workbook to {output_path}")
    return output_path
