from __future__ import annotations

import io
import json
from typing import Any

import pandas as pd

PILLAR_COLUMNS = [
    "Pillar",
    "Score",
    "MaturityLevel",
    "Label",
    "Sprints",
    "TasksCompleted",
    "TasksTotal",
    "Findings",
]
SPRINT_COLUMNS = [
    "SprintID",
    "Pillar",
    "SprintName",
    "SprintGoal",
    "TaskID",
    "Task",
    "Priority",
    "DueDate",
    "Completed",
    "CreatedAt",
]


def _to_iso(val: Any) -> Any:
    if hasattr(val, "isoformat"):
        return val.isoformat()
    return val


def _records(df: pd.DataFrame) -> list[dict[str, Any]]:
    cleaned = df.astype(object).where(pd.notna(df), None)
    return cleaned.map(_to_iso).to_dict(orient="records")


def make_json_export_payload(
    mentee: dict[str, Any], pillars_df: pd.DataFrame, sprints_df: pd.DataFrame
) -> str:
    payload = {
        "mentee": {k: _to_iso(v) for k, v in mentee.items()},
        "pillars": _records(pillars_df),
        "sprints": _records(sprints_df),
    }
    return json.dumps(payload, indent=2, ensure_ascii=False)


def make_xlsx_export_bytes(pillars_df: pd.DataFrame, sprints_df: pd.DataFrame) -> bytes:
    """Single-sheet workbook: every task row joined to its pillar."""
    pillars_df = pillars_df if pillars_df is not None else pd.DataFrame(columns=PILLAR_COLUMNS)
    sprints_df = sprints_df if sprints_df is not None else pd.DataFrame(columns=SPRINT_COLUMNS)

    combined = pillars_df.merge(sprints_df, how="left", on="Pillar")
    ordered_columns = PILLAR_COLUMNS + [c for c in SPRINT_COLUMNS if c != "Pillar"]
    for column in ordered_columns:
        if column not in combined.columns:
            combined[column] = pd.NA
    combined = combined[ordered_columns]

    bio = io.BytesIO()
    with pd.ExcelWriter(bio, engine="xlsxwriter") as writer:
        combined.to_excel(writer, index=False, sheet_name="Jornada")
    return bio.getvalue()
