"""Export utilities for enriched leads."""
from __future__ import annotations

from pathlib import Path
from typing import List, MutableMapping, Optional, Sequence, Union

import pandas as pd

from .models import EnrichedLead

PathLike = Union[str, Path]

# Downstream spreadsheets and CRM importers key on these exact headers.
SOCIAL_COLUMNS = [
    ("Instagram", ("instagram",)),
    ("LinkedIn", ("linkedin",)),
    ("YouTube", ("youtube", "video")),
    ("Facebook", ("facebook",)),
    ("Twitter", ("twitter",)),
    ("TikTok", ("tiktok",)),
]

EXPORT_COLUMNS: List[str] = [
    "Entity",
    "Email",
    "Phone",
    "Location",
    "Website",
    "Temperature",
    "Lead Score",
    "Wealth Signal",
    "Revenue",
    "Role",
    *(header for header, _ in SOCIAL_COLUMNS),
]


def leads_to_dataframe(leads: Sequence[EnrichedLead]) -> pd.DataFrame:
    """Convert enriched leads into a :class:`pandas.DataFrame` with the export column order."""

    records = [_lead_to_row(lead) for lead in leads]
    return pd.DataFrame(records, columns=EXPORT_COLUMNS)


def _lead_to_row(lead: EnrichedLead) -> MutableMapping[str, object]:
    row: MutableMapping[str, object] = {
        "Entity": lead.entity,
        "Email": lead.email or "",
        "Phone": lead.phone or "",
        "Location": lead.location or "",
        "Website": lead.website or "",
        "Temperature": lead.temperature,
        "Lead Score": lead.lead_score,
        "Wealth Signal": lead.wealth_signal.value,
        "Revenue": lead.estimated_revenue or "",
        "Role": lead.role or "",
    }
    for header, platforms in SOCIAL_COLUMNS:
        row[header] = next((lead.social_profiles[key] for key in platforms if lead.social_profiles.get(key)), "")
    return row


def export_csv(leads: Sequence[EnrichedLead]) -> bytes:
    """Render ``leads`` as UTF-8 CSV bytes, header row included."""

    return leads_to_dataframe(leads).to_csv(index=False).encode("utf-8")


def export_leads(
    leads: Sequence[EnrichedLead],
    path: PathLike,
    *,
    sheet_name: str = "Leads",
    exporter_kwargs: Optional[MutableMapping[str, object]] = None,
) -> Path:
    """Write enriched leads to a CSV, TSV, or Excel file."""

    output_path = Path(path)
    _write_dataframe(leads_to_dataframe(leads), output_path, sheet_name=sheet_name, exporter_kwargs=exporter_kwargs)
    return output_path


def _write_dataframe(
    dataframe: pd.DataFrame,
    path: Path,
    *,
    sheet_name: str,
    exporter_kwargs: Optional[MutableMapping[str, object]],
) -> None:
    exporter_kwargs = dict(exporter_kwargs or {})
    suffix = path.suffix.lower()

    if suffix in {".csv", ".tsv"}:
        if suffix == ".tsv":
            exporter_kwargs.setdefault("sep", "\t")
        dataframe.to_csv(path, index=False, **exporter_kwargs)
        return

    if suffix in {".xlsx", ".xlsm"}:
        engine = exporter_kwargs.pop("engine", None) or "openpyxl"
        dataframe.to_excel(path, index=False, sheet_name=sheet_name, engine=engine, **exporter_kwargs)
        return

    raise ValueError(f"Unsupported export file extension: {suffix}")


__all__ = ["EXPORT_COLUMNS", "export_csv", "export_leads", "leads_to_dataframe"]
