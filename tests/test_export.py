from __future__ import annotations

import pandas as pd
import pytest

from lead_crawler.export import EXPORT_COLUMNS, export_csv, export_leads, leads_to_dataframe
from lead_crawler.models import EnrichedLead, LeadSource, RawLead, WealthSignal


def _sample_leads():
    clinic = EnrichedLead(
        lead=RawLead(entity="Bright Clinic", website="https://brightclinic.com"),
        email="jane@gmail.com",
        phone="+1 (512) 555-0100",
        location="Austin",
        wealth_signal=WealthSignal.HIGH,
        lead_score=82,
        estimated_revenue="$100k+",
        social_profiles={"instagram": "https://www.instagram.com/brightclinic", "tiktok": "https://www.tiktok.com/@bright"},
    )
    channel = EnrichedLead.from_raw(
        RawLead(
            entity="Austin Dental Tips",
            website="https://www.youtube.com/@austindentaltips",
            source=LeadSource.VIDEO,
            social_profiles={"video": "https://www.youtube.com/@austindentaltips"},
        )
    )
    return [clinic, channel]


def test_leads_to_dataframe_uses_fixed_column_order() -> None:
    dataframe = leads_to_dataframe(_sample_leads())

    assert list(dataframe.columns) == [
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
        "Instagram",
        "LinkedIn",
        "YouTube",
        "Facebook",
        "Twitter",
        "TikTok",
    ]
    first = dataframe.iloc[0]
    assert first["Temperature"] == "Hot"
    assert first["Wealth Signal"] == "High"
    assert first["TikTok"] == "https://www.tiktok.com/@bright"
    second = dataframe.iloc[1]
    assert second["YouTube"] == "https://www.youtube.com/@austindentaltips"
    assert second["Temperature"] == "Cold"
    assert second["Email"] == ""


def test_empty_export_still_has_header_row() -> None:
    assert list(leads_to_dataframe([]).columns) == EXPORT_COLUMNS
    assert export_csv([]).decode("utf-8").strip() == ",".join(EXPORT_COLUMNS)


def test_export_csv_returns_bytes_with_header() -> None:
    payload = export_csv(_sample_leads())

    lines = payload.decode("utf-8").splitlines()
    assert lines[0] == ",".join(EXPORT_COLUMNS)
    assert lines[1].startswith("Bright Clinic,jane@gmail.com,+1 (512) 555-0100,Austin,https://brightclinic.com,Hot,82,High")


def test_export_leads_writes_tsv(tmp_path) -> None:
    path = export_leads(_sample_leads(), tmp_path / "leads.tsv")

    dataframe = pd.read_csv(path, sep="\t", keep_default_na=False)
    assert list(dataframe.columns) == EXPORT_COLUMNS
    assert dataframe.loc[0, "Instagram"] == "https://www.instagram.com/brightclinic"


def test_export_leads_writes_excel(tmp_path) -> None:
    path = export_leads(_sample_leads(), tmp_path / "leads.xlsx")

    dataframe = pd.read_excel(path, engine="openpyxl")
    assert list(dataframe.columns) == EXPORT_COLUMNS
    assert dataframe.loc[0, "Entity"] == "Bright Clinic"


def test_export_leads_rejects_unknown_extension(tmp_path) -> None:
    with pytest.raises(ValueError):
        export_leads(_sample_leads(), tmp_path / "leads.json")
