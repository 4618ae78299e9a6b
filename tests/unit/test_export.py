import csv
import json
from pathlib import Path

import pytest

from leads.pipeline.export import LeadExporter, LeadExportError, load_existing_leads
from leads.schemas import LEAD_COLUMNS, Lead, LeadType


def sample_leads():
    return [
        Lead(name="John Smith", title="President", company="Acme Builders", phone="+15551234567",
             email="john@acme.com", city="Austin", state="TX", company_size="50-200 employees",
             website="https://acme.com", source_url="https://acme.com/leadership", verified=True),
        Lead(name="Amy Lee", title="Managing Broker", company="Peak Realty", phone="+15559876543",
             website="https://peakrealty.com", source_url="https://peakrealty.com/team",
             lead_type=LeadType.REAL_ESTATE),
    ]


def test_to_csv_headings_and_rows(tmp_path: Path):
    exporter = LeadExporter(output_dir=tmp_path)
    path = exporter.to_csv(sample_leads(), filename="leads.csv")

    with open(path, newline="", encoding="utf-8") as f:
        reader = csv.DictReader(f)
        rows = list(reader)
    assert reader.fieldnames == list(LEAD_COLUMNS.values())
    assert rows[0]["Name"] == "John Smith"
    assert rows[0]["Verified"] == "Y"
    assert rows[0]["Lead Type"] == "construction"
    assert rows[1]["Verified"] == "N"
    assert rows[1]["Lead Type"] == "real-estate"
    assert rows[1]["Email"] == ""


def test_to_json_fields(tmp_path: Path):
    exporter = LeadExporter(output_dir=tmp_path)
    path = exporter.to_json(sample_leads(), filename="leads.json")

    data = json.loads(path.read_text(encoding="utf-8"))
    assert len(data) == 2
    assert data[0]["phone"] == "+15551234567"
    assert data[0]["verified"] is True
    assert data[1]["lead_type"] == "real-estate"


def test_to_both_and_timestamped_names(tmp_path: Path):
    exporter = LeadExporter(output_dir=tmp_path / "nested")
    csv_path, json_path = exporter.to_both(sample_leads(), base_filename="run1.csv")
    assert csv_path.name == "run1.csv"
    assert json_path.name == "run1.json"

    auto = exporter.to_csv(sample_leads())
    assert auto.name.startswith("leads_") and auto.suffix == ".csv"


def test_empty_export_raises(tmp_path: Path):
    with pytest.raises(ValueError):
        LeadExporter(output_dir=tmp_path).to_csv([])


@pytest.mark.parametrize("fmt", ["csv", "json"])
def test_previous_export_loads_back(tmp_path: Path, fmt):
    exporter = LeadExporter(output_dir=tmp_path)
    leads = sample_leads()
    path = exporter.to_csv(leads, "prev.csv") if fmt == "csv" else exporter.to_json(leads, "prev.json")

    loaded = load_existing_leads(path)
    assert loaded == leads


def test_load_existing_errors(tmp_path: Path):
    with pytest.raises(LeadExportError):
        load_existing_leads(tmp_path / "missing.csv")

    txt = tmp_path / "leads.txt"
    txt.write_text("x", encoding="utf-8")
    with pytest.raises(LeadExportError):
        load_existing_leads(txt)

    bad = tmp_path / "bad.json"
    bad.write_text("{not json", encoding="utf-8")
    with pytest.raises(LeadExportError):
        load_existing_leads(bad)

    obj = tmp_path / "obj.json"
    obj.write_text('{"name": "x"}', encoding="utf-8")
    with pytest.raises(LeadExportError):
        load_existing_leads(obj)


def test_export_stats(tmp_path: Path):
    stats = LeadExporter(output_dir=tmp_path).get_export_stats(sample_leads())
    assert stats["total_leads"] == 2
    assert stats["verified"] == 1
    assert stats["with_email"] == 1
    assert stats["lead_types"] == {"construction": 1, "real-estate": 1}
