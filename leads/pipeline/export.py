"""
Export Pipeline - CSV/JSON Lead Output and Previous-Run Loading

Writes qualified leads to flat CSV (original column headings) or JSON, and
reads a previous export back in so a new run can deduplicate against it.

Key Features:
- CSV and JSON output, or both with a shared base filename
- Timestamped filenames when none is given
- Previous CSV/JSON exports loaded back as Lead records
"""

import csv
import json
from datetime import datetime as dt
from pathlib import Path
from typing import Dict, List, Optional, Union

from ..schemas import LEAD_COLUMNS, Lead, LeadType


class LeadExportError(Exception):
    """Raised when a lead file cannot be written or read."""


def _timestamp() -> str:
    return dt.now().strftime("%Y%m%d_%H%M%S")


class LeadExporter:
    """
    Exports qualified leads to CSV/JSON files.
    """

    def __init__(self, output_dir: Union[str, Path] = "output"):
        """
        Initialize Lead Exporter.

        Args:
            output_dir: Directory for output files (created if doesn't exist)
        """
        self.output_dir = Path(output_dir)
        self.output_dir.mkdir(parents=True, exist_ok=True)

    def to_csv(self, leads: List[Lead], filename: Optional[str] = None) -> Path:
        """
        Export leads to CSV, one row per lead with the standard headings.

        Args:
            leads: Lead objects to write
            filename: Output filename (auto-generated if None)

        Returns:
            Path to created CSV file
        """
        if not leads:
            raise ValueError("No leads to export")

        if filename is None:
            filename = f"leads_{_timestamp()}.csv"
        csv_path = self.output_dir / filename

        with open(csv_path, 'w', newline='', encoding='utf-8') as csvfile:
            writer = csv.DictWriter(csvfile, fieldnames=list(LEAD_COLUMNS.values()))
            writer.writeheader()
            for lead in leads:
                writer.writerow(lead.to_row())

        print(f"💾 CSV exported: {csv_path} ({len(leads)} leads)")
        return csv_path

    def to_json(self, leads: List[Lead], filename: Optional[str] = None, pretty: bool = True) -> Path:
        """
        Export leads to a JSON array of objects keyed by field name.

        Args:
            leads: Lead objects to write
            filename: Output filename (auto-generated if None)
            pretty: Pretty-print JSON with indentation

        Returns:
            Path to created JSON file
        """
        if not leads:
            raise ValueError("No leads to export")

        if filename is None:
            filename = f"leads_{_timestamp()}.json"
        json_path = self.output_dir / filename

        export_data = [lead.model_dump(mode="json") for lead in leads]
        with open(json_path, 'w', encoding='utf-8') as jsonfile:
            json.dump(export_data, jsonfile, indent=2 if pretty else None, ensure_ascii=False)

        print(f"💾 JSON exported: {json_path} ({len(export_data)} leads)")
        return json_path

    def to_both(self, leads: List[Lead], base_filename: Optional[str] = None) -> tuple[Path, Path]:
        if base_filename is None:
            base_filename = f"leads_{_timestamp()}"
        base_name = Path(base_filename).stem
        csv_path = self.to_csv(leads, f"{base_name}.csv")
        json_path = self.to_json(leads, f"{base_name}.json")
        return csv_path, json_path

    def get_export_stats(self, leads: List[Lead]) -> Dict[str, object]:
        by_type: Dict[str, int] = {t.value: 0 for t in LeadType}
        for lead in leads:
            by_type[lead.lead_type.value] += 1
        return {
            "total_leads": len(leads),
            "with_email": sum(1 for lead in leads if lead.email),
            "verified": sum(1 for lead in leads if lead.verified),
            "lead_types": by_type,
        }


def load_existing_leads(path: Union[str, Path]) -> List[Lead]:
    """
    Load leads from a previous CSV or JSON export.

    Args:
        path: Export file; format chosen by extension (.csv or .json)

    Returns:
        Lead records, in file order

    Raises:
        LeadExportError: file missing, unreadable or of an unknown format
    """
    p = Path(path)
    if not p.exists():
        raise LeadExportError(f"Existing leads file not found: {p}")
    suffix = p.suffix.lower()
    try:
        if suffix == '.csv':
            with open(p, 'r', newline='', encoding='utf-8') as f:
                rows = list(csv.DictReader(f))
        elif suffix == '.json':
            with open(p, 'r', encoding='utf-8') as f:
                rows = json.load(f)
            if not isinstance(rows, list):
                raise LeadExportError(f"Expected a JSON array of leads in {p}")
        else:
            raise LeadExportError(f"Unsupported existing leads format: {p.suffix or '(none)'}")
    except (OSError, ValueError, csv.Error) as e:
        raise LeadExportError(f"Cannot read existing leads from {p}: {e}") from e

    leads = [Lead.from_row(row) for row in rows if isinstance(row, dict)]
    print(f"📂 Loaded {len(leads)} existing leads from {p}")
    return leads
