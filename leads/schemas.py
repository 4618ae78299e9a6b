"""
Decision-Maker Leads - Pydantic Data Schemas

Core data models for people extracted from company pages, the company
metadata they are combined with, and the qualified Lead records that get
deduplicated and exported.
"""

from enum import Enum
from typing import Dict, List, Optional

from pydantic import BaseModel, ConfigDict, Field, field_validator


class LeadType(str, Enum):
    """Market segment a lead belongs to."""
    CONSTRUCTION = "construction"
    REAL_ESTATE = "real-estate"


class PersonRecord(BaseModel):
    """
    A person found on a single page.

    Produced by the people extractor; immutable once created and only ever
    wrapped into a Lead.
    """
    model_config = ConfigDict(frozen=True)

    name: str = Field(..., description="Person's full name")
    title: str = Field(..., description="Job title as written on the page")
    phone: Optional[str] = Field(default=None, description="E.164 phone number")
    email: Optional[str] = Field(default=None, description="Lowercased email address")
    source: str = Field(..., description="URL of the page the person was found on")

    @field_validator('name', 'title')
    @classmethod
    def validate_non_empty_strings(cls, v):
        """Ensure name and title are not empty."""
        if not v or not v.strip():
            raise ValueError('Field cannot be empty')
        return v.strip()


class CompanyInfo(BaseModel):
    """Company metadata and the candidate pages worth fetching for people."""
    name: str
    website: str
    leadership_pages: List[str] = Field(default_factory=list)
    contact_pages: List[str] = Field(default_factory=list)
    about_pages: List[str] = Field(default_factory=list)
    location: str = Field(default="", description="Raw location text, e.g. 'Austin, TX'")
    description: str = Field(default="", description="Free text used for company size estimation")

    def candidate_pages(self, limit: int = 3) -> List[str]:
        """Leadership, then contact, then about pages; falls back to the website itself."""
        pages: List[str] = []
        for url in self.leadership_pages + self.contact_pages + self.about_pages:
            if url not in pages:
                pages.append(url)
        if not pages:
            pages.append(self.website)
        return pages[:limit]


class EnrichmentResult(BaseModel):
    """Phone/email returned by an enrichment provider."""
    phone: Optional[str] = None
    email: Optional[str] = None
    verified: bool = False


# Export column headings, in order
LEAD_COLUMNS: Dict[str, str] = {
    "name": "Name",
    "title": "Title",
    "company": "Company",
    "phone": "Phone",
    "email": "Email",
    "city": "City",
    "state": "State",
    "company_size": "Company Size",
    "website": "Website",
    "source_url": "Source URL",
    "verified": "Verified",
    "lead_type": "Lead Type",
    "notes": "Notes",
}


class Lead(BaseModel):
    """
    Qualified, exportable record combining a person and their company.

    Owned by the running session until export; after that it is read-only
    historical data (e.g. loaded back as existing records for dedupe).
    """
    model_config = ConfigDict(validate_assignment=True)

    name: str = ""
    title: str = ""
    company: str = ""
    phone: str = ""
    email: str = ""
    city: str = ""
    state: str = ""
    company_size: str = ""
    website: str = ""
    source_url: str = ""
    verified: bool = False
    lead_type: LeadType = LeadType.CONSTRUCTION
    notes: str = ""

    @classmethod
    def from_person(cls, person: PersonRecord, company: CompanyInfo, lead_type: LeadType = LeadType.CONSTRUCTION) -> 'Lead':
        """Wrap a PersonRecord with the metadata of the company it was found for."""
        return cls(
            name=person.name,
            title=person.title,
            company=company.name,
            phone=person.phone or "",
            email=person.email or "",
            website=company.website,
            source_url=person.source,
            lead_type=lead_type,
        )

    def to_row(self) -> Dict[str, str]:
        """Flatten into an export row keyed by the column headings."""
        data = self.model_dump()
        row: Dict[str, str] = {}
        for field, heading in LEAD_COLUMNS.items():
            value = data[field]
            if field == "verified":
                value = "Y" if value else "N"
            elif field == "lead_type":
                value = self.lead_type.value
            row[heading] = value if value is not None else ""
        return row

    @classmethod
    def from_row(cls, row: Dict[str, object]) -> 'Lead':
        """Inverse of to_row; accepts either column headings or field names as keys."""
        values: Dict[str, object] = {}
        for field, heading in LEAD_COLUMNS.items():
            raw = row.get(heading, row.get(field))
            if raw is None:
                continue
            if field == "verified":
                values[field] = raw is True or str(raw).strip().upper() in ("Y", "YES", "TRUE", "1")
            elif field == "lead_type":
                try:
                    values[field] = LeadType(str(raw).strip() or LeadType.CONSTRUCTION.value)
                except ValueError:
                    values[field] = LeadType.CONSTRUCTION
            else:
                values[field] = str(raw)
        return cls(**values)
