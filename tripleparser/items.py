"""Pydantic models for headings, structured data, triples and extraction records.

Every model serialises to the camelCase / ``@type`` shapes consumed by the
presentation layer via ``model_dump(by_alias=True)``.
"""

from __future__ import annotations

from datetime import UTC, datetime
from typing import Annotated, Any, Literal

from pydantic import BaseModel, Field, field_validator
from pydantic.alias_generators import to_camel

_RECORD_CONFIG = {"alias_generator": to_camel, "populate_by_name": True, "frozen": True}


# ---------------------------------------------------------------------------
# Headings
# ---------------------------------------------------------------------------

class Heading(BaseModel):
    """One ``<h1>``-``<h6>`` element with its structural context."""

    model_config = _RECORD_CONFIG

    level: int = Field(ge=1, le=6)
    text: str = Field(min_length=1)
    section_context: str = "main"
    importance: int = Field(ge=1, le=10)


class HierarchyNode(BaseModel):
    """A heading placed in the level-based outline."""

    model_config = {"alias_generator": to_camel, "populate_by_name": True}

    text: str
    level: int = Field(ge=0, le=6)
    importance: int = 0
    section_context: str = "main"
    children: list[HierarchyNode] = Field(default_factory=list)


# ---------------------------------------------------------------------------
# Triples
# ---------------------------------------------------------------------------

def _clean_field(value: Any) -> Any:
    if isinstance(value, bool):
        return value
    if isinstance(value, (int, float)):
        value = str(value)
    if isinstance(value, str):
        value = value.strip()
        if not value:
            raise ValueError("field must not be blank")
    return value


class EAVTriple(BaseModel):
    """Entity / attribute / value fact."""

    model_config = {"frozen": True}

    type: Literal["eav_triple"] = "eav_triple"
    entity: str
    attribute: str
    value: str

    @field_validator("entity", "attribute", "value", mode="before")
    @classmethod
    def strip_fields(cls, v: Any) -> Any:
        return _clean_field(v)

    @property
    def identity_key(self) -> str:
        return f"eav:{self.entity}:{self.attribute}:{self.value}".lower()


class SPOTriple(BaseModel):
    """Subject / predicate / object fact."""

    model_config = {"frozen": True}

    type: Literal["spo_triple"] = "spo_triple"
    subject: str
    predicate: str
    object: str

    @field_validator("subject", "predicate", "object", mode="before")
    @classmethod
    def strip_fields(cls, v: Any) -> Any:
        return _clean_field(v)

    @property
    def identity_key(self) -> str:
        return f"spo:{self.subject}:{self.predicate}:{self.object}".lower()


Triple = Annotated[EAVTriple | SPOTriple, Field(discriminator="type")]


# ---------------------------------------------------------------------------
# Structured data (normalized schema.org objects)
# ---------------------------------------------------------------------------

class ProductData(BaseModel):
    model_config = _RECORD_CONFIG

    type: Literal["Product"] = Field("Product", alias="@type")
    name: str | None = None
    description: str | None = None
    price: str | None = None
    currency: str | None = None
    availability: str | None = None


class Contacts(BaseModel):
    model_config = _RECORD_CONFIG

    telephone: str | None = None
    email: str | None = None


class OrganizationData(BaseModel):
    model_config = _RECORD_CONFIG

    type: Literal["Organization"] = Field("Organization", alias="@type")
    name: str | None = None
    description: str | None = None
    url: str | None = None
    social_profiles: list[str] = Field(default_factory=list)
    contacts: Contacts = Field(default_factory=Contacts)


class WebPageData(BaseModel):
    model_config = _RECORD_CONFIG

    type: Literal["WebPage", "ItemPage"] = Field("WebPage", alias="@type")
    name: str | None = None
    url: str | None = None
    date_published: str | None = None
    date_modified: str | None = None
    description: str | None = None
    in_language: str | None = None


class BreadcrumbItem(BaseModel):
    model_config = _RECORD_CONFIG

    name: str | None = None
    url: str | None = None
    position: int | None = None


class BreadcrumbListData(BaseModel):
    model_config = _RECORD_CONFIG

    type: Literal["BreadcrumbList"] = Field("BreadcrumbList", alias="@type")
    items: list[BreadcrumbItem] = Field(default_factory=list)


class OtherData(BaseModel):
    """Any other schema.org object, kept verbatim."""

    model_config = {"populate_by_name": True, "frozen": True, "extra": "allow"}

    type: str | list[str] = Field(alias="@type")

    @field_validator("type")
    @classmethod
    def type_not_empty(cls, v: str | list[str]) -> str | list[str]:
        if not v:
            raise ValueError("@type cannot be empty")
        return v


StructuredDataItem = (
    ProductData | OrganizationData | WebPageData | BreadcrumbListData | OtherData
)


# ---------------------------------------------------------------------------
# Per-page intermediate and final records
# ---------------------------------------------------------------------------

class ExtractedContent(BaseModel):
    """Output of the structural parser for one page."""

    model_config = _RECORD_CONFIG

    main_content: str = ""
    headings: list[Heading] = Field(default_factory=list)
    structured_data: list[StructuredDataItem] = Field(default_factory=list)
    language: str | None = None

    @property
    def is_empty(self) -> bool:
        return not self.main_content.strip() and not self.headings


class ExtractionRecord(BaseModel):
    """Final result for one URL."""

    model_config = _RECORD_CONFIG

    url: str
    main_content: str | None = None
    headings: list[Heading] = Field(default_factory=list)
    triples: list[Triple] = Field(default_factory=list)
    structured_data: list[StructuredDataItem] = Field(default_factory=list)
    success: bool = True
    error: str | None = None

    @classmethod
    def failure(cls, url: str, error: str) -> ExtractionRecord:
        return cls(url=url, success=False, error=error)

    def to_dict(self) -> dict[str, Any]:
        """Serialise to the wire shape; failed records carry only url and error."""
        if not self.success:
            return {"url": self.url, "success": False, "error": self.error}
        return self.model_dump(by_alias=True, exclude_none=True)


class BatchStats(BaseModel):
    model_config = _RECORD_CONFIG

    total_urls: int = 0
    successful_extractions: int = 0
    failed_extractions: int = 0
    completion_time: str = ""


class BatchResult(BaseModel):
    """Envelope returned by :func:`tripleparser.pipeline.process_batch`."""

    model_config = _RECORD_CONFIG

    success: bool = True
    results: list[ExtractionRecord] = Field(default_factory=list)
    stats: BatchStats = Field(default_factory=BatchStats)

    def to_dict(self) -> dict[str, Any]:
        return {
            "success": self.success,
            "results": [r.to_dict() for r in self.results],
            "stats": self.stats.model_dump(by_alias=True),
        }

    @classmethod
    def from_records(cls, records: list[ExtractionRecord]) -> BatchResult:
        """Wrap *records* and compute the batch stats, stamped with the current UTC time."""
        succeeded = sum(1 for r in records if r.success)
        return cls(
            success=True,
            results=records,
            stats=BatchStats(
                total_urls=len(records),
                successful_extractions=succeeded,
                failed_extractions=len(records) - succeeded,
                completion_time=datetime.now(UTC).isoformat(),
            ),
        )
