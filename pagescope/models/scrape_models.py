"""Models for scrape requests, extracted documents and scrape results.

Attributes are snake_case in Python and camelCase on the wire, so results
serialize to the flat JSON record clients expect (``methodUsed``,
``uniqueComponents``, ``scrapedAt``...).
"""

from datetime import datetime
from enum import Enum
from typing import Any, Literal

from pydantic import BaseModel, ConfigDict, Field
from pydantic.alias_generators import to_camel


class CamelModel(BaseModel):
    """Base model serializing field names as camelCase."""

    model_config = ConfigDict(alias_generator=to_camel, populate_by_name=True)

    def to_record(self) -> dict[str, Any]:
        """JSON-compatible dict using wire names."""
        return self.model_dump(mode="json", by_alias=True)


class MethodUsed(str, Enum):
    """Which strategy produced the result."""

    HTTP = "HTTP"
    BROWSER = "BROWSER"


class ScrapeRequest(CamelModel):
    """One invocation's input record."""

    model_config = ConfigDict(
        alias_generator=to_camel, populate_by_name=True, frozen=True
    )

    url: str | None = Field(default=None, description="Page to scrape")
    prompt: str | None = Field(
        default=None, description="Optional instruction for the AI summary"
    )


class Link(CamelModel):
    url: str
    text: str


class Table(CamelModel):
    """A bounded rendition of one HTML table."""

    caption: str = ""
    headers: list[str] = Field(default_factory=list)
    rows: list[list[str]] = Field(default_factory=list)
    row_count: int = 0
    col_count: int = 0
    html: str = Field(default="", exclude=True)


class ListBlock(CamelModel):
    """A bounded rendition of one ``ul``/``ol`` element."""

    type: Literal["ordered", "unordered"]
    items: list[str] = Field(default_factory=list)
    item_count: int = 0
    html: str = Field(default="", exclude=True)


class Component(CamelModel):
    """A notable non-paragraph element (heading, form control, landmark...)."""

    name: str
    content: str


class TechSignal(CamelModel):
    name: str
    icon: str


class ExtractedDocument(CamelModel):
    """Structured content parsed from one HTML document."""

    title: str
    description: str = ""
    paragraphs: list[str] = Field(default_factory=list)
    images: list[str] = Field(default_factory=list)
    links: list[Link] = Field(default_factory=list)
    tables: list[Table] = Field(default_factory=list)
    lists: list[ListBlock] = Field(default_factory=list)
    unique_components: list[Component] = Field(default_factory=list)
    tech_stack: list[TechSignal] = Field(default_factory=list)

    # Internal only: the classifier reads these, serialization never does
    body_text_length: int = Field(default=0, exclude=True)
    raw_html: str = Field(default="", exclude=True)


class ScrapeResult(ExtractedDocument):
    """Final record of a successful invocation."""

    url: str
    method_used: MethodUsed
    summary: str = ""
    scraped_at: datetime

    @classmethod
    def from_document(
        cls,
        document: ExtractedDocument,
        *,
        url: str,
        method_used: MethodUsed,
        summary: str,
        scraped_at: datetime,
    ) -> "ScrapeResult":
        """Merge an extracted document with run metadata."""
        return cls(
            **document.model_dump(exclude={"tables", "lists"}),
            # Passed as models so their markup survives the merge
            tables=document.tables,
            lists=document.lists,
            body_text_length=document.body_text_length,
            raw_html=document.raw_html,
            url=url,
            method_used=method_used,
            summary=summary,
            scraped_at=scraped_at,
        )

    def to_record(self, include_raw_html: bool = False) -> dict[str, Any]:
        """Wire record; markup of the page, tables and lists only on request."""
        record = super().to_record()
        if include_raw_html:
            record["rawHtml"] = self.raw_html
            for table_record, table in zip(record["tables"], self.tables):
                table_record["html"] = table.html
            for list_record, block in zip(record["lists"], self.lists):
                list_record["html"] = block.html
        return record


class ErrorDetails(CamelModel):
    http_error: str | None = None
    browser_error: str | None = None


class ErrorPayload(CamelModel):
    """Public error body returned to the caller on failure."""

    error: str
    error_type: str | None = None
    message: str
    url: str | None = None
    details: ErrorDetails | None = None
    timestamp: datetime

    def to_record(self) -> dict[str, Any]:
        # Drop absent top-level keys but keep explicit nulls inside details
        record = self.model_dump(mode="json", by_alias=True)
        return {key: value for key, value in record.items() if value is not None}
