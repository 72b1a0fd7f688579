"""
Data model for summarization runs.

SummaryOptions configures a run and is frozen once built. PageMetadata,
BatchResult and BatchReport carry results back to the caller; nothing
here is persisted.
"""

from dataclasses import dataclass, field
from datetime import datetime, timezone
from typing import Any, Literal

from pydantic import BaseModel, Field, field_validator

SummaryLength = Literal["short", "medium", "long"]
SummaryFormat = Literal["paragraphs", "bullets", "json"]
OutputMode = Literal["text", "json"]


class SummaryOptions(BaseModel):
    """
    Options for one summarization run.

    Passed by value through every layer. The model is frozen; use
    `model_copy(update=...)` to derive a variant.
    """

    length: SummaryLength = Field(
        default="medium",
        description="Summary length class",
    )
    format: SummaryFormat = Field(
        default="paragraphs",
        description="Summary format: paragraphs, bullets or json",
    )
    plugins: tuple[str, ...] = Field(
        default=(),
        description="Names of content analyzers to run on each page",
    )
    max_retries: int = Field(
        default=3,
        ge=0,
        le=10,
        description="Attempt budget for each network operation",
    )
    retry_delay: float = Field(
        default=1.0,
        ge=0.0,
        le=60.0,
        description="Base retry delay in seconds",
    )
    follow_links: int = Field(
        default=0,
        ge=0,
        le=20,
        description="Number of same-host links to summarize after the main page",
    )
    comparative: bool = Field(
        default=False,
        description="Generate a comparative analysis across batch results",
    )
    output: OutputMode = Field(
        default="text",
        description="Output rendering requested by the caller",
    )
    include_metadata: bool = Field(
        default=False,
        description="Include page metadata in rendered output",
    )

    model_config = {
        "frozen": True,
        "extra": "forbid",
    }

    @field_validator("plugins", mode="before")
    @classmethod
    def normalize_plugins(cls, v: Any) -> tuple[str, ...]:
        """Accept a list or comma-separated string; drop blanks and duplicates."""
        if v is None:
            return ()
        if isinstance(v, str):
            v = v.split(",")
        names: list[str] = []
        for name in v:
            name = str(name).strip().lower()
            if name and name not in names:
                names.append(name)
        return tuple(names)


@dataclass(frozen=True)
class PageMetadata:
    """Metadata captured once per page fetch."""

    title: str
    description: str
    url: str
    timestamp: datetime = field(default_factory=lambda: datetime.now(timezone.utc))

    def to_dict(self) -> dict[str, str]:
        """Convert to dictionary for serialization."""
        return {
            "title": self.title,
            "description": self.description,
            "url": self.url,
            "timestamp": self.timestamp.isoformat(),
        }


@dataclass
class BatchResult:
    """
    Terminal outcome for one URL.

    Exactly one of `summary` and `error` is set. `retries` is None unless
    at least one retry happened.
    """

    url: str
    summary: str | None = None
    metadata: PageMetadata | None = None
    analysis: dict[str, Any] | None = None
    tags: list[str] | None = None
    error: str | None = None
    error_code: str | None = None
    retries: int | None = None
    processing_time: float | None = None  # seconds
    followed: list["BatchResult"] = field(default_factory=list)

    def __post_init__(self) -> None:
        if (self.summary is None) == (self.error is None):
            raise ValueError("BatchResult must have exactly one of summary or error")

    @classmethod
    def from_error(
        cls,
        url: str,
        error: BaseException,
        processing_time: float | None = None,
    ) -> "BatchResult":
        """
        Error-tagged result carrying the error's message and code.

        `retries` comes from the error's details: a "retries" count when the
        processor recorded one, else the retry budget's "attempts" minus one.
        """
        message = getattr(error, "message", None) or str(error) or type(error).__name__
        details = getattr(error, "details", None) or {}
        retries = details.get("retries", details.get("attempts", 1) - 1)
        return cls(
            url=url,
            error=message,
            error_code=getattr(error, "code", None),
            retries=retries or None,
            processing_time=processing_time,
        )

    @property
    def succeeded(self) -> bool:
        """Whether this URL was summarized."""
        return self.error is None

    @property
    def title(self) -> str:
        """Page title, falling back to the URL."""
        if self.metadata is not None and self.metadata.title:
            return self.metadata.title
        return self.url

    def to_dict(self) -> dict[str, Any]:
        """Convert to dictionary for serialization, omitting empty fields."""
        data: dict[str, Any] = {
            "url": self.url,
            "status": "success" if self.succeeded else "error",
        }
        if self.summary is not None:
            data["summary"] = self.summary
        if self.metadata is not None:
            data["metadata"] = self.metadata.to_dict()
        if self.analysis:
            data["analysis"] = self.analysis
        if self.tags:
            data["tags"] = self.tags
        if self.error is not None:
            data["error"] = self.error
            data["error_code"] = self.error_code
        if self.retries is not None:
            data["retries"] = self.retries
        if self.processing_time is not None:
            data["processing_time"] = round(self.processing_time, 3)
        if self.followed:
            data["followed"] = [r.to_dict() for r in self.followed]
        return data


@dataclass
class BatchReport:
    """Results of a batch run, in input order, with optional comparative text."""

    results: list[BatchResult] = field(default_factory=list)
    comparative: str | None = None
    warnings: list[str] = field(default_factory=list)
    duration_seconds: float = 0.0

    @property
    def succeeded(self) -> int:
        """Number of URLs summarized."""
        return sum(1 for r in self.results if r.succeeded)

    @property
    def failed(self) -> int:
        """Number of URLs that ended in an error."""
        return len(self.results) - self.succeeded

    def to_dict(self) -> dict[str, Any]:
        """Convert to dictionary for serialization."""
        data: dict[str, Any] = {
            "total": len(self.results),
            "succeeded": self.succeeded,
            "failed": self.failed,
            "duration_seconds": round(self.duration_seconds, 3),
            "results": [r.to_dict() for r in self.results],
        }
        if self.comparative is not None:
            data["comparative"] = self.comparative
        if self.warnings:
            data["warnings"] = self.warnings
        return data
