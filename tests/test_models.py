"""
Tests for the run data model.
"""

import pytest
from pydantic import ValidationError

from web_digest.core.exceptions import ErrorCode, ErrorKind, WebDigestError
from web_digest.core.models import BatchReport, BatchResult, PageMetadata, SummaryOptions


class TestSummaryOptions:
    """Tests for SummaryOptions."""

    def test_defaults(self):
        """Defaults should describe a plain medium summary."""
        options = SummaryOptions()

        assert options.length == "medium"
        assert options.format == "paragraphs"
        assert options.plugins == ()
        assert options.max_retries == 3

    def test_plugins_normalized(self):
        """Plugin names should be lowercased, stripped and deduplicated."""
        assert SummaryOptions(plugins="Keywords, sentiment,,keywords").plugins == ("keywords", "sentiment")
        assert SummaryOptions(plugins=["READABILITY"]).plugins == ("readability",)

    def test_invalid_values(self):
        """Unknown lengths and out-of-range budgets should be rejected."""
        with pytest.raises(ValidationError):
            SummaryOptions(length="huge")
        with pytest.raises(ValidationError):
            SummaryOptions(max_retries=-1)
        with pytest.raises(ValidationError):
            SummaryOptions(colour="blue")

    def test_frozen(self):
        """Options should be immutable once built."""
        options = SummaryOptions()

        with pytest.raises(ValidationError):
            options.length = "short"

        assert options.model_copy(update={"length": "short"}).length == "short"


class TestBatchResult:
    """Tests for BatchResult."""

    def test_exactly_one_outcome(self):
        """A result must be either a success or a failure."""
        with pytest.raises(ValueError):
            BatchResult(url="https://example.com")
        with pytest.raises(ValueError):
            BatchResult(url="https://example.com", summary="s", error="e")

    def test_title_fallback(self):
        """The URL should stand in for a missing title."""
        result = BatchResult(url="https://example.com", summary="s")
        assert result.title == "https://example.com"

        result.metadata = PageMetadata(title="Home", description="", url="https://example.com")
        assert result.title == "Home"

    def test_from_error(self):
        """Error results should carry the message, code and retries."""
        error = WebDigestError(
            "Processing failed after 3 attempts: Server error 503",
            ErrorKind.TRANSIENT_NETWORK,
            code=ErrorCode.SERVER_ERROR,
            details={"attempts": 3},
            retryable=False,
        )

        result = BatchResult.from_error("https://example.com", error, processing_time=1.5)

        assert not result.succeeded
        assert result.error == "Processing failed after 3 attempts: Server error 503"
        assert result.error_code == ErrorCode.SERVER_ERROR
        assert result.retries == 2
        assert result.processing_time == 1.5

    def test_from_generic_error(self):
        """Errors outside the taxonomy should keep their text and have no code."""
        result = BatchResult.from_error("https://example.com", RuntimeError("boom"))

        assert result.error == "boom"
        assert result.error_code is None
        assert result.retries is None

    def test_to_dict_omits_empty(self):
        """Empty optional fields should be omitted."""
        data = BatchResult(url="https://example.com", summary="s").to_dict()

        assert data == {"url": "https://example.com", "status": "success", "summary": "s"}


class TestBatchReport:
    """Tests for BatchReport."""

    def test_counts(self):
        """Success and failure counts should come from the results."""
        report = BatchReport(
            results=[
                BatchResult(url="https://a.example.com", summary="a"),
                BatchResult(url="https://b.example.com", error="x"),
                BatchResult(url="https://c.example.com", summary="c"),
            ]
        )

        assert (report.succeeded, report.failed) == (2, 1)
