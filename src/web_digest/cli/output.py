"""
Text and JSON renderings of results for the command line.
"""

import json
import re
import secrets
from datetime import datetime, timezone
from pathlib import Path
from typing import Any

from web_digest.core.models import BatchReport, BatchResult, SummaryOptions

SENTENCE_PATTERN = re.compile(r"[^.!?]+[.!?]+")
KEY_POINT_COUNT = 3


def leading_sentences(text: str, count: int = KEY_POINT_COUNT) -> list[str]:
    """First `count` sentences of `text`, stripped."""
    sentences = (s.strip() for s in SENTENCE_PATTERN.findall(text))
    return [s for s in sentences if s][:count]


def extract_key_points(summary: str, options: SummaryOptions) -> list[str]:
    """
    Key points of a summary.

    JSON-format summaries supply their own `keyPoints`; otherwise the
    leading sentences are used.
    """
    if options.format == "json":
        try:
            parsed = json.loads(summary)
        except ValueError:
            parsed = None
        if isinstance(parsed, dict) and isinstance(parsed.get("keyPoints"), list):
            return [str(point) for point in parsed["keyPoints"]]
    return leading_sentences(summary)


def _format_timestamp(timestamp: datetime) -> str:
    return timestamp.astimezone().strftime("%Y-%m-%d %H:%M:%S")


def format_result_text(result: BatchResult, options: SummaryOptions) -> str:
    """Human-readable rendering of one page result, followed links included."""
    if not result.succeeded:
        return f"\nERROR [{result.error_code}]: {result.error}\n"

    lines = ["", "--- Website Summary ---", ""]

    if options.include_metadata and result.metadata is not None:
        lines.append(f"Title: {result.metadata.title}")
        lines.append(f"URL: {result.metadata.url}")
        lines.append(f"Date: {_format_timestamp(result.metadata.timestamp)}")
        if result.metadata.description:
            lines.append(f"Description: {result.metadata.description}")
        lines.append("")

    lines.append(result.summary or "")

    if result.analysis:
        lines.extend(["", "=== Plugin Analysis ===", ""])
        for name, analysis in result.analysis.items():
            lines.append(f"{name}:")
            lines.append(json.dumps(analysis, indent=2))
            lines.append("")

    if result.tags:
        lines.append(f"Tags: {', '.join(result.tags)}")

    lines.extend(["", "-----------------------", ""])
    output = "\n".join(lines)

    for index, linked in enumerate(result.followed, start=1):
        output += f"\n--- Linked page {index}: {linked.url} ---\n"
        if linked.succeeded:
            output += f"\n{linked.summary}\n"
        else:
            output += f"ERROR [{linked.error_code}]: {linked.error}\n"

    return output


def result_to_json(result: BatchResult, options: SummaryOptions) -> dict[str, Any]:
    """JSON-ready dict for one result."""
    if not result.succeeded:
        data: dict[str, Any] = {
            "url": result.url,
            "status": "error",
            "error": result.error,
            "errorCode": result.error_code,
        }
        if result.retries:
            data["attempts"] = result.retries + 1
        return data

    metadata = result.metadata
    data = {
        "url": result.url,
        "timestamp": metadata.timestamp.isoformat() if metadata else None,
        "processingTime": round(result.processing_time or 0.0, 3),
        "metadata": {
            "title": metadata.title if metadata else "",
            "description": metadata.description if metadata else "",
        },
        "summary": {
            "content": result.summary,
            "length": options.length,
        },
        "status": "success",
    }

    key_points = extract_key_points(result.summary or "", options)
    if key_points:
        data["summary"]["keyPoints"] = key_points
    if result.retries:
        data["retries"] = result.retries
    if result.analysis:
        data["analysis"] = result.analysis
    if result.tags:
        data["tags"] = result.tags
    if result.followed:
        data["followed"] = [result_to_json(r, options) for r in result.followed]
    return data


def format_result_json(result: BatchResult, options: SummaryOptions) -> str:
    return json.dumps(result_to_json(result, options), indent=2, ensure_ascii=False)


def format_report_text(report: BatchReport, options: SummaryOptions) -> str:
    """Human-readable rendering of a batch run."""
    rule = "-" * 50
    lines = [
        "",
        "=== BATCH SUMMARY RESULTS ===",
        "",
        f"Total URLs processed: {len(report.results)}",
        f"Successful: {report.succeeded}",
        f"Failed: {report.failed}",
    ]
    if report.duration_seconds > 0:
        lines.append(f"Total processing time: {report.duration_seconds:.2f}s")
    lines.append("")

    for index, result in enumerate(report.results, start=1):
        lines.extend(["", f"--- Summary {index} ---", f"URL: {result.url}"])
        if not result.succeeded:
            lines.append(f"ERROR [{result.error_code}]: {result.error}")
            if result.retries:
                lines.append(f"Attempts: {result.retries + 1}")
        else:
            lines.append(f"Title: {result.title}")
            if result.metadata is not None:
                lines.append(f"Date: {_format_timestamp(result.metadata.timestamp)}")
            if result.processing_time:
                lines.append(f"Processing time: {result.processing_time:.2f}s")
            if result.retries:
                lines.append(f"Retries: {result.retries}")
            if result.tags:
                lines.append(f"Tags: {', '.join(result.tags)}")
            lines.extend(["", result.summary or ""])
        lines.extend(["", rule])

    if report.comparative:
        lines.extend(["", "", "=== COMPARATIVE ANALYSIS ===", "", report.comparative, "", "=" * 50])

    for warning in report.warnings:
        lines.append(f"Warning: {warning}")

    return "\n".join(lines) + "\n"


def report_to_json(report: BatchReport, options: SummaryOptions) -> dict[str, Any]:
    """JSON-ready dict for a batch run."""
    data: dict[str, Any] = {
        "batchId": secrets.token_hex(8),
        "timestamp": datetime.now(timezone.utc).isoformat(),
        "summary": {
            "total": len(report.results),
            "successful": report.succeeded,
            "failed": report.failed,
            "totalProcessingTime": round(report.duration_seconds, 3),
        },
        "results": [result_to_json(r, options) for r in report.results],
    }

    if report.comparative:
        data["comparative"] = {
            "commonThemes": leading_sentences(report.comparative),
            "analysis": report.comparative,
        }
    if report.warnings:
        data["warnings"] = report.warnings
    return data


def format_report_json(report: BatchReport, options: SummaryOptions) -> str:
    return json.dumps(report_to_json(report, options), indent=2, ensure_ascii=False)


def render_result(result: BatchResult, options: SummaryOptions) -> str:
    """Rendering selected by `options.output`."""
    if options.output == "json":
        return format_result_json(result, options)
    return format_result_text(result, options)


def render_report(report: BatchReport, options: SummaryOptions) -> str:
    if options.output == "json":
        return format_report_json(report, options)
    return format_report_text(report, options)


def write_output(text: str, path: Path) -> Path:
    """Write rendered output to `path`, creating parent directories."""
    path.parent.mkdir(parents=True, exist_ok=True)
    path.write_text(text, encoding="utf-8")
    return path
