#!/usr/bin/env python3
"""
Report Assembler

Joins a text extraction result with per-stream data classification results
into one report whose shape never depends on whether classification ran:

- streams keep the order extraction returned them in, with the primary
  stream moved first and named "Body"
- the remaining streams are "Attachment", or "Attachment-1", "Attachment-2",
  ... when there is more than one
- classification results are matched by derived stream name; a missing
  result is an explicit null
- the raw extraction result is carried verbatim next to the normalized view

Serialization is deterministic so identical inputs give identical bytes.
"""

import base64
import json
from dataclasses import dataclass, field
from typing import Any, Dict, List, Mapping, Optional, Tuple

from config import (
    EXTRACTION_ERROR_FIELDS,
    EXTRACTION_FAILURE_STATUSES,
    EXTRACTION_STATUS_FIELDS,
    EXTRACTION_STREAM_FIELDS,
    REPORT_JSON_INDENT,
    REPORT_STATUS_FAILED,
    REPORT_STATUS_SUCCEEDED,
    STREAM_ATTACHMENT,
    STREAM_BODY,
    STREAM_ID_FIELDS,
    STREAM_PRIMARY_FLAGS,
    STREAM_TEXT_FIELDS,
)
from src.core.field_resolver import first_present, is_present


@dataclass
class StreamRecord:
    """One content stream of the source file"""
    name: str
    stream_id: Optional[str]
    text: Optional[str]
    classification: Optional[Any] = None

    def to_dict(self) -> Dict[str, Any]:
        return {
            'Name': self.name,
            'StreamId': self.stream_id,
            'Text': self.text,
            'Classification': self.classification,
        }


@dataclass
class Report:
    """Joined extraction/classification report for one source file"""
    source_file: str
    status: str
    extraction: Any
    streams: List[StreamRecord] = field(default_factory=list)
    error: Optional[str] = None
    classification_requested: bool = False

    @property
    def succeeded(self) -> bool:
        return self.status == REPORT_STATUS_SUCCEEDED

    def to_dict(self) -> Dict[str, Any]:
        data_classification = None
        if self.classification_requested:
            data_classification = {s.name: s.classification for s in self.streams}
        return {
            'SourceFile': self.source_file,
            'Status': self.status,
            'Error': self.error,
            'ClassificationRequested': self.classification_requested,
            'Streams': [s.to_dict() for s in self.streams],
            'Extraction': self.extraction,
            'DataClassification': data_classification,
        }


def extraction_failure(extraction_result: Any) -> Optional[str]:
    """
    Return the service-reported failure message, or None when the result
    looks usable.
    """
    if extraction_result is None:
        return "Text extraction returned no result"
    if not isinstance(extraction_result, Mapping):
        return None

    message = first_present(extraction_result, EXTRACTION_ERROR_FIELDS)
    if message is not None:
        return str(message).strip()

    status = first_present(extraction_result, EXTRACTION_STATUS_FIELDS)
    if isinstance(status, str) and status.strip().lower() in EXTRACTION_FAILURE_STATUSES:
        return f"Text extraction reported status '{status.strip()}'"
    return None


def _raw_streams(extraction_result: Any) -> List[Any]:
    if isinstance(extraction_result, list):
        return list(extraction_result)
    streams = first_present(extraction_result, EXTRACTION_STREAM_FIELDS, [])
    if not isinstance(streams, (list, tuple)):
        # A single stream comes back unwrapped
        return [streams]
    return list(streams)


def _is_flagged_primary(stream: Any) -> bool:
    if not isinstance(stream, Mapping):
        return False
    return any(stream.get(flag) is True for flag in STREAM_PRIMARY_FLAGS)


def derive_streams(extraction_result: Any) -> List[Tuple[str, Any]]:
    """
    Name the streams of an extraction result.

    Args:
        extraction_result: Raw extraction result (mapping or list of streams)

    Returns:
        Ordered list of (derived_name, raw_stream)
    """
    streams = _raw_streams(extraction_result)
    if not streams:
        return []

    primary = next((i for i, s in enumerate(streams) if _is_flagged_primary(s)), 0)
    ordered = [streams[primary]] + [s for i, s in enumerate(streams) if i != primary]

    attachments = ordered[1:]
    named = [(STREAM_BODY, ordered[0])]
    if len(attachments) == 1:
        named.append((STREAM_ATTACHMENT, attachments[0]))
    else:
        for n, stream in enumerate(attachments, start=1):
            named.append((f"{STREAM_ATTACHMENT}-{n}", stream))
    return named


def stream_text(stream: Any) -> Optional[str]:
    """Extracted text of a raw stream, if the service returned any"""
    if isinstance(stream, str):
        return stream if is_present(stream) else None
    if not isinstance(stream, Mapping):
        return None
    text = first_present(stream, STREAM_TEXT_FIELDS)
    return None if text is None else str(text)


def _stream_id(stream: Any) -> Optional[str]:
    if not isinstance(stream, Mapping):
        return None
    value = first_present(stream, STREAM_ID_FIELDS)
    return None if value is None else str(value)


def assemble_report(source_file: str, extraction_result: Any,
                    classification_by_stream: Optional[Mapping[str, Any]] = None) -> Report:
    """
    Build the joined report.

    Args:
        source_file: Path of the file that was extracted
        extraction_result: Raw extraction result from the service
        classification_by_stream: Classification results keyed by derived
            stream name, or None when classification was not requested

    Returns:
        Report (never raises for a service-reported extraction failure)
    """
    requested = classification_by_stream is not None
    failure = extraction_failure(extraction_result)
    if failure is not None:
        return Report(
            source_file=source_file,
            status=REPORT_STATUS_FAILED,
            extraction=extraction_result,
            error=failure,
            classification_requested=requested,
        )

    records = []
    for name, stream in derive_streams(extraction_result):
        classification = None
        if requested:
            classification = classification_by_stream.get(name)
        records.append(StreamRecord(
            name=name,
            stream_id=_stream_id(stream),
            text=stream_text(stream),
            classification=classification,
        ))

    return Report(
        source_file=source_file,
        status=REPORT_STATUS_SUCCEEDED,
        extraction=extraction_result,
        streams=records,
        classification_requested=requested,
    )


def _json_default(value: Any) -> Any:
    if isinstance(value, (bytes, bytearray)):
        return base64.b64encode(bytes(value)).decode("ascii")
    if isinstance(value, (set, frozenset)):
        return sorted(value, key=str)
    return str(value)


def serialize_report(report: Report) -> str:
    """Deterministic JSON text of a report"""
    return json.dumps(report.to_dict(), indent=REPORT_JSON_INDENT,
                      ensure_ascii=False, default=_json_default)
