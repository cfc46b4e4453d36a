from __future__ import annotations

import base64
import binascii
from collections.abc import Mapping
from dataclasses import dataclass, field

from python_multipart.exceptions import MultipartParseError
from python_multipart.multipart import MultipartParser, parse_options_header

"""multipart/form-data file extraction for single-file uploads.

The body is parsed with python-multipart; the first part whose
Content-Disposition carries a ``filename`` and which declares a Content-Type
is the uploaded workbook. Bodies arrive base64 encoded from the gateway unless
flagged otherwise.
"""

__all__ = [
    "UploadMissing",
    "ExtractionFailure",
    "FormPart",
    "get_header",
    "parse_boundary",
    "decode_body",
    "parse_parts",
    "extract_file",
]


class UploadMissing(Exception):
    """No multipart boundary or no request body."""


class ExtractionFailure(Exception):
    """Body present but no file part could be located."""


@dataclass
class FormPart:
    """One multipart part: lower-cased header names -> latin-1 values, raw content."""
    headers: dict[str, str] = field(default_factory=dict)
    content: bytearray = field(default_factory=bytearray)

    @property
    def filename(self) -> str | None:
        disposition = self.headers.get("content-disposition")
        if not disposition:
            return None
        _, params = parse_options_header(disposition)
        name = params.get(b"filename")
        return None if name is None else name.decode("utf-8", errors="replace")


def get_header(headers: Mapping[str, str] | None, name: str) -> str | None:
    """Case-insensitive header lookup.

    Args:
        headers: request headers as sent by the gateway (may be None)
        name: header name in any casing

    Returns:
        The header value, or None when absent
    """
    if not headers:
        return None
    wanted = name.lower()
    for key, value in headers.items():
        if key.lower() == wanted:
            return value
    return None


def parse_boundary(content_type: str | None) -> str | None:
    """Extract the ``boundary`` parameter from a Content-Type value.

    Args:
        content_type: e.g. ``multipart/form-data; boundary=----abc``

    Returns:
        The boundary token (quotes removed), or None when missing / empty
    """
    if not content_type:
        return None
    _, params = parse_options_header(content_type)
    boundary = params.get(b"boundary")
    if not boundary:
        return None
    return boundary.decode("latin-1")


def decode_body(body: str | bytes | None, is_base64: bool = True) -> bytes:
    """Turn the gateway body into raw bytes.

    Plain text bodies are taken as latin-1 (one char per byte, binary-safe);
    text that cannot be latin-1 was decoded as UTF-8 upstream and is encoded
    back the same way.

    Raises:
        ExtractionFailure: the body is flagged base64 but is not valid base64
    """
    if body is None:
        return b""
    if not is_base64:
        if isinstance(body, bytes):
            return body
        try:
            return body.encode("latin-1")
        except UnicodeEncodeError:
            return body.encode("utf-8")
    try:
        return base64.b64decode(body, validate=False)
    except (binascii.Error, ValueError) as e:
        raise ExtractionFailure(f"invalid base64 body: {e}") from e


def parse_parts(body: bytes, boundary: str) -> list[FormPart]:
    """Split a multipart body into parts with python-multipart.

    Raises:
        ExtractionFailure: the body is not valid multipart for ``boundary``
    """
    parts: list[FormPart] = []
    header_field = bytearray()
    header_value = bytearray()

    def on_part_begin() -> None:
        parts.append(FormPart())

    def on_header_field(data: bytes, start: int, end: int) -> None:
        header_field.extend(data[start:end])

    def on_header_value(data: bytes, start: int, end: int) -> None:
        header_value.extend(data[start:end])

    def on_header_end() -> None:
        name = bytes(header_field).decode("latin-1").strip().lower()
        # latin-1 で保持し、filename は取り出す時に UTF-8 として読む
        parts[-1].headers[name] = bytes(header_value).decode("latin-1").strip()
        header_field.clear()
        header_value.clear()

    def on_part_data(data: bytes, start: int, end: int) -> None:
        parts[-1].content.extend(data[start:end])

    parser = MultipartParser(
        boundary,
        callbacks={
            "on_part_begin": on_part_begin,
            "on_header_field": on_header_field,
            "on_header_value": on_header_value,
            "on_header_end": on_header_end,
            "on_part_data": on_part_data,
        },
    )
    try:
        parser.write(body)
        parser.finalize()
    except MultipartParseError as e:
        raise ExtractionFailure(f"malformed multipart body: {e}") from e
    return parts


def extract_file(body: bytes, boundary: str) -> bytes:
    """Return the content of the first file part in ``body``.

    Args:
        body: decoded request body
        boundary: multipart boundary token from the Content-Type header

    Returns:
        Raw bytes of the uploaded file

    Raises:
        UploadMissing: empty body or boundary
        ExtractionFailure: malformed body, or no part with a filename and content type
    """
    if not body or not boundary:
        raise UploadMissing("No file uploaded")
    for part in parse_parts(body, boundary):
        if part.filename is not None and "content-type" in part.headers:
            return bytes(part.content)
    raise ExtractionFailure("Could not extract file data")
