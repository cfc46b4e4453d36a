from .multipart import (
    ExtractionFailure,
    FormPart,
    UploadMissing,
    decode_body,
    extract_file,
    get_header,
    parse_boundary,
    parse_parts,
)

__all__ = [
    "ExtractionFailure",
    "FormPart",
    "UploadMissing",
    "decode_body",
    "extract_file",
    "get_header",
    "parse_boundary",
    "parse_parts",
]
