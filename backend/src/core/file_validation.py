import logging
from dataclasses import dataclass, field
from enum import Enum
from types import MappingProxyType

logger = logging.getLogger(__name__)


class UploadErrorKind(str, Enum):
    EMPTY_INPUT = "empty_input"
    MISSING_CONTENT_TYPE = "missing_content_type"
    UNSUPPORTED_TYPE = "unsupported_type"
    TOO_LARGE = "too_large"
    TOO_SMALL = "too_small"
    TYPE_MISMATCH = "type_mismatch"


@dataclass(frozen=True)
class FileSignature:
    """Leading bytes a file must start with, and the bytes needed to check them."""

    magic: tuple[bytes, ...]
    min_length: int = 0

    def __post_init__(self) -> None:
        if not self.min_length:
            object.__setattr__(self, "min_length", max(len(m) for m in self.magic))

    def matches(self, content: bytes) -> bool:
        return any(content[: len(m)] == m for m in self.magic)


SIGNATURES = MappingProxyType({
    "image/jpeg": FileSignature((b"\xff\xd8\xff",)),
    "image/png": FileSignature((b"\x89PNG\r\n\x1a\n",)),
    "application/pdf": FileSignature((b"%PDF",)),
})

CONTENT_TYPE_ALIASES = MappingProxyType({
    "image/jpg": "image/jpeg",
})

ALLOWED_LABELS = "JPEG, PNG, PDF"


@dataclass(frozen=True)
class ValidationResult:
    success: bool
    canonical_type: str | None = None
    error_kind: UploadErrorKind | None = None
    error_message: str | None = field(default=None)

    @classmethod
    def ok(cls, canonical_type: str) -> "ValidationResult":
        return cls(success=True, canonical_type=canonical_type)

    @classmethod
    def error(cls, kind: UploadErrorKind, message: str) -> "ValidationResult":
        return cls(success=False, error_kind=kind, error_message=message)


def normalize_content_type(value: str) -> str:
    """Lower-case, drop parameters (``; charset=...``) and resolve aliases."""
    base = value.strip().lower().split(";", 1)[0].strip()
    return CONTENT_TYPE_ALIASES.get(base, base)


def _hex(data: bytes) -> str:
    return " ".join(f"{b:02X}" for b in data)


def validate_upload(
    payload: bytes | None,
    declared_type: str | None,
    filename: str | None = None,
    max_size: int | None = None,
) -> ValidationResult:
    """Check that an upload's leading bytes match its declared content type.

    The declared type only selects which signature to compare against; the
    filename is used for logging and never for the decision. Every rejection
    comes back as a ``ValidationResult``, this function does not raise.
    """
    if not payload:
        return ValidationResult.error(UploadErrorKind.EMPTY_INPUT, "File is empty or null")

    if declared_type is None or not declared_type.strip():
        return ValidationResult.error(
            UploadErrorKind.MISSING_CONTENT_TYPE, "Content-Type header is missing"
        )

    canonical = normalize_content_type(declared_type)
    signature = SIGNATURES.get(canonical)
    if signature is None:
        logger.warning("Unsupported file type: %s", declared_type)
        return ValidationResult.error(
            UploadErrorKind.UNSUPPORTED_TYPE,
            f"Unsupported file type: {declared_type}. Allowed types: {ALLOWED_LABELS}",
        )

    if max_size is not None and len(payload) > max_size:
        return ValidationResult.error(
            UploadErrorKind.TOO_LARGE,
            f"File too large. Maximum size is {max_size // (1024 * 1024)} MB",
        )

    if len(payload) < signature.min_length:
        logger.warning("File too small to determine type: %d bytes", len(payload))
        return ValidationResult.error(
            UploadErrorKind.TOO_SMALL,
            "File is too small or corrupted. It may have been truncated.",
        )

    if not signature.matches(payload):
        logger.warning(
            "Magic number mismatch for file %r. Expected type: %s, actual signature: %s",
            filename, canonical, _hex(payload[: signature.min_length]),
        )
        return ValidationResult.error(
            UploadErrorKind.TYPE_MISMATCH,
            f"File content does not match declared type ({declared_type}). "
            "This may indicate a spoofed or corrupted file.",
        )

    logger.debug("File type validated: %r as %s", filename, canonical)
    return ValidationResult.ok(canonical)


def validate_file_magic(content: bytes, claimed_content_type: str) -> bool:
    """Validate file content matches claimed Content-Type via magic bytes."""
    return validate_upload(content, claimed_content_type).success
