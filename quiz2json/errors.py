"""Conversion failure taxonomy — every pipeline stage raises one of these."""


class ConversionError(Exception):
    """Base class; `kind` is a stable tag used in logs."""

    kind = "conversion"


class MissingCredentialError(ConversionError):
    kind = "missing_credential"


class ReadError(ConversionError):
    kind = "read"


class TransportError(ConversionError):
    kind = "transport"


class EmptyResponseError(ConversionError):
    kind = "empty_response"


class MalformedResponseError(ConversionError):
    kind = "malformed_response"

    def __init__(self, message: str, raw_text: str) -> None:
        super().__init__(message)
        self.raw_text = raw_text


class SchemaMismatchError(ConversionError):
    kind = "schema_mismatch"


class ConversionInProgressError(ConversionError):
    kind = "in_progress"


class ConversionCancelledError(ConversionError):
    kind = "cancelled"


class UnexpectedError(ConversionError):
    """Any other exception raised inside the pipeline; the original is chained."""

    kind = "unexpected"
