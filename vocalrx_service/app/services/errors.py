# app/services/errors.py


class VocalRxError(RuntimeError):
    """Base class for every failure raised by the gateways."""

    status_code = 500


class ConfigurationError(VocalRxError):
    """A vendor credential or setting is missing. Never retried."""

    status_code = 500


class InputValidationError(VocalRxError):
    """The caller sent a missing, empty or wrong-typed payload."""

    status_code = 400


class UpstreamError(VocalRxError):
    """The vendor answered with a non-success status or an unusable body."""

    status_code = 500


class NoTranscriptError(UpstreamError):
    pass


class ContractViolation(UpstreamError):
    """LLM text is not JSON, or is JSON but not an object."""
