from typing import Any


class RemixError(Exception):
    status_code = 500

    def __init__(self, message: str, *, details: Any = None) -> None:
        super().__init__(message)
        self.message = message
        self.details = details

    def to_dict(self) -> dict[str, Any]:
        data: dict[str, Any] = {"error": self.message}
        if self.details is not None:
            data["details"] = self.details
        return data


class ConfigError(RemixError):
    """Server-side credentials are missing."""

    status_code = 500


class ValidationError(RemixError):
    """The request is malformed or incomplete."""

    status_code = 400


class UpstreamError(RemixError):
    """A third-party api failed or returned nothing usable."""

    status_code = 502


class ParseError(UpstreamError):
    pass


class SchemaError(UpstreamError):
    pass


ERRORS_BY_STATUS: dict[int, type[RemixError]] = {
    400: ValidationError,
    500: ConfigError,
    502: UpstreamError,
}


def error_for_status(status_code: int) -> type[RemixError]:
    return ERRORS_BY_STATUS.get(status_code, RemixError)
