"""Error hierarchy for the webhook and engagement paths.

Every error carries a stable ``code`` and the HTTP status it maps to.
Expected race outcomes (already applied, already exists, not found) are NOT
errors: they are returned as enum values by the services.
"""


class ServiceError(Exception):
    """Base exception; rendered by the app-level handler in ``app.main``."""

    code = "INTERNAL_ERROR"
    http_status = 500

    def __init__(self, message: str):
        super().__init__(message)
        self.message = message

    def to_response(self) -> dict:
        return {"detail": self.message, "code": self.code}


class AuthenticationFailure(ServiceError):
    """Bad or missing webhook signature. Permanent, the provider must not retry."""

    code = "AUTHENTICATION_FAILURE"
    http_status = 403


class MalformedInput(ServiceError):
    """Payload that cannot be parsed into an event envelope."""

    code = "MALFORMED_INPUT"
    http_status = 400


class UnknownTarget(ServiceError):
    """User, post or recipe that does not exist."""

    code = "UNKNOWN_TARGET"
    http_status = 404

    def __init__(self, kind: str, target_id):
        super().__init__(f"{kind.capitalize()} not found")
        self.kind = kind
        self.target_id = target_id


class TransientStoreFailure(ServiceError):
    """Database failure during an atomic write. Nothing was committed."""

    code = "TRANSIENT_STORE_FAILURE"
    http_status = 500
