# type: ignore
# pyright: reportMissingImports=false, reportGeneralTypeErrors=false
"""
Domain error taxonomy.

Services raise these; the HTTP boundary switches on ``kind`` to choose the
status code instead of inspecting message text.
"""

from enum import Enum


class ErrorKind(str, Enum):
    NOT_FOUND = "not_found"
    FORBIDDEN = "forbidden"
    BAD_REQUEST = "bad_request"
    CONFLICT = "conflict"


HTTP_STATUS_BY_KIND: dict[ErrorKind, int] = {
    ErrorKind.NOT_FOUND: 404,
    ErrorKind.FORBIDDEN: 403,
    ErrorKind.BAD_REQUEST: 400,
    ErrorKind.CONFLICT: 409,
}


class GearGuardError(Exception):
    """Base failure carrying a machine-readable kind and a readable detail."""

    kind: ErrorKind = ErrorKind.BAD_REQUEST

    def __init__(self, detail: str) -> None:
        super().__init__(detail)
        self.detail = detail

    @property
    def status_code(self) -> int:
        return HTTP_STATUS_BY_KIND[self.kind]


class NotFoundError(GearGuardError):
    kind = ErrorKind.NOT_FOUND


class ForbiddenError(GearGuardError):
    kind = ErrorKind.FORBIDDEN


class BadRequestError(GearGuardError):
    kind = ErrorKind.BAD_REQUEST


class ConflictError(GearGuardError):
    kind = ErrorKind.CONFLICT
