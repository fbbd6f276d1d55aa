from typing import Optional


class SkillSwapError(Exception):
    """Base class for errors raised by the service layer."""

    status_code = 400

    def __init__(self, detail: str):
        super().__init__(detail)
        self.detail = detail


class ValidationError(SkillSwapError):
    """Malformed input: unknown direction, bad message length, duplicate skills..."""

    status_code = 400


class NotFoundError(SkillSwapError):
    status_code = 404


class NotParticipant(SkillSwapError):
    """The acting user may not perform this operation on the swap."""

    status_code = 403


class InvalidTransition(SkillSwapError):
    """The swap's current status does not allow the requested action."""

    status_code = 409


class AlreadyRated(SkillSwapError):
    status_code = 409


class SwapNotCompleted(SkillSwapError):
    status_code = 400


class StoreError(SkillSwapError):
    """
    The data store rejected or failed to execute an operation.

    `code` carries the PostgREST / Postgres error code when one is available
    (e.g. "23505" for a unique violation).
    """

    status_code = 500

    def __init__(self, detail: str, code: Optional[str] = None):
        super().__init__(detail)
        self.code = code

    @property
    def is_unique_violation(self) -> bool:
        return self.code == "23505"
