"""Domain errors raised by routers and rendered by the app's exception handlers."""

from __future__ import annotations

from typing import Optional


class BookshelfError(Exception):
    """Base error; carries the HTTP status it is rendered with."""

    status_code = 500

    def __init__(self, detail: str):
        self.detail = detail
        super().__init__(detail)

    def to_dict(self) -> dict:
        return {"detail": self.detail}


class NotFoundError(BookshelfError):
    status_code = 404

    def __init__(self, resource: str):
        super().__init__(f"{resource} not found")


class NotOwnerError(BookshelfError):
    """Caller tried to change a row it does not own. Clients show a notice and go back."""

    status_code = 403

    def __init__(self, detail: str, redirect_to: Optional[str] = "/"):
        super().__init__(detail)
        self.redirect_to = redirect_to

    def to_dict(self) -> dict:
        return {"detail": self.detail, "redirect_to": self.redirect_to}


class ConflictError(BookshelfError):
    status_code = 409


class ConfirmationRequired(BookshelfError):
    """A destructive call was made without `confirm=true`."""

    status_code = 428

    def to_dict(self) -> dict:
        return {"detail": self.detail, "confirm_with": {"confirm": True}}


class ReviewValidationError(BookshelfError):
    """Rating or text missing on a review submission, reported per field."""

    status_code = 422

    def __init__(self, errors: dict[str, str]):
        super().__init__("Validation failed")
        self.errors = errors

    def to_dict(self) -> dict:
        return {"detail": self.detail, "errors": self.errors}
