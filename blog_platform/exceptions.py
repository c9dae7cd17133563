"""
Exceptions raised by blog_platform views and services.

ApiView turns these into JSON responses of the form
``{"message": ...}`` with the matching status code.
"""


class ApiError(Exception):
    """Base error for the JSON API."""

    status = 400

    def __init__(self, message, status=None):
        super().__init__(message)
        self.message = message
        if status is not None:
            self.status = status

    def as_payload(self):
        return {"message": self.message}


class NotAuthenticated(ApiError):
    status = 401


class Forbidden(ApiError):
    status = 403


class NotFound(ApiError):
    status = 404


class FormInvalid(ApiError):
    """Raised when submitted data fails form validation."""

    def __init__(self, form):
        super().__init__("Validation failed")
        self.form = form

    def as_payload(self):
        errors = []
        for field, messages in self.form.errors.items():
            for message in messages:
                errors.append({"field": field, "message": message})
        return {"errors": errors}
