"""
Domain errors for workout tracking.

Each error carries the HTTP status it maps to, so the API layer can
translate them in one exception handler instead of in every route.
Plain field validation uses ValueError (raised from the models).
"""


class FitTrackError(Exception):
    """Base class for rejected operations."""
    status_code = 400


class UserNotFoundError(FitTrackError):
    """Raised when a user lookup finds nothing."""
    status_code = 404


class EntryNotFoundError(FitTrackError):
    """Raised when an exercise entry is missing or belongs to someone else."""
    status_code = 404


class TemplateNotFoundError(FitTrackError):
    """Raised when a template doesn't exist or isn't visible to the user."""
    status_code = 404


class TemplatePermissionError(FitTrackError):
    """Raised when a user tries to change a template they don't own."""
    status_code = 403


class TemplateLimitError(FitTrackError):
    """Raised when the user's tier doesn't allow another custom template."""
    status_code = 403


class TrialAlreadyUsedError(FitTrackError):
    """Raised when a user asks for a second free trial."""
    status_code = 409


class AdminRequiredError(FitTrackError):
    """Raised when a non-admin calls an admin-only operation."""
    status_code = 403
