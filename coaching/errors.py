from __future__ import annotations

from typing import Any, Dict, Optional


class CoachingError(Exception):
    """Base error for the coaching journal.

    Every error ends the current operation only. ``code`` is a stable machine
    identifier used by the HTTP layer; ``user_message`` is what the user sees.
    """

    code = "COACHING_ERROR"
    default_message = "Something went wrong."

    def __init__(self, message: Optional[str] = None, details: Optional[Dict[str, Any]] = None) -> None:
        self.user_message = message or self.default_message
        self.details = details or {}
        super().__init__(self.user_message)


class ConfigurationError(CoachingError):
    code = "CONFIGURATION_REQUIRED"
    default_message = "Missing configuration. Open the settings and fill in the required values."


class AuthenticationError(CoachingError):
    code = "AUTHENTICATION_REQUIRED"
    default_message = "Not signed in to Google. Run the login flow and try again."


class ExtractionError(CoachingError):
    code = "EXTRACTION_FAILED"
    default_message = "Failed to analyze the video."


class CredentialError(ExtractionError):
    code = "INVALID_CREDENTIAL"
    default_message = (
        "The Gemini API key was rejected (invalid or revoked). "
        "Create a new key and update it in the settings."
    )


class QuotaExceededError(ExtractionError):
    code = "QUOTA_EXCEEDED"
    default_message = (
        "The Gemini API quota or rate limit was exceeded. "
        "Wait a minute and try again, or check your plan limits."
    )


class ExtractionFailedError(ExtractionError):
    code = "EXTRACTION_FAILED"
    default_message = (
        "Failed to analyze the video. Check the URL and make sure the model is available."
    )


class PersistenceError(CoachingError):
    code = "PERSISTENCE_FAILED"
    default_message = "Could not read or write the spreadsheet. Check permissions and try again."


class InvalidInputError(CoachingError):
    code = "INVALID_REQUEST"
    default_message = "Invalid input."


class InvalidStateError(CoachingError):
    code = "INVALID_STATE"
    default_message = "This action is not available right now."


class OperationInProgressError(CoachingError):
    code = "OPERATION_IN_PROGRESS"
    default_message = "Another request for this action is still running."
