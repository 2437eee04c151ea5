# exceptions.py
"""Custom exceptions for the standup reporting system."""

from typing import Optional


class ReportingError(Exception):
    """Base exception for reporting system errors"""
    pass


class InvalidDateRange(ReportingError):
    """Raised when a requested report window is malformed or too wide"""
    pass


class InvalidUpdate(ReportingError):
    """Raised when a submitted standup update fails validation"""

    def __init__(self, errors):
        self.errors = list(errors)
        super().__init__("; ".join(self.errors))


class AISummaryError(ReportingError):
    """Base class for recoverable AI summary failures"""
    pass


class AIUnavailable(AISummaryError):
    """Raised when AI generation cannot be attempted at all"""
    pass


class AIRequestFailed(AISummaryError):
    """Raised when the text-generation call fails or exhausts its retries"""
    pass


class AIParseFailed(AISummaryError):
    """Raised when the generated text holds no usable JSON summary"""
    pass


class LLMProviderError(ReportingError):
    """Raised when LLM provider operations fail"""

    def __init__(self, message: str, status_code: Optional[int] = None):
        self.status_code = status_code
        super().__init__(message)


class ConfigurationError(ReportingError):
    """Raised when configuration is invalid"""
    pass


class DatabaseError(ReportingError):
    """Raised when database operations fail"""
    pass


class RepositoryFailure(DatabaseError):
    """Raised to callers when report data could not be loaded"""
    pass
