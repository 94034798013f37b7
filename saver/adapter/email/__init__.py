"""Verification email adapter."""

from .sender import (
    HttpVerificationEmailSender,
    LoggingVerificationEmailSender,
    MockVerificationEmailSender,
    SentEmail,
)

__all__ = [
    "HttpVerificationEmailSender",
    "LoggingVerificationEmailSender",
    "MockVerificationEmailSender",
    "SentEmail",
]
