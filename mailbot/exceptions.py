"""Custom exceptions for the mail watcher bot."""


class MailBotError(Exception):
    """Base exception for all mail watcher errors."""


class ConfigurationError(MailBotError):
    """Raised when required startup configuration is missing."""


class ProviderError(MailBotError):
    """Raised when the mail provider is unreachable or answers garbage."""


class StateStoreError(MailBotError):
    """Raised when the durable state snapshot cannot be read or written."""
