class NotifierError(Exception):
    """Base error for notifier adapters."""

class NotifierNotConfigured(NotifierError):
    """Required transport settings are missing."""

class DeliveryFailed(NotifierError):
    """The transport rejected or could not deliver the message."""
