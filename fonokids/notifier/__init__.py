from .contracts import Message, NotifierPort
from .adapters import SmtpNotifier, LogNotifier, InMemoryNotifier
from .errors import NotifierError, NotifierNotConfigured, DeliveryFailed
from .templates import render_reset_code_email

__all__ = [
    "Message",
    "NotifierPort",
    "SmtpNotifier",
    "LogNotifier",
    "InMemoryNotifier",
    "NotifierError",
    "NotifierNotConfigured",
    "DeliveryFailed",
    "render_reset_code_email",
]
