from .inmemory import InMemoryPatientStore
from .sql import SqlPatientStore
from .database import make_engine, make_session_factory, create_tables
from .models import Base, Patient, PasswordResetCode

__all__ = [
    "InMemoryPatientStore",
    "SqlPatientStore",
    "make_engine",
    "make_session_factory",
    "create_tables",
    "Base",
    "Patient",
    "PasswordResetCode",
]
