from .app import create_app, build_notifier, build_store
from .settings import Settings

__all__ = ["create_app", "build_notifier", "build_store", "Settings"]
