__all__ = [
    "GradingSettings",
    "LoggingSettings",
    "RegistrarWebSettings",
    "Secrets",
    "Settings",
    "StorageSettings",
    "WebSettings",
]


from .grading import GradingSettings
from .logging import LoggingSettings
from .secrets import Secrets
from .settings import Settings
from .storage import StorageSettings
from .web import RegistrarWebSettings, WebSettings
