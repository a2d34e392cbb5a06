__all__ = [
    "BootConfiguration",
    "di",
    "RegistrarContainer",
    "LoggingProvider",
    "Settings",
    "Secrets",
]


from . import di
from .config import Secrets, Settings
from .container import BootConfiguration, RegistrarContainer
from .provider import LoggingProvider
