__all__ = [
    "BootConfiguration",
    "RegistrarContainer",
    "StorageContainer",
]

from .registrar import BootConfiguration, RegistrarContainer
from .storage import StorageContainer
