from .cloner import Cloner
from .clone_service import CloneService

__all__ = [
    "Cloner",
    "CloneService",
]
