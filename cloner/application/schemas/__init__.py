from .clone import CloneRequest, CloneResponse

__all__ = [
    "CloneRequest",
    "CloneResponse",
]
