from .clone_repository import SQLAlchemyCloneRepository, cloneable_models

__all__ = [
    "SQLAlchemyCloneRepository",
    "cloneable_models",
]
