from .base import Base
from .models import ArticleModel, ArticleSectionModel, TagModel
from .session import (
    async_session_factory,
    destination_engines,
    destination_session_factories,
    engine,
    get_db_session,
    get_destination_sessions,
)

__all__ = [
    "Base",
    "ArticleModel",
    "ArticleSectionModel",
    "TagModel",
    "engine",
    "async_session_factory",
    "destination_engines",
    "destination_session_factories",
    "get_db_session",
    "get_destination_sessions",
]
