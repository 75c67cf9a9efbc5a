from .article import (
    ArticleModel,
    ArticleSectionModel,
    TagModel,
    article_tags,
    section_tags,
)

__all__ = [
    "ArticleModel",
    "ArticleSectionModel",
    "TagModel",
    "article_tags",
    "section_tags",
]
