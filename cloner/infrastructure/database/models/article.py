"""SQLAlchemy ORM models for cloneable articles, their sections and tags."""

from datetime import datetime, timezone

from sqlalchemy import Column, DateTime, ForeignKey, Integer, String, Table, Text
from sqlalchemy.orm import Mapped, mapped_column, relationship

from cloner.domain.entities import Cloneable
from cloner.infrastructure.database.base import Base


def _utcnow() -> datetime:
    return datetime.now(timezone.utc)


# Pivot tables — many-to-many links re-attached (not copied) on clone
article_tags = Table(
    "article_tags",
    Base.metadata,
    Column("article_id", ForeignKey("articles.id", ondelete="CASCADE"), primary_key=True),
    Column("tag_id", ForeignKey("tags.id", ondelete="CASCADE"), primary_key=True),
    Column("added_by", String(100), nullable=True),
)

section_tags = Table(
    "section_tags",
    Base.metadata,
    Column("section_id", ForeignKey("article_sections.id", ondelete="CASCADE"), primary_key=True),
    Column("tag_id", ForeignKey("tags.id", ondelete="CASCADE"), primary_key=True),
)


class TagModel(Base):
    """ORM model — maps to the 'tags' table. Shared between articles, never cloned."""

    __tablename__ = "tags"

    id: Mapped[int] = mapped_column(primary_key=True, autoincrement=True)
    name: Mapped[str] = mapped_column(String(100), nullable=False, unique=True)

    def __repr__(self) -> str:
        return f"<TagModel(id={self.id}, name='{self.name}')>"


class ArticleModel(Cloneable, Base):
    """ORM model — maps to the 'articles' table."""

    __tablename__ = "articles"

    clone_exempt_attributes = ["view_count"]
    cloneable_file_attributes = ["cover_image"]
    cloneable_relations = ["sections", "tags"]
    cloneable_relations_pivot_data = {"tags": {"added_by": "cloner"}}

    id: Mapped[int] = mapped_column(primary_key=True, autoincrement=True)
    title: Mapped[str] = mapped_column(String(255), nullable=False, index=True)
    content: Mapped[str] = mapped_column(Text, nullable=False)
    cover_image: Mapped[str | None] = mapped_column(String(500), nullable=True)
    view_count: Mapped[int] = mapped_column(Integer, nullable=False, default=0)
    created_at: Mapped[datetime] = mapped_column(
        DateTime(timezone=True),
        default=_utcnow,
        nullable=False,
    )
    updated_at: Mapped[datetime] = mapped_column(
        DateTime(timezone=True),
        default=_utcnow,
        onupdate=_utcnow,
        nullable=False,
    )

    sections: Mapped[list["ArticleSectionModel"]] = relationship(
        back_populates="article",
        cascade="all, delete-orphan",
        order_by="ArticleSectionModel.position",
    )
    tags: Mapped[list[TagModel]] = relationship(secondary=article_tags)

    def __repr__(self) -> str:
        return f"<ArticleModel(id={self.id}, title='{self.title}')>"


class ArticleSectionModel(Cloneable, Base):
    """ORM model — maps to the 'article_sections' table. Owned by an article."""

    __tablename__ = "article_sections"

    cloneable_file_attributes = ["attachment"]
    cloneable_relations = ["tags"]

    id: Mapped[int] = mapped_column(primary_key=True, autoincrement=True)
    article_id: Mapped[int] = mapped_column(
        ForeignKey("articles.id", ondelete="CASCADE"), nullable=False, index=True
    )
    heading: Mapped[str] = mapped_column(String(255), nullable=False)
    body: Mapped[str] = mapped_column(Text, nullable=False, default="")
    position: Mapped[int] = mapped_column(Integer, nullable=False, default=0)
    attachment: Mapped[str | None] = mapped_column(String(500), nullable=True)
    created_at: Mapped[datetime] = mapped_column(
        DateTime(timezone=True),
        default=_utcnow,
        nullable=False,
    )
    updated_at: Mapped[datetime] = mapped_column(
        DateTime(timezone=True),
        default=_utcnow,
        onupdate=_utcnow,
        nullable=False,
    )

    article: Mapped[ArticleModel] = relationship(back_populates="sections")
    tags: Mapped[list[TagModel]] = relationship(secondary=section_tags)

    def __repr__(self) -> str:
        return f"<ArticleSectionModel(id={self.id}, heading='{self.heading}')>"
