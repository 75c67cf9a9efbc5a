"""Integration tests — clone SQLAlchemy models between real SQLite databases."""

from datetime import datetime, timezone

import pytest
import pytest_asyncio
from sqlalchemy import String, func, select
from sqlalchemy.orm import DeclarativeBase, Mapped, mapped_column

from cloner.application.services import Cloner
from cloner.domain.entities import Cloneable, RelationKind
from cloner.domain.exceptions import StoreError, UnknownDestinationError, UnsupportedEntityError
from cloner.infrastructure.database import ArticleModel, ArticleSectionModel, Base, TagModel
from cloner.infrastructure.database.models import article_tags, section_tags
from cloner.infrastructure.database.repositories import SQLAlchemyCloneRepository
from cloner.infrastructure.database.session import build_engine, build_session_factory
from cloner.infrastructure.events.in_memory_event_bus import InMemoryEventBus
from cloner.infrastructure.storage.local_file_duplicator import LocalFileDuplicator

T0 = datetime(2020, 1, 1, tzinfo=timezone.utc)


class InvoiceBase(DeclarativeBase):
    pass


class InvoiceModel(Cloneable, InvoiceBase):
    """Cloneable model whose key column is not called ``id``."""

    __tablename__ = "invoices"

    invoice_id: Mapped[int] = mapped_column(primary_key=True, autoincrement=True)
    number: Mapped[str] = mapped_column(String(50), nullable=False)


# ── Fixtures ─────────────────────────────────────────────────────────

@pytest_asyncio.fixture
async def sessions(tmp_path):
    engines = {name: build_engine(f"sqlite:///{tmp_path / name}.db") for name in ("default", "archive")}
    for bind in engines.values():
        async with bind.begin() as conn:
            await conn.run_sync(Base.metadata.create_all)

    opened = {name: build_session_factory(bind)() for name, bind in engines.items()}
    yield opened

    for session in opened.values():
        await session.close()
    for bind in engines.values():
        await bind.dispose()


@pytest.fixture
def upload_dir(tmp_path):
    root = tmp_path / "uploads"
    (root / "covers").mkdir(parents=True)
    (root / "files").mkdir()
    (root / "covers" / "img1.png").write_bytes(b"cover")
    (root / "files" / "usage.pdf").write_bytes(b"%PDF usage")
    return root


@pytest.fixture
def repository(sessions) -> SQLAlchemyCloneRepository:
    return SQLAlchemyCloneRepository(sessions["default"], {"archive": sessions["archive"]})


@pytest.fixture
def bus() -> InMemoryEventBus:
    return InMemoryEventBus()


@pytest.fixture
def cloner(repository, bus, upload_dir) -> Cloner:
    return Cloner(repository=repository, events=bus, files=LocalFileDuplicator(str(upload_dir)))


@pytest_asyncio.fixture
async def article(sessions) -> ArticleModel:
    session = sessions["default"]
    news, howto = TagModel(name="news"), TagModel(name="howto")
    article = ArticleModel(
        title="Getting Started",
        content="Body",
        cover_image="covers/img1.png",
        view_count=42,
        created_at=T0,
        updated_at=T0,
        tags=[news, howto],
        sections=[
            ArticleSectionModel(heading="Intro", position=0, tags=[news], created_at=T0, updated_at=T0),
            ArticleSectionModel(
                heading="Usage", position=1, attachment="files/usage.pdf", created_at=T0, updated_at=T0
            ),
        ],
    )
    session.add(article)
    await session.commit()
    return article


async def _count(session, table) -> int:
    return await session.scalar(select(func.count()).select_from(table))


async def _sections_of(session, article_id: int) -> list[ArticleSectionModel]:
    result = await session.scalars(
        select(ArticleSectionModel)
        .where(ArticleSectionModel.article_id == article_id)
        .order_by(ArticleSectionModel.position)
    )
    return list(result.all())


# ── Repository ───────────────────────────────────────────────────────

@pytest.mark.asyncio
async def test_relation_kinds_come_from_the_mapper(repository, article):
    assert repository.relation_kind(article, "sections") is RelationKind.OWNED
    assert repository.relation_kind(article, "tags") is RelationKind.LINK

    with pytest.raises(UnsupportedEntityError, match="many-to-one"):
        repository.relation_kind(article.sections[0], "article")
    with pytest.raises(UnsupportedEntityError, match="no relationship"):
        repository.relation_kind(article, "authors")


@pytest.mark.asyncio
async def test_get_by_id_looks_up_cloneable_tables(repository, article):
    assert await repository.get_by_id("articles", article.id) is article
    assert await repository.get_by_id("articles", 999) is None

    with pytest.raises(UnsupportedEntityError):
        await repository.get_by_id("tags", 1)


# ── Duplicate ────────────────────────────────────────────────────────

@pytest.mark.asyncio
async def test_duplicate_article_with_sections_tags_and_files(cloner, sessions, article, upload_dir):
    session = sessions["default"]

    clone = await cloner.duplicate(article)
    await session.commit()
    await session.refresh(clone)

    assert clone.id != article.id
    assert clone.title == "Getting Started"
    assert clone.view_count == 0
    assert clone.created_at.replace(tzinfo=None) != T0.replace(tzinfo=None)
    assert clone.cover_image == "covers/img1_copy.png"
    assert (upload_dir / "covers" / "img1_copy.png").read_bytes() == b"cover"

    # Owned sections are new rows under the clone
    sections = await _sections_of(session, clone.id)
    assert [s.heading for s in sections] == ["Intro", "Usage"]
    assert {s.id for s in sections}.isdisjoint({s.id for s in article.sections})
    assert sections[0].attachment is None
    assert sections[1].attachment == "files/usage_copy.pdf"

    # Linked tags are re-attached with pivot data, never copied
    pivot_rows = (await session.execute(select(article_tags).where(article_tags.c.article_id == clone.id))).all()
    assert len(pivot_rows) == 2
    assert {row.added_by for row in pivot_rows} == {"cloner"}
    assert await _count(session, TagModel) == 2

    # Sections apply their own link rule
    intro_tags = (await session.execute(select(section_tags).where(section_tags.c.section_id == sections[0].id))).all()
    assert len(intro_tags) == 1

    # The source is untouched
    assert len(await _sections_of(session, article.id)) == 2
    assert await _count(session, ArticleModel) == 2


@pytest.mark.asyncio
async def test_cloned_events_are_published_for_the_whole_tree(cloner, bus, article):
    names = []
    bus.subscribe("cloned:*", lambda event: names.append(event.name))

    await cloner.duplicate(article)

    assert names == ["cloned:ArticleModel", "cloned:ArticleSectionModel", "cloned:ArticleSectionModel"]


# ── Duplicate to another store ───────────────────────────────────────

@pytest.mark.asyncio
async def test_duplicate_to_archive_copies_rows_but_no_links(cloner, sessions, article):
    default, archive = sessions["default"], sessions["archive"]

    clone = await cloner.duplicate_to(article, "archive")
    await archive.commit()

    assert await _count(archive, ArticleModel) == 1
    assert [s.heading for s in await _sections_of(archive, clone.id)] == ["Intro", "Usage"]
    assert await _count(archive, article_tags) == 0
    assert await _count(archive, section_tags) == 0
    assert await _count(default, ArticleModel) == 1


@pytest.mark.asyncio
async def test_duplicate_to_unknown_destination_fails(cloner, article):
    with pytest.raises(UnknownDestinationError):
        await cloner.duplicate_to(article, "nowhere")


@pytest.mark.asyncio
async def test_attributes_of_detached_expired_entity_raises_store_error(repository, sessions, article):
    session = sessions["default"]
    session.expire(article)
    session.expunge(article)

    with pytest.raises(StoreError, match="Could not load ArticleModel"):
        await repository.attributes_of(article)


# ── Custom primary key ───────────────────────────────────────────────

@pytest.mark.asyncio
async def test_duplicate_model_with_custom_primary_key(tmp_path):
    bind = build_engine(f"sqlite:///{tmp_path / 'invoices'}.db")
    async with bind.begin() as conn:
        await conn.run_sync(InvoiceBase.metadata.create_all)

    async with build_session_factory(bind)() as session:
        invoice = InvoiceModel(number="INV-1")
        session.add(invoice)
        await session.commit()

        repository = SQLAlchemyCloneRepository(session)
        assert await repository.attributes_of(invoice) == {"number": "INV-1"}

        clone = await Cloner(repository=repository, events=InMemoryEventBus()).duplicate(invoice)
        await session.commit()

        assert clone.invoice_id != invoice.invoice_id
        assert clone.number == "INV-1"
        assert await _count(session, InvoiceModel) == 2

    await bind.dispose()
