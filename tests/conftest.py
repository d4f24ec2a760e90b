"""
Pytest configuration and fixtures.
"""

from types import SimpleNamespace

import pytest
import pytest_asyncio
from sqlalchemy.ext.asyncio import AsyncSession, create_async_engine, async_sessionmaker

from byit.models import (
    Base,
    Category,
    Developer,
    Project,
    ProjectCategory,
    ProjectCategoryUnitType,
    UnitType,
    User,
    UserRole,
)


# Test database URL (use SQLite for tests)
TEST_DATABASE_URL = "sqlite+aiosqlite:///:memory:"


@pytest_asyncio.fixture
async def db_engine():
    """Create test database engine."""
    engine = create_async_engine(TEST_DATABASE_URL, echo=False)

    async with engine.begin() as conn:
        await conn.run_sync(Base.metadata.create_all)

    yield engine

    await engine.dispose()


@pytest_asyncio.fixture
async def db_session(db_engine):
    """Create test database session."""
    async_session = async_sessionmaker(
        db_engine,
        class_=AsyncSession,
        expire_on_commit=False,
    )

    async with async_session() as session:
        yield session


@pytest_asyncio.fixture
async def file_engine(tmp_path):
    """File-backed database for tests that need two independent sessions."""
    engine = create_async_engine(f"sqlite+aiosqlite:///{tmp_path / 'byit.db'}", echo=False)

    async with engine.begin() as conn:
        await conn.run_sync(Base.metadata.create_all)

    yield engine

    await engine.dispose()


@pytest.fixture
def session_factory(file_engine):
    return async_sessionmaker(file_engine, class_=AsyncSession, expire_on_commit=False)


async def seed_hierarchy(db: AsyncSession) -> SimpleNamespace:
    """
    One developer → project → category → unit type chain plus users.

    All rate fields start NULL; tests set the values they need.
    """
    broker = User(email="broker@byit.test", first_name="Omar", last_name="Hassan", role=UserRole.BROKER)
    manager = User(email="manager@byit.test", first_name="Sara", role=UserRole.MANAGER)
    developer = Developer(name="Emaar Misr", headquarters="Cairo")
    apartments = Category(name="Apartments")
    studio = UnitType(name="Studio")
    db.add_all([broker, manager, developer, apartments, studio])
    await db.flush()

    project = Project(developer_id=developer.id, name="Marassi", location="North Coast")
    db.add(project)
    await db.flush()

    category = ProjectCategory(project_id=project.id, category_id=apartments.id)
    db.add(category)
    await db.flush()

    unit_type = ProjectCategoryUnitType(
        project_category_id=category.id,
        unit_type_id=studio.id,
    )
    db.add(unit_type)
    await db.commit()

    return SimpleNamespace(
        broker=broker,
        manager=manager,
        developer=developer,
        project=project,
        category=category,
        unit_type=unit_type,
        catalog_category=apartments,
        catalog_unit_type=studio,
    )


@pytest_asyncio.fixture
async def hierarchy(db_session):
    """Seeded hierarchy in the in-memory database."""
    return await seed_hierarchy(db_session)


@pytest_asyncio.fixture
async def file_hierarchy(session_factory):
    """Seeded hierarchy in the file-backed database (detached instances)."""
    async with session_factory() as session:
        return await seed_hierarchy(session)
