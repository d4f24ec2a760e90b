"""
Tests for the database schema.

Verifies the tables the engine relies on exist after create_all, and that
the initial migration script covers the same tables.
"""

import pathlib

import pytest
import pytest_asyncio
from sqlalchemy import inspect as sa_inspect

TABLES = [
    "users",
    "developers",
    "projects",
    "categories",
    "unit_types",
    "project_categories",
    "project_category_unit_types",
    "deals",
    "commissions",
    "audit_logs",
]

RATE_TABLES = ["developers", "projects", "project_categories", "project_category_unit_types"]
RATE_COLUMNS = ["actual_commission_rate", "broker_commission_rate", "communicated_commission"]


@pytest_asyncio.fixture
async def inspector(db_engine):
    """Return a dict of {table_name: {column_name: column_info}}."""
    async with db_engine.connect() as conn:
        def _inspect(sync_conn):
            insp = sa_inspect(sync_conn)
            return {
                table: {c["name"]: c for c in insp.get_columns(table)}
                for table in insp.get_table_names()
            }
        return await conn.run_sync(_inspect)


# ── Models ─────────────────────────────────────────────────

class TestTables:
    @pytest.mark.parametrize("table", TABLES)
    def test_table_exists(self, inspector, table):
        assert table in inspector

    @pytest.mark.parametrize("table", RATE_TABLES)
    def test_rate_columns_nullable(self, inspector, table):
        for column in RATE_COLUMNS:
            assert inspector[table][column]["nullable"] is True

    def test_commission_columns(self, inspector):
        for column in ["deal_id", "rate", "amount", "status", "approved_at", "paid_at", "rejection_reason"]:
            assert column in inspector["commissions"]


# ── Migration script structural checks ─────────────────────

class TestMigrationScript:
    """Validate migration script structure (source-level checks)."""

    @pytest.fixture
    def source(self):
        fpath = pathlib.Path(__file__).resolve().parent.parent / "alembic" / "versions" / "000_initial_schema.py"
        return fpath.read_text(encoding="utf-8")

    def test_revision_id(self, source):
        assert 'revision: str = "000_initial_schema"' in source

    def test_upgrade_covers_all_tables(self, source):
        up_start = source.index("def upgrade()")
        down_start = source.index("def downgrade()")
        upgrade_body = source[up_start:down_start]
        for table in TABLES:
            assert f'"{table}"' in upgrade_body, f"Table '{table}' not found in upgrade()"

    def test_downgrade_covers_all_tables(self, source):
        downgrade_body = source[source.index("def downgrade()"):]
        for table in TABLES:
            assert f'op.drop_table("{table}")' in downgrade_body

    def test_rate_columns_in_migration(self, source):
        for column in RATE_COLUMNS:
            assert column in source
