import importlib.util
from pathlib import Path

from alembic.migration import MigrationContext
from alembic.operations import Operations
from sqlalchemy import create_engine, inspect
from sqlmodel import SQLModel

from runeswap import models  # noqa: F401

MIGRATION = Path(__file__).resolve().parents[1] / "database" / "migrations" / "versions" / "0001_initial.py"


def _load_migration():
    spec = importlib.util.spec_from_file_location("migration_0001_initial", MIGRATION)
    module = importlib.util.module_from_spec(spec)
    spec.loader.exec_module(module)
    return module


def test_initial_migration_matches_models():
    migration = _load_migration()
    engine = create_engine("sqlite://")
    with engine.begin() as conn:
        with Operations.context(MigrationContext.configure(conn)):
            migration.upgrade()
        inspector = inspect(conn)
        migrated = {
            name: {column["name"] for column in inspector.get_columns(name)}
            for name in inspector.get_table_names()
        }
        indexes = {
            name: {index["name"] for index in inspector.get_indexes(name)}
            for name in inspector.get_table_names()
        }
    engine.dispose()

    expected = {name: set(table.columns.keys()) for name, table in SQLModel.metadata.tables.items()}
    assert migrated == expected
    for name, table in SQLModel.metadata.tables.items():
        assert {index.name for index in table.indexes} <= indexes[name]
