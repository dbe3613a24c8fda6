"""
test_alembic.py — Verify Alembic migration setup and structure.

Checks the migration files statically (no live database, no Alembic
runtime) against the SQLAlchemy model metadata.

Called by: pytest
Depends on: alembic/, visita360.models
"""

import ast
from pathlib import Path

from visita360.models import Base

ROOT = Path(__file__).parent.parent
MIGRATION_DIR = ROOT / "alembic" / "versions"


def _migrations() -> list[Path]:
    return sorted(MIGRATION_DIR.glob("*.py"))


def _module_assignments(tree: ast.Module) -> dict:
    out = {}
    for node in tree.body:
        if isinstance(node, ast.AnnAssign) and isinstance(node.target, ast.Name) and node.value is not None:
            out[node.target.id] = ast.literal_eval(node.value)
        elif isinstance(node, ast.Assign) and isinstance(node.targets[0], ast.Name):
            try:
                out[node.targets[0].id] = ast.literal_eval(node.value)
            except ValueError:
                pass
    return out


def _created_tables(tree: ast.Module) -> set[str]:
    tables = set()
    for node in ast.walk(tree):
        if (
            isinstance(node, ast.Call)
            and isinstance(node.func, ast.Attribute)
            and node.func.attr == "create_table"
            and node.args
            and isinstance(node.args[0], ast.Constant)
        ):
            tables.add(node.args[0].value)
    return tables


def test_initial_migration_has_required_attributes():
    files = _migrations()
    assert files, "No migration files found"
    tree = ast.parse(files[0].read_text(encoding="utf-8"))
    attrs = _module_assignments(tree)
    assert attrs["revision"] == "001_initial"
    assert attrs["down_revision"] is None

    functions = {n.name for n in tree.body if isinstance(n, ast.FunctionDef)}
    assert {"upgrade", "downgrade"} <= functions


def test_migrations_create_every_model_table():
    created = set()
    for path in _migrations():
        created |= _created_tables(ast.parse(path.read_text(encoding="utf-8")))
    assert created == set(Base.metadata.tables)


def test_env_uses_app_settings_and_metadata():
    src = (ROOT / "alembic" / "env.py").read_text(encoding="utf-8")
    assert "from visita360.config import Settings" in src
    assert "target_metadata = Base.metadata" in src
    assert "set_main_option(\"sqlalchemy.url\"" in src
