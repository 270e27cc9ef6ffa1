"""
pytest configuration for buildergen tests.

Adds the repository root to sys.path so that 'import buildergen' works
without installing the package, and provides a fixture that generates
builders for a record module written to a temporary directory and
imports both.
"""

import importlib
import sys
import textwrap
import uuid
from pathlib import Path

import pytest

# Ensure the repository root is on the path (buildergen lives at the root)
root_dir = Path(__file__).parent.parent
if str(root_dir) not in sys.path:
    sys.path.insert(0, str(root_dir))

from buildergen.generator import generate_file, output_path_for  # noqa: E402


@pytest.fixture
def write_records(tmp_path):
    """Write dedented record source to a uniquely named module in tmp_path."""

    def _write(source: str, stem: str = "records") -> Path:
        path = tmp_path / f"{stem}_{uuid.uuid4().hex[:8]}.py"
        path.write_text(textwrap.dedent(source), encoding="utf-8")
        return path

    return _write


@pytest.fixture
def load_builders(tmp_path, monkeypatch, write_records):
    """Generate builders for a record module and import (records, builders, result)."""
    monkeypatch.syspath_prepend(str(tmp_path))
    imported: list[str] = []

    def _load(source: str, targets=None, config=None):
        source_path = write_records(source)
        result = generate_file(source_path, targets=targets, config=config)
        output_path = output_path_for(source_path, config)
        output_path.write_text(result.source, encoding="utf-8")

        importlib.invalidate_caches()
        records = importlib.import_module(source_path.stem)
        imported.append(source_path.stem)
        builders = importlib.import_module(output_path.stem)
        imported.append(output_path.stem)
        return records, builders, result

    yield _load

    for name in imported:
        sys.modules.pop(name, None)
