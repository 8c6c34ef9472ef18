"""Shared test fixtures for layout tests."""
import io
import shutil
from pathlib import Path

import pytest

from layout.core.config import set_settings
from layout.core.context import RunContext
from layout.rendering.engine import Renderer
from layout.ui.simple import SimpleUI

DATA_DIR = Path(__file__).parent / "data"


@pytest.fixture(autouse=True)
def reset_settings(monkeypatch):
    """Runtime settings are rebuilt from a clean environment for every test."""
    for name in ("LAYOUT_CONFIG", "LAYOUT_SHELL", "LAYOUT_GIT_BINARY", "LAYOUT_HOOK_TERMINATE_TIMEOUT"):
        monkeypatch.delenv(name, raising=False)
    set_settings(None)
    yield
    set_settings(None)


@pytest.fixture
def ctx():
    """Fresh, never cancelled run context."""
    return RunContext()


@pytest.fixture
def renderer():
    """Renderer with an empty state."""
    return Renderer({})


@pytest.fixture
def make_ui():
    """Build a SimpleUI fed with ``answers``; the output buffer is exposed as ``.out``."""

    def _make(answers: str = "") -> SimpleUI:
        ui = SimpleUI(io.StringIO(answers), io.StringIO())
        ui.out = ui.out_stream
        return ui

    return _make


@pytest.fixture
def project_a(tmp_path):
    """Writable copy of the sample layout in tests/data/projectA."""
    target = tmp_path / "projectA"
    shutil.copytree(DATA_DIR / "projectA", target)
    return target


@pytest.fixture
def write_manifest(tmp_path):
    """Write a layout.yaml (and optional content files) below tmp_path."""

    def _write(rel_dir: str, manifest: str, files=None) -> Path:
        layout_dir = tmp_path / rel_dir
        layout_dir.mkdir(parents=True, exist_ok=True)
        (layout_dir / "layout.yaml").write_text(manifest)
        for name, content in (files or {}).items():
            path = layout_dir / "content" / name
            path.parent.mkdir(parents=True, exist_ok=True)
            path.write_text(content)
        return layout_dir / "layout.yaml"

    return _write
