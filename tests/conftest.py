from __future__ import annotations

from pathlib import Path
from typing import Iterator

import pytest

from tests._fixtures.project_builder import GeneratedModules, ProjectBuilder


@pytest.fixture
def project_builder(tmp_path: Path) -> ProjectBuilder:
    """Provide a reusable project builder rooted at the pytest tmp_path."""
    return ProjectBuilder(tmp_path)


@pytest.fixture
def generated_modules(tmp_path: Path, monkeypatch: pytest.MonkeyPatch) -> Iterator[GeneratedModules]:
    """Import generated artifacts from a directory placed on ``sys.path``."""
    directory = tmp_path / "generated"
    directory.mkdir()
    monkeypatch.syspath_prepend(str(directory))
    modules = GeneratedModules(directory)
    yield modules
    modules.cleanup()
