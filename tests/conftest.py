from __future__ import annotations

from pathlib import Path
import pytest

from reftype_core.fm.types import VarInfo


@pytest.fixture(scope="session")
def repo_root() -> Path:
    # tests/ -> repo root
    return Path(__file__).resolve().parents[1]


@pytest.fixture(scope="session")
def examples_dir(repo_root: Path) -> Path:
    return repo_root / "examples"


@pytest.fixture(scope="session")
def predicates_dir(examples_dir: Path) -> Path:
    p = examples_dir / "predicates"
    assert p.exists(), f"Missing example predicates: {p}"
    return p


@pytest.fixture
def xy_vars() -> VarInfo:
    return VarInfo.of("x", "y")


@pytest.fixture
def real_x() -> VarInfo:
    return VarInfo.of(real=["x"])


