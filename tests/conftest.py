"""
Shared pytest fixtures for pact-matrix tests.

This module provides:
- An in-memory SQLite engine with every table created
- A session per test, rolled back afterwards
- ``scenario`` — a MatrixScenario builder bound to that session
- ``service`` — a MatrixService bound to that session
"""

from __future__ import annotations

from collections.abc import Generator
from pathlib import Path

import pytest
from sqlalchemy.engine import Engine

from pact_matrix.core.orm import MatrixBase, MatrixSession, create_matrix_engine
from pact_matrix.matrix.service import MatrixService
from tests._support.scenario import MatrixScenario


def pytest_collection_modifyitems(config: pytest.Config, items: list[pytest.Item]) -> None:
    """Mark tests touching the store as integration, the rest as unit."""
    for item in items:
        markers = {mark.name for mark in item.iter_markers()}
        if markers.intersection({"unit", "integration"}):
            continue
        fixtures = set(getattr(item, "fixturenames", ()))
        if fixtures.intersection({"session", "scenario", "service"}):
            item.add_marker(pytest.mark.integration)
        else:
            item.add_marker(pytest.mark.unit)


@pytest.fixture
def engine() -> Generator[Engine, None, None]:
    """In-memory SQLite engine with all tables created."""
    eng = create_matrix_engine("sqlite:///:memory:")
    MatrixBase.metadata.create_all(eng)
    yield eng
    eng.dispose()


@pytest.fixture
def session(engine: Engine) -> Generator[MatrixSession, None, None]:
    with MatrixSession(bind=engine) as sess:
        yield sess
        sess.rollback()


@pytest.fixture
def scenario(session: MatrixSession) -> MatrixScenario:
    return MatrixScenario(session)


@pytest.fixture
def service(session: MatrixSession) -> MatrixService:
    return MatrixService(session)


@pytest.fixture
def env_file_dir(tmp_path: Path, monkeypatch: pytest.MonkeyPatch) -> Path:
    """Run the test from an empty directory so no stray .env is read."""
    monkeypatch.chdir(tmp_path)
    return tmp_path
