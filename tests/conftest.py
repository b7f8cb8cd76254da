"""Shared test fixtures and marker registration."""

from __future__ import annotations

from typing import TYPE_CHECKING

import pytest

from cdn_store.drivers._cdn import ContentDeliveryDriver
from tests.fake_remote import FakeContentDelivery

if TYPE_CHECKING:
    from collections.abc import Iterator
    from pathlib import Path



def pytest_configure(config: object) -> None:
    """Register custom markers."""
    if isinstance(config, pytest.Config):
        config.addinivalue_line("markers", "integration: requires external services")


@pytest.fixture
def remote() -> FakeContentDelivery:
    return FakeContentDelivery()


@pytest.fixture
def staging_root(tmp_path: Path) -> Path:
    return tmp_path / "staging"


@pytest.fixture
def driver(remote: FakeContentDelivery, staging_root: Path) -> Iterator[ContentDeliveryDriver]:
    """Driver talking to the in-memory remote, two entries per listing page."""
    d = ContentDeliveryDriver(
        apikey="secret",
        environment="stage",
        staging_root=staging_root,
        page_size=2,
        transport=remote.transport(),
    )
    yield d
    d.close()
