from unittest.mock import AsyncMock, MagicMock

import pytest


# ── Patch settings before any other import ──────────────────────────────────
@pytest.fixture(autouse=True)
def _patch_settings(monkeypatch):
    from src.core.config import settings
    monkeypatch.setattr(settings, "max_receipt_size_bytes", 5 * 1024 * 1024)
    monkeypatch.setattr(settings, "password_history_enabled", True)
    monkeypatch.setattr(settings, "password_history_size", 5)


@pytest.fixture
def mock_db():
    """Create a mock async database session."""
    db = AsyncMock()
    db.flush = AsyncMock()
    db.add = MagicMock()
    db.delete = AsyncMock()
    db.execute = AsyncMock()
    db.commit = AsyncMock()
    db.rollback = AsyncMock()
    return db
