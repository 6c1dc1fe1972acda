"""Shared pytest fixtures and configuration for all tests."""

import os

os.environ.setdefault("ENVIRONMENT", "test")

from pathlib import Path
from typing import AsyncIterator

import pytest
import pytest_asyncio

from order_desk.core.config import Settings
from order_desk.database import Database


@pytest.fixture
def frontend_dir(tmp_path: Path) -> Path:
    """Fixture providing a minimal frontend bundle."""
    bundle = tmp_path / "frontend"
    (bundle / "assets").mkdir(parents=True)
    (bundle / "index.html").write_text("<html><body>order desk</body></html>")
    (bundle / "assets" / "app.js").write_text("console.log('menu');")
    return bundle


@pytest.fixture
def db_path(tmp_path: Path) -> Path:
    return tmp_path / "orders.db"


@pytest.fixture
def settings(db_path: Path, frontend_dir: Path) -> Settings:
    """Fixture providing settings backed by a throwaway SQLite file."""
    return Settings(
        _env_file=None,
        database_url=f"sqlite+aiosqlite:///{db_path}",
        frontend_dir=str(frontend_dir),
        password_hash_rounds=4,
    )


@pytest_asyncio.fixture
async def database(settings: Settings) -> AsyncIterator[Database]:
    """Fixture providing an initialized store handle."""
    db = Database.from_settings(settings)
    await db.init_models()
    yield db
    await db.dispose()


@pytest.fixture
def scenario_order() -> dict:
    """Fixture providing the single-line order used across tests."""
    return {"items": [{"menu_item_id": 5, "unit_price": 12.50, "quantity": 2}]}


@pytest.fixture
def table_order() -> dict:
    """Fixture providing a shared-table order with three lines."""
    return {
        "session_id": "S1718000000000",
        "table_id": 7,
        "queue_number": "B12",
        "special_instructions": "Birthday table",
        "items": [
            {
                "menu_item_id": 1,
                "customer_id": "C1",
                "quantity": 2,
                "unit_price": 8.50,
                "spicy_level": 3,
                "protein_choice": "Chicken",
                "special_notes": "No peanuts",
            },
            {"menu_item_id": 2, "customer_id": "C2", "unit_price": 12.00},
            {"menu_item_id": 3, "customer_id": "C2", "quantity": 3, "unit_price": 2.10},
        ],
    }
