"""Unit tests for the HTTP endpoints."""

import re
import sqlite3
from pathlib import Path
from typing import Iterator
from unittest.mock import AsyncMock

import pytest
from fastapi.testclient import TestClient

from order_desk.core.config import Settings
from order_desk.main import create_app, resolve_frontend_path
from order_desk.services.errors import PersistenceFailure

ORDER_NUMBER = re.compile(r"^ORD-[A-Z0-9]{8}$")


@pytest.fixture
def client(settings: Settings) -> Iterator[TestClient]:
    """Create a test client running the full lifespan against SQLite."""
    app = create_app(settings=settings)
    with TestClient(app) as test_client:
        yield test_client


def seed_menu(db_path: Path) -> None:
    conn = sqlite3.connect(db_path)
    try:
        conn.executemany(
            "INSERT INTO categories (id, name_en, slug) VALUES (?, ?, ?)",
            [(1, "Noodles", "noodles"), (2, "Drinks", "drinks")],
        )
        conn.executemany(
            "INSERT INTO menu_items (id, category_id, name_en, price, is_available) "
            "VALUES (?, ?, ?, ?, ?)",
            [
                (1, 1, "Pad Thai", 12.50, 1),
                (2, 2, "Thai Iced Tea", 4.00, 1),
                (3, 1, "Boat Noodles", 11.00, 0),
                (4, None, "Sticky Rice", 2.50, 1),
            ],
        )
        conn.commit()
    finally:
        conn.close()


@pytest.mark.unit
class TestHealthEndpoints:
    """Test suite for liveness endpoints."""

    def test_health(self, client: TestClient) -> None:
        response = client.get("/api/health")

        assert response.status_code == 200
        assert response.json() == {"status": "ok"}

    def test_api_test(self, client: TestClient) -> None:
        response = client.get("/api/test")

        assert response.status_code == 200
        assert response.json() == {"message": "Server and API are working!"}

    def test_module_app_is_inert_under_test(self) -> None:
        """Importing the module under test builds no services or database."""
        from order_desk import main

        assert not hasattr(main.app.state, "database")
        assert not hasattr(main.app.state, "order_service")


@pytest.mark.unit
class TestCreateOrderEndpoint:
    """Test suite for POST /api/orders."""

    def test_scenario_order(self, client: TestClient, scenario_order: dict) -> None:
        response = client.post("/api/orders", json=scenario_order)

        assert response.status_code == 200
        data = response.json()
        assert set(data) == {"order_id", "order_number"}
        assert isinstance(data["order_id"], int)
        assert ORDER_NUMBER.match(data["order_number"])

        active = client.get("/api/orders/active").json()
        assert len(active) == 1
        assert active[0]["id"] == data["order_id"]
        assert active[0]["total_amount"] == pytest.approx(25.00)

    def test_short_route(self, client: TestClient, scenario_order: dict) -> None:
        response = client.post("/orders", json=scenario_order)

        assert response.status_code == 200
        assert ORDER_NUMBER.match(response.json()["order_number"])

    def test_numeric_identifiers_accepted(self, client: TestClient) -> None:
        payload = {
            "session_id": 1718000000000,
            "items": [{"menu_item_id": 1, "customer_id": 2, "unit_price": "8.50"}],
        }

        response = client.post("/api/orders", json=payload)

        assert response.status_code == 200
        active = client.get("/api/orders/active").json()
        assert active[0]["session_id"] == "1718000000000"
        assert active[0]["total_amount"] == pytest.approx(8.50)

    @pytest.mark.parametrize("payload", [{"items": []}, {}, {"items": None, "table_id": 3}])
    def test_missing_items(self, client: TestClient, payload: dict) -> None:
        response = client.post("/api/orders", json=payload)

        assert response.status_code == 400
        assert response.json() == {"error": "Order must include items"}
        assert client.get("/api/orders/active").json() == []

    def test_unparseable_body(self, client: TestClient) -> None:
        response = client.post(
            "/api/orders",
            content="not json",
            headers={"Content-Type": "application/json"},
        )

        assert response.status_code == 400
        assert "error" in response.json()

    def test_wrong_field_type_rejected_before_store(self, client: TestClient) -> None:
        payload = {"items": [{"menu_item_id": 1, "unit_price": 5.0, "quantity": 2.5}]}

        response = client.post("/api/orders", json=payload)

        assert response.status_code == 400
        assert response.json() == {"error": "Invalid request body"}
        assert client.get("/api/orders/active").json() == []

    def test_store_rejection_is_generic_500(self, client: TestClient, table_order: dict) -> None:
        """The caller learns that creation failed, never why."""
        table_order["items"][2]["menu_item_id"] = None

        response = client.post("/api/orders", json=table_order)

        assert response.status_code == 500
        assert response.json() == {"error": "Failed to create order"}
        assert client.get("/api/orders/active").json() == []

    def test_service_failure_maps_to_500(self, client: TestClient, scenario_order: dict) -> None:
        client.app.state.order_service.submit = AsyncMock(
            side_effect=PersistenceFailure("Failed to create order")
        )

        response = client.post("/api/orders", json=scenario_order)

        assert response.status_code == 500
        assert response.json() == {"error": "Failed to create order"}

    def test_two_identical_submissions(self, client: TestClient, scenario_order: dict) -> None:
        first = client.post("/api/orders", json=scenario_order).json()
        second = client.post("/api/orders", json=scenario_order).json()

        assert first["order_id"] != second["order_id"]
        assert first["order_number"] != second["order_number"]
        assert len(client.get("/api/orders/active").json()) == 2


@pytest.mark.unit
class TestActiveOrdersEndpoint:
    """Test suite for GET /api/orders/active."""

    def test_only_in_progress_orders(
        self, client: TestClient, db_path: Path, table_order: dict, scenario_order: dict
    ) -> None:
        kept = client.post("/api/orders", json=table_order).json()
        done = client.post("/api/orders", json=scenario_order).json()

        conn = sqlite3.connect(db_path)
        conn.execute("UPDATE orders SET status = 'completed' WHERE id = ?", (done["order_id"],))
        conn.commit()
        conn.close()

        active = client.get("/api/orders/active").json()

        assert [o["order_number"] for o in active] == [kept["order_number"]]
        assert active[0]["table_id"] == 7
        assert active[0]["queue_number"] == "B12"
        assert active[0]["total_amount"] == pytest.approx(35.30)

    def test_prefers_database_view(self, client: TestClient, db_path: Path) -> None:
        conn = sqlite3.connect(db_path)
        conn.execute("CREATE VIEW active_orders AS SELECT 'ORD-VIEW0001' AS order_number")
        conn.commit()
        conn.close()

        assert client.get("/api/orders/active").json() == [{"order_number": "ORD-VIEW0001"}]


@pytest.mark.unit
class TestMenuEndpoint:
    """Test suite for GET /api/menu."""

    def test_falls_back_to_tables(self, client: TestClient, db_path: Path) -> None:
        seed_menu(db_path)

        response = client.get("/api/menu")

        assert response.status_code == 200
        menu = response.json()
        assert [m["name_en"] for m in menu] == ["Pad Thai", "Thai Iced Tea", "Sticky Rice"]
        assert menu[0]["category_en"] == "Noodles"
        assert menu[0]["category_slug"] == "noodles"
        assert menu[2]["category_en"] is None

    def test_prefers_database_view(self, client: TestClient, db_path: Path) -> None:
        seed_menu(db_path)
        conn = sqlite3.connect(db_path)
        conn.execute(
            "CREATE VIEW menu_with_categories AS "
            "SELECT mi.id, mi.name_en, c.slug AS category_slug "
            "FROM menu_items mi JOIN categories c ON mi.category_id = c.id "
            "WHERE c.slug = 'drinks'"
        )
        conn.commit()
        conn.close()

        menu = client.get("/api/menu").json()

        assert menu == [{"id": 2, "name_en": "Thai Iced Tea", "category_slug": "drinks"}]


@pytest.mark.unit
class TestRegisterEndpoint:
    """Test suite for POST /api/admin/register."""

    def test_register(self, client: TestClient) -> None:
        response = client.post(
            "/api/admin/register",
            json={"username": "somchai", "email": "somchai@example.com", "password": "s3cret"},
        )

        assert response.status_code == 200
        data = response.json()
        assert data["username"] == "somchai"
        assert isinstance(data["id"], int)

    @pytest.mark.parametrize(
        "payload",
        [{"username": "somchai"}, {"password": "s3cret"}, {"username": "", "password": "x"}],
    )
    def test_missing_credentials(self, client: TestClient, payload: dict) -> None:
        response = client.post("/api/admin/register", json=payload)

        assert response.status_code == 400
        assert response.json() == {"error": "username and password required"}

    def test_duplicate_username(self, client: TestClient) -> None:
        payload = {"username": "somchai", "password": "s3cret"}
        assert client.post("/api/admin/register", json=payload).status_code == 200

        response = client.post("/api/admin/register", json=payload)

        assert response.status_code == 500
        assert response.json() == {"error": "Failed to register user"}


@pytest.mark.unit
class TestFrontend:
    """Test suite for static file serving and SPA fallback."""

    def test_root_serves_index(self, client: TestClient) -> None:
        response = client.get("/")

        assert response.status_code == 200
        assert "order desk" in response.text

    def test_static_asset(self, client: TestClient) -> None:
        response = client.get("/assets/app.js")

        assert response.status_code == 200
        assert "console.log" in response.text

    def test_spa_fallback(self, client: TestClient) -> None:
        response = client.get("/tables/7/checkout")

        assert response.status_code == 200
        assert "order desk" in response.text

    def test_missing_index(self, client: TestClient, frontend_dir: Path) -> None:
        (frontend_dir / "index.html").unlink()

        response = client.get("/tables/7")

        assert response.status_code == 500
        assert response.text == "Frontend not found"

    def test_missing_frontend_dir(self, settings: Settings, tmp_path: Path) -> None:
        settings.frontend_dir = str(tmp_path / "nowhere")

        with pytest.raises(RuntimeError, match="Frontend folder not found"):
            create_app(settings=settings)

    def test_relative_frontend_dir_uses_working_directory(
        self, settings: Settings, frontend_dir: Path, monkeypatch: pytest.MonkeyPatch
    ) -> None:
        monkeypatch.chdir(frontend_dir.parent)
        settings.frontend_dir = "frontend"

        assert resolve_frontend_path(settings) == frontend_dir.resolve()

        with TestClient(create_app(settings=settings)) as test_client:
            response = test_client.get("/")

        assert response.status_code == 200
        assert "order desk" in response.text
