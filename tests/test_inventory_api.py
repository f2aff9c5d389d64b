"""
Tests for inventory CRUD, low-stock alerts and barcode lookup.
"""
from pathlib import Path

import pytest
from sqlalchemy.exc import OperationalError
from sqlalchemy.orm import Session, sessionmaker

from app.core.config import settings
from app.database import get_db
from app.main import app
from app.models.inventory import InventoryItem


def new_item(**overrides):
    item = {
        "comp_code": "C-100",
        "description": "Cable tie",
        "quantity": 40,
        "price": "1.25",
        "barcode": "5000001",
        "category": "Consumables",
        "unit_type": "Pack",
        "weight": "200g",
        "pack_size": 50,
    }
    item.update(overrides)
    return item


class TestCreateItem:

    def test_admin_creates_item(self, client, headers):
        response = client.post("/inventory", json=new_item(), headers=headers["admin"])

        assert response.status_code == 201
        body = response.json()
        assert body["comp_code"] == "C-100"
        assert body["quantity"] == 40
        assert body["pack_size"] == 50

    def test_single_unit_forces_pack_size_one(self, client, headers):
        response = client.post(
            "/inventory",
            json=new_item(unit_type="Single Unit", pack_size=12),
            headers=headers["admin"],
        )

        assert response.status_code == 201
        assert response.json()["pack_size"] == 1

    @pytest.mark.parametrize("role", ["stock_operator", "user"])
    def test_only_admins_create_items(self, client, headers, role):
        response = client.post("/inventory", json=new_item(), headers=headers[role])

        assert response.status_code == 403

    def test_duplicate_code_conflicts(self, client, headers, stocked):
        response = client.post(
            "/inventory",
            json=new_item(comp_code="A", barcode="9999"),
            headers=headers["admin"],
        )

        assert response.status_code == 409

    def test_duplicate_barcode_conflicts(self, client, headers, stocked):
        response = client.post(
            "/inventory",
            json=new_item(barcode="0001"),
            headers=headers["admin"],
        )

        assert response.status_code == 409

    def test_negative_quantity_rejected(self, client, headers):
        response = client.post("/inventory", json=new_item(quantity=-1), headers=headers["admin"])

        assert response.status_code == 400
        assert "quantity" in response.json()["error"]


class TestQueries:

    def test_list_inventory(self, client, headers, stocked):
        response = client.get("/inventory", headers=headers["user"])

        assert response.status_code == 200
        assert {item["comp_code"] for item in response.json()} == {"A", "B"}

    def test_low_stock_lists_items_below_threshold(self, client, headers, stocked):
        client.post("/inventory", json=new_item(), headers=headers["admin"])

        response = client.get("/inventory/low-stock", headers=headers["stock_operator"])

        assert response.status_code == 200
        assert [item["comp_code"] for item in response.json()] == ["B", "A"]

    def test_barcode_lookup(self, client, headers, stocked):
        found = client.get("/inventory/barcode/0002", headers=headers["user"])
        missing = client.get("/inventory/barcode/does-not-exist", headers=headers["user"])

        assert found.status_code == 200
        assert found.json()["comp_code"] == "B"
        assert missing.status_code == 404

    def test_all_products(self, client, headers, stocked):
        response = client.get("/inventory/all-products", headers=headers["user"])

        assert response.json() == [
            {"comp_code": "A", "description": "Widget"},
            {"comp_code": "B", "description": "Bolt pack"},
        ]


class TestUpdateAndDelete:

    def test_update_descriptive_fields(self, client, headers, stocked):
        item_id = stocked[1].id

        response = client.put(
            f"/inventory/{item_id}",
            json={"description": "Bolt pack (M6)", "price": "6.50"},
            headers=headers["admin"],
        )

        assert response.status_code == 200
        body = response.json()
        assert body["description"] == "Bolt pack (M6)"
        assert body["quantity"] == 3

    def test_failed_update_rolls_back(self, client, headers, stocked, engine, db_session):
        class FailingCommitSession(Session):
            def commit(self):
                raise OperationalError("COMMIT", {}, Exception("database is locked"))

        failing = sessionmaker(bind=engine, class_=FailingCommitSession, autoflush=False)

        def failing_db():
            db = failing()
            try:
                yield db
            finally:
                db.close()

        app.dependency_overrides[get_db] = failing_db

        response = client.put(
            f"/inventory/{stocked[1].id}",
            json={"barcode": "7777"},
            headers=headers["admin"],
        )

        assert response.status_code == 500
        assert response.json()["detail"] == "Unable to update item"

        db_session.expire_all()
        assert db_session.get(InventoryItem, stocked[1].id).barcode == "0002"

    def test_delete_unused_item(self, client, headers, stocked):
        response = client.delete(f"/inventory/{stocked[0].id}", headers=headers["admin"])

        assert response.status_code == 200
        remaining = client.get("/inventory", headers=headers["admin"]).json()
        assert [item["comp_code"] for item in remaining] == ["B"]

    def test_delete_item_with_history_conflicts(self, client, headers, stocked):
        client.post(
            "/inventory/transaction",
            json={"item_code": "A", "quantity": 1, "transaction_type": "issued", "price": 10},
            headers=headers["admin"],
        )

        response = client.delete(f"/inventory/{stocked[0].id}", headers=headers["admin"])

        assert response.status_code == 409

    def test_delete_unknown_item(self, client, headers):
        response = client.delete("/inventory/999", headers=headers["admin"])

        assert response.status_code == 404


PNG_BYTES = b"\x89PNG\r\n\x1a\n" + b"\x00" * 32


class TestProductImage:

    def test_admin_uploads_image_and_it_is_served(self, client, headers, stocked):
        response = client.post(
            f"/inventory/{stocked[0].id}/image",
            files={"image": ("widget photo.png", PNG_BYTES, "image/png")},
            headers=headers["admin"],
        )

        assert response.status_code == 200
        image = response.json()["image"]
        assert image.endswith("-widget_photo.png")

        served = client.get(f"/uploads/{image}")
        assert served.status_code == 200
        assert served.content == PNG_BYTES

        listed = client.get("/inventory/barcode/0001", headers=headers["user"]).json()
        assert listed["image"] == image

    def test_replacing_image_removes_old_file(self, client, headers, stocked):
        first = client.post(
            f"/inventory/{stocked[0].id}/image",
            files={"image": ("a.png", PNG_BYTES, "image/png")},
            headers=headers["admin"],
        ).json()["image"]

        second = client.post(
            f"/inventory/{stocked[0].id}/image",
            files={"image": ("b.png", PNG_BYTES, "image/png")},
            headers=headers["admin"],
        ).json()["image"]

        assert second != first
        assert not (Path(settings.UPLOAD_DIR) / first).exists()
        assert (Path(settings.UPLOAD_DIR) / second).exists()

    def test_path_segments_are_stripped_from_filename(self, client, headers, stocked):
        response = client.post(
            f"/inventory/{stocked[0].id}/image",
            files={"image": ("../../etc/passwd.png", PNG_BYTES, "image/png")},
            headers=headers["admin"],
        )

        image = response.json()["image"]
        assert "/" not in image
        assert (Path(settings.UPLOAD_DIR) / image).exists()

    def test_non_image_rejected(self, client, headers, stocked):
        response = client.post(
            f"/inventory/{stocked[0].id}/image",
            files={"image": ("notes.txt", b"hello", "text/plain")},
            headers=headers["admin"],
        )

        assert response.status_code == 400

    def test_oversized_image_rejected(self, client, headers, stocked, monkeypatch):
        monkeypatch.setattr(settings, "MAX_IMAGE_BYTES", 16)

        response = client.post(
            f"/inventory/{stocked[0].id}/image",
            files={"image": ("big.png", PNG_BYTES, "image/png")},
            headers=headers["admin"],
        )

        assert response.status_code == 413

    def test_unknown_item(self, client, headers):
        response = client.post(
            "/inventory/999/image",
            files={"image": ("a.png", PNG_BYTES, "image/png")},
            headers=headers["admin"],
        )

        assert response.status_code == 404

    def test_only_admins_upload(self, client, headers, stocked):
        response = client.post(
            f"/inventory/{stocked[0].id}/image",
            files={"image": ("a.png", PNG_BYTES, "image/png")},
            headers=headers["stock_operator"],
        )

        assert response.status_code == 403
