from __future__ import annotations

from fastapi.testclient import TestClient

from farmacia_reports.app import app


client = TestClient(app)

OPTIONS = {"generated_at": "2024-03-05T10:30:00"}

PRODUCTS = [
    {"id": 1, "name": "Paracetamol 500mg", "category": "Analgésicos", "stock": 4, "price": 2.5},
    {"id": 2, "name": "Vitamina C", "category": "Suplementos", "stock": 25, "reorderLevel": 5, "price": 4.0},
]

TRANSACTIONS = [
    {"id": "T-001", "customer": "María López", "items": 3, "amount": 45.5, "status": "completed",
     "date": "2024-03-01T09:15:00"},
    {"id": 2, "customer": "Juan Pérez", "items": 1, "amount": 12.0, "status": "cancelled",
     "date": "2024-03-02T11:00:00"},
]


def test_inventory_export_streams_pdf() -> None:
    response = client.post("/reports/inventory/export", json={"records": PRODUCTS, "options": OPTIONS})

    assert response.status_code == 200, response.text
    assert response.headers["content-type"] == "application/pdf"
    assert response.headers["content-disposition"] == 'attachment; filename="inventory_20240305_103000.pdf"'
    assert response.headers["x-report-pages"] == "5"
    assert response.content.startswith(b"%PDF")


def test_sales_export_as_csv() -> None:
    response = client.post(
        "/reports/sales/export",
        json={"records": TRANSACTIONS, "options": {**OPTIONS, "format": "csv"}},
    )

    assert response.status_code == 200, response.text
    assert response.headers["content-type"].startswith("text/csv")
    assert response.headers["content-disposition"].endswith('filename="sales_20240305_103000.csv"')
    assert response.content.startswith(b"\xef\xbb\xbf")
    assert "María López" in response.content.decode("utf-8-sig")


def test_malformed_records_are_reported_not_rejected() -> None:
    records = [*PRODUCTS, {"id": 3, "name": "", "stock": 1}]

    response = client.post("/reports/inventory/export", json={"records": records, "options": {**OPTIONS, "format": "json"}})

    assert response.status_code == 200, response.text
    assert response.headers["x-report-warnings"] == "1"
    assert len(response.json()["rows"]) == 2


def test_layout_overflow_maps_to_422() -> None:
    options = {**OPTIONS, "layout": {"header_height_mm": 250}}

    response = client.post("/reports/inventory/export", json={"records": PRODUCTS, "options": options})

    assert response.status_code == 422
    assert "requiere" in response.json()["detail"]


def test_unknown_option_is_rejected() -> None:
    response = client.post("/reports/sales/export", json={"records": [], "options": {"colour": "red"}})

    assert response.status_code == 422


def test_health() -> None:
    response = client.get("/health")

    assert response.status_code == 200
    assert response.json() == {"status": "ok"}
