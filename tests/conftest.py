from __future__ import annotations

from datetime import datetime
import os
import sys
import tempfile
from pathlib import Path

import pytest

REPO_ROOT = Path(__file__).resolve().parents[1]
if str(REPO_ROOT) not in sys.path:
    sys.path.insert(0, str(REPO_ROOT))

os.environ.setdefault("REPORTS_LOG_DIR", tempfile.mkdtemp(prefix="farmacia-reports-logs-"))

from farmacia_reports.core.models import Product, Transaction
from farmacia_reports.core.report_config_models import ReportOptions
from farmacia_reports.services.pdf.assets import AssetProvider
from farmacia_reports.services.pdf.page_flow import PageFlowController
from farmacia_reports.services.pdf.surface import DrawingSurface
from farmacia_reports.services.pdf.theme import resolve_theme
from farmacia_reports.services.report_config import page_size_mm

GENERATED_AT = datetime(2024, 3, 5, 10, 30)


@pytest.fixture
def options() -> ReportOptions:
    return ReportOptions(generated_at=GENERATED_AT)


@pytest.fixture
def make_flow(options: ReportOptions):
    def _make(report_options: ReportOptions | None = None, *, assets: AssetProvider | None = None):
        resolved = report_options or options
        width, height = page_size_mm(resolved.layout)
        theme = resolve_theme(resolved.theme)
        surface = DrawingSurface(width, height, font_family=theme.font_family)
        return PageFlowController(surface, resolved, theme, title="Prueba", assets=assets)

    return _make


@pytest.fixture
def sample_products() -> list[Product]:
    return [
        Product(id=1, name="Paracetamol 500mg", sku="PAR-500", category="Analgésicos", stock=4, price=2.5),
        Product(id=2, name="Ibuprofeno 400mg", sku="IBU-400", category="Analgésicos", stock=8, price=3.0),
        Product(id=3, name="Amoxicilina 875mg", sku="AMO-875", category="Antibióticos", stock=15, price=7.25),
        Product(id=4, name="Vitamina C", sku="VIT-C", category="Suplementos", stock=25, price=4.0),
        Product(
            id=5,
            name="Loratadina 10mg",
            sku="LOR-10",
            category="Antialérgicos",
            stock=3,
            reorder_level=2,
            price=1.75,
        ),
    ]


@pytest.fixture
def sample_transactions() -> list[Transaction]:
    return [
        Transaction(id="T-001", customer="María López", items=3, amount=45.5, status="completed",
                    date=datetime(2024, 3, 1, 9, 15)),
        Transaction(id="T-002", customer="Juan Pérez", items=1, amount=12.0, status="pending",
                    date=datetime(2024, 3, 2, 11, 0)),
        Transaction(id="T-003", customer="María López", items=2, amount=30.0, status="cancelled",
                    date=datetime(2024, 3, 3, 16, 45)),
        Transaction(id="T-004", customer="Ana Gómez", items=5, amount=80.0, status="completed",
                    date=datetime(2024, 3, 4, 10, 5)),
    ]
