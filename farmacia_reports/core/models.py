"""Pydantic models for report inputs and summaries."""
from __future__ import annotations

from datetime import date, datetime
from typing import Literal, Optional

from pydantic import BaseModel, ConfigDict, Field, field_validator

StockLevel = Literal["critical", "low", "normal", "high"]
TransactionStatus = Literal["completed", "pending", "cancelled"]

STOCK_LEVEL_LABELS: dict[str, str] = {
    "critical": "Crítico",
    "low": "Bajo",
    "normal": "Normal",
    "high": "Alto",
}

TRANSACTION_STATUS_LABELS: dict[str, str] = {
    "completed": "Completado",
    "pending": "Pendiente",
    "cancelled": "Cancelado",
}


class Product(BaseModel):
    """Inventory snapshot of one product at report time."""

    model_config = ConfigDict(frozen=True, populate_by_name=True)

    id: int
    name: str = Field(..., min_length=1)
    sku: Optional[str] = None
    barcode: Optional[str] = None
    category: Optional[str] = None
    stock: int = Field(..., ge=0)
    reorder_level: Optional[int] = Field(default=None, ge=0, alias="reorderLevel")
    price: float = Field(default=0.0, ge=0)
    cost_price: Optional[float] = Field(default=None, ge=0, alias="costPrice")
    supplier: Optional[str] = None
    expiry_date: Optional[date] = Field(default=None, alias="expiryDate")
    location: Optional[str] = None
    status: str = "active"

    @field_validator("category", "supplier", mode="before")
    @classmethod
    def _blank_to_none(cls, value: object) -> object:
        if isinstance(value, str) and not value.strip():
            return None
        return value


class Transaction(BaseModel):
    """Projection of a point-of-sale transaction."""

    model_config = ConfigDict(frozen=True)

    id: str
    customer: str
    items: int = Field(default=0, ge=0)
    amount: float = Field(..., ge=0)
    status: TransactionStatus = "completed"
    date: datetime

    @field_validator("id", mode="before")
    @classmethod
    def _coerce_id(cls, value: object) -> object:
        if isinstance(value, int):
            return str(value)
        return value


class CategoryTotal(BaseModel):
    label: str
    products: int
    units: int
    value: float


class InventorySummary(BaseModel):
    total_products: int
    total_units: int
    inventory_value: float
    low_stock_count: int
    stock_levels: dict[str, int]
    categories: list[CategoryTotal] = Field(default_factory=list)


class SalesSummary(BaseModel):
    total_transactions: int
    total_amount: float
    completed_amount: float
    average_ticket: float
    total_items: int
    status_counts: dict[str, int]
    daily_totals: list[tuple[date, float]] = Field(default_factory=list)
    customer_totals: list[tuple[str, float]] = Field(default_factory=list)
    trend_percent: Optional[float] = None
