"""Composition root — wires concrete implementations to domain interfaces.

This is the only place in the codebase that knows about *all* layers.
Every other module depends only on abstractions.
"""

from __future__ import annotations

from dataclasses import dataclass

from bookstore.domain.repository.inventory_ledger import InventoryLedger
from bookstore.domain.repository.order_repository import OrderRepository
from bookstore.infrastructure.config import Settings
from bookstore.infrastructure.persistence.json_catalog_store import JsonCatalogStore
from bookstore.infrastructure.persistence.json_inventory_ledger import (
    JsonInventoryLedger,
)
from bookstore.infrastructure.persistence.json_order_repository import (
    JsonOrderRepository,
)
from bookstore.infrastructure.persistence.sql_repositories import (
    SqlCatalogStore,
    SqlInventoryLedger,
    SqlOrderRepository,
    create_sql_engine,
)


@dataclass(frozen=True)
class Repositories:

    catalog: JsonCatalogStore | SqlCatalogStore
    ledger: InventoryLedger
    orders: OrderRepository


def repositories(settings: Settings | None = None) -> Repositories:
    settings = settings or Settings()

    if settings.STORAGE == "json":
        data_dir = settings.DATA_DIR
        return Repositories(
            catalog=JsonCatalogStore(data_dir / "books.json", data_dir / "users.json"),
            ledger=JsonInventoryLedger(data_dir / "books.json"),
            orders=JsonOrderRepository(data_dir / "orders.json"),
        )

    if settings.STORAGE == "sql":
        engine = create_sql_engine(settings.DATABASE_URL)
        return Repositories(
            catalog=SqlCatalogStore(engine),
            ledger=SqlInventoryLedger(engine),
            orders=SqlOrderRepository(engine),
        )

    raise ValueError(
        f"Unknown BOOKSTORE_STORAGE {settings.STORAGE!r} (expected 'json' or 'sql')"
    )
