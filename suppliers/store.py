"""
suppliers/store.py -- SQLAlchemy-backed persistence for Supplier records.

Uses SQLAlchemy Core (not ORM) so the dataclass in suppliers/models.py remains
the authoritative domain representation. Swapping SQLite for PostgreSQL or
SQL Server is a connection string change, not a rewrite.

Pattern: Repository + Data Mapper. SupplierStore is the repository;
_row_to_supplier is the mapper. Route handlers never touch SQL directly.

Every write returns the number of affected rows. The route layer treats zero
as a failed save -- there is no transaction spanning more than one statement
and no optimistic concurrency token, so concurrent updates are last-write-wins.

Usage:
    store = SupplierStore("sqlite:///:memory:")
    store.create_supplier(Supplier(id=uuid4(), name="Acme", document="12345678901234"))
    supplier = store.get_supplier(supplier_id)
    store.close()
"""

from __future__ import annotations

from uuid import UUID

from sqlalchemy import Boolean, Column, MetaData, String, Table, Uuid
from sqlalchemy.engine import Engine

from core.database import make_engine, ping
from suppliers.models import Supplier

_DEFAULT_DB_URL = "sqlite:///./suppliers.db"

# ---------------------------------------------------------------------------
# Schema
# ---------------------------------------------------------------------------

_metadata = MetaData()

_suppliers = Table(
    "Suppliers",
    _metadata,
    Column("id", Uuid, primary_key=True),
    Column("name", String(200), nullable=False),
    Column("document", String(14), nullable=False),
    Column("active", Boolean, nullable=False, server_default="0"),
)


# ---------------------------------------------------------------------------
# Repository
# ---------------------------------------------------------------------------


class SupplierStore:
    """Repository for Supplier records."""

    def __init__(self, db_url: str = _DEFAULT_DB_URL) -> None:
        self.engine: Engine = make_engine(db_url)
        _metadata.create_all(self.engine)

    def list_suppliers(self) -> list[Supplier]:
        """Return every supplier. No ORDER BY -- callers must not rely on row order."""
        with self.engine.connect() as conn:
            rows = conn.execute(_suppliers.select()).fetchall()
        return [_row_to_supplier(r) for r in rows]

    def get_supplier(self, supplier_id: UUID) -> Supplier | None:
        """Look up a supplier by primary key. Returns None if not found."""
        with self.engine.connect() as conn:
            row = conn.execute(_suppliers.select().where(_suppliers.c.id == supplier_id)).fetchone()
        return _row_to_supplier(row) if row is not None else None

    def create_supplier(self, supplier: Supplier) -> int:
        """Insert a supplier and return the number of rows written.

        Raises sqlalchemy.exc.IntegrityError when the id already exists.
        """
        with self.engine.connect() as conn:
            result = conn.execute(
                _suppliers.insert().values(
                    id=supplier.id,
                    name=supplier.name,
                    document=supplier.document,
                    active=supplier.active,
                )
            )
            conn.commit()
        return result.rowcount

    def update_supplier(self, supplier: Supplier) -> int:
        """Replace name, document and active on the row whose id is supplier.id.

        Returns the number of rows updated (0 when the id does not exist).
        """
        with self.engine.connect() as conn:
            result = conn.execute(
                _suppliers.update()
                .where(_suppliers.c.id == supplier.id)
                .values(name=supplier.name, document=supplier.document, active=supplier.active)
            )
            conn.commit()
        return result.rowcount

    def delete_supplier(self, supplier_id: UUID) -> int:
        """Delete a supplier by id. Returns the number of rows removed."""
        with self.engine.connect() as conn:
            result = conn.execute(_suppliers.delete().where(_suppliers.c.id == supplier_id))
            conn.commit()
        return result.rowcount

    def is_healthy(self) -> bool:
        return ping(self.engine)

    def close(self) -> None:
        self.engine.dispose()


# ---------------------------------------------------------------------------
# Row mapper (Data Mapper pattern)
# ---------------------------------------------------------------------------


def _row_to_supplier(row) -> Supplier:
    return Supplier(
        id=row.id,
        name=row.name,
        document=row.document,
        active=bool(row.active),
    )
