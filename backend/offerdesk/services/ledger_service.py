# Overview: Quantity ledgers (stock, free stock, external items) and their history recorder.

from __future__ import annotations

from dataclasses import dataclass
from typing import Any, Callable

from flask import current_app

from ..extensions import db
from ..models import (
    StockRecord,
    FreeStockRecord,
    ExternalItem,
    StockHistory,
    FreeStockHistory,
    ExternalItemStockHistory,
)
from ..validation import (
    NotFoundError,
    Reason,
    ValidationError,
    parse_int,
    parse_positive_quantity,
    parse_target_quantity,
)
from offerdesk.time_utils import utcnow
from .concurrency import lock_for_update, run_in_transaction
"""
Ledger invariants (authoritative)

- A ledger is one integer quantity field per subject; it never goes negative.
- add: delta > 0, no PIN, new = previous + delta.
- set: target >= 0, PIN-gated at the HTTP boundary, new = target, change = target - previous.
- Every mutation appends exactly one history row in the same DB transaction:
  new_quantity == previous_quantity + change_amount.
- History rows are never updated or deleted by application code.
"""


@dataclass(frozen=True)
class Ledger:
    name: str
    record_model: Any
    subject_column: str
    quantity_attr: str
    history_model: Any
    history_subject_attr: str
    not_found_message: str


STOCK = Ledger(
    name="stock",
    record_model=StockRecord,
    subject_column="product_id",
    quantity_attr="quantity",
    history_model=StockHistory,
    history_subject_attr="product_id",
    not_found_message="Product stock not found",
)

FREE_STOCK = Ledger(
    name="free_stock",
    record_model=FreeStockRecord,
    subject_column="product_id",
    quantity_attr="free_stock_quantity",
    history_model=FreeStockHistory,
    history_subject_attr="product_id",
    not_found_message="Product free stock not found",
)

EXTERNAL_ITEM = Ledger(
    name="external_item",
    record_model=ExternalItem,
    subject_column="id",
    quantity_attr="stock_quantity",
    history_model=ExternalItemStockHistory,
    history_subject_attr="external_item_id",
    not_found_message="External item not found",
)


@dataclass
class LedgerChange:
    ledger: Ledger
    record: Any
    history: Any
    previous_quantity: int
    new_quantity: int

    @property
    def change_amount(self) -> int:
        return self.new_quantity - self.previous_quantity


def get_record(ledger: Ledger, subject_id: int, *, lock: bool = False):
    query = db.session.query(ledger.record_model).filter(
        getattr(ledger.record_model, ledger.subject_column) == subject_id
    )
    if lock:
        query = lock_for_update(query)
    record = query.first()
    if record is None:
        raise NotFoundError(ledger.not_found_message)
    return record


def record_history(
    ledger: Ledger,
    subject_id: int,
    *,
    action_type: str,
    previous_quantity: int,
    new_quantity: int,
    reason: Reason,
    admin_pin_used: bool,
):
    """
    Append one history row for a ledger mutation.

    No commit here; the row joins the caller's transaction.
    """
    entry = ledger.history_model(
        action_type=action_type,
        previous_quantity=previous_quantity,
        new_quantity=new_quantity,
        change_amount=new_quantity - previous_quantity,
        reason_type=reason.reason_type,
        reason_note=reason.note,
        admin_pin_used=admin_pin_used,
    )
    setattr(entry, ledger.history_subject_attr, subject_id)
    db.session.add(entry)
    return entry


def apply_change(
    ledger: Ledger,
    subject_id: int,
    *,
    compute: Callable[[int], int],
    action_type: str,
    reason: Reason,
    admin_pin_used: bool,
) -> LedgerChange:
    """
    Stage a read-modify-write of one ledger plus its history row.

    Callers own the transaction (see run_in_transaction).
    """
    record = get_record(ledger, subject_id, lock=True)
    previous = getattr(record, ledger.quantity_attr) or 0
    new = compute(previous)
    if new < 0:
        raise ValidationError("Quantity cannot be negative")

    setattr(record, ledger.quantity_attr, new)
    record.last_updated = utcnow()

    entry = record_history(
        ledger,
        subject_id,
        action_type=action_type,
        previous_quantity=previous,
        new_quantity=new,
        reason=reason,
        admin_pin_used=admin_pin_used,
    )
    db.session.flush()
    return LedgerChange(ledger=ledger, record=record, history=entry, previous_quantity=previous, new_quantity=new)


def add_quantity(ledger: Ledger, subject_id: int, quantity, reason: Reason) -> LedgerChange:
    """Increase a ledger by a positive delta. No PIN required."""
    delta = parse_positive_quantity(quantity)

    change = run_in_transaction(lambda: apply_change(
        ledger,
        subject_id,
        compute=lambda previous: previous + delta,
        action_type="addition",
        reason=reason,
        admin_pin_used=False,
    ))
    current_app.logger.info(
        "%s %s: added %s (%s -> %s)",
        ledger.name, subject_id, delta, change.previous_quantity, change.new_quantity,
    )
    return change


def set_quantity(ledger: Ledger, subject_id: int, quantity, reason: Reason) -> LedgerChange:
    """
    Overwrite a ledger with an absolute value.

    The PIN has already been verified by the caller; the history row records it.
    """
    target = parse_target_quantity(quantity)

    change = run_in_transaction(lambda: apply_change(
        ledger,
        subject_id,
        compute=lambda _previous: target,
        action_type="update",
        reason=reason,
        admin_pin_used=True,
    ))
    current_app.logger.info(
        "%s %s: set to %s (was %s, change %s)",
        ledger.name, subject_id, change.new_quantity, change.previous_quantity, change.change_amount,
    )
    return change


def list_history(ledger: Ledger, subject_id: int | None = None) -> list:
    """History rows newest first, optionally for one subject."""
    model = ledger.history_model
    q = db.session.query(model)
    if subject_id is not None:
        q = q.filter(getattr(model, ledger.history_subject_attr) == subject_id)
    return q.order_by(model.created_at.desc(), model.id.desc()).all()


def set_low_stock_threshold(ledger: Ledger, subject_id: int, threshold):
    """Change the low-stock warning level. Quantity and history are untouched."""
    if not hasattr(ledger.record_model, "low_stock_threshold"):
        raise ValidationError(f"{ledger.name} has no low stock threshold")
    if threshold is None or threshold == "":
        raise ValidationError("low_stock_threshold is required")
    value = parse_int(threshold, "low_stock_threshold")
    if value < 0:
        raise ValidationError("low_stock_threshold cannot be negative")

    def _op():
        record = get_record(ledger, subject_id, lock=True)
        record.low_stock_threshold = value
        db.session.flush()
        return record

    return run_in_transaction(_op)


def list_records(ledger: Ledger) -> list:
    model = ledger.record_model
    return db.session.query(model).order_by(model.last_updated.desc(), model.id.desc()).all()


def set_allocated_to_offers(product_id: int, allocated) -> FreeStockRecord:
    """
    Operator override for free_stock.allocated_to_offers.

    0 <= allocated <= free_stock_quantity. free_stock_quantity itself and the
    history table are untouched.
    """
    if allocated is None or allocated == "":
        raise ValidationError("allocated_to_offers is required")
    value = parse_int(allocated, "allocated_to_offers")

    def _op():
        record = get_record(FREE_STOCK, product_id, lock=True)
        if value < 0 or value > record.free_stock_quantity:
            raise ValidationError(
                f"allocated_to_offers must be between 0 and {record.free_stock_quantity}"
            )
        record.allocated_to_offers = value
        record.last_updated = utcnow()
        db.session.flush()
        return record

    record = run_in_transaction(_op)
    current_app.logger.info("free_stock %s: allocated_to_offers set to %s", product_id, value)
    return record
