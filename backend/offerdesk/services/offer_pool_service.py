# Overview: Offer pool bookkeeping; moves unclaimed free-item units into stock or writes them off.

from __future__ import annotations

from dataclasses import dataclass

from flask import current_app

from ..extensions import db
from ..models import OfferPool, OfferPoolHistory
from ..validation import NotFoundError, Other, ValidationError, parse_positive_quantity, require_text
from offerdesk.time_utils import utcnow
from .concurrency import lock_for_update, run_in_transaction
from .ledger_service import STOCK, FREE_STOCK, LedgerChange, apply_change
"""
Offer pool invariants (authoritative)

- 0 < quantity <= accumulated_quantity for transfer and deduct.
- transfer(q, dest): accumulated -= q; total_transferred_to_<dest> += q;
  destination ledger += q with a history row (reason other, note names the pool);
  one pool history row transferred_to_<dest>.
- deduct(q, reason): accumulated -= q; total_deducted += q; one pool history row.
  No ledger is touched.
- All writes of one operation commit together or not at all.
"""

DESTINATIONS = {
    "regular": (STOCK, "total_transferred_to_regular", "transfer_to_regular", "transferred_to_regular"),
    "free": (FREE_STOCK, "total_transferred_to_free", "transfer_to_free", "transferred_to_free"),
}


class InsufficientPoolQuantityError(ValidationError):
    """The pool holds fewer units than requested."""


@dataclass
class PoolMovement:
    pool: OfferPool
    pool_history: OfferPoolHistory
    quantity: int
    ledger_change: LedgerChange | None = None


def list_pools() -> list[OfferPool]:
    return db.session.query(OfferPool).order_by(OfferPool.last_updated.desc(), OfferPool.id.desc()).all()


def get_pool(pool_id: int, *, lock: bool = False) -> OfferPool:
    q = db.session.query(OfferPool).filter_by(id=pool_id)
    if lock:
        q = lock_for_update(q)
    pool = q.first()
    if pool is None:
        raise NotFoundError("Pool not found")
    return pool


def list_pool_history(pool_id: int) -> list[OfferPoolHistory]:
    return (
        db.session.query(OfferPoolHistory)
        .filter_by(offer_pool_id=pool_id)
        .order_by(OfferPoolHistory.created_at.desc(), OfferPoolHistory.id.desc())
        .all()
    )


def _drain(pool: OfferPool, quantity: int) -> None:
    if pool.accumulated_quantity < quantity:
        raise InsufficientPoolQuantityError(
            f"Only {pool.accumulated_quantity} items available in pool"
        )
    pool.accumulated_quantity -= quantity
    pool.last_updated = utcnow()


def _append_pool_history(pool: OfferPool, action_type: str, quantity: int, reason: str, admin_pin_used: bool):
    entry = OfferPoolHistory(
        offer_pool_id=pool.id,
        action_type=action_type,
        quantity=quantity,
        reason=reason,
        admin_pin_used=admin_pin_used,
    )
    db.session.add(entry)
    return entry


def transfer(pool_id: int, quantity, destination: str) -> PoolMovement:
    """
    Move pool units into the regular or free stock of the pool's product.

    PIN already verified by the caller.
    """
    qty = parse_positive_quantity(quantity)
    if destination not in DESTINATIONS:
        raise ValidationError("Invalid transfer destination")
    ledger, total_attr, ledger_action, pool_action = DESTINATIONS[destination]

    def _op() -> PoolMovement:
        pool = get_pool(pool_id, lock=True)
        if pool.product_id is None:
            raise ValidationError("This pool holds external items and can only be deducted")
        _drain(pool, qty)
        setattr(pool, total_attr, (getattr(pool, total_attr) or 0) + qty)

        change = apply_change(
            ledger,
            pool.product_id,
            compute=lambda previous: previous + qty,
            action_type=ledger_action,
            reason=Other(note=f"Transferred from offer pool (Pool ID: {pool.id})"),
            admin_pin_used=True,
        )
        entry = _append_pool_history(pool, pool_action, qty, f"Admin transfer to {destination} stock", True)
        db.session.flush()
        return PoolMovement(pool=pool, pool_history=entry, quantity=qty, ledger_change=change)

    movement = run_in_transaction(_op)
    current_app.logger.info(
        "offer_pool %s: transferred %s to %s stock of product %s",
        pool_id, qty, destination, movement.pool.product_id,
    )
    return movement


def deduct(pool_id: int, quantity, reason) -> PoolMovement:
    """Write pool units off (damaged, expired, ...). No ledger side effect."""
    qty = parse_positive_quantity(quantity)
    text = require_text(reason, "Reason is required")

    def _op() -> PoolMovement:
        pool = get_pool(pool_id, lock=True)
        _drain(pool, qty)
        pool.total_deducted = (pool.total_deducted or 0) + qty
        entry = _append_pool_history(pool, "deducted", qty, text, True)
        db.session.flush()
        return PoolMovement(pool=pool, pool_history=entry, quantity=qty)

    movement = run_in_transaction(_op)
    current_app.logger.info("offer_pool %s: deducted %s (%s)", pool_id, qty, text)
    return movement


def accumulate(pool_id: int, quantity, reason: str | None = None) -> PoolMovement:
    """Add unclaimed units to a pool (customer-claim bookkeeping, operator CLI)."""
    qty = parse_positive_quantity(quantity)

    def _op() -> PoolMovement:
        pool = get_pool(pool_id, lock=True)
        pool.accumulated_quantity = (pool.accumulated_quantity or 0) + qty
        pool.last_updated = utcnow()
        entry = _append_pool_history(pool, "accumulated", qty, reason or "Unclaimed free items", False)
        db.session.flush()
        return PoolMovement(pool=pool, pool_history=entry, quantity=qty)

    movement = run_in_transaction(_op)
    current_app.logger.info("offer_pool %s: accumulated %s", pool_id, qty)
    return movement
