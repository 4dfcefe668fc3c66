"""
Delivery records: create, read, partial update and the role list queries.

Nothing here commits; the lifecycle engine owns the transaction.
"""
from sqlalchemy import or_
from sqlalchemy.orm import Session, Query
from typing import Any, Dict, Iterable, List, Optional
from datetime import datetime
import logging

from models.delivery import Delivery, DeliveryStatus

logger = logging.getLogger(__name__)


def create_delivery(db: Session, **fields: Any) -> Delivery:
    db_delivery = Delivery(**fields)
    db.add(db_delivery)
    db.flush()
    logger.info(f"Delivery row staged: {db_delivery.id}")
    return db_delivery


def get_delivery(db: Session, delivery_id: str, for_update: bool = False) -> Optional[Delivery]:
    query = db.query(Delivery).filter(Delivery.id == delivery_id)
    if for_update:
        query = query.with_for_update()
    return query.first()


def update_delivery(db: Session, delivery: Delivery, **fields: Any) -> Delivery:
    """Apply a partial update; only the given fields change."""
    for field, value in fields.items():
        setattr(delivery, field, value)
    delivery.updated_at = datetime.utcnow()
    db.flush()
    return delivery


def compare_and_set(
    db: Session,
    delivery_id: str,
    expected_statuses: Iterable[str],
    values: Dict[Any, Any]
) -> bool:
    """Update a delivery only if its status is still one of ``expected_statuses``.

    Returns True when exactly one row changed.
    """
    changes = dict(values)
    changes[Delivery.updated_at] = datetime.utcnow()
    changed = db.query(Delivery).filter(
        Delivery.id == delivery_id,
        Delivery.status.in_(list(expected_statuses))
    ).update(changes, synchronize_session=False)
    return changed == 1


def _newest_first(query: Query) -> Query:
    return query.order_by(Delivery.created_at.desc(), Delivery.id.desc())


def list_all(db: Session, skip: int = 0, limit: Optional[int] = None) -> List[Delivery]:
    query = _newest_first(db.query(Delivery)).offset(skip)
    if limit is not None:
        query = query.limit(limit)
    return query.all()


def list_for_requester(db: Session, user_id: str, skip: int = 0, limit: Optional[int] = None) -> List[Delivery]:
    query = _newest_first(
        db.query(Delivery).filter(Delivery.requester_user_id == user_id)
    ).offset(skip)
    if limit is not None:
        query = query.limit(limit)
    return query.all()


def list_for_operator(db: Session, operator_id: str, skip: int = 0, limit: Optional[int] = None) -> List[Delivery]:
    """Unclaimed work plus deliveries this operator has claimed."""
    query = _newest_first(
        db.query(Delivery).filter(
            or_(
                Delivery.status == DeliveryStatus.PENDING.value,
                Delivery.operator_id == operator_id
            )
        )
    ).offset(skip)
    if limit is not None:
        query = query.limit(limit)
    return query.all()
