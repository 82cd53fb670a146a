from typing import List
from sqlalchemy import func
from sqlalchemy.orm import Session
from .models import RecentCustomer
from .utils import normalize_name, now_utc

MAX_RECENT = 5

def _recent_query(db: Session, operator_id: int):
    return (
        db.query(RecentCustomer)
        .filter(RecentCustomer.operator_id == operator_id)
        .order_by(RecentCustomer.used_at.desc(), RecentCustomer.id.desc())
    )

def get_recent_customers(db: Session, operator_id: int) -> List[str]:
    return [rc.name for rc in _recent_query(db, operator_id).limit(MAX_RECENT)]

def add_recent_customer(db: Session, operator_id: int, name: str) -> List[str]:
    name = normalize_name(name)
    if not name:
        return get_recent_customers(db, operator_id)

    # case-insensitive de-dup, the new entry goes on top
    (
        db.query(RecentCustomer)
        .filter(RecentCustomer.operator_id == operator_id, func.lower(RecentCustomer.name) == name.lower())
        .delete(synchronize_session=False)
    )
    db.add(RecentCustomer(operator_id=operator_id, name=name, used_at=now_utc()))
    db.flush()

    stale = _recent_query(db, operator_id).offset(MAX_RECENT).all()
    for rc in stale:
        db.delete(rc)
    db.commit()
    return get_recent_customers(db, operator_id)

def clear_recent_customers(db: Session, operator_id: int) -> None:
    db.query(RecentCustomer).filter(RecentCustomer.operator_id == operator_id).delete(synchronize_session=False)
    db.commit()
