"""
Adjustment log - append-only history of every balance change per application.
"""
import logging
from decimal import Decimal
from typing import Dict, Iterable, List, Optional

from sqlalchemy.orm import Session

from app.models.leave import AdjustmentLog
from app.services.leave_balance_service import to_hours, ZERO
from app.utils.datetime_utils import now_utc

logger = logging.getLogger(__name__)


def record(
    db: Session,
    application_uuid: str,
    general_delta,
    annual_delta,
    returning: bool = False,
) -> AdjustmentLog:
    """Append a log entry and flush so its sequence id is assigned."""
    entry = AdjustmentLog(
        leave_application_uuid=application_uuid,
        general_hours=to_hours(general_delta),
        annual_hours=to_hours(annual_delta),
        returning=returning,
        created_at=now_utc(),
    )
    db.add(entry)
    db.flush()
    logger.info(
        "Adjustment log #%s for %s: general=%s annual=%s returning=%s",
        entry.id, application_uuid, entry.general_hours, entry.annual_hours, returning,
    )
    return entry


def most_recent(db: Session, application_uuid: str) -> Optional[AdjustmentLog]:
    return (
        db.query(AdjustmentLog)
        .filter(AdjustmentLog.leave_application_uuid == application_uuid)
        .order_by(AdjustmentLog.id.desc())
        .first()
    )


def history(db: Session, application_uuid: str) -> List[AdjustmentLog]:
    return (
        db.query(AdjustmentLog)
        .filter(AdjustmentLog.leave_application_uuid == application_uuid)
        .order_by(AdjustmentLog.id)
        .all()
    )


def contribution(entries: Iterable[AdjustmentLog]) -> Dict[str, Decimal]:
    """
    Net hours an application currently holds in each pool, replayed in
    creation order the way the engine applied them:

    - a returning entry subtracts its amounts;
    - a forward entry adds its amounts, after first removing the forward
      entry still held (revise adds that one back without logging it).
    """
    general = ZERO
    annual = ZERO
    held: Optional[AdjustmentLog] = None
    for entry in entries:
        if entry.returning:
            general -= to_hours(entry.general_hours)
            annual -= to_hours(entry.annual_hours)
            held = None
            continue
        if held is not None:
            general -= to_hours(held.general_hours)
            annual -= to_hours(held.annual_hours)
        general += to_hours(entry.general_hours)
        annual += to_hours(entry.annual_hours)
        held = entry
    return {"general": to_hours(general), "annual": to_hours(annual)}
