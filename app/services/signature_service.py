"""
Signature recorder - stamps approve/reject provenance on a leave application.
"""
import logging
from typing import Protocol

from sqlalchemy.orm import Session

from app.models.employee import Employee
from app.models.leave import LeaveApplication, Signature, SignatureEvent
from app.utils.datetime_utils import now_utc

logger = logging.getLogger(__name__)


class SignatureRecorder(Protocol):
    def sign(
        self, db: Session, application: LeaveApplication, manager: Employee, event: SignatureEvent
    ) -> Signature:
        ...


class DatabaseSignatureRecorder:
    """Writes one signatures row per approve/reject, inside the caller's transaction."""

    def sign(
        self, db: Session, application: LeaveApplication, manager: Employee, event: SignatureEvent
    ) -> Signature:
        signature = Signature(
            leave_application_uuid=application.uuid,
            manager_id=manager.id,
            event=event,
            signed_at=now_utc(),
        )
        db.add(signature)
        db.flush()
        logger.info("Leave %s signed by manager %s (%s)", application.uuid, manager.id, event.value)
        return signature


default_recorder = DatabaseSignatureRecorder()
