"""ResolutionEngine — the entry point admin tooling uses to move complaints along.

Each method submits one command synchronously and returns the case as stored
after the command committed. Domain errors (InvalidTransition, NotFound,
Conflict) propagate unchanged. Storage errors are translated: a lost
optimistic-lock race becomes Conflict and anything else the store raises
becomes PersistenceFailure. In both cases nothing was committed.
"""

import json
from datetime import datetime

import structlog
from protean.exceptions import ExpectedVersionError, ObjectNotFoundError, ProteanException
from protean.utils.globals import current_domain
from sqlalchemy.exc import SQLAlchemyError

from aftersales.complaint.complaint import ComplaintCase
from aftersales.complaint.filing import FileComplaint
from aftersales.complaint.investigation import ResolveComplaintAsFalse, ResolveComplaintAsTrue
from aftersales.complaint.pickup import MarkPickedUp, SchedulePickup
from aftersales.complaint.remedy import CreateReplacementOrder, ProcessComplaintRefund
from aftersales.errors import Conflict, InvalidTransition, NotFound, PersistenceFailure
from aftersales.utils.loading import load

logger = structlog.get_logger(__name__)

_DOMAIN_ERRORS = (InvalidTransition, NotFound, Conflict)


class ResolutionEngine:
    def file_complaint(
        self,
        order_id: str,
        user_id: str,
        complaint_type: str,
        description: str,
        evidence_images: list[str] | None = None,
    ) -> ComplaintCase:
        return self._submit(
            FileComplaint(
                order_id=order_id,
                user_id=user_id,
                complaint_type=complaint_type,
                description=description,
                evidence_images=json.dumps(evidence_images or []),
            )
        )

    def resolve_as_true(self, complaint_id: str, notes: str | None = None, expected_version: int | None = None):
        return self._submit(
            ResolveComplaintAsTrue(complaint_id=complaint_id, notes=notes, expected_version=expected_version)
        )

    def resolve_as_false(self, complaint_id: str, notes: str | None = None, expected_version: int | None = None):
        return self._submit(
            ResolveComplaintAsFalse(complaint_id=complaint_id, notes=notes, expected_version=expected_version)
        )

    def schedule_pickup(
        self,
        complaint_id: str,
        pickup_date: datetime,
        admin_notes: str | None = None,
        expected_version: int | None = None,
    ):
        return self._submit(
            SchedulePickup(
                complaint_id=complaint_id,
                pickup_date=pickup_date,
                admin_notes=admin_notes,
                expected_version=expected_version,
            )
        )

    def mark_picked_up(self, complaint_id: str, expected_version: int | None = None):
        return self._submit(MarkPickedUp(complaint_id=complaint_id, expected_version=expected_version))

    def create_replacement_order(self, complaint_id: str, expected_version: int | None = None):
        return self._submit(CreateReplacementOrder(complaint_id=complaint_id, expected_version=expected_version))

    def process_refund(self, complaint_id: str, refund_method: str, expected_version: int | None = None):
        return self._submit(
            ProcessComplaintRefund(
                complaint_id=complaint_id,
                refund_method=refund_method,
                expected_version=expected_version,
            )
        )

    def get(self, complaint_id: str) -> ComplaintCase:
        return load(ComplaintCase, complaint_id, "complaint_id")

    # -------------------------------------------------------------------
    # Command submission
    # -------------------------------------------------------------------
    def _submit(self, command) -> ComplaintCase:
        command_name = command.__class__.__name__
        try:
            complaint_id = current_domain.process(command, asynchronous=False)
        except _DOMAIN_ERRORS:
            raise
        except ExpectedVersionError as exc:
            logger.info("Complaint update lost a concurrent write", command=command_name, error=str(exc))
            raise Conflict({"_entity": ["Complaint was modified by another request, reload and retry"]}) from exc
        except ObjectNotFoundError as exc:
            raise NotFound(getattr(exc, "messages", None) or {"_entity": [str(exc)]}) from exc
        except ProteanException as exc:
            # Validation failures from commands and invariants are caller errors
            if hasattr(exc, "messages"):
                raise
            logger.error("Complaint store failure", command=command_name, error=str(exc))
            raise PersistenceFailure({"_entity": [str(exc)]}) from exc
        except (SQLAlchemyError, ConnectionError) as exc:
            logger.error("Complaint store unreachable", command=command_name, error=str(exc))
            raise PersistenceFailure({"_entity": ["Complaint store is unavailable"]}) from exc

        return self.get(complaint_id)
