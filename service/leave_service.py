import logging
from dataclasses import dataclass, replace
from datetime import date, datetime
from math import ceil
from typing import Callable, List, Optional, Tuple

from sqlalchemy import func
from sqlalchemy.orm import Session

from model.leave_model import LeaveRequest, LeaveStatus
from model.usermodels import User
from Schema.leave_management_schema import (
    AllLeaveRequestsResponse, LeaveRequestResponse, LeaveRequestWithOwnerResponse,
    MyLeaveRequestsResponse, Pagination,
)
from service.notification_service import LeaveDecisionNotice, NotificationDispatcher
from utils.auth_utils import ADMIN_ONLY, Identity, authorize
from utils.exceptions import Conflict, NotFound, ValidationError

logger = logging.getLogger(__name__)

DEFAULT_PAGE_SIZE = 10
MAX_PAGE_SIZE = 100
MAX_LEAVE_TYPE_LENGTH = 50
REASON_MIN_LENGTH = 10
REASON_MAX_LENGTH = 500
ADMIN_COMMENT_MAX_LENGTH = 500
DECISION_STATUSES = {LeaveStatus.approved.value, LeaveStatus.rejected.value}


@dataclass(frozen=True)
class LeaveSubmission:
    """Raw form input for a new leave request."""

    leave_type: str
    start_date: str
    end_date: str
    reason: str
    attachment_path: Optional[str] = None


@dataclass(frozen=True)
class ValidatedLeave:
    leave_type: str
    start_date: date
    end_date: date
    reason: str
    attachment_path: Optional[str] = None


def _parse_date(value, field_name: str) -> date:
    if isinstance(value, date):
        return value
    text = (value or "").strip()
    if not text:
        raise ValidationError(f"{field_name} is required")
    try:
        return datetime.strptime(text, "%Y-%m-%d").date()
    except ValueError:
        raise ValidationError(f"{field_name} must be a valid date (YYYY-MM-DD)")


def validate_submission(submission: LeaveSubmission) -> ValidatedLeave:
    leave_type = (submission.leave_type or "").strip()
    if not leave_type:
        raise ValidationError("leave_type is required")
    if len(leave_type) > MAX_LEAVE_TYPE_LENGTH:
        raise ValidationError(f"leave_type must be at most {MAX_LEAVE_TYPE_LENGTH} characters")

    start_date = _parse_date(submission.start_date, "start_date")
    end_date = _parse_date(submission.end_date, "end_date")
    if end_date < start_date:
        raise ValidationError("end_date must be on or after start_date")

    reason = submission.reason or ""
    if len(reason) < REASON_MIN_LENGTH:
        raise ValidationError(f"reason must be at least {REASON_MIN_LENGTH} characters long")
    if len(reason) > REASON_MAX_LENGTH:
        raise ValidationError(f"reason must be at most {REASON_MAX_LENGTH} characters long")

    return ValidatedLeave(
        leave_type=leave_type,
        start_date=start_date,
        end_date=end_date,
        reason=reason,
        attachment_path=submission.attachment_path,
    )


def validate_paging(page: int, page_size: int) -> Tuple[int, int]:
    if page < 1:
        raise ValidationError("page must be greater than or equal to 1")
    if page_size < 1:
        raise ValidationError("limit must be greater than or equal to 1")
    return page, min(page_size, MAX_PAGE_SIZE)


def build_pagination(page: int, page_size: int, total: int) -> Pagination:
    return Pagination(page=page, limit=page_size, total=total, pages=ceil(total / page_size))


class LeaveRepository:
    def __init__(self, db: Session):
        self.db = db

    def _ordered(self, query):
        # created_at has second resolution on some backends, id breaks ties
        return query.order_by(LeaveRequest.created_at.desc(), LeaveRequest.id.desc())

    def create(self, owner_id: int, fields: ValidatedLeave) -> LeaveRequest:
        leave = LeaveRequest(
            user_id=owner_id,
            leave_type=fields.leave_type,
            start_date=fields.start_date,
            end_date=fields.end_date,
            reason=fields.reason,
            status=LeaveStatus.pending,
            admin_comment=None,
            attachment_path=fields.attachment_path,
        )
        try:
            self.db.add(leave)
            self.db.commit()
        except Exception:
            self.db.rollback()
            raise
        self.db.refresh(leave)
        return leave

    def list_by_owner(self, owner_id: int, page: int, page_size: int) -> Tuple[List[LeaveRequest], int]:
        query = self.db.query(LeaveRequest).filter(LeaveRequest.user_id == owner_id)
        total = query.count()
        items = self._ordered(query).offset((page - 1) * page_size).limit(page_size).all()
        return items, total

    def list_all(self, page: int, page_size: int) -> Tuple[List[LeaveRequestWithOwnerResponse], int]:
        total = self.db.query(func.count(LeaveRequest.id)).scalar() or 0
        rows = (
            self._ordered(self._with_owner_query())
            .offset((page - 1) * page_size)
            .limit(page_size)
            .all()
        )
        return [self._to_with_owner(*row) for row in rows], total

    def update_status(self, leave_id: int, status: LeaveStatus, admin_comment: Optional[str]) -> LeaveRequest:
        """Move a pending request to a terminal status.

        Compare-and-set on ``status = pending``: concurrent decisions on the
        same row cannot both succeed.
        """
        try:
            updated = (
                self.db.query(LeaveRequest)
                .filter(LeaveRequest.id == leave_id, LeaveRequest.status == LeaveStatus.pending)
                .update(
                    {
                        LeaveRequest.status: status,
                        LeaveRequest.admin_comment: admin_comment,
                        LeaveRequest.updated_at: func.now(),
                    },
                    synchronize_session=False,
                )
            )
            if updated == 0:
                self.db.rollback()
                exists = self.db.query(LeaveRequest.id).filter(LeaveRequest.id == leave_id).first()
                if exists is None:
                    raise NotFound("Leave request not found")
                raise Conflict("Leave request has already been decided")
            self.db.commit()
        except (NotFound, Conflict):
            raise
        except Exception:
            self.db.rollback()
            raise

        leave = self.db.query(LeaveRequest).filter(LeaveRequest.id == leave_id).one()
        self.db.refresh(leave)
        return leave

    def get_with_owner(self, leave_id: int) -> Optional[LeaveRequestWithOwnerResponse]:
        row = self._with_owner_query().filter(LeaveRequest.id == leave_id).first()
        if row is None:
            return None
        return self._to_with_owner(*row)

    def _with_owner_query(self):
        return self.db.query(LeaveRequest, User.first_name, User.last_name, User.email).join(
            User, LeaveRequest.user_id == User.id
        )

    @staticmethod
    def _to_with_owner(leave: LeaveRequest, first_name: str, last_name: str, email: str) -> LeaveRequestWithOwnerResponse:
        base = LeaveRequestResponse.model_validate(leave).model_dump()
        return LeaveRequestWithOwnerResponse(**base, first_name=first_name, last_name=last_name, email=email)


class LeaveWorkflowService:
    """Leave request lifecycle: submit, list, decide."""

    def __init__(self, repository: LeaveRepository, dispatcher: NotificationDispatcher):
        self.repository = repository
        self.dispatcher = dispatcher

    def submit(self, identity: Identity, submission: LeaveSubmission) -> LeaveRequest:
        fields = validate_submission(submission)
        leave = self.repository.create(identity.id, fields)
        logger.info(
            "Leave request created",
            extra={"leave_id": leave.id, "user_id": identity.id, "leave_type": leave.leave_type},
        )
        return leave

    def list_mine(self, identity: Identity, page: int = 1, page_size: int = DEFAULT_PAGE_SIZE) -> MyLeaveRequestsResponse:
        page, page_size = validate_paging(page, page_size)
        items, total = self.repository.list_by_owner(identity.id, page, page_size)
        return MyLeaveRequestsResponse(
            leave_requests=[LeaveRequestResponse.model_validate(item) for item in items],
            pagination=build_pagination(page, page_size, total),
        )

    def list_all(self, identity: Identity, page: int = 1, page_size: int = DEFAULT_PAGE_SIZE) -> AllLeaveRequestsResponse:
        authorize(identity, ADMIN_ONLY)
        page, page_size = validate_paging(page, page_size)
        items, total = self.repository.list_all(page, page_size)
        return AllLeaveRequestsResponse(
            leave_requests=items,
            pagination=build_pagination(page, page_size, total),
        )

    def decide(
        self,
        identity: Identity,
        leave_id: int,
        status: str,
        admin_comment: Optional[str] = None,
        schedule: Optional[Callable] = None,
    ) -> LeaveRequest:
        """Approve or reject a pending request and queue the owner's notification.

        ``schedule`` is called as ``schedule(func, notice)``; the router passes
        ``BackgroundTasks.add_task`` so the e-mail goes out after the response.
        """
        authorize(identity, ADMIN_ONLY)

        if status not in DECISION_STATUSES:
            raise ValidationError("status must be one of [approved, rejected]")
        comment = (admin_comment or "").strip() or None
        if comment is not None and len(comment) > ADMIN_COMMENT_MAX_LENGTH:
            raise ValidationError(f"admin_comment must be at most {ADMIN_COMMENT_MAX_LENGTH} characters long")

        new_status = LeaveStatus(status)
        leave = self.repository.update_status(leave_id, new_status, comment)
        logger.info(
            "Leave status updated",
            extra={"leave_id": leave_id, "new_status": new_status.value, "decided_by": identity.id},
        )

        self._queue_notification(leave_id, schedule)
        return leave

    def _queue_notification(self, leave_id: int, schedule: Optional[Callable]) -> None:
        try:
            leave_with_owner = self.repository.get_with_owner(leave_id)
            if leave_with_owner is None:
                return
            notice = LeaveDecisionNotice.from_leave(leave_with_owner)
            if schedule is None:
                logger.warning(f"No scheduler given, notification for leave {leave_id} not sent")
                return
            schedule(self.dispatcher.dispatch_safely, notice)
        except Exception:
            # the decision is already committed; a notification problem must not undo it
            logger.exception(f"Failed to queue notification for leave {leave_id}")


def with_attachment(submission: LeaveSubmission, attachment_path: Optional[str]) -> LeaveSubmission:
    return replace(submission, attachment_path=attachment_path)
