from fastapi import APIRouter, BackgroundTasks, Depends, File, Form, Query, UploadFile, status
from sqlalchemy.orm import Session
from typing import Optional
from container import Container, get_container
from db.database import get_db
from Schema.leave_management_schema import (
    AllLeaveRequestsResponse, LeaveRequestEnvelope, LeaveRequestResponse,
    LeaveStatusUpdate, MyLeaveRequestsResponse,
)
from service.leave_service import (
    DEFAULT_PAGE_SIZE, LeaveRepository, LeaveSubmission, LeaveWorkflowService,
    validate_submission, with_attachment,
)
from utils.auth_utils import ADMIN_ONLY, Identity, get_current_user, require_role


# Create router
router = APIRouter(prefix="/api/leaves")


def get_leave_workflow(db: Session = Depends(get_db), container: Container = Depends(get_container)) -> LeaveWorkflowService:
    return LeaveWorkflowService(LeaveRepository(db), container.dispatcher)


# API Endpoints
@router.post("", response_model=LeaveRequestEnvelope, status_code=status.HTTP_201_CREATED)
def create_leave_request(
    leave_type: str = Form(""),
    start_date: str = Form(""),
    end_date: str = Form(""),
    reason: str = Form(""),
    attachment: Optional[UploadFile] = File(None),
    identity: Identity = Depends(get_current_user),
    workflow: LeaveWorkflowService = Depends(get_leave_workflow),
    container: Container = Depends(get_container),
):
    """Submit a leave request, optionally with a supporting document"""
    submission = LeaveSubmission(
        leave_type=leave_type,
        start_date=start_date,
        end_date=end_date,
        reason=reason,
    )
    # reject bad input before anything touches the disk
    validate_submission(submission)

    attachment_path = container.attachments.save(attachment)
    try:
        leave = workflow.submit(identity, with_attachment(submission, attachment_path))
    except Exception:
        container.attachments.delete(attachment_path)
        raise

    return LeaveRequestEnvelope(
        message="Leave request created successfully",
        leave_request=LeaveRequestResponse.model_validate(leave),
    )


@router.get("/my", response_model=MyLeaveRequestsResponse)
def get_my_leave_requests(
    page: int = Query(1),
    limit: int = Query(DEFAULT_PAGE_SIZE),
    identity: Identity = Depends(get_current_user),
    workflow: LeaveWorkflowService = Depends(get_leave_workflow),
):
    """Get the caller's leave requests, newest first"""
    return workflow.list_mine(identity, page, limit)


@router.get("", response_model=AllLeaveRequestsResponse)
def get_all_leave_requests(
    page: int = Query(1),
    limit: int = Query(DEFAULT_PAGE_SIZE),
    identity: Identity = Depends(require_role(ADMIN_ONLY)),
    workflow: LeaveWorkflowService = Depends(get_leave_workflow),
):
    """Admin view of every leave request with the owner's name and email"""
    return workflow.list_all(identity, page, limit)


@router.put("/{leave_id}", response_model=LeaveRequestEnvelope)
def update_leave_status(
    leave_id: int,
    status_update: LeaveStatusUpdate,
    background_tasks: BackgroundTasks,
    identity: Identity = Depends(require_role(ADMIN_ONLY)),
    workflow: LeaveWorkflowService = Depends(get_leave_workflow),
):
    """Approve or reject a leave request"""
    leave = workflow.decide(
        identity,
        leave_id,
        status_update.status,
        status_update.admin_comment,
        schedule=background_tasks.add_task,
    )
    return LeaveRequestEnvelope(
        message="Leave request updated successfully",
        leave_request=LeaveRequestResponse.model_validate(leave),
    )
