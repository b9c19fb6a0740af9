from datetime import date, datetime
from typing import List, Optional
from pydantic import BaseModel, Field
from model.leave_model import LeaveStatus


# Pydantic Models
class LeaveStatusUpdate(BaseModel):
    status: str
    admin_comment: Optional[str] = None

    model_config = {
        "json_schema_extra": {
            "example": {"status": "approved", "admin_comment": "Enjoy your time off!"}
        }
    }


class LeaveRequestResponse(BaseModel):
    id: int
    user_id: int = Field(alias="userId")
    leave_type: str = Field(alias="leaveType")
    start_date: date = Field(alias="startDate")
    end_date: date = Field(alias="endDate")
    reason: str
    status: LeaveStatus
    admin_comment: Optional[str] = Field(None, alias="adminComment")
    attachment_path: Optional[str] = Field(None, alias="attachmentPath")
    created_at: datetime = Field(alias="createdAt")
    updated_at: datetime = Field(alias="updatedAt")

    model_config = {
        "from_attributes": True,
        "populate_by_name": True,
    }


class LeaveRequestWithOwnerResponse(LeaveRequestResponse):
    """Admin view of a leave request joined with its owner."""

    first_name: str = Field(alias="firstName")
    last_name: str = Field(alias="lastName")
    email: str

    @property
    def employee_name(self) -> str:
        return f"{self.first_name} {self.last_name}"


class Pagination(BaseModel):
    page: int
    limit: int
    total: int
    pages: int


class MyLeaveRequestsResponse(BaseModel):
    leave_requests: List[LeaveRequestResponse] = Field(alias="leaveRequests")
    pagination: Pagination

    model_config = {
        "populate_by_name": True
    }


class AllLeaveRequestsResponse(BaseModel):
    leave_requests: List[LeaveRequestWithOwnerResponse] = Field(alias="leaveRequests")
    pagination: Pagination

    model_config = {
        "populate_by_name": True
    }


class LeaveRequestEnvelope(BaseModel):
    message: str
    leave_request: LeaveRequestResponse = Field(alias="leaveRequest")

    model_config = {
        "populate_by_name": True
    }
