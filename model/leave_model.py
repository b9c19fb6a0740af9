from enum import Enum as pyEnum
from sqlalchemy import Column, DateTime, Integer, String, Text, Date, Enum, ForeignKey, func
from sqlalchemy.orm import relationship
import model.usermodels as usermodels  # noqa: F401  registers User for the relationship
from db.database import Base


class LeaveStatus(str, pyEnum):
    pending = "pending"
    approved = "approved"
    rejected = "rejected"


# Database Models
class LeaveRequest(Base):
    __tablename__ = "leave_requests"

    id = Column(Integer, primary_key=True, index=True)
    user_id = Column(Integer, ForeignKey("users.id", ondelete="CASCADE"), nullable=False, index=True)
    leave_type = Column(String(50), nullable=False)  # Annual, Sick, Personal, etc.
    start_date = Column(Date, nullable=False)
    end_date = Column(Date, nullable=False)
    reason = Column(Text, nullable=False)
    status = Column(Enum(LeaveStatus, name="status"), default=LeaveStatus.pending, nullable=False)
    admin_comment = Column(Text, nullable=True)
    attachment_path = Column(String(500), nullable=True)
    created_at = Column(DateTime, server_default=func.now(), nullable=False, index=True)
    updated_at = Column(DateTime, server_default=func.now(), onupdate=func.now(), nullable=False)

    user = relationship("User", back_populates="leave_requests")
