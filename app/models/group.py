"""
Group, GroupMember and GroupSubmission models - the group assignment path
"""
from sqlalchemy import (
    Column, String, Integer, Float, Boolean, Text, DateTime, ForeignKey,
    CheckConstraint, Uuid,
)
from sqlalchemy.orm import relationship
from sqlalchemy.sql import func
from app.database import Base
import uuid


class Group(Base):
    """
    Groups table - ``locked`` flips false->true exactly once, together with
    ``submission_id``, through a conditional UPDATE
    """
    __tablename__ = "groups"

    id = Column(Integer, primary_key=True, index=True)
    group_number = Column(Integer, unique=True, nullable=False)
    locked = Column(Boolean, nullable=False, default=False)
    submission_id = Column(Uuid(as_uuid=True), nullable=True)  # group_submissions.id
    score = Column(Float, nullable=True)
    created_at = Column(DateTime, server_default=func.now())
    updated_at = Column(DateTime, server_default=func.now(), onupdate=func.now())

    members = relationship("GroupMember", back_populates="group", order_by="GroupMember.id")

    __table_args__ = (
        CheckConstraint(
            "(locked AND submission_id IS NOT NULL) OR (NOT locked AND submission_id IS NULL)",
            name="ck_group_lock_has_submission",
        ),
    )

    def __repr__(self):
        return f"<Group(group_number={self.group_number}, locked={self.locked})>"


class GroupMember(Base):
    """Roster entry - a subject belongs to at most one group"""
    __tablename__ = "group_members"

    id = Column(Integer, primary_key=True, index=True)
    group_id = Column(Integer, ForeignKey("groups.id"), nullable=False, index=True)
    subject_id = Column(String(64), unique=True, nullable=False)

    group = relationship("Group", back_populates="members")


class GroupSubmission(Base):
    """
    Group submissions table - created once per group; later touched only by
    grading (score, feedback, graded_by, graded_at)
    """
    __tablename__ = "group_submissions"

    id = Column(Uuid(as_uuid=True), primary_key=True, default=uuid.uuid4)
    group_id = Column(Integer, ForeignKey("groups.id"), nullable=False, index=True)
    group_number = Column(Integer, nullable=False, index=True)
    file_name = Column(String(255), nullable=False)
    file_url = Column(Text, nullable=False)
    uploaded_by = Column(String(64), nullable=False, index=True)
    uploaded_at = Column(DateTime, nullable=False)
    score = Column(Float, nullable=True)
    feedback = Column(Text, nullable=True)
    graded_by = Column(String(64), nullable=True)
    graded_at = Column(DateTime, nullable=True)

    group = relationship("Group")

    def __repr__(self):
        return f"<GroupSubmission(group_number={self.group_number}, score={self.score})>"
