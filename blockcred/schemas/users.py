"""
User Schema
============

Students and issuers as the record store hands them to the pipeline.
Authentication lives elsewhere; here a user is just an identity with a
role.
"""

from __future__ import annotations

from datetime import datetime
from enum import Enum
from typing import Optional

from pydantic import BaseModel, Field

from blockcred.utils import utc_now


class UserRole(str, Enum):
    """Institution roles. Issuance rights per role live in permissions.py."""
    MAIN_ADMIN = "ssn_main_admin"
    COE = "coe"
    DEPARTMENT_FACULTY = "department_faculty"
    CLUB_COORDINATOR = "club_coordinator"
    EXTERNAL_VERIFIER = "external_verifier"
    STUDENT = "student"


class User(BaseModel):
    id: str = Field(description="Store-assigned user id")
    name: str
    email: str = ""
    role: UserRole
    student_id: Optional[str] = Field(
        default=None,
        description="Institution student identifier (students only)"
    )
    department: str = ""
    institution: str = ""
    club_name: str = ""
    is_active: bool = True
    is_approved: bool = True
    created_at: datetime = Field(default_factory=utc_now)
