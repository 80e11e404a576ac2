"""
Issuance Permission Gate
=========================

The pipeline consumes permissions as a yes/no question:
"may this issuer issue this certificate type?". Any object with a
``can_issue(issuer, cert_type) -> bool`` method will do.

``RolePermissionGate`` is the institution's default role table:

    role                 marksheet degree bonafide noc participation
    ssn_main_admin           ✓       ✓       ✓      ✓        ✓
    coe                      ✓       ✓
    department_faculty                       ✓      ✓
    club_coordinator                                         ✓
    external_verifier / student: nothing

Degree certificates ride on the marksheet permission (the Controller of
Examinations issues both).
"""

from __future__ import annotations

from typing import Protocol

from blockcred.schemas.certificate import CertType
from blockcred.schemas.users import User, UserRole


class PermissionGate(Protocol):
    def can_issue(self, issuer: User, cert_type: CertType) -> bool:
        ...


# Capability names mirror the institution's permission table.
CAN_ISSUE_MARKSHEET = "can_issue_marksheet"
CAN_ISSUE_BONAFIDE = "can_issue_bonafide"
CAN_ISSUE_NOC = "can_issue_noc"
CAN_ISSUE_PARTICIPATION = "can_issue_participation"

ROLE_CAPABILITIES: dict[UserRole, frozenset[str]] = {
    UserRole.MAIN_ADMIN: frozenset({
        CAN_ISSUE_MARKSHEET, CAN_ISSUE_BONAFIDE, CAN_ISSUE_NOC, CAN_ISSUE_PARTICIPATION,
    }),
    UserRole.COE: frozenset({CAN_ISSUE_MARKSHEET}),
    UserRole.DEPARTMENT_FACULTY: frozenset({CAN_ISSUE_BONAFIDE, CAN_ISSUE_NOC}),
    UserRole.CLUB_COORDINATOR: frozenset({CAN_ISSUE_PARTICIPATION}),
    UserRole.EXTERNAL_VERIFIER: frozenset(),
    UserRole.STUDENT: frozenset(),
}

CERT_TYPE_CAPABILITY: dict[CertType, str] = {
    CertType.MARKSHEET: CAN_ISSUE_MARKSHEET,
    CertType.DEGREE: CAN_ISSUE_MARKSHEET,
    CertType.BONAFIDE: CAN_ISSUE_BONAFIDE,
    CertType.NOC: CAN_ISSUE_NOC,
    CertType.PARTICIPATION: CAN_ISSUE_PARTICIPATION,
}


class RolePermissionGate:
    """Permission gate backed by the static role table above."""

    def __init__(self, table: dict[UserRole, frozenset[str]] | None = None):
        self.table = table if table is not None else ROLE_CAPABILITIES

    def can_issue(self, issuer: User, cert_type: CertType) -> bool:
        if not issuer.is_active:
            return False
        capability = CERT_TYPE_CAPABILITY.get(cert_type)
        if capability is None:
            return False
        return capability in self.table.get(issuer.role, frozenset())
