"""
BlockCred Test Configuration
==============================

Shared fixtures and factories for the entire test suite.
"""

from __future__ import annotations

import os
from datetime import datetime, timezone
from typing import Any

import pytest

# ── Ensure test mode ────────────────────────────────────────────
os.environ.setdefault("BLOCKCRED_LEDGER__VARIANT", "mock")
os.environ.setdefault("BLOCKCRED_CONTENT__BACKEND", "local")

from blockcred.config import BlockCredConfig, ContentStoreConfig, LedgerConfig, LedgerVariant
from blockcred.content.local import LocalContentStore
from blockcred.issuance import IssuanceOrchestrator
from blockcred.ledger.mock import MockLedgerClient
from blockcred.permissions import RolePermissionGate
from blockcred.pipeline import CredentialPipeline
from blockcred.schemas.certificate import (
    CertificateMetadata,
    CertType,
    IssueCertificateRequest,
)
from blockcred.schemas.users import User, UserRole
from blockcred.store.memory import MemoryStore
from blockcred.wallets import WalletDirectory

FIXED_TIME = datetime(2024, 6, 1, 10, 30, 0, tzinfo=timezone.utc)
STUDENT_ID = "2021CS001"
OTHER_STUDENT_ID = "2021CS002"


# ── Markers ─────────────────────────────────────────────────────

def pytest_configure(config):
    """Register custom markers."""
    config.addinivalue_line("markers", "unit: fast unit tests")
    config.addinivalue_line("markers", "integration: multi-component tests")
    config.addinivalue_line("markers", "slow: tests that take >5s")


# ── Fixtures ────────────────────────────────────────────────────

@pytest.fixture
def config() -> BlockCredConfig:
    """Default test config: in-process ledger and content store."""
    return BlockCredConfig(
        ledger=LedgerConfig(variant=LedgerVariant.MOCK),
        content=ContentStoreConfig(),
    )


@pytest.fixture
def fixed_clock():
    return lambda: FIXED_TIME


@pytest.fixture
def users() -> list[User]:
    """One user per role plus a second student."""
    return [
        User(id="admin-1", name="Main Admin", role=UserRole.MAIN_ADMIN, institution="SSN"),
        User(id="coe-1", name="Controller of Examinations", role=UserRole.COE, institution="SSN"),
        User(id="fac-1", name="Dr. Faculty", role=UserRole.DEPARTMENT_FACULTY, department="CSE"),
        User(id="club-1", name="Club Lead", role=UserRole.CLUB_COORDINATOR, club_name="Robotics"),
        User(id="ver-1", name="Acme HR", role=UserRole.EXTERNAL_VERIFIER),
        User(
            id="stu-1", name="Asha Raman", email="asha@example.edu",
            role=UserRole.STUDENT, student_id=STUDENT_ID, department="CSE",
        ),
        User(id="stu-2", name="Vikram Iyer", role=UserRole.STUDENT, student_id=OTHER_STUDENT_ID),
    ]


@pytest.fixture
def store(users) -> MemoryStore:
    return MemoryStore(users)


@pytest.fixture
def ledger() -> MockLedgerClient:
    return MockLedgerClient(start_block=100)


@pytest.fixture
def content_store() -> LocalContentStore:
    return LocalContentStore()


@pytest.fixture
def wallets(ledger) -> WalletDirectory:
    return WalletDirectory(ledger)


@pytest.fixture
def orchestrator(store, content_store, ledger, wallets, fixed_clock) -> IssuanceOrchestrator:
    return IssuanceOrchestrator(
        store=store,
        content_store=content_store,
        ledger=ledger,
        wallets=wallets,
        permission_gate=RolePermissionGate(),
        clock=fixed_clock,
        institution="SSN College of Engineering",
    )


@pytest.fixture
def pipeline(config, store, content_store, ledger, fixed_clock) -> CredentialPipeline:
    return CredentialPipeline(
        config=config,
        store=store,
        content_store=content_store,
        ledger=ledger,
        clock=fixed_clock,
    )


@pytest.fixture
def make_request():
    """Factory fixture for issuance requests."""
    return make_issue_request


# ── Factories ───────────────────────────────────────────────────

def make_issue_request(
    student_id: str = STUDENT_ID,
    cert_type: CertType = CertType.DEGREE,
    file_data: bytes = b"%PDF-1.4 degree certificate",
    file_name: str = "degree.pdf",
    **metadata: Any,
) -> IssueCertificateRequest:
    """Factory for creating issuance requests."""
    return IssueCertificateRequest(
        student_id=student_id,
        cert_type=cert_type,
        file_data=file_data,
        file_name=file_name,
        metadata=CertificateMetadata(**metadata),
    )
