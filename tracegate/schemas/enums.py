"""Enumerations shared by models, engine and API."""

from enum import Enum


class NodeStatus(str, Enum):
    PENDING = "Pending"
    APPROVED = "Approved"
    REJECTED = "Rejected"


class NodeSource(str, Enum):
    SPEC = "spec"
    CODE = "code"
    TEST = "test"


class AuditAction(str, Enum):
    MANIFEST_SYNC = "MANIFEST_SYNC"
    APPROVAL = "APPROVAL"
    REJECTION = "REJECTION"
    EVIDENCE_UPLOAD = "EVIDENCE_UPLOAD"
    RRT_ISSUED = "RRT_ISSUED"


class TestStatus(str, Enum):
    __test__ = False  # not a pytest class

    PASSED = "passed"
    FAILED = "failed"
    SKIPPED = "skipped"
