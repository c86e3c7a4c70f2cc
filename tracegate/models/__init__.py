"""Database models."""

from tracegate.models.manifest import Edge, Manifest, Node
from tracegate.models.evidence import Evidence
from tracegate.models.audit import AuditEntry

__all__ = ["Manifest", "Node", "Edge", "Evidence", "AuditEntry"]
