"""Manifest, node and edge models."""

from sqlalchemy import ForeignKey, Index, Integer, String, Text
from sqlalchemy.orm import Mapped, mapped_column

from tracegate.database import Base


class Manifest(Base):
    """Immutable snapshot of a product's trace graph at one commit."""

    __tablename__ = "manifests"

    # Insertion order breaks ties between syncs with the same timestamp
    seq: Mapped[int] = mapped_column(Integer, primary_key=True, autoincrement=True)
    id: Mapped[str] = mapped_column(String(36), unique=True, nullable=False)
    product_code: Mapped[str] = mapped_column(Text, nullable=False)
    version: Mapped[str] = mapped_column(Text, nullable=False)
    commit_sha: Mapped[str] = mapped_column(String(64), nullable=False, index=True)
    manifest_hash: Mapped[str] = mapped_column(Text, nullable=False)
    synced_at: Mapped[str] = mapped_column(String(50), nullable=False)


class Node(Base):
    """Approvable trace node, owned by exactly one manifest."""

    __tablename__ = "nodes"

    id: Mapped[str] = mapped_column(String(36), primary_key=True)
    manifest_id: Mapped[str] = mapped_column(
        String(36), ForeignKey("manifests.id"), nullable=False
    )
    gxp_id: Mapped[str] = mapped_column(Text, nullable=False)
    type: Mapped[str] = mapped_column(String(20), nullable=False)
    title: Mapped[str | None] = mapped_column(Text, nullable=True)
    description: Mapped[str | None] = mapped_column(Text, nullable=True)
    risk: Mapped[str | None] = mapped_column(String(20), nullable=True, default="Medium")
    source: Mapped[str | None] = mapped_column(String(10), nullable=True)
    file: Mapped[str | None] = mapped_column(Text, nullable=True)
    line: Mapped[int | None] = mapped_column(Integer, nullable=True)
    position: Mapped[int] = mapped_column(Integer, nullable=False, default=0)
    status: Mapped[str] = mapped_column(
        String(20), nullable=False, default="Pending"
    )  # Pending|Approved|Rejected
    approved_by: Mapped[str | None] = mapped_column(Text, nullable=True)
    approved_at: Mapped[str | None] = mapped_column(String(50), nullable=True)

    __table_args__ = (
        Index("idx_nodes_manifest", "manifest_id"),
        Index("idx_nodes_gxp_id", "gxp_id"),
    )


class Edge(Base):
    """Directed traces-to link between two node identifiers (may dangle)."""

    __tablename__ = "edges"

    id: Mapped[str] = mapped_column(String(36), primary_key=True)
    manifest_id: Mapped[str] = mapped_column(
        String(36), ForeignKey("manifests.id"), nullable=False, index=True
    )
    source_id: Mapped[str] = mapped_column(Text, nullable=False)
    target_id: Mapped[str] = mapped_column(Text, nullable=False)
    position: Mapped[int] = mapped_column(Integer, nullable=False, default=0)
