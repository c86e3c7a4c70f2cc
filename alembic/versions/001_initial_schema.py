"""Initial schema - manifests, nodes, edges, evidence, audit_log.

Revision ID: 001
Revises:
Create Date: 2026-10-18

"""
from typing import Sequence, Union

from alembic import op
import sqlalchemy as sa
from sqlalchemy.dialects.postgresql import JSONB

revision: str = "001"
down_revision: Union[str, None] = None
branch_labels: Union[str, Sequence[str], None] = None
depends_on: Union[str, Sequence[str], None] = None

JSON_TYPE = sa.JSON().with_variant(JSONB(), "postgresql")


def upgrade() -> None:
    op.create_table(
        "manifests",
        sa.Column("seq", sa.Integer(), primary_key=True, autoincrement=True),
        sa.Column("id", sa.String(36), unique=True, nullable=False),
        sa.Column("product_code", sa.Text(), nullable=False),
        sa.Column("version", sa.Text(), nullable=False),
        sa.Column("commit_sha", sa.String(64), nullable=False),
        sa.Column("manifest_hash", sa.Text(), nullable=False),
        sa.Column("synced_at", sa.String(50), nullable=False),
    )
    op.create_index("ix_manifests_commit_sha", "manifests", ["commit_sha"])

    op.create_table(
        "nodes",
        sa.Column("id", sa.String(36), primary_key=True),
        sa.Column("manifest_id", sa.String(36), sa.ForeignKey("manifests.id"), nullable=False),
        sa.Column("gxp_id", sa.Text(), nullable=False),
        sa.Column("type", sa.String(20), nullable=False),
        sa.Column("title", sa.Text(), nullable=True),
        sa.Column("description", sa.Text(), nullable=True),
        sa.Column("risk", sa.String(20), nullable=True, server_default="Medium"),
        sa.Column("source", sa.String(10), nullable=True),
        sa.Column("file", sa.Text(), nullable=True),
        sa.Column("line", sa.Integer(), nullable=True),
        sa.Column("position", sa.Integer(), nullable=False, server_default="0"),
        sa.Column("status", sa.String(20), nullable=False, server_default="Pending"),
        sa.Column("approved_by", sa.Text(), nullable=True),
        sa.Column("approved_at", sa.String(50), nullable=True),
    )
    op.create_index("idx_nodes_manifest", "nodes", ["manifest_id"])
    op.create_index("idx_nodes_gxp_id", "nodes", ["gxp_id"])

    op.create_table(
        "edges",
        sa.Column("id", sa.String(36), primary_key=True),
        sa.Column("manifest_id", sa.String(36), sa.ForeignKey("manifests.id"), nullable=False),
        sa.Column("source_id", sa.Text(), nullable=False),
        sa.Column("target_id", sa.Text(), nullable=False),
        sa.Column("position", sa.Integer(), nullable=False, server_default="0"),
    )
    op.create_index("ix_edges_manifest_id", "edges", ["manifest_id"])

    op.create_table(
        "evidence",
        sa.Column("seq", sa.Integer(), primary_key=True, autoincrement=True),
        sa.Column("id", sa.String(36), unique=True, nullable=False),
        sa.Column("manifest_id", sa.String(36), sa.ForeignKey("manifests.id"), nullable=False),
        sa.Column("execution_id", sa.Text(), nullable=False),
        sa.Column("commit_sha", sa.String(64), nullable=True),
        sa.Column("environment", sa.Text(), nullable=True),
        sa.Column("executed_at", sa.String(50), nullable=True),
        sa.Column("results_json", JSON_TYPE, nullable=False),
        sa.Column("created_at", sa.String(50), nullable=False),
    )
    op.create_index("ix_evidence_manifest_id", "evidence", ["manifest_id"])

    op.create_table(
        "audit_log",
        sa.Column("seq", sa.Integer(), primary_key=True, autoincrement=True),
        sa.Column("id", sa.String(36), unique=True, nullable=False),
        sa.Column("timestamp", sa.String(50), nullable=False),
        sa.Column("action", sa.String(32), nullable=False),
        sa.Column("user_id", sa.Text(), nullable=True),
        sa.Column("details", sa.Text(), nullable=True),
        sa.Column("payload_hash", sa.Text(), nullable=False),
    )
    op.create_index("ix_audit_log_timestamp", "audit_log", ["timestamp"])


def downgrade() -> None:
    op.drop_index("ix_audit_log_timestamp", table_name="audit_log")
    op.drop_table("audit_log")
    op.drop_index("ix_evidence_manifest_id", table_name="evidence")
    op.drop_table("evidence")
    op.drop_index("ix_edges_manifest_id", table_name="edges")
    op.drop_table("edges")
    op.drop_index("idx_nodes_gxp_id", table_name="nodes")
    op.drop_index("idx_nodes_manifest", table_name="nodes")
    op.drop_table("nodes")
    op.drop_index("ix_manifests_commit_sha", table_name="manifests")
    op.drop_table("manifests")
