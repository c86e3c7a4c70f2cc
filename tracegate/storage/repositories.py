"""Repository functions for manifests, nodes, edges, evidence and audit entries."""

from uuid import uuid4

from sqlalchemy import select
from sqlalchemy.ext.asyncio import AsyncSession

from tracegate.models import AuditEntry, Edge, Evidence, Manifest, Node
from tracegate.schemas.enums import NodeStatus
from tracegate.utils.clock import now_iso


# Manifests


async def create_manifest(
    db: AsyncSession,
    product_code: str,
    version: str,
    commit_sha: str,
    manifest_hash: str,
) -> Manifest:
    """Create an immutable manifest row."""
    manifest = Manifest(
        id=str(uuid4()),
        product_code=product_code,
        version=version,
        commit_sha=commit_sha,
        manifest_hash=manifest_hash,
        synced_at=now_iso(),
    )
    db.add(manifest)
    await db.flush()
    return manifest


async def get_manifest_by_id(db: AsyncSession, manifest_id: str) -> Manifest | None:
    result = await db.execute(select(Manifest).where(Manifest.id == manifest_id))
    return result.scalar_one_or_none()


async def get_manifest_by_sha(db: AsyncSession, commit_sha: str) -> Manifest | None:
    """Most recent manifest synced for exactly this commit."""
    result = await db.execute(
        select(Manifest)
        .where(Manifest.commit_sha == commit_sha)
        .order_by(Manifest.synced_at.desc(), Manifest.seq.desc())
        .limit(1)
    )
    return result.scalar_one_or_none()


async def get_latest_manifest(
    db: AsyncSession, product_code: str | None = None
) -> Manifest | None:
    """Most recently synced manifest, optionally restricted to one product."""
    query = select(Manifest)
    if product_code:
        query = query.where(Manifest.product_code == product_code)
    result = await db.execute(
        query.order_by(Manifest.synced_at.desc(), Manifest.seq.desc()).limit(1)
    )
    return result.scalar_one_or_none()


# Nodes


async def create_node(
    db: AsyncSession,
    manifest_id: str,
    gxp_id: str,
    type: str,
    title: str | None = None,
    description: str | None = None,
    risk: str | None = None,
    source: str | None = None,
    file: str | None = None,
    line: int | None = None,
    position: int = 0,
) -> Node:
    """Create a node in Pending state."""
    node = Node(
        id=str(uuid4()),
        manifest_id=manifest_id,
        gxp_id=gxp_id,
        type=type,
        title=title,
        description=description,
        risk=risk or "Medium",
        source=source,
        file=file,
        line=line,
        position=position,
        status=NodeStatus.PENDING.value,
    )
    db.add(node)
    await db.flush()
    return node


async def get_nodes_by_manifest(db: AsyncSession, manifest_id: str) -> list[Node]:
    result = await db.execute(
        select(Node).where(Node.manifest_id == manifest_id).order_by(Node.position)
    )
    return list(result.scalars().all())


async def get_node_by_gxp_id(
    db: AsyncSession, manifest_id: str, gxp_id: str
) -> Node | None:
    result = await db.execute(
        select(Node).where(Node.manifest_id == manifest_id, Node.gxp_id == gxp_id)
    )
    return result.scalars().first()


async def get_node_by_id(db: AsyncSession, node_id: str) -> Node | None:
    result = await db.execute(select(Node).where(Node.id == node_id))
    return result.scalar_one_or_none()


async def get_pending_nodes(db: AsyncSession, manifest_id: str) -> list[Node]:
    result = await db.execute(
        select(Node)
        .where(Node.manifest_id == manifest_id, Node.status == NodeStatus.PENDING.value)
        .order_by(Node.position)
    )
    return list(result.scalars().all())


async def update_node_status(
    db: AsyncSession, node: Node, status: NodeStatus, user_id: str
) -> Node:
    """Set status and record who changed it and when."""
    node.status = status.value
    node.approved_by = user_id
    node.approved_at = now_iso()
    await db.flush()
    return node


# Edges


async def create_edge(
    db: AsyncSession,
    manifest_id: str,
    source_id: str,
    target_id: str,
    position: int = 0,
) -> Edge:
    edge = Edge(
        id=str(uuid4()),
        manifest_id=manifest_id,
        source_id=source_id,
        target_id=target_id,
        position=position,
    )
    db.add(edge)
    await db.flush()
    return edge


async def get_edges_by_manifest(db: AsyncSession, manifest_id: str) -> list[Edge]:
    result = await db.execute(
        select(Edge).where(Edge.manifest_id == manifest_id).order_by(Edge.position)
    )
    return list(result.scalars().all())


# Evidence


async def create_evidence(
    db: AsyncSession,
    manifest_id: str,
    execution_id: str,
    results_json: list[dict],
    commit_sha: str | None = None,
    environment: str | None = None,
    executed_at: str | None = None,
) -> Evidence:
    """Create evidence record - append-only."""
    now = now_iso()
    evidence = Evidence(
        id=str(uuid4()),
        manifest_id=manifest_id,
        execution_id=execution_id,
        commit_sha=commit_sha,
        environment=environment,
        executed_at=executed_at or now,
        results_json=results_json,
        created_at=now,
    )
    db.add(evidence)
    await db.flush()
    return evidence


async def get_evidence_by_manifest(db: AsyncSession, manifest_id: str) -> list[Evidence]:
    """Evidence for a manifest in creation order."""
    result = await db.execute(
        select(Evidence)
        .where(Evidence.manifest_id == manifest_id)
        .order_by(Evidence.created_at, Evidence.seq)
    )
    return list(result.scalars().all())


async def get_latest_evidence(db: AsyncSession, manifest_id: str) -> Evidence | None:
    result = await db.execute(
        select(Evidence)
        .where(Evidence.manifest_id == manifest_id)
        .order_by(Evidence.created_at.desc(), Evidence.seq.desc())
        .limit(1)
    )
    return result.scalar_one_or_none()


# Audit log


async def create_audit_entry(
    db: AsyncSession,
    timestamp: str,
    action: str,
    user_id: str | None,
    details: str | None,
    payload_hash: str,
) -> AuditEntry:
    """Append an audit entry. Entries are never updated."""
    entry = AuditEntry(
        id=str(uuid4()),
        timestamp=timestamp,
        action=action,
        user_id=user_id,
        details=details,
        payload_hash=payload_hash,
    )
    db.add(entry)
    await db.flush()
    return entry


async def get_audit_entries(db: AsyncSession, limit: int) -> list[AuditEntry]:
    """Most recent entries first."""
    result = await db.execute(
        select(AuditEntry)
        .order_by(AuditEntry.timestamp.desc(), AuditEntry.seq.desc())
        .limit(limit)
    )
    return list(result.scalars().all())
