"""Manifest sync - persists a trace graph as a new immutable manifest."""

import logging

from sqlalchemy.ext.asyncio import AsyncSession

from tracegate.engine.audit import record_audit
from tracegate.schemas.enums import AuditAction
from tracegate.schemas.nodes import EdgeOut, ManifestGraph, ManifestOut, NodeOut
from tracegate.schemas.sync import SyncRequest, SyncResult
from tracegate.storage.repositories import (
    create_edge,
    create_manifest,
    create_node,
    get_edges_by_manifest,
    get_latest_manifest,
    get_nodes_by_manifest,
)

logger = logging.getLogger(__name__)


async def sync_manifest(db: AsyncSession, payload: SyncRequest, user_id: str) -> SyncResult:
    """Create a manifest with fresh Pending nodes and all submitted edges.

    Every sync creates new rows, even when identifiers repeat from an earlier
    manifest. Edges are stored by identifier and may dangle.
    """
    manifest = await create_manifest(
        db,
        product_code=payload.product_code,
        version=payload.version,
        commit_sha=payload.commit_sha,
        manifest_hash=payload.manifest_hash,
    )

    created_nodes = []
    for position, node_data in enumerate(payload.nodes):
        node = await create_node(
            db,
            manifest_id=manifest.id,
            gxp_id=node_data.gxp_id,
            type=node_data.type,
            title=node_data.title,
            description=node_data.description,
            risk=node_data.risk,
            source=node_data.source.value if node_data.source else None,
            file=node_data.file,
            line=node_data.line,
            position=position,
        )
        created_nodes.append(node)

    for position, edge_data in enumerate(payload.edges):
        await create_edge(
            db,
            manifest_id=manifest.id,
            source_id=edge_data.source,
            target_id=edge_data.target,
            position=position,
        )

    await record_audit(
        db,
        AuditAction.MANIFEST_SYNC,
        user_id,
        f"Synced {payload.product_code} v{payload.version} "
        f"({len(created_nodes)} nodes, {len(payload.edges)} edges)",
    )
    logger.info(
        "Manifest %s synced for %s @ %s", manifest.id, payload.product_code, payload.commit_sha
    )

    return SyncResult(
        sync_id=manifest.id,
        manifest_id=manifest.id,
        nodes_created=len(created_nodes),
        edges_created=len(payload.edges),
        pending_approvals=[n.gxp_id for n in created_nodes],
    )


async def get_current_manifest(db: AsyncSession) -> ManifestGraph | None:
    """Most recently synced manifest with its nodes and edges."""
    manifest = await get_latest_manifest(db)
    if manifest is None:
        return None
    nodes = await get_nodes_by_manifest(db, manifest.id)
    edges = await get_edges_by_manifest(db, manifest.id)
    return ManifestGraph(
        manifest=ManifestOut.model_validate(manifest),
        nodes=[NodeOut.model_validate(n) for n in nodes],
        edges=[EdgeOut.model_validate(e) for e in edges],
    )
