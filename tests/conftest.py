"""Shared fixtures: a temporary record store per test and a manifest factory."""

import pytest

from tracegate.database import RecordStore
from tracegate.engine.graph import compute_manifest_hash, sort_nodes
from tracegate.engine.sync import sync_manifest
from tracegate.schemas.enums import NodeSource
from tracegate.schemas.graph import TraceEdge, TraceNode
from tracegate.schemas.sync import SyncRequest


@pytest.fixture
async def store(tmp_path):
    record_store = RecordStore(f"sqlite+aiosqlite:///{tmp_path / 'tracegate-test.db'}")
    await record_store.open()
    yield record_store
    await record_store.close()


@pytest.fixture
async def db(store):
    async with store.session() as session:
        yield session


def build_sync_request(
    commit_sha: str,
    node_specs: list[tuple[str, str]],
    edge_specs: list[tuple[str, str]] | None = None,
    version: str = "1.0.0",
    product_code: str = "REF",
) -> SyncRequest:
    nodes = sort_nodes(
        TraceNode(gxp_id=gxp_id, type=node_type, title=f"{gxp_id} title", source=NodeSource.SPEC)
        for gxp_id, node_type in node_specs
    )
    edges = [TraceEdge(source=s, target=t) for s, t in edge_specs or []]
    return SyncRequest(
        product_code=product_code,
        version=version,
        commit_sha=commit_sha,
        manifest_hash=compute_manifest_hash(nodes, edges, version),
        nodes=[n.model_dump() for n in nodes],
        edges=edges,
    )


@pytest.fixture
def make_manifest(db):
    """Sync a manifest with the given (gxp_id, type) nodes and (source, target) edges."""

    async def _make(commit_sha="abcdef123456", nodes=(), edges=(), version="1.0.0"):
        request = build_sync_request(commit_sha, list(nodes), list(edges), version)
        return await sync_manifest(db, request, "ci-agent@rosie.local")

    return _make
