#!/usr/bin/env python3
"""
Seed script: syncs a small demo manifest so the API has data to show.
Run against the configured database: python scripts/seed.py
"""

import asyncio
import os
import sys

# Add project root to path
sys.path.insert(0, os.path.dirname(os.path.dirname(os.path.abspath(__file__))))

from tracegate.config import settings
from tracegate.database import RecordStore
from tracegate.engine.graph import compute_manifest_hash, sort_nodes
from tracegate.engine.sync import sync_manifest
from tracegate.schemas.enums import NodeSource
from tracegate.schemas.graph import TraceEdge, TraceNode
from tracegate.schemas.sync import SyncRequest

COMMIT_SHA = "abc1234def5678"
VERSION = "1.0.0"

NODES = [
    TraceNode(gxp_id="REF-URS-001", type="URS", title="Users can sign in securely",
              risk="High", source=NodeSource.SPEC, file="specs/urs/URS-001.md"),
    TraceNode(gxp_id="REF-FRS-001", type="FRS", title="Issue signed session tokens",
              risk="High", source=NodeSource.SPEC, file="specs/frs/FRS-001.md"),
    TraceNode(gxp_id="REF-DS-001", type="DS", title="JWT Token Generation",
              risk="Medium", source=NodeSource.CODE, file="src/validator.ts", line=11),
    TraceNode(gxp_id="REF-OQ-001", type="OQ", title="Token round trip",
              risk="Medium", source=NodeSource.TEST, file="tests/unit/token.spec.ts", line=3),
]

EDGES = [
    TraceEdge(source="REF-FRS-001", target="REF-URS-001"),
    TraceEdge(source="REF-DS-001", target="REF-FRS-001"),
    TraceEdge(source="REF-OQ-001", target="REF-DS-001"),
]


async def seed():
    nodes = sort_nodes(NODES)
    payload = SyncRequest(
        product_code="REF",
        version=VERSION,
        commit_sha=COMMIT_SHA,
        manifest_hash=compute_manifest_hash(nodes, EDGES, VERSION),
        nodes=[n.model_dump() for n in nodes],
        edges=EDGES,
    )

    async with RecordStore(settings.database_url) as store:
        async with store.session() as session:
            result = await sync_manifest(session, payload, settings.ci_user_id)
            await session.commit()

    print("Seed complete!")
    print(f"Manifest: {result.manifest_id} ({result.nodes_created} nodes, {result.edges_created} edges)")
    print("Example: curl http://localhost:8000/v1/release/readiness/" + COMMIT_SHA)


if __name__ == "__main__":
    asyncio.run(seed())
