"""Trace graph builder - merges spec documents and annotations into one DAG."""

import logging
from collections.abc import Iterable
from pathlib import Path

from tracegate.scanner.annotations import DEFAULT_EXTENSIONS, scan_directory
from tracegate.scanner.documents import (
    PRODUCT_MANIFEST_FILE,
    parse_product_manifest,
    parse_spec_file,
)
from tracegate.schemas.enums import NodeSource
from tracegate.schemas.graph import TraceEdge, TraceGraph, TraceNode
from tracegate.utils.canonical import sha256_digest

logger = logging.getLogger(__name__)

SPEC_DIRS = ("specs/urs", "specs/frs", "specs/ds")
SOURCE_DIR = "src"
TESTS_DIR = "tests"

TYPE_RANK = {"URS": 0, "FRS": 1, "DS": 2, "TC": 3, "OQ": 4, "PQ": 5}
UNKNOWN_RANK = 99

# Fields that identify a node's content; provenance (file/line) is excluded
HASHED_NODE_FIELDS = ("gxp_id", "type", "title", "description", "risk", "source")


def node_sort_key(node: TraceNode) -> tuple[int, str]:
    return TYPE_RANK.get(node.type, UNKNOWN_RANK), node.gxp_id


def sort_nodes(nodes: Iterable[TraceNode]) -> list[TraceNode]:
    """Order by type hierarchy, then identifier. Independent of discovery order."""
    return sorted(nodes, key=node_sort_key)


def compute_manifest_hash(
    nodes: Iterable[TraceNode], edges: Iterable[TraceEdge], version: str
) -> str:
    """sha256 fingerprint over the canonical JSON of {nodes, edges, version}.

    Order-sensitive: callers pass nodes already sorted with sort_nodes().
    """
    payload = {
        "nodes": [
            {f: v for f, v in node.model_dump(mode="json").items() if f in HASHED_NODE_FIELDS}
            for node in nodes
        ],
        "edges": [{"source": e.source, "target": e.target} for e in edges],
        "version": version,
    }
    return sha256_digest(payload)


def verify_manifest_hash(graph: TraceGraph, expected_hash: str) -> bool:
    return compute_manifest_hash(graph.nodes, graph.edges, graph.version) == expected_hash


class GraphAccumulator:
    """First writer wins per identifier; every source contributes its edges."""

    def __init__(self):
        self.nodes: dict[str, TraceNode] = {}
        self.edges: list[TraceEdge] = []

    def add(self, node: TraceNode, traces: Iterable[str]) -> bool:
        added = node.gxp_id not in self.nodes
        if added:
            self.nodes[node.gxp_id] = node
        else:
            logger.debug(
                "Duplicate %s from %s ignored (kept %s)",
                node.gxp_id,
                node.source.value,
                self.nodes[node.gxp_id].source.value,
            )
        for target in traces:
            self.edges.append(TraceEdge(source=node.gxp_id, target=target))
        return added


def _relative(path: Path, root: Path) -> str:
    try:
        return path.relative_to(root).as_posix()
    except ValueError:
        return str(path)


def build_trace_graph(
    project_dir: Path | str,
    extensions: Iterable[str] = DEFAULT_EXTENSIONS,
) -> TraceGraph | None:
    """Build the trace graph for a project, or None without gxp-product.md."""
    root = Path(project_dir)
    product = parse_product_manifest(root / PRODUCT_MANIFEST_FILE)
    if product is None:
        logger.info("No %s in %s", PRODUCT_MANIFEST_FILE, root)
        return None

    acc = GraphAccumulator()

    for spec_dir in SPEC_DIRS:
        full_dir = root / spec_dir
        if not full_dir.is_dir():
            continue
        for spec_path in sorted(full_dir.glob("*.md")):
            spec = parse_spec_file(spec_path, _relative(spec_path, root))
            if spec is None:
                continue
            acc.add(
                TraceNode(
                    gxp_id=spec.gxp_id,
                    type=spec.type,
                    title=spec.title,
                    description=spec.description,
                    risk=spec.risk,
                    source=NodeSource.SPEC,
                    file=spec.file,
                ),
                spec.traces,
            )

    for sub_dir, source in ((SOURCE_DIR, NodeSource.CODE), (TESTS_DIR, NodeSource.TEST)):
        for ann in scan_directory(root / sub_dir, extensions, relative_to=root):
            acc.add(
                TraceNode(
                    gxp_id=ann.gxp_id,
                    type=ann.type,
                    title=ann.title,
                    description=ann.description,
                    risk=ann.risk,
                    source=source,
                    file=ann.file,
                    line=ann.line,
                ),
                ann.traces,
            )

    nodes = sort_nodes(acc.nodes.values())
    graph = TraceGraph(
        product_code=product.product_code,
        product_name=product.product_name,
        version=product.version,
        nodes=nodes,
        edges=acc.edges,
        manifest_hash=compute_manifest_hash(nodes, acc.edges, product.version),
    )
    logger.info(
        "Built trace graph %s v%s: %d nodes, %d edges",
        graph.product_code,
        graph.version,
        len(graph.nodes),
        len(graph.edges),
    )
    return graph


DISPLAY_TYPE_ORDER = ("URS", "FRS", "DS", "OQ", "PQ", "TC")


def format_graph(graph: TraceGraph) -> str:
    """Plain-text rendering grouped by type, with outgoing trace arrows."""
    lines = [
        "",
        f"  Trace Graph: {graph.product_code} v{graph.version}",
        f"  Hash: {graph.manifest_hash}",
        "  " + "-" * 50,
        "",
    ]
    outgoing: dict[str, list[str]] = {}
    for edge in graph.edges:
        outgoing.setdefault(edge.source, []).append(edge.target)

    groups: dict[str, list[TraceNode]] = {}
    for node in graph.nodes:
        groups.setdefault(node.type, []).append(node)
    ordered_types = list(DISPLAY_TYPE_ORDER) + sorted(set(groups) - set(DISPLAY_TYPE_ORDER))

    for node_type in ordered_types:
        members = groups.get(node_type)
        if not members:
            continue
        lines.append(f"  {node_type}")
        for node in members:
            targets = outgoing.get(node.gxp_id, [])
            arrow = f" -> {', '.join(targets)}" if targets else ""
            title = f" ({node.title[:30]})" if node.title else ""
            lines.append(f"    |- {node.gxp_id}{title}{arrow}")
        lines.append("")
    return "\n".join(lines)
