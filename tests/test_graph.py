"""Unit tests for trace graph construction, ordering and hashing."""

import pytest

from tracegate.engine.graph import (
    build_trace_graph,
    compute_manifest_hash,
    format_graph,
    sort_nodes,
    verify_manifest_hash,
)
from tracegate.schemas.enums import NodeSource
from tracegate.schemas.graph import TraceEdge, TraceNode


def _node(gxp_id, node_type, **kw):
    return TraceNode(gxp_id=gxp_id, type=node_type, source=kw.pop("source", NodeSource.SPEC), **kw)


@pytest.fixture
def project(tmp_path):
    (tmp_path / "gxp-product.md").write_text(
        "---\nproduct_name: Reference\nversion: 1.2.0\nproduct_code: REF\n---\n"
    )
    for sub in ("specs/urs", "specs/frs", "specs/ds", "src", "tests/unit"):
        (tmp_path / sub).mkdir(parents=True)
    (tmp_path / "specs/urs/urs-001.md").write_text(
        "---\ngxp_id: URS-1\ntype: URS\n---\n# Secure sign-in\nUsers sign in.\n"
    )
    (tmp_path / "specs/frs/frs-002.md").write_text(
        "---\ngxp_id: FRS-2\ntype: FRS\nrisk: High\ntraces: [URS-1]\n---\n"
        "# Token validation\nValidate tokens.\n"
    )
    (tmp_path / "src/validator.ts").write_text(
        "// @gxp-id: FRS-2\n"
        "// @gxp-type: FRS\n"
        "// @gxp-title: Code title must not win\n"
        "// @gxp-traces: DS-1\n"
        "// @gxp-id: DS-1\n"
        "// @gxp-type: DS\n"
        "// @gxp-traces: FRS-2\n"
    )
    (tmp_path / "tests/unit/token.spec.ts").write_text(
        "// @gxp-id: OQ-1\n// @gxp-type: OQ\n// @gxp-traces: DS-1\n"
        "// @gxp-id: TC-1\n// @gxp-traces: DS-1, FRS-9\n"
    )
    return tmp_path


def test_build_returns_none_without_product_manifest(tmp_path):
    assert build_trace_graph(tmp_path) is None


def test_build_graph_orders_nodes_by_type_then_id(project):
    graph = build_trace_graph(project)
    assert graph.product_code == "REF"
    assert graph.version == "1.2.0"
    assert [n.gxp_id for n in graph.nodes] == ["URS-1", "FRS-2", "DS-1", "TC-1", "OQ-1"]
    assert [n.source for n in graph.nodes] == [
        NodeSource.SPEC,
        NodeSource.SPEC,
        NodeSource.CODE,
        NodeSource.TEST,
        NodeSource.TEST,
    ]


def test_duplicate_identifier_keeps_spec_fields_and_all_edges(project):
    graph = build_trace_graph(project)
    frs = [n for n in graph.nodes if n.gxp_id == "FRS-2"]
    assert len(frs) == 1
    assert frs[0].title == "Token validation"
    assert frs[0].description == "Validate tokens."
    assert frs[0].file == "specs/frs/frs-002.md"

    frs_edges = [(e.source, e.target) for e in graph.edges if e.source == "FRS-2"]
    assert frs_edges == [("FRS-2", "URS-1"), ("FRS-2", "DS-1")]


def test_dangling_edges_are_kept(project):
    graph = build_trace_graph(project)
    assert ("TC-1", "FRS-9") in [(e.source, e.target) for e in graph.edges]


def test_provenance_is_relative(project):
    graph = build_trace_graph(project)
    ds = next(n for n in graph.nodes if n.gxp_id == "DS-1")
    assert ds.file == "src/validator.ts"
    assert ds.line == 5


def test_spec_without_identifier_becomes_unknown_node(project):
    (project / "specs/ds/loose.md").write_text("# Loose design note\n")
    graph = build_trace_graph(project)
    unknown = next(n for n in graph.nodes if n.gxp_id == "UNKNOWN")
    assert unknown.type == "URS"
    assert unknown.title == "Loose design note"


def test_hash_is_stable_across_builds(project):
    first = build_trace_graph(project)
    second = build_trace_graph(project)
    assert first.manifest_hash == second.manifest_hash
    assert verify_manifest_hash(first, first.manifest_hash)


def test_sort_is_idempotent_and_independent_of_discovery_order():
    nodes = [
        _node("TC-2", "TC"),
        _node("X-1", "CUSTOM"),
        _node("URS-2", "URS"),
        _node("TC-10", "TC"),
        _node("URS-1", "URS"),
        _node("PQ-1", "PQ"),
    ]
    once = sort_nodes(nodes)
    assert [n.gxp_id for n in once] == ["URS-1", "URS-2", "TC-10", "TC-2", "PQ-1", "X-1"]
    assert sort_nodes(once) == once
    assert sort_nodes(reversed(nodes)) == once


def test_hash_changes_with_title_risk_or_edges():
    nodes = [_node("URS-1", "URS", title="A", risk="Low")]
    edges = [TraceEdge(source="FRS-1", target="URS-1")]
    base = compute_manifest_hash(nodes, edges, "1.0.0")

    assert compute_manifest_hash([_node("URS-1", "URS", title="B", risk="Low")], edges, "1.0.0") != base
    assert compute_manifest_hash([_node("URS-1", "URS", title="A", risk="High")], edges, "1.0.0") != base
    assert compute_manifest_hash(nodes, [], "1.0.0") != base
    assert compute_manifest_hash(nodes, edges, "1.0.1") != base


def test_hash_ignores_provenance():
    a = [_node("DS-1", "DS", file="src/a.ts", line=3, source=NodeSource.CODE)]
    b = [_node("DS-1", "DS", file="src/moved.ts", line=40, source=NodeSource.CODE)]
    assert compute_manifest_hash(a, [], "1") == compute_manifest_hash(b, [], "1")


def test_hash_uses_sha256_scheme():
    digest = compute_manifest_hash([], [], "0.0.0")
    assert digest.startswith("sha256:")
    assert len(digest.split(":", 1)[1]) == 64


def test_format_graph(project):
    text = format_graph(build_trace_graph(project))
    assert "Trace Graph: REF v1.2.0" in text
    assert "|- FRS-2 (Token validation) -> URS-1, DS-1" in text
