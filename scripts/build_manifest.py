#!/usr/bin/env python3
"""
Build the trace graph of a project and write the sync payload as JSON.
Runs the scanner and graph builder in-process (no DB/API needed).
Usage: python scripts/build_manifest.py PROJECT_DIR --commit <sha> [--output FILE] [--tree]
"""

import argparse
import json
import sys
from pathlib import Path

# Add project root
sys.path.insert(0, str(Path(__file__).resolve().parent.parent))

from tracegate.engine.graph import build_trace_graph, format_graph


def main():
    parser = argparse.ArgumentParser(description=__doc__.strip().splitlines()[0])
    parser.add_argument("project_dir", type=Path)
    parser.add_argument("--commit", required=True, help="commit SHA the manifest describes")
    parser.add_argument("--output", type=Path, help="write payload here instead of stdout")
    parser.add_argument("--tree", action="store_true", help="print the graph as a tree to stderr")
    args = parser.parse_args()

    graph = build_trace_graph(args.project_dir)
    if graph is None:
        print(f"Error: no gxp-product.md in {args.project_dir}", file=sys.stderr)
        sys.exit(1)

    if args.tree:
        print(format_graph(graph), file=sys.stderr)

    payload = {
        "product_code": graph.product_code,
        "version": graph.version,
        "commit_sha": args.commit,
        "manifest_hash": graph.manifest_hash,
        "nodes": [n.model_dump(mode="json") for n in graph.nodes],
        "edges": [e.model_dump() for e in graph.edges],
    }
    text = json.dumps(payload, indent=2)
    if args.output:
        args.output.write_text(text + "\n", encoding="utf-8")
        print(f"Wrote {len(graph.nodes)} nodes, {len(graph.edges)} edges -> {args.output}")
    else:
        print(text)


if __name__ == "__main__":
    main()
