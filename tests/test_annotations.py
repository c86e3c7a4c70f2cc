"""Unit tests for the @gxp-* annotation scanner."""

from tracegate.scanner.annotations import (
    AnnotationAccumulator,
    extract_annotations,
    scan_directory,
)

VALIDATOR_TS = """\
import { createHash } from 'crypto';

// @gxp-id: REF-DS-001
// @gxp-type: DS
// @gxp-title: JWT Token Generation
// @gxp-traces: REF-FRS-001
// @gxp-risk: Medium
export function generateToken() {}

// @gxp-id: REF-DS-002
// @gxp-traces: REF-FRS-002, REF-FRS-003
// @gxp-trace: REF-URS-001
export function validateToken() {}
"""


def test_extract_two_blocks():
    anns = extract_annotations(VALIDATOR_TS, "src/validator.ts")
    assert [a.gxp_id for a in anns] == ["REF-DS-001", "REF-DS-002"]

    first = anns[0]
    assert first.type == "DS"
    assert first.title == "JWT Token Generation"
    assert first.traces == ["REF-FRS-001"]
    assert first.risk == "Medium"
    assert first.file == "src/validator.ts"
    assert first.line == 3


def test_traces_accumulate_and_type_defaults_to_tc():
    anns = extract_annotations(VALIDATOR_TS, "f.ts")
    second = anns[1]
    assert second.type == "TC"
    assert second.traces == ["REF-FRS-002", "REF-FRS-003", "REF-URS-001"]
    assert second.line == 10


def test_marker_keywords_case_insensitive_identifier_case_sensitive():
    text = "# @GXP-ID: TC-9\n# @Gxp-Type: OQ\n# @gxp-id: lower-case\n"
    anns = extract_annotations(text, "t.py")
    # lowercase identifiers do not match the id pattern
    assert [a.gxp_id for a in anns] == ["TC-9"]
    assert anns[0].type == "OQ"


def test_markers_before_any_id_are_ignored():
    text = "// @gxp-title: Orphan\n// @gxp-risk: High\n// @gxp-id: TC-1\n"
    anns = extract_annotations(text, "a.ts")
    assert len(anns) == 1
    assert anns[0].title is None
    assert anns[0].risk is None


def test_file_without_ids_yields_nothing():
    assert extract_annotations("// @gxp-title: nothing\nconst x = 1;\n", "a.ts") == []


def test_other_markers_on_id_line_are_not_applied():
    anns = extract_annotations("// @gxp-id: TC-1 @gxp-type: OQ\n", "a.ts")
    assert anns[0].type == "TC"


def test_accumulator_flush_resets_state():
    acc = AnnotationAccumulator("x.ts")
    assert acc.feed("// @gxp-title: early", 1) is None
    assert not acc.is_open
    assert acc.feed("// @gxp-id: TC-1", 2) is None
    assert acc.is_open
    acc.feed("// @gxp-title: First", 3)
    closed = acc.feed("// @gxp-id: TC-2", 4)
    assert closed.gxp_id == "TC-1"
    assert closed.title == "First"
    last = acc.flush()
    assert last.gxp_id == "TC-2"
    assert last.title is None
    assert acc.flush() is None


def test_scan_directory_filters_extensions_and_excluded_dirs(tmp_path):
    (tmp_path / "src").mkdir()
    (tmp_path / "src" / "a.ts").write_text("// @gxp-id: DS-1\n")
    (tmp_path / "src" / "b.py").write_text("# @gxp-id: DS-2\n")
    (tmp_path / "src" / "notes.md").write_text("@gxp-id: DS-3\n")
    (tmp_path / "src" / "node_modules" / "lib").mkdir(parents=True)
    (tmp_path / "src" / "node_modules" / "lib" / "c.js").write_text("// @gxp-id: DS-4\n")
    (tmp_path / "src" / "x.spec.ts").write_text("// @gxp-id: TC-5\n")

    anns = scan_directory(tmp_path / "src", relative_to=tmp_path)
    # each file scanned once, in sorted path order
    assert [a.gxp_id for a in anns] == ["DS-1", "DS-2", "TC-5"]
    assert anns[0].file == "src/a.ts"


def test_scan_missing_directory(tmp_path):
    assert scan_directory(tmp_path / "nope") == []
