"""End-to-end tests: entry files -> dependency graph -> cycle reports."""

from pathlib import Path

import pytest

from import_cycles import AnalysisConfig, CycleKind, build_graph, detect_import_cycles
from import_cycles.report import (
    format_dependencies,
    format_text,
    rank_cycle_files,
    relative_to,
    to_dict,
)

FIXTURES = Path(__file__).parent / "fixtures"


def _fixture(*parts):
    return str((FIXTURES.joinpath(*parts)).resolve())


def _chains(report):
    return [([Path(f).name for f in c.files], c.kind) for c in report.cycles]


# ── Scenarios ─────────────────────────────────────────────────

class TestScenarios:
    def test_no_cycles(self):
        result = detect_import_cycles([_fixture("no-cycles", "entry.ts")])
        assert result.reports == []
        assert result.failures == []
        assert not result.has_cycles

    def test_class_instantiated_at_module_level(self):
        result = detect_import_cycles([_fixture("class-cycle", "a.ts")])
        assert len(result.reports) == 1
        report = result.reports[0]
        assert report.file_path == _fixture("class-cycle", "a.ts")
        assert _chains(report) == [(["a.ts", "b.ts", "a.ts"], CycleKind.CLOSED)]

    def test_class_used_only_as_type(self):
        result = detect_import_cycles([_fixture("type-only-class", "a.ts")])
        assert result.reports == []

    def test_class_instantiated_in_method(self):
        result = detect_import_cycles([_fixture("method-return", "a.ts")])
        assert [_chains(r) for r in result.reports] == [
            [(["a.ts", "b.ts", "a.ts"], CycleKind.CLOSED)],
        ]

    def test_extended_class(self):
        result = detect_import_cycles([_fixture("extended-class-cycle", "entry.ts")])
        assert [_chains(r) for r in result.reports] == [
            [(["entry.ts", "animal.ts", "entry.ts"], CycleKind.CLOSED)],
        ]

    def test_type_imports_break_cycles(self):
        result = detect_import_cycles([_fixture("types-cycles", "entry.ts")])
        assert result.reports == []

    def test_class_used_only_in_arrow_and_generic_types(self):
        result = detect_import_cycles([_fixture("arrow-type-only", "a.ts")])
        assert result.reports == []

    def test_dot_import_resolves_to_directory_index(self):
        pkg = _fixture("dot-index", "pkg.ts")
        result = detect_import_cycles([pkg])
        assert result.reports == []
        assert result.graph.dependencies_of(_fixture("dot-index", "pkg", "entry.ts")) == [
            _fixture("dot-index", "pkg", "index.ts"),
        ]

    def test_barrel_cycle(self):
        result = detect_import_cycles([_fixture("barrel", "app.ts")])
        assert len(result.reports) == 1
        (chain,) = result.reports[0].cycles
        assert chain.kind == CycleKind.CLOSED
        assert chain.files == [
            _fixture("barrel", "app.ts"),
            _fixture("barrel", "models", "index.ts"),
            _fixture("barrel", "models", "user.ts"),
            _fixture("barrel", "app.ts"),
        ]


class TestMultipleEntries:
    ENTRIES = [
        _fixture("multiple-cycles", "entry.ts"),
        _fixture("multiple-cycles", "entry2.ts"),
        _fixture("multiple-cycles", "standalone.ts"),
    ]

    def test_reports_per_entry(self):
        result = detect_import_cycles(self.ENTRIES)
        assert [r.file_path for r in result.reports] == self.ENTRIES[:2]
        assert _chains(result.reports[0]) == [
            (["entry.ts", "x.ts", "entry.ts"], CycleKind.CLOSED),
            (["entry.ts", "y.ts", "z.ts", "y.ts"], CycleKind.SUBCYCLE),
        ]
        assert _chains(result.reports[1]) == [
            (["entry2.ts", "z.ts", "y.ts", "z.ts"], CycleKind.SUBCYCLE),
        ]
        assert result.cycle_count == 3

    def test_entries_are_independent(self):
        together = detect_import_cycles(self.ENTRIES)
        for entry, report in zip(self.ENTRIES, together.reports):
            alone = detect_import_cycles([entry])
            assert [c.files for c in alone.reports[0].cycles] == [c.files for c in report.cycles]

    def test_idempotent(self):
        first = detect_import_cycles(self.ENTRIES)
        second = detect_import_cycles(self.ENTRIES)
        assert [[c.files for c in r.cycles] for r in first.reports] == \
            [[c.files for c in r.cycles] for r in second.reports]

    def test_worker_count_does_not_change_result(self):
        single = detect_import_cycles(self.ENTRIES, AnalysisConfig(max_workers=1))
        many = detect_import_cycles(self.ENTRIES, AnalysisConfig(max_workers=8))
        assert to_dict(single) == to_dict(many)

    def test_duplicate_entries(self):
        entry = self.ENTRIES[0]
        result = detect_import_cycles([entry, entry])
        assert result.entries == [entry]
        assert len(result.reports) == 1

    def test_ranking(self):
        result = detect_import_cycles(self.ENTRIES)
        ranking = [(Path(p).name, n) for p, n in rank_cycle_files(result.reports)]
        assert ranking == [
            ("entry.ts", 2),
            ("y.ts", 2),
            ("z.ts", 2),
            ("entry2.ts", 1),
            ("x.ts", 1),
        ]

    def test_progress_callback(self):
        calls = []
        detect_import_cycles(self.ENTRIES, progress=lambda stage, i, n: calls.append((stage, i, n)))
        assert calls[0] == ("Resolving imports", 0, 1)
        assert calls[-1] == ("Finding cycles", 3, 3)


# ── Failures ──────────────────────────────────────────────────

class TestFailures:
    def test_missing_entry(self, tmp_path):
        good = _fixture("class-cycle", "a.ts")
        missing = str(tmp_path / "missing.ts")
        result = detect_import_cycles([missing, good])
        assert [f.file_path for f in result.failures] == [str(Path(missing).resolve())]
        assert "File not found" in result.failures[0].error
        assert [r.file_path for r in result.reports] == [good]

    def test_unparsable_entry(self, tmp_path):
        bad = tmp_path / "bad.ts"
        bad.write_text('import { a from "./a"\n')
        result = detect_import_cycles([bad])
        assert len(result.failures) == 1
        assert "Syntax error" in result.failures[0].error
        assert result.reports == []

    def test_broken_dependency_is_dropped(self):
        entry = _fixture("broken-import", "entry.ts")
        broken = _fixture("broken-import", "broken.ts")
        result = detect_import_cycles([entry])
        assert result.failures == []
        assert result.reports == []
        assert broken in result.graph.failures
        assert result.graph.dependencies_of(entry) == []


# ── Graph and rendering ───────────────────────────────────────

class TestGraph:
    def test_edges_carry_names(self):
        graph = build_graph([_fixture("multiple-cycles", "entry.ts")])
        entry = _fixture("multiple-cycles", "entry.ts")
        assert graph.dependencies_of(entry) == [
            _fixture("multiple-cycles", "x.ts"),
            _fixture("multiple-cycles", "y.ts"),
        ]
        assert graph.edge(entry, _fixture("multiple-cycles", "x.ts")).names == ["x"]
        assert entry in graph.reverse[_fixture("multiple-cycles", "x.ts")]

    def test_only_reachable_files(self):
        graph = build_graph([_fixture("multiple-cycles", "entry2.ts")])
        names = sorted(Path(p).name for p in graph.forward)
        assert names == ["entry2.ts", "y.ts", "z.ts"]

    def test_format_dependencies(self):
        graph = build_graph([_fixture("class-cycle", "a.ts")])
        text = format_dependencies(graph, relative_to(FIXTURES.resolve() / "class-cycle"))
        assert text.splitlines() == [
            "a.ts",
            "  -> b.ts  (Human)",
            "b.ts",
            "  -> a.ts  (myHuman)",
        ]


class TestFormatText:
    def test_report_layout(self):
        result = detect_import_cycles([_fixture("class-cycle", "a.ts")])
        text = format_text(result, relative_to(FIXTURES.resolve() / "class-cycle"))
        assert text.splitlines() == [
            "Files that have cycles: 1",
            "",
            "File: a.ts contains 1 cycle",
            "",
            "  a.ts -> b.ts -> a.ts",
        ]

    @pytest.mark.parametrize("relative", [True, False])
    def test_failures_listed(self, tmp_path, relative):
        bad = tmp_path / "bad.ts"
        bad.write_text('import { a from "./a"\n')
        result = detect_import_cycles([bad])
        fmt = relative_to(tmp_path.resolve()) if relative else str
        text = format_text(result, fmt)
        assert "Files that could not be analyzed: 1" in text
        assert ("  bad.ts: " in text) == relative
