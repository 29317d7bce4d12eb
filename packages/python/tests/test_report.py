"""
Tests for bedesign report writing

Tests text blocks, markdown documents and output sinks.
"""

import io

import pytest
import pandas as pd


class TestBlocks:
    """Test console-style blocks."""

    def test_save_block_frame(self):
        """Test a block is framed by 110-character rules."""
        from bedesign.report import save_block, RULE

        buf = io.StringIO()
        save_block(buf, "Detected dataset names", {"parallel": "FSL2015_5", "crossover": None})
        text = buf.getvalue()

        assert len(RULE) == 110
        assert text.startswith(f"\n{RULE}\nDetected dataset names\n{RULE}\n\n")
        assert "parallel  = FSL2015_5" in text
        assert "crossover = missing" in text

    def test_render_dataframe(self):
        """Test DataFrames render without index."""
        from bedesign.report import render

        text = render(pd.DataFrame({"formulation": ["R"], "n": [3]}))

        assert text.splitlines()[0].split() == ["formulation", "n"]
        assert text.splitlines()[1].split() == ["R", "3"]

    def test_render_dataclass_hides_trace(self):
        """Test dataclass fields excluded from repr are not rendered."""
        from bedesign.report import render
        from bedesign.trial import find_sample_size

        res = find_sample_size(0.8, 30.0, nsim=500, rng=1)
        text = render(res)

        assert text.startswith("SampleSizeResult")
        assert "design" in text and "crossover" in text
        assert "trace" not in text

    def test_render_values(self):
        """Test float, list and nested dataclass formatting."""
        from bedesign.report import render
        from bedesign.trial import SimulationParameters

        assert render(0.123456789) == "0.123457"
        assert render(["a", "b"]) == "a, b"
        assert render(float("nan")) == "NaN"
        text = render({"params": SimulationParameters(n=24, cv_pct=25.0)})
        assert "SimulationParameters(n=24, cv_pct=25, gmr=1, design=crossover" in text

    def test_try_run_success(self):
        """Test a successful step writes its result."""
        from bedesign.report import try_run

        buf = io.StringIO()
        ok, res = try_run(buf, "Task", lambda: {"value": 1})

        assert ok
        assert res == {"value": 1}
        assert "value = 1" in buf.getvalue()

    def test_try_run_failure(self):
        """Test a failing step writes an ERROR block and does not raise."""
        from bedesign.report import try_run

        def boom():
            raise RuntimeError("kaboom")

        buf = io.StringIO()
        ok, res = try_run(buf, "Task 2 - Parallel BE: AUC", boom)
        text = buf.getvalue()

        assert not ok
        assert res is None
        assert "Task 2 - Parallel BE: AUC  [ERROR]" in text
        assert "RuntimeError: kaboom" in text
        assert "Traceback" in text


class TestDocuments:
    """Test markdown documents."""

    def test_md_table(self):
        """Test markdown table layout."""
        from bedesign.report import md_table

        table = md_table(["a", "b"], [[1, 2], ["x", "y"]])

        assert table.splitlines() == ["| a | b |", "|---|---|", "| 1 | 2 |", "| x | y |"]

    def test_questions(self):
        """Test the questions mapping points at the configured outputs."""
        from bedesign.config import ProjectConfig
        from bedesign.report import build_questions_md

        text = build_questions_md(ProjectConfig(figures_dir="figs"))

        for heading in ("## Task 1", "## Task 2", "## Task 3", "## Task 4", "## Visualizations"):
            assert heading in text
        assert "`outputs/student_project_1_outputs.txt`" in text
        assert "`figs/`" in text


class TestSinks:
    """Test output sinks."""

    def test_file_sink(self, tmp_path):
        """Test FileSink creates parent directories."""
        from bedesign.report import FileSink

        sink = FileSink(tmp_path)
        path = sink.write_text("docs/report.md", "# Report")

        assert path == tmp_path / "docs" / "report.md"
        assert path.read_text(encoding="utf-8") == "# Report"
        assert sink.directory("figs").is_dir()

    def test_memory_sink(self, tmp_path):
        """Test MemorySink keeps documents by relative path."""
        from pathlib import Path
        from bedesign.report import MemorySink

        sink = MemorySink()
        sink.write_text(Path("outputs") / "run.txt", "DONE.")

        assert sink.documents == {"outputs/run.txt": "DONE."}
        assert sink.directory("figs") is None
        assert MemorySink(figures_root=tmp_path).directory("figs") == tmp_path / "figs"

    def test_abstract(self):
        """Test OutputSink cannot be instantiated."""
        from bedesign.report import OutputSink

        with pytest.raises(TypeError):
            OutputSink()
