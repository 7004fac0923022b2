"""Tests for the per-version pipeline, with fake git and docfx collaborators."""

import tempfile
from pathlib import Path

import pytest
import yaml

from unity_xrefmap.config import XRefMapConfig
from unity_xrefmap.errors import CheckoutError, SetupError
from unity_xrefmap.pipeline import VersionPipeline
from unity_xrefmap.utils.docfx import ToolResult


class FakeSource:
    """Branches whose 'checkout' just records the current branch."""

    def __init__(self, branches: list[str], unreachable=()):
        self._branches = branches
        self.unreachable = set(unreachable)
        self.checked_out: list[str] = []

    def branches(self) -> list[str]:
        return list(self._branches)

    def materialize(self, branch: str) -> None:
        if branch in self.unreachable:
            raise CheckoutError(branch, "pathspec did not match")
        self.checked_out.append(branch)


class FakeGenerator:
    """Writes canned metadata for the current branch, or fails for chosen ones."""

    def __init__(self, source: FakeSource, metadata_path: Path, failing=(), malformed=(), available=True):
        self.source = source
        self.metadata_path = metadata_path
        self.failing = set(failing)
        self.malformed = set(malformed)
        self.available = available

    def ensure_available(self) -> None:
        if not self.available:
            raise SetupError("'docfx' was not found on PATH")

    def generate(self) -> ToolResult:
        branch = self.source.checked_out[-1]
        if branch in self.failing:
            return ToolResult(exit_code=1)

        self.metadata_path.mkdir(parents=True, exist_ok=True)
        if branch in self.malformed:
            (self.metadata_path / "Broken.yml").write_text("### YamlMime:ManagedReference\nitems: [\n")
            return ToolResult(exit_code=0)

        version = branch.split("/", 1)[1]
        items = [
            {"uid": "UnityEngine.Object", "commentId": "T:UnityEngine.Object", "name": "Object"},
            {"uid": f"UnityEngine.Object.Only{version.replace('.', '_')}", "commentId": "M:x", "name": "x"},
            {"uid": "UnityEngine.Object.Destroy*", "commentId": "Overload:UnityEngine.Object.Destroy"},
        ]
        path = self.metadata_path / f"UnityEngine.Object.{version}.yml"
        path.write_text("### YamlMime:ManagedReference\n" + yaml.safe_dump({"items": items}))
        return ToolResult(exit_code=0)


def _setup(tmpdir: str, branches: list[str], unreachable=(), **generator_kwargs):
    root = Path(tmpdir)
    config = XRefMapConfig(
        repository_path=root / "UnityCsReference",
        metadata_path=root / "ScriptReference",
        output_path=root / "out",
        working_dir=root,
    )
    source = FakeSource(branches, unreachable)
    generator = FakeGenerator(source, config.metadata_path, **generator_kwargs)
    return config, source, VersionPipeline(config, source, generator)


BRANCHES = ["origin/master", "origin/2020.1", "origin/2019.4", "origin/2019.10", "origin/feature/x"]


def test_processes_versions_oldest_first():
    with tempfile.TemporaryDirectory() as tmpdir:
        config, source, pipeline = _setup(tmpdir, BRANCHES)
        report = pipeline.run()

        assert source.checked_out == ["origin/2019.4", "origin/2019.10", "origin/2020.1"]
        assert [r.version for r in report.succeeded] == ["2019.4", "2019.10", "2020.1"]
        for version in ["2019.4", "2019.10", "2020.1"]:
            assert (config.output_path / version / "xrefmap.yml").is_file()


def test_output_uses_version_base_url_and_drops_overloads():
    with tempfile.TemporaryDirectory() as tmpdir:
        config, _, pipeline = _setup(tmpdir, ["origin/2021.3"])
        report = pipeline.run()

        [result] = report.succeeded
        assert result.reference_count == 2
        text = result.output_path.read_text()
        assert text.startswith("### YamlMime:XRefMap\n")
        data = yaml.safe_load(text)
        assert data["sorted"] is True
        hrefs = [r["href"] for r in data["references"]]
        assert "https://docs.unity3d.com/2021.3/Documentation/ScriptReference/Object.html" in hrefs
        assert all("Overload:" not in r["commentId"] for r in data["references"])


def test_metadata_does_not_leak_between_versions():
    with tempfile.TemporaryDirectory() as tmpdir:
        config, _, pipeline = _setup(tmpdir, ["origin/2019.4", "origin/2020.1"])
        pipeline.run()

        data = yaml.safe_load((config.output_path / "2020.1" / "xrefmap.yml").read_text())
        uids = [r["uid"] for r in data["references"]]
        assert "UnityEngine.Object.Only2020_1" in uids
        assert "UnityEngine.Object.Only2019_4" not in uids


def test_filter_restricts_versions():
    with tempfile.TemporaryDirectory() as tmpdir:
        config, source, pipeline = _setup(tmpdir, BRANCHES)
        report = pipeline.run(["2020.1", "2030.1"])

        assert source.checked_out == ["origin/2020.1"]
        assert [r.version for r in report.succeeded] == ["2020.1"]
        assert sorted(r.version for r in report.filtered) == ["2019.10", "2019.4"]
        assert not (config.output_path / "2019.4").exists()


def test_tool_failure_skips_version_and_continues():
    with tempfile.TemporaryDirectory() as tmpdir:
        config, source, pipeline = _setup(tmpdir, BRANCHES, failing={"origin/2019.10"})
        report = pipeline.run()

        assert [r.version for r in report.skipped] == ["2019.10"]
        assert "exited with code 1" in report.skipped[0].reason
        assert not (config.output_path / "2019.10" / "xrefmap.yml").exists()
        assert [r.version for r in report.succeeded] == ["2019.4", "2020.1"]
        assert source.checked_out[-1] == "origin/2020.1"


def test_malformed_metadata_fails_version_only():
    with tempfile.TemporaryDirectory() as tmpdir:
        config, _, pipeline = _setup(tmpdir, BRANCHES, malformed={"origin/2019.4"})
        report = pipeline.run()

        assert [r.version for r in report.failed] == ["2019.4"]
        assert "Broken.yml" in report.failed[0].reason
        assert not (config.output_path / "2019.4" / "xrefmap.yml").exists()
        assert [r.version for r in report.succeeded] == ["2019.10", "2020.1"]


def test_missing_tool_aborts_before_any_version():
    with tempfile.TemporaryDirectory() as tmpdir:
        config, source, pipeline = _setup(tmpdir, BRANCHES, available=False)
        with pytest.raises(SetupError):
            pipeline.run()
        assert source.checked_out == []
        assert not config.output_path.exists()


def test_index_page_lists_generated_maps():
    with tempfile.TemporaryDirectory() as tmpdir:
        config, _, pipeline = _setup(tmpdir, BRANCHES, failing={"origin/2020.1"})
        report = pipeline.run()

        assert report.index_path == config.output_path / "index.html"
        html = report.index_path.read_text()
        assert "2019.4/xrefmap.yml" in html
        assert "2019.10/xrefmap.yml" in html
        assert "2020.1/xrefmap.yml" not in html


def test_no_index_when_nothing_succeeded():
    with tempfile.TemporaryDirectory() as tmpdir:
        config, _, pipeline = _setup(tmpdir, ["origin/2019.4"], failing={"origin/2019.4"})
        report = pipeline.run()
        assert report.index_path is None
        assert not (config.output_path / "index.html").exists()


def test_report_summary():
    with tempfile.TemporaryDirectory() as tmpdir:
        _, _, pipeline = _setup(tmpdir, BRANCHES, failing={"origin/2019.4"})
        report = pipeline.run(["2019.4", "2020.1"])
        assert report.summary() == "1 succeeded, 1 skipped, 0 failed, 1 not selected"


def test_rerun_is_byte_identical():
    with tempfile.TemporaryDirectory() as tmpdir:
        config, _, pipeline = _setup(tmpdir, ["origin/2021.3"])
        pipeline.run()
        first = (config.output_path / "2021.3" / "xrefmap.yml").read_bytes()
        pipeline.run()
        second = (config.output_path / "2021.3" / "xrefmap.yml").read_bytes()
        assert first == second


def test_checkout_failure_fails_version_and_continues():
    with tempfile.TemporaryDirectory() as tmpdir:
        config, source, pipeline = _setup(tmpdir, BRANCHES, unreachable={"origin/2019.10"})
        report = pipeline.run()

        assert [r.version for r in report.failed] == ["2019.10"]
        assert "origin/2019.10" in report.failed[0].reason
        assert not (config.output_path / "2019.10").exists()
        assert [r.version for r in report.succeeded] == ["2019.4", "2020.1"]
        assert source.checked_out == ["origin/2019.4", "origin/2020.1"]
        assert "2020.1/xrefmap.yml" in report.index_path.read_text()
