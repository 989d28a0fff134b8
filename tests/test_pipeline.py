#!/usr/bin/env python3
"""
Test script for the full pipeline (Phase 6).
Runs all four stages against the mocked site and a temporary workspace.
"""

import asyncio
import json
import logging
import sys
import threading

import pytest

from config import Settings
from fakes import FakeSite, FakeSnapshotStore, default_pages, snapshot_document
from pipeline import PipelineDriver, build_parser, select_snapshot_store
from pipeline import main as pipeline_main
from snapshot_store import FileSnapshotStore, GitSnapshotStore, UrlSnapshotStore
from spec_emitter import artifact_names
from utils.errors import FetchError
from workspace import Workspace


@pytest.fixture
def settings(tmp_path):
    viewer = tmp_path / "viewer"
    viewer.mkdir()
    (viewer / "index.html").write_text("<html>viewer</html>")
    return Settings(root_dir=tmp_path / "project", viewer_dir=viewer)


def _run(settings, site, store):
    async def go():
        client = site.client()
        try:
            driver = PipelineDriver(settings, client=client, snapshot_store=store, version="test")
            return await driver.run()
        finally:
            await client.close()
    return asyncio.run(go())


def test_complete_run_writes_all_artifacts(settings):
    """Nothing missing: reconciliation skipped, 8 files plus the viewer."""
    store = FakeSnapshotStore(snapshot_document())
    report = _run(settings, FakeSite(), store)

    out = settings.root_dir / "out"
    print(f"   📁 Output: {sorted(p.name for p in out.iterdir())}")
    assert report.endpoints == 1
    assert report.regions == 3
    assert store.calls == 0
    assert len(report.written) == 8
    for name in artifact_names():
        assert (out / name).is_file()
    assert (out / "tool" / "index.html").read_text() == "<html>viewer</html>"

    oas = json.loads((out / "openapi-3.0.0.min.json").read_text())
    refs = json.dumps(oas)
    for schema_ref in ("match.MatchDto", "match.ParticipantDto"):
        assert schema_ref in oas["components"]["schemas"]
        assert f"#/components/schemas/{schema_ref}" in refs


def test_missing_dto_recovered_from_snapshot(settings):
    store = FakeSnapshotStore(snapshot_document())
    site = FakeSite(pages=default_pages(dtos=("ParticipantDto",)))
    report = _run(settings, site, store)

    assert store.calls == 1
    assert report.reconciliation.repaired == ["match.MatchDto"]
    oas = json.loads((settings.root_dir / "out" / "openapi-3.0.0.json").read_text())
    assert oas["components"]["schemas"]["match.MatchDto"]["description"] == "Match details (previous build)"


def test_snapshot_failure_still_completes(settings, caplog):
    """Reference not found: run completes with MatchDto absent."""
    caplog.set_level(logging.INFO)
    store = FakeSnapshotStore(error="fatal: invalid object name 'origin/gh-pages'")
    site = FakeSite(pages=default_pages(dtos=("ParticipantDto",)))
    report = _run(settings, site, store)

    failures = [r for r in caplog.records if "FAILED to get previous commit" in r.getMessage()]
    assert len(failures) == 1
    assert [g.full_name for g in report.reconciliation.gaps] == ["match.MatchDto"]
    assert len(report.written) == 8
    oas = json.loads((settings.root_dir / "out" / "openapi-3.0.0.json").read_text())
    assert "match.MatchDto" not in oas["components"]["schemas"]


def test_region_failure_aborts_run(settings):
    site = FakeSite(fail_times={"/regional-endpoints.html": 2})
    with pytest.raises(FetchError):
        _run(settings, site, FakeSnapshotStore())
    out = settings.root_dir / "out"
    assert not any(out.glob("*.json"))


def test_workspace_clears_stale_output_but_keeps_hidden(settings):
    out = settings.root_dir / "out"
    (out / "stale").mkdir(parents=True)
    (out / "stale" / "old.json").write_text("{}")
    (out / "openapi-3.0.0.json").write_text("{}")
    (out / ".git").mkdir()
    (out / ".nojekyll").write_text("")

    path = Workspace(settings.root_dir, "out", settings.viewer_dir).prepare()

    assert path == out
    assert sorted(p.name for p in out.iterdir()) == [".git", ".nojekyll", "tool"]


class _ThreadRecordingWorkspace(Workspace):
    def prepare(self):
        self.thread = threading.current_thread()
        return super().prepare()


def test_workspace_prepared_off_the_event_loop(settings):
    workspace = _ThreadRecordingWorkspace(settings.root_dir, "out", settings.viewer_dir)

    async def go():
        client = FakeSite().client()
        try:
            driver = PipelineDriver(settings, client=client, snapshot_store=FakeSnapshotStore(),
                                    workspace=workspace, version="test")
            return await driver.run()
        finally:
            await client.close()
    report = asyncio.run(go())

    assert workspace.thread is not threading.main_thread()
    assert len(report.written) == 8


def test_workspace_requires_viewer(tmp_path):
    with pytest.raises(FileNotFoundError):
        Workspace(tmp_path, "out", tmp_path / "no-viewer").prepare()


def test_snapshot_store_selection(settings, tmp_path):
    client = object()
    assert isinstance(select_snapshot_store(settings, client), GitSnapshotStore)
    url_settings = settings.model_copy(update={"snapshot_url": "https://example.test/openapi.json"})
    assert isinstance(select_snapshot_store(url_settings, client), UrlSnapshotStore)
    file_settings = url_settings.model_copy(update={"snapshot_file": tmp_path / "prev.json"})
    assert isinstance(select_snapshot_store(file_settings, client), FileSnapshotStore)


def test_settings_from_env(monkeypatch, tmp_path):
    monkeypatch.setenv("RIOT_SCHEMA_OUTPUT", "public")
    monkeypatch.setenv("RIOT_SCHEMA_TIMEOUT", "5")
    settings = Settings.from_env(root_dir=tmp_path)
    assert settings.output_dir == "public"
    assert settings.timeout == 5.0
    assert settings.root_dir == tmp_path

    monkeypatch.setenv("RIOT_SCHEMA_RETRIES", "lots")
    with pytest.raises(ValueError):
        Settings.from_env()


def test_cli_arguments():
    args = build_parser().parse_args(["--root", "/tmp/x", "--snapshot-ref", "origin/main:a.json", "-v"])
    assert str(args.root) == "/tmp/x"
    assert args.snapshot_ref == "origin/main:a.json"
    assert args.verbose


def test_main_returns_nonzero_on_failure(monkeypatch, tmp_path):
    """Missing viewer bundle: the run stops before any request is made."""
    monkeypatch.setenv("RIOT_SCHEMA_VIEWER_DIR", str(tmp_path / "no-viewer"))
    assert pipeline_main(["--root", str(tmp_path)]) == 1

    monkeypatch.setenv("RIOT_SCHEMA_RETRIES", "-1")
    assert pipeline_main(["--root", str(tmp_path)]) == 1


def main():
    """Run the tests without pytest's collector."""
    sys.exit(pytest.main([__file__, "-v"]))


if __name__ == "__main__":
    main()
