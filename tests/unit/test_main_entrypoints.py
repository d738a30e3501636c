from __future__ import annotations

import logging
from pathlib import Path
from types import SimpleNamespace

import pytest
import typer
from fastapi.testclient import TestClient
from typer.testing import CliRunner

from telexform import main as main_mod
from telexform.features import OperationResult

runner = CliRunner()


@pytest.mark.unit
def test_feature_or_exit_unknown():
    with pytest.raises(typer.Exit):
        main_mod._feature_or_exit("does-not-exist")


@pytest.mark.unit
def test_handle_cli_result_failure_raises_exit():
    with pytest.raises(typer.Exit):
        main_mod._handle_cli_result("concat", OperationResult.fail("boom"))
    assert main_mod._handle_cli_result("concat", OperationResult.ok({"a": 1})) == {"a": 1}


@pytest.mark.unit
def test_version_command():
    result = runner.invoke(main_mod.app, ["version"])
    assert result.exit_code == 0
    assert "telexform version: " in result.stdout


@pytest.mark.unit
def test_concat_command_reads_context(context_file: Path):
    result = runner.invoke(
        main_mod.app,
        [
            "concat",
            "--context",
            str(context_file),
            "-d",
            "|",
            "/name",
            "/attributes/code",
            "/attributes/ok",
            "/attributes/tags",
            "/attributes/missing",
        ],
    )
    assert result.exit_code == 0, result.output
    assert result.stdout.strip() == "span|7|true||<nil>"


@pytest.mark.unit
def test_concat_command_resource_root(context_file: Path):
    result = runner.invoke(
        main_mod.app,
        ["concat", "--context", str(context_file), "--root", "resource", "/service.name"],
    )
    assert result.exit_code == 0, result.output
    assert result.stdout.strip() == "cart"


@pytest.mark.unit
def test_concat_command_literals_without_context():
    result = runner.invoke(main_mod.app, ["concat", "--literal", "-d", " ", "hello", "world"])
    assert result.exit_code == 0, result.output
    assert result.stdout.strip() == "hello world"


@pytest.mark.unit
def test_concat_command_failures(tmp_path: Path):
    missing = runner.invoke(main_mod.app, ["concat", "--context", str(tmp_path / "missing.json"), "/a"])
    assert missing.exit_code == 1

    broken = tmp_path / "broken.json"
    broken.write_text("{not json", encoding="utf-8")
    invalid = runner.invoke(main_mod.app, ["concat", "--context", str(broken), "/a"])
    assert invalid.exit_code == 1

    bad_root = runner.invoke(main_mod.app, ["concat", "--root", "span", "/a"])
    assert bad_root.exit_code == 1


@pytest.mark.unit
def test_list_functions_command():
    result = runner.invoke(main_mod.app, ["list-functions"])
    assert result.exit_code == 0
    assert "All available functions" in result.stdout
    assert "strings.Concat" in result.stdout
    assert "Available namespaces: strings" in result.stdout

    filtered = runner.invoke(main_mod.app, ["list-functions", "--namespace", "strings"])
    assert filtered.exit_code == 0
    assert "Functions in namespace 'strings'" in filtered.stdout

    unknown = runner.invoke(main_mod.app, ["list-functions", "--namespace", "nope"])
    assert unknown.exit_code == 1


@pytest.mark.unit
def test_serve_uses_environment(monkeypatch: pytest.MonkeyPatch):
    called: dict[str, object] = {}
    monkeypatch.setattr(
        main_mod.uvicorn,
        "run",
        lambda app, host, port: called.update({"app": app, "host": host, "port": port}),
    )
    monkeypatch.setenv("TELEXFORM_HOST", "0.0.0.0")
    monkeypatch.setenv("TELEXFORM_PORT", "9001")
    main_mod.serve(host=None, port=None, debug=False)
    assert called == {"app": main_mod.api_app, "host": "0.0.0.0", "port": 9001}

    main_mod.serve(host="127.0.0.1", port=8080, debug=False)
    assert called["host"] == "127.0.0.1"
    assert called["port"] == 8080


@pytest.mark.unit
def test_setup_logging_levels(monkeypatch: pytest.MonkeyPatch):
    monkeypatch.delenv("TELEXFORM_LOG_LEVEL", raising=False)
    main_mod.setup_logging(debug=True)
    assert logging.getLogger().level == logging.DEBUG
    main_mod.setup_logging(verbose=True)
    assert logging.getLogger().level == main_mod.VERBOSE_LEVEL

    monkeypatch.setenv("TELEXFORM_LOG_LEVEL", "warning")
    main_mod.setup_logging(debug=True)
    assert logging.getLogger().level == logging.WARNING

    monkeypatch.setenv("TELEXFORM_LOG_LEVEL", "verbose")
    main_mod.setup_logging()
    assert logging.getLogger().level == main_mod.VERBOSE_LEVEL

    monkeypatch.setenv("TELEXFORM_LOG_LEVEL", "not-a-level")
    main_mod.setup_logging()
    assert logging.getLogger().level == logging.INFO


@pytest.mark.unit
def test_api_endpoints():
    client = TestClient(main_mod.api_app)

    version = client.get("/api/v1/version")
    assert version.status_code == 200
    assert version.json()["success"] is True
    assert "version" in version.json()["data"]

    functions = client.get("/api/v1/functions", params={"namespace": "strings"})
    assert functions.status_code == 200
    assert "Concat" in functions.json()["data"]["functions"]

    concat = client.post(
        "/api/v1/concat",
        json={
            "delimiter": "-",
            "paths": ["/a", "/b"],
            "literals": [{"key": "value"}, 3.14159],
            "context": {"a": "hello", "b": None},
        },
    )
    assert concat.status_code == 200
    assert concat.json()["data"]["result"] == "hello-<nil>--3.14159"


@pytest.mark.unit
def test_api_failures(monkeypatch: pytest.MonkeyPatch):
    client = TestClient(main_mod.api_app)

    bad_root = client.post("/api/v1/concat", json={"paths": ["/a"], "root": "span"})
    assert bad_root.status_code == 400
    assert "Unknown context root" in bad_root.json()["detail"]

    def _broken_handler(**kwargs):
        raise RuntimeError("boom")

    class FakeRegistry:
        @staticmethod
        def get_feature(name: str):
            if name == "version":
                return SimpleNamespace(handler=_broken_handler)
            return None

    monkeypatch.setattr(main_mod, "FeatureRegistry", FakeRegistry)
    assert client.get("/api/v1/version").status_code == 500
    assert client.get("/api/v1/functions").status_code == 404
