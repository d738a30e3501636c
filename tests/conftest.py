"""Shared pytest fixtures for telexform tests."""

from __future__ import annotations

from pathlib import Path
import logging
import sys

import pytest


REPO_ROOT = Path(__file__).resolve().parents[1]
if str(REPO_ROOT) not in sys.path:
    sys.path.insert(0, str(REPO_ROOT))


def pytest_configure(config: pytest.Config) -> None:
    config.addinivalue_line("markers", "unit: fast, isolated tests")


@pytest.fixture
def transform_context():
    from telexform.context import TransformContext

    return TransformContext(
        item={
            "name": "GET /users",
            "attributes": {
                "http.method": "GET",
                "http.status_code": 200,
                "retry": False,
                "peer/addr": "10.0.0.1",
                "tags": ["a", "b"],
            },
            "span_id": bytes.fromhex("0ed2e63cbe71f5a8"),
            "duration": 1.25,
        },
        resource={"service.name": "checkout"},
        instrumentation_scope={"name": "otel-python", "version": "1.2.0"},
    )


@pytest.fixture
def function_registry():
    from telexform.functions.registry import FunctionRegistry

    return FunctionRegistry()


@pytest.fixture
def context_file(tmp_path: Path) -> Path:
    path = tmp_path / "context.json"
    path.write_text(
        '{"item": {"name": "span", "attributes": {"code": 7, "ok": true, "tags": [1, 2]}},'
        ' "resource": {"service.name": "cart"}}',
        encoding="utf-8",
    )
    return path


@pytest.fixture(autouse=True)
def _restore_root_logging():
    root = logging.getLogger()
    handlers = list(root.handlers)
    level = root.level
    yield
    root.handlers = handlers
    root.setLevel(level)


def pytest_make_parametrize_id(config, val, argname):
    # Huge ints exceed Python's int->str digit limit during test-ID generation.
    if isinstance(val, int) and not isinstance(val, bool) and val.bit_length() > 4000:
        return f"{argname}-bigint{val.bit_length()}bits"
    return None
