"""
telexform Main module - CLI and HTTP API
"""

import json
import logging
import os
import time
from pathlib import Path
from typing import Any, Generic, List, Optional, TypeVar

import typer
import uvicorn
from fastapi import FastAPI, HTTPException, status
from fastapi.routing import APIRouter
from pydantic import BaseModel

from telexform.context import CONTEXT_ROOTS
from telexform.features import Feature, FeatureRegistry, OperationResult
from telexform.version import get_version

# Type variables for generic response handling
T = TypeVar("T")

# Module-level logger
logger = logging.getLogger("telexform.main")

DEFAULT_HOST = "127.0.0.1"
DEFAULT_PORT = 8000


class SuccessResponse(BaseModel, Generic[T]):
    """Standard success response model"""

    success: bool = True
    data: Optional[T] = None


class ConcatRequest(BaseModel):
    delimiter: str = ""
    paths: List[str] = []
    literals: List[Any] = []
    context: Any = None
    root: str = "item"


# Create CLI app with Typer
app = typer.Typer(
    name="telexform",
    help="telexform - evaluate transformation-language functions over telemetry records",
    add_completion=False,
)

# Create FastAPI app for API server
api_app = FastAPI(
    title="telexform API",
    description="API for evaluating transformation-language functions",
    version=get_version(),
)

# API router for versioned endpoints
api_router = APIRouter(prefix="/api/v1")


# ----------------- Helper Functions -----------------


class ElapsedMsFormatter(logging.Formatter):
    """Formatter that shows milliseconds since program start, right-aligned for up to 9999 seconds."""
    def __init__(self, fmt=None, datefmt=None, *args, **kwargs):
        super().__init__(fmt, datefmt, *args, **kwargs)
        self.start_time = time.monotonic()
        self.width = 8

    def format(self, record):
        elapsed_ms = int((time.monotonic() - self.start_time) * 1000)
        if elapsed_ms < 10**7:
            elapsed = f"[{elapsed_ms:>{self.width}}ms]"
        else:
            elapsed = f"[{elapsed_ms}ms]"
        record.elapsed = elapsed
        return super().format(record)


VERBOSE_LEVEL = 15  # Between INFO (20) and DEBUG (10)
logging.addLevelName(VERBOSE_LEVEL, "VERBOSE")


def _level_from_env() -> Optional[int]:
    name = os.environ.get("TELEXFORM_LOG_LEVEL", "").strip().upper()
    if not name:
        return None
    if name == "VERBOSE":
        return VERBOSE_LEVEL
    level = logging.getLevelName(name)
    if isinstance(level, int):
        return level
    return None


def setup_logging(debug: bool = False, verbose: bool = False) -> None:
    """Set up logging configuration

    TELEXFORM_LOG_LEVEL, when set to a known level name, wins over the flags.
    """
    if debug:
        log_level = logging.DEBUG
    elif verbose:
        log_level = VERBOSE_LEVEL
    else:
        log_level = logging.INFO
    env_level = _level_from_env()
    if env_level is not None:
        log_level = env_level
    formatter = ElapsedMsFormatter('%(elapsed)s %(message)s')
    handler = logging.StreamHandler()
    handler.setFormatter(formatter)
    root = logging.getLogger()
    root.handlers = []  # Remove any existing handlers
    root.addHandler(handler)
    root.setLevel(log_level)
    for noisy in ("uvicorn.access", "asyncio"):
        logging.getLogger(noisy).setLevel(logging.DEBUG if debug else logging.WARNING)


def _feature_or_exit(feature_name: str) -> Feature:
    feature = FeatureRegistry.get_feature(feature_name)
    if not feature:
        logger.error("Unknown feature: %s", feature_name)
        raise typer.Exit(code=1)
    return feature


def _handle_cli_result(feature_name: str, result: OperationResult) -> Any:
    if not result.success:
        logger.error("%s failed: %s", feature_name, result.error or "Unknown error")
        raise typer.Exit(code=1)
    return result.data


def _load_context_document(context_file: Optional[Path]) -> Any:
    if context_file is None:
        return None
    try:
        with open(context_file, "r", encoding="utf-8") as f:
            return json.load(f)
    except FileNotFoundError:
        logger.error("File not found: %s", context_file)
        raise typer.Exit(code=1)
    except json.JSONDecodeError as e:
        logger.error("Invalid JSON in %s: %s", context_file, e)
        raise typer.Exit(code=1)


# ----------------- CLI Commands -----------------


@app.command()
def version() -> None:
    """Show the telexform version"""
    setup_logging(False)
    data = _handle_cli_result("version", _feature_or_exit("version").handler())
    typer.echo(f"telexform version: {data.get('version', 'unknown')}")


@app.command()
def concat(
    values: List[str] = typer.Argument(None, help="Context paths (or literal strings with --literal)"),
    delimiter: str = typer.Option("", "--delimiter", "-d", help="Text placed between values"),
    context_file: Optional[Path] = typer.Option(None, "--context", "-c", help="JSON context document"),
    root: str = typer.Option("item", help=f"Context root for paths ({', '.join(CONTEXT_ROOTS)})"),
    literal: bool = typer.Option(False, "--literal", help="Treat VALUES as literal strings"),
    debug: bool = typer.Option(False, "--debug", help="Enable debug mode"),
    verbose: bool = typer.Option(False, "--verbose", help="Enable verbose logging (between info and debug)"),
) -> None:
    """Evaluate Concat over values read from a JSON context"""
    setup_logging(debug, verbose)
    document = _load_context_document(context_file)
    values = list(values or [])

    kwargs: dict[str, Any] = {"delimiter": delimiter, "context": document, "root": root}
    if literal:
        kwargs["literals"] = values
    else:
        kwargs["paths"] = values

    data = _handle_cli_result("concat", _feature_or_exit("concat").handler(**kwargs))
    logger.log(VERBOSE_LEVEL, "Evaluated %d getters", data.get("getters", 0))
    typer.echo(data["result"])


@app.command("list-functions")
def list_functions(
    namespace: Optional[str] = typer.Option(None, "--namespace", "-n", help="Namespace to filter functions"),
) -> None:
    """List available functions"""
    setup_logging(False)
    data = _handle_cli_result(
        "list_functions", _feature_or_exit("list_functions").handler(namespace=namespace)
    )

    if data.get("namespace_filter"):
        typer.echo(f"Functions in namespace '{data['namespace_filter']}':")
    else:
        typer.echo("All available functions:")

    functions = data.get("functions", {})
    if not functions:
        typer.echo("  No functions found.")
    for name, description in sorted(functions.items()):
        typer.echo(f"  {name:<30} {description}")

    if not data.get("namespace_filter"):
        namespaces = data.get("namespaces", [])
        if namespaces:
            typer.echo(f"\nAvailable namespaces: {', '.join(sorted(namespaces))}")


@app.command()
def serve(
    host: Optional[str] = typer.Option(None, help="Host to bind the API server [env: TELEXFORM_HOST]"),
    port: Optional[int] = typer.Option(None, help="Port to bind the API server [env: TELEXFORM_PORT]"),
    debug: bool = typer.Option(False, "--debug", help="Enable debug mode"),
):
    """Start the telexform API server"""
    setup_logging(debug)
    host = host or os.environ.get("TELEXFORM_HOST", DEFAULT_HOST)
    port = port or int(os.environ.get("TELEXFORM_PORT", DEFAULT_PORT))

    logger.info(f"Starting telexform API server version {get_version()} on {host}:{port}")
    logger.info(f"API documentation available at http://{host}:{port}/docs")
    uvicorn.run(api_app, host=host, port=port)


# ----------------- API Endpoints -----------------


def _run_api_feature(feature_name: str, **kwargs: Any) -> Any:
    try:
        feature = FeatureRegistry.get_feature(feature_name)
        if not feature:
            raise HTTPException(
                status_code=status.HTTP_404_NOT_FOUND,
                detail=f"{feature_name} feature not found",
            )
        result = feature.handler(**kwargs)
        if not result.success:
            raise HTTPException(
                status_code=status.HTTP_400_BAD_REQUEST,
                detail=result.error or "An error occurred",
            )
        return SuccessResponse[Any](data=result.data)
    except HTTPException:
        raise
    except Exception as e:
        logger.error("Error in %s endpoint: %s", feature_name, str(e), exc_info=True)
        raise HTTPException(
            status_code=status.HTTP_500_INTERNAL_SERVER_ERROR,
            detail="Internal server error",
        ) from e


@api_router.get("/version")
async def get_version_endpoint():
    """Get telexform version"""
    return _run_api_feature("version")


@api_router.get("/functions")
async def list_functions_endpoint(namespace: Optional[str] = None):
    """List available functions"""
    return _run_api_feature("list_functions", namespace=namespace)


@api_router.post("/concat")
async def concat_endpoint(request: ConcatRequest):
    """Evaluate Concat over the request's context"""
    return _run_api_feature("concat", **request.model_dump())


# Include the router in the FastAPI app
api_app.include_router(api_router)


if __name__ == "__main__":
    app()
