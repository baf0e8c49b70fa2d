"""Main entry point for the codefixer application.

Sets up the Typer CLI application, performs dependency injection (Composition
Root), defines CLI commands, and delegates execution to the CommandHandler.
"""

import asyncio
import logging
from pathlib import Path
from typing import Any, Coroutine, Dict, List, Optional, TypeVar

import typer
from typing_extensions import Annotated

from codefixer.core.command_handler import CommandHandler
from codefixer.core.services.collector_service import CollectorService
from codefixer.core.services.correction_service import CorrectionService
from codefixer.core.services.updater_service import UpdaterService
from codefixer.domain.errors import CodeFixerError, InvalidArgumentError
from codefixer.infrastructure.ai.ollama.ollama_client import OllamaClient
from codefixer.infrastructure.cli.display import ConsoleDisplay
from codefixer.infrastructure.config.settings import (
    get_api_url,
    get_config,
    get_default_model,
    get_excluded_folders,
    get_extensions,
    get_max_chars,
    get_timeout_minutes,
    load_configuration,
)
from codefixer.infrastructure.filesystem.local_fs import LocalFileSystem
from codefixer.infrastructure.monitoring.logger_setup import resolve_log_level, setup_logging

logger = logging.getLogger(__name__)

T = TypeVar("T")

# --- Dependency Injection Container (Manual) ---

def create_dependencies(
    model: Optional[str] = None,
    api_url: Optional[str] = None,
    timeout_minutes: Optional[float] = None,
    max_chars: Optional[int] = None,
) -> Dict[str, Any]:
    """Creates and wires up all dependencies for one command.

    This acts as the Composition Root. Explicit arguments (CLI flags) win
    over configured values.
    """
    dependencies: Dict[str, Any] = {}
    dependencies['ui'] = ConsoleDisplay()
    dependencies['file_system'] = LocalFileSystem()
    dependencies['ai_model'] = OllamaClient(
        model=model or get_default_model(),
        api_url=api_url or get_api_url(),
        timeout_minutes=timeout_minutes if timeout_minutes is not None else get_timeout_minutes(),
    )
    dependencies['collector_service'] = CollectorService(
        file_system=dependencies['file_system'],
        ui=dependencies['ui'],
    )
    dependencies['correction_service'] = CorrectionService(
        ai_model=dependencies['ai_model'],
        file_system=dependencies['file_system'],
        ui=dependencies['ui'],
        max_chars=max_chars if max_chars is not None else get_max_chars(),
    )
    dependencies['updater_service'] = UpdaterService(
        file_system=dependencies['file_system'],
        ui=dependencies['ui'],
    )
    dependencies['command_handler'] = CommandHandler(
        collector_service=dependencies['collector_service'],
        correction_service=dependencies['correction_service'],
        updater_service=dependencies['updater_service'],
        ai_model=dependencies['ai_model'],
        ui=dependencies['ui'],
    )
    logger.debug("All dependencies initialized successfully.")
    return dependencies


# --- Typer App Definition ---
app = typer.Typer(
    name="codefixer",
    help="Review source files with a local Ollama model and apply its corrections.",
    add_completion=False,
)


# --- Helper for Running Async Commands ---
def run_async(dependencies: Dict[str, Any], coro: Coroutine[Any, Any, T]) -> T:
    """Runs a handler coroutine and closes the HTTP client afterwards."""

    async def _run() -> T:
        try:
            return await coro
        finally:
            await dependencies['ai_model'].close()

    try:
        return asyncio.run(_run())
    except InvalidArgumentError as e:
        dependencies['ui'].display_error(str(e))
        raise typer.Exit(code=2)
    except CodeFixerError as e:
        logger.error(f"Command failed: {e}", exc_info=True)
        dependencies['ui'].display_error(f"Command failed: {e}")
        raise typer.Exit(code=1)


def normalize_extensions(extensions: List[str]) -> List[str]:
    """Adds the leading dot users tend to leave out ('cs' -> '.cs')."""
    return [ext if ext.startswith(".") else f".{ext}" for ext in extensions]


# --- CLI Commands ---

ExtensionOption = Annotated[
    Optional[List[str]],
    typer.Option("--ext", "-e", help="File extension to include (repeatable). Defaults to config (.cs)."),
]
ExcludeOption = Annotated[
    Optional[List[str]],
    typer.Option("--exclude", "-x", help="Folder name to skip (repeatable). Defaults to bin and obj."),
]
ApiUrlOption = Annotated[
    Optional[str],
    typer.Option("--api-url", help="Ollama generate endpoint URL."),
]
RootArgument = Annotated[
    Path,
    typer.Argument(exists=True, file_okay=False, dir_okay=True, resolve_path=True,
                   help="Directory to scan."),
]


@app.command()
def scan(
    root: RootArgument,
    ext: ExtensionOption = None,
    exclude: ExcludeOption = None,
):
    """List the files a 'fix' run would analyze."""
    dependencies = create_dependencies()
    handler: CommandHandler = dependencies['command_handler']
    run_async(dependencies, handler.handle_scan(
        str(root),
        normalize_extensions(ext or get_extensions()),
        exclude or get_excluded_folders(),
    ))


@app.command()
def fix(
    root: RootArgument,
    output: Annotated[Path, typer.Option("--output", "-o", file_okay=False, resolve_path=True,
                                         help="Directory receiving the corrected files.")],
    model: Annotated[Optional[str], typer.Option("--model", "-m", help="Ollama model name.")] = None,
    ext: ExtensionOption = None,
    exclude: ExcludeOption = None,
    api_url: ApiUrlOption = None,
    max_chars: Annotated[Optional[int], typer.Option("--max-chars", min=1,
                                                     help="Characters of each file sent to the model.")] = None,
    timeout: Annotated[Optional[float], typer.Option("--timeout", min=0.1,
                                                     help="Request timeout in minutes.")] = None,
    apply: Annotated[bool, typer.Option("--apply/--no-apply",
                                        help="Overwrite the original files with the corrections.")] = False,
):
    """Ask the model to review each file and write its corrections."""
    dependencies = create_dependencies(
        model=model, api_url=api_url, timeout_minutes=timeout, max_chars=max_chars
    )
    handler: CommandHandler = dependencies['command_handler']
    summary = run_async(dependencies, handler.handle_fix(
        str(root),
        str(output),
        normalize_extensions(ext or get_extensions()),
        exclude or get_excluded_folders(),
        apply=apply,
    ))
    if summary.has_failures:
        raise typer.Exit(code=1)


@app.command(name="list-models")
def list_models_command(api_url: ApiUrlOption = None):
    """List the models available on the Ollama server."""
    dependencies = create_dependencies(api_url=api_url)
    handler: CommandHandler = dependencies['command_handler']
    run_async(dependencies, handler.handle_list_models())


@app.callback()
def main_callback(
    verbose: Annotated[bool, typer.Option("--verbose", "-v", help="Enable debug logging.")] = False,
):
    """Loads configuration and logging before any command runs."""
    load_configuration()
    log_level = logging.DEBUG if verbose else resolve_log_level(get_config('logging.level'))
    setup_logging(
        log_level=log_level,
        log_file=get_config('logging.file'),
        log_format=get_config('logging.format'),
    )
    logger.debug("Configuration and logging initialized.")


# --- Main Execution Guard ---

def cli_entry_point():
    """Function called by the `codefixer` console script."""
    app()


if __name__ == "__main__":
    cli_entry_point()
