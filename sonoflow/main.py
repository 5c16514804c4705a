"""Main application entry point for SonoFlow."""

import json
import sys
import logging
from pathlib import Path
from typing import Optional

import click
from aiohttp import web
from rich.console import Console
from rich.panel import Panel
from rich.table import Table

from . import __version__
from .config import SonoFlowConfig
from .enhancement import PROCEDURE_SECTIONS
from .errors import SonoFlowError
from .services.enhancement_service import EnhancementService
from .web import create_app

logger = logging.getLogger(__name__)


def setup_logging(config: SonoFlowConfig, level: str = "INFO") -> None:
    """Set up logging configuration from YAML config."""
    log_file_path = config.get('logging.file_path', 'data/logs/sonoflow.log')
    console_output = config.get('logging.console_output', True)

    log_dir = Path(log_file_path).parent
    log_dir.mkdir(parents=True, exist_ok=True)

    handlers = []

    # File handler - always write to file
    file_handler = logging.FileHandler(log_file_path)
    file_handler.setLevel(logging.DEBUG)
    file_formatter = logging.Formatter(
        '%(asctime)s - %(name)s - %(levelname)s - %(funcName)s:%(lineno)d - %(message)s'
    )
    file_handler.setFormatter(file_formatter)
    handlers.append(file_handler)

    if console_output:
        console_handler = logging.StreamHandler(sys.stdout)
        console_handler.setLevel(getattr(logging, level.upper()))
        console_formatter = logging.Formatter('%(asctime)s - %(name)s - %(levelname)s - %(message)s')
        console_handler.setFormatter(console_formatter)
        handlers.append(console_handler)

    root_logger = logging.getLogger()
    root_logger.handlers.clear()
    root_logger.setLevel(getattr(logging, level.upper()))
    for handler in handlers:
        root_logger.addHandler(handler)

    logger.info("=" * 50)
    logger.info("SonoFlow starting up")
    logger.info(f"Log file: {log_file_path}")
    logger.info(f"Log level set to: {level}")
    logger.info("=" * 50)


def _load_config(config_path: Optional[str]) -> SonoFlowConfig:
    try:
        return SonoFlowConfig(config_path)
    except (FileNotFoundError, SonoFlowError) as e:
        raise click.ClickException(str(e))


@click.group()
@click.version_option(__version__, prog_name="SonoFlow")
def main() -> None:
    """SonoFlow - live clinical dictation with transcript enhancement."""


@main.command()
@click.option("--config", "config_path", type=click.Path(dir_okay=False), help="Path to configuration YAML file")
@click.option("--host", help="Interface to bind (overrides config)")
@click.option("--port", type=int, help="Port to listen on (overrides config)")
@click.option("--log-level",
              type=click.Choice(["DEBUG", "INFO", "WARNING", "ERROR"], case_sensitive=False),
              help="Set logging level (overrides config)")
def serve(config_path: Optional[str], host: Optional[str], port: Optional[int], log_level: Optional[str]) -> None:
    """Run the HTTP and WebSocket server."""
    config = _load_config(config_path)
    setup_logging(config, log_level or config.get('logging.level', 'INFO'))

    host = host or config.get('server.host', '0.0.0.0')
    port = port or config.get('server.port', 5000)

    app = create_app(config)
    logger.info(f"Serving on {host}:{port}")
    web.run_app(app, host=host, port=port, print=None)


def _render_result(console: Console, response: dict) -> None:
    console.print(Panel(response["enhanced_transcript"], title="Enhanced transcript", border_style="green"))

    if response["measurements"]:
        table = Table(title="Measurements")
        table.add_column("Measurement", style="cyan")
        table.add_column("Value", justify="right")
        for name, value in response["measurements"].items():
            table.add_row(name.replace('_', ' '), str(value))
        console.print(table)

    console.print(f"Section: {response['detected_section'] or '-'}")
    for suggestion in response["suggestions"]:
        console.print(suggestion)


@main.command()
@click.argument("text")
@click.option("--procedure", type=click.Choice(sorted(PROCEDURE_SECTIONS)), default="echocardiogram",
              show_default=True, help="Procedure type used for section classification")
@click.option("--language", default="en-US", show_default=True, help="Language tag of the transcript")
@click.option("--json", "as_json", is_flag=True, help="Print the raw JSON response")
def enhance(text: str, procedure: str, language: str, as_json: bool) -> None:
    """Enhance a dictated TEXT and print the annotated result."""
    service = EnhancementService()
    try:
        response = service.enhance({"transcript": text, "procedure_type": procedure, "language": language})
    except SonoFlowError as e:
        raise click.ClickException(e.message)

    if as_json:
        click.echo(json.dumps(response, ensure_ascii=False, indent=2))
    else:
        _render_result(Console(), response)


if __name__ == "__main__":
    main()
