"""
main.py — Command-line Entry Point

Runs the bundled demos. Without an argument every demo runs in turn;
with one argument only the named demo runs.

Responsibilities:
    • Configure logging for the process
    • Dispatch to the selected demo
    • Report failures without changing the exit code
"""

from typing import Callable, Dict, Optional

import typer

from demos import concurrency, dataprocessing, ecommerce, fundamentals, patterns, webscraper
from .logging_config import get_logger, setup_logging

log = get_logger(__name__)

DEMOS: Dict[str, Callable[[], None]] = {
    "fundamentals": fundamentals.main,
    "patterns": patterns.main,
    "concurrency": concurrency.main,
    "dataprocessing": dataprocessing.main,
    "webscraper": webscraper.main,
    "ecommerce": ecommerce.main,
}

app = typer.Typer(
    name="order-demos",
    help="Order workflow and programming paradigm demos",
    add_completion=False,
)


def run_demo(name: str) -> bool:
    """
    Runs a single demo. Any failure is logged and reported as False.
    """
    try:
        DEMOS[name]()
        return True
    except Exception as e:
        log.critical(f"Demo '{name}' failed: {e}", exc_info=True)
        typer.echo(f"Demo '{name}' failed: {e}", err=True)
        return False


@app.command()
def run(
        example: Optional[str] = typer.Argument(
            None, help=f"Demo to run: {', '.join(DEMOS)}. Runs all when omitted."
        ),
        verbose: bool = typer.Option(False, "--verbose", "-v", help="Enable debug logging"),
):
    """Run one demo, or all of them."""
    setup_logging(level="DEBUG" if verbose else None)

    if example is None:
        for name in DEMOS:
            typer.echo(f"\n=== Running {name} example ===")
            run_demo(name)
        return

    name = example.lower()
    if name not in DEMOS:
        typer.echo(f"Unknown example. Available options: {', '.join(DEMOS)}")
        return
    run_demo(name)


def main():
    app()


if __name__ == "__main__":
    main()
