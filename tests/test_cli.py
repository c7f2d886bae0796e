"""Tests for the command-line demo runner."""

import pytest
from typer.testing import CliRunner

from order_service import main as cli

runner = CliRunner()


@pytest.fixture
def calls(monkeypatch):
    """Replaces every demo with a recorder."""
    seen = []
    for name in cli.DEMOS:
        monkeypatch.setitem(cli.DEMOS, name, lambda name=name: seen.append(name))
    return seen


class TestCli:

    def test_runs_selected_demo(self, calls):
        result = runner.invoke(cli.app, ["patterns"])

        assert result.exit_code == 0
        assert calls == ["patterns"]

    def test_runs_all_demos_in_order(self, calls):
        result = runner.invoke(cli.app, [])

        assert result.exit_code == 0
        assert calls == ["fundamentals", "patterns", "concurrency",
                         "dataprocessing", "webscraper", "ecommerce"]

    def test_unknown_demo_lists_options(self, calls):
        result = runner.invoke(cli.app, ["nope"])

        assert result.exit_code == 0
        assert "Available options: fundamentals, patterns" in result.output
        assert calls == []

    def test_failing_demo_still_exits_zero(self, monkeypatch):
        def broken():
            raise RuntimeError("kaputt")

        monkeypatch.setitem(cli.DEMOS, "ecommerce", broken)

        result = runner.invoke(cli.app, ["ecommerce"])

        assert result.exit_code == 0

    def test_ecommerce_demo_end_to_end(self):
        result = runner.invoke(cli.app, ["ecommerce"])

        assert result.exit_code == 0
        assert "Order Total: CHF 1299.97" in result.output
        assert "Order status: PAID" in result.output
        assert "Demo completed successfully!" in result.output

    @pytest.mark.parametrize("name", ["fundamentals", "patterns", "dataprocessing"])
    def test_offline_demos_run(self, name):
        result = runner.invoke(cli.app, [name])

        assert result.exit_code == 0
        assert "failed" not in result.output
