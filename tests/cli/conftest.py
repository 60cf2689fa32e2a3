"""Fixtures for CLI tests."""

import pytest
from click.testing import CliRunner


@pytest.fixture
def db_path(tmp_path):
    """Database file used by CLI invocations."""
    return tmp_path / "cli.db"


@pytest.fixture
def cli_runner(db_path):
    """Click CLI test runner bound to a temporary database."""

    class DocliteCliRunner(CliRunner):
        def invoke(self, args, **kwargs):  # type: ignore
            """Invoke the doclite CLI against the temporary database."""
            from doclite.cli.main import cli

            if isinstance(args, list):
                return super().invoke(cli, ["--db", str(db_path), *args], **kwargs)
            return super().invoke(args, **kwargs)

    return DocliteCliRunner()


@pytest.fixture
def populated(cli_runner):
    """Runner whose database holds three people."""
    result = cli_runner.invoke(
        [
            "insert",
            '{"name": "Paul", "age": 34}',
            '{"name": "Carol", "age": 41}',
            '{"name": "Zach", "age": 17}',
        ]
    )
    assert result.exit_code == 0
    return cli_runner
