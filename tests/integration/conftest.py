"""
Fixtures for gcli integration tests.

These tests run the CLI in a subprocess against the real Google APIs using
the accounts in your normal gcli configuration. They are skipped when no
authenticated account is configured.

Environment variables:
    GCLI_TEST_ACCOUNT    Account to use (default: the default account)
    GCLI_TEST_RECIPIENT  Address that may receive test emails; tests that
                         send real email are skipped without it
"""

import json
import os
import subprocess
from typing import Any, Dict, List

import pytest

from gcli.sdk import accounts
from gcli.sdk.auth import token_exists
from gcli.sdk.exceptions import GCLIError

PROJECT_ROOT = os.path.dirname(os.path.dirname(os.path.dirname(os.path.abspath(__file__))))


@pytest.fixture(scope="session")
def test_account() -> str:
    """Name of an authenticated account to run against."""
    try:
        name, _ = accounts.get_account(os.getenv("GCLI_TEST_ACCOUNT"))
    except GCLIError as e:
        pytest.skip(f"No usable gcli account: {e}")
    if not token_exists(name):
        pytest.skip(f"Account '{name}' is not authenticated; run 'gcli auth reauth {name}'")
    return name


@pytest.fixture(scope="session")
def test_recipient() -> str:
    recipient = os.getenv("GCLI_TEST_RECIPIENT")
    if not recipient:
        pytest.skip("GCLI_TEST_RECIPIENT not set")
    return recipient


@pytest.fixture
def scheduled_file(tmp_path, monkeypatch):
    """Keep scheduled emails created by a test out of the real store."""
    path = tmp_path / "scheduled.json"
    monkeypatch.setenv("GCLI_SCHEDULED_FILE", str(path))
    return path


@pytest.fixture(scope="session")
def cli_runner():
    """
    Factory fixture that executes gcli commands via subprocess with --json.

    The returned function signature:
        cli_runner(command_args: List[str]) -> Dict[str, Any]

    Returns dict with:
        - returncode: int (0 for success)
        - stdout: str (raw output)
        - stderr: str (error output)
        - json: parsed JSON if stdout is valid JSON, None otherwise
    """
    def run_command(command_args: List[str]) -> Dict[str, Any]:
        try:
            result = subprocess.run(
                ["python3", "-m", "gcli.cli", "--json"] + command_args,
                capture_output=True,
                text=True,
                timeout=60,
                cwd=PROJECT_ROOT,
                env=os.environ.copy(),
            )
        except subprocess.TimeoutExpired:
            return {"returncode": 124, "stdout": "", "stderr": "Command timed out", "json": None}

        json_data = None
        if result.stdout.strip():
            try:
                json_data = json.loads(result.stdout)
            except json.JSONDecodeError:
                json_data = None

        return {
            "returncode": result.returncode,
            "stdout": result.stdout,
            "stderr": result.stderr,
            "json": json_data,
        }

    return run_command
