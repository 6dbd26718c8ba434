"""
Unit tests for the auth and config CLI commands.
"""

import json

import pytest
from click.testing import CliRunner

from gcli.cli.__main__ import gcli
from gcli.sdk import accounts
from gcli.sdk import auth as sdk_auth
from gcli.sdk.exceptions import AuthError


@pytest.fixture
def runner():
    return CliRunner()


def invoke(runner, *args, **kwargs):
    return runner.invoke(gcli, list(args), obj={}, **kwargs)


class TestAuthAdd:

    def test_add_and_authenticate(self, runner, monkeypatch):
        authenticated = []
        monkeypatch.setattr(sdk_auth, "authenticate_account",
                            lambda name, account: authenticated.append((name, account["client_id"])))

        result = invoke(runner, "auth", "add", "work", "--client-id", "cid", "--client-secret", "secret")

        assert result.exit_code == 0, result.output
        assert authenticated == [("work", "cid")]
        assert accounts.get_default_account_name() == "work"

    def test_prompts_for_missing_credentials(self, runner, monkeypatch):
        monkeypatch.setattr(sdk_auth, "authenticate_account", lambda name, account: None)

        result = invoke(runner, "auth", "add", "work", input="cid\nsecret\n")

        assert result.exit_code == 0, result.output
        _, account = accounts.get_account("work")
        assert account["client_id"] == "cid"
        assert account["client_secret"] == "secret"

    def test_failed_flow_removes_account(self, runner, monkeypatch):
        def failing(name, account):
            raise AuthError("failed to complete OAuth flow: cancelled")

        monkeypatch.setattr(sdk_auth, "authenticate_account", failing)

        result = invoke(runner, "auth", "add", "work", "--client-id", "cid", "--client-secret", "secret")

        assert result.exit_code == 1
        assert "authentication failed" in result.output
        assert accounts.get_all_account_names() == []

    def test_existing_account(self, runner, two_accounts):
        result = invoke(runner, "auth", "add", "work", "--client-id", "cid", "--client-secret", "secret")
        assert result.exit_code == 1
        assert "already exists" in result.output

    def test_invalid_name(self, runner, monkeypatch):
        monkeypatch.setattr(sdk_auth, "authenticate_account", lambda name, account: None)
        result = invoke(runner, "auth", "add", "bad name!", "--client-id", "cid", "--client-secret", "secret")
        assert result.exit_code == 1
        assert "invalid account name" in result.output


class TestAuthManage:

    def test_list_json(self, runner, two_accounts):
        result = invoke(runner, "--json", "auth", "list")

        assert result.exit_code == 0, result.output
        data = json.loads(result.output)
        assert [a["name"] for a in data] == ["personal", "work"]
        assert [a["is_default"] for a in data] == [False, True]
        assert all(a["has_token"] is False for a in data)

    def test_default(self, runner, two_accounts):
        result = invoke(runner, "auth", "default", "personal")
        assert result.exit_code == 0
        assert accounts.get_default_account_name() == "personal"

    def test_default_unknown(self, runner, two_accounts):
        result = invoke(runner, "auth", "default", "nosuch")
        assert result.exit_code == 1
        assert "does not exist" in result.output

    def test_remove_moves_default(self, runner, two_accounts):
        result = invoke(runner, "auth", "remove", "work")
        assert result.exit_code == 0
        assert accounts.get_all_account_names() == ["personal"]
        assert accounts.get_default_account_name() == "personal"


class TestConfig:

    def test_show_json_hides_secrets(self, runner, two_accounts):
        result = invoke(runner, "--json", "config", "show")

        assert result.exit_code == 0, result.output
        data = json.loads(result.output)
        assert data["default_account"] == "work"
        assert data["accounts"]["work"]["client_secret"] == "****"
        assert data["accounts"]["work"]["client_id"] == "work-client-id"
        assert "work-secret" not in result.output

    def test_show_without_accounts(self, runner):
        result = invoke(runner, "config", "show")
        assert result.exit_code == 0
        assert "No accounts configured." in result.output

    def test_set_calendar_id(self, runner, two_accounts):
        result = invoke(runner, "config", "set", "work.calendar-id", "team@example.com")

        assert result.exit_code == 0, result.output
        _, account = accounts.get_account("work")
        assert account["calendar_id"] == "team@example.com"

    def test_set_default_account(self, runner, two_accounts):
        result = invoke(runner, "config", "set", "default-account", "personal")
        assert result.exit_code == 0
        assert accounts.get_default_account_name() == "personal"

    @pytest.mark.parametrize("key", ["colour", "work.colour"])
    def test_set_unknown_key(self, runner, two_accounts, key):
        result = invoke(runner, "config", "set", key, "blue")
        assert result.exit_code == 1
        assert "unknown" in result.output

    def test_path(self, runner, config_dir):
        result = invoke(runner, "config", "path")
        assert result.output.strip() == str(config_dir / "config.yaml")


def test_version(runner):
    result = invoke(runner, "--version")
    assert result.exit_code == 0
    assert "gcli" in result.output
