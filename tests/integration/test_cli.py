"""
CLI integration tests using Click's test runner.

Commands run end-to-end against the in-memory API node from conftest:
the bootstrap's API client is patched to use the mock transport, and the
``.env`` lookup is disabled so only the patched environment is read.
"""

from __future__ import annotations

import os
from typing import Iterator
from unittest.mock import patch

import httpx
import pytest
from click.testing import CliRunner

from dropskit.chain.chains import Chains
from dropskit.chain.rpc import APIClient
from dropskit.cli import VERSION, cli
from dropskit.context import ClientContext

from conftest import DEV_PRIVATE_KEY, DEV_PUBLIC_KEY, FakeChain

ENV = {
    "ACCOUNT_NAME": "alice",
    "PERMISSION_LEVEL": "active",
    "PRIVATE_KEY": DEV_PRIVATE_KEY,
}

SEED = "d" * 40


@pytest.fixture()
def runner() -> CliRunner:
    return CliRunner()


@pytest.fixture()
def chain_env(transport: httpx.MockTransport) -> Iterator[None]:
    """Configured identity talking to the fake API node."""
    with patch.dict(os.environ, ENV, clear=True), \
            patch("dropskit.commands.load_env_file"), \
            patch("dropskit.context.APIClient", lambda url: APIClient(url, transport=transport)):
        yield


class TestVersionAndHelp:
    """Test commands that need no configuration."""

    def test_version(self, runner: CliRunner) -> None:
        result = runner.invoke(cli, ["--version"])
        assert result.exit_code == 0
        assert VERSION in result.output

    def test_help_lists_commands(self, runner: CliRunner) -> None:
        result = runner.invoke(cli, [])
        assert result.exit_code == 0
        for command in ("whoami", "balance", "generate", "transfer", "destroy", "epoch", "enroll"):
            assert command in result.output


class TestConfiguration:
    """Missing configuration fails fast with the variable named."""

    @pytest.mark.parametrize("variable", ["ACCOUNT_NAME", "PERMISSION_LEVEL", "PRIVATE_KEY"])
    def test_missing_variable(self, runner: CliRunner, variable: str) -> None:
        env = {k: v for k, v in ENV.items() if k != variable}
        with patch.dict(os.environ, env, clear=True), patch("dropskit.commands.load_env_file"):
            result = runner.invoke(cli, ["whoami"])

        assert result.exit_code == 1
        assert f"{variable} value must be provided" in result.output

    def test_invalid_private_key(self, runner: CliRunner) -> None:
        env = {**ENV, "PRIVATE_KEY": "PVT_K1_notakey"}
        with patch.dict(os.environ, env, clear=True), patch("dropskit.commands.load_env_file"):
            result = runner.invoke(cli, ["whoami"])

        assert result.exit_code == 1
        assert "ERROR:" in result.output


class TestWhoami:
    """Test identity display."""

    def test_whoami(self, runner: CliRunner, chain_env: None) -> None:
        result = runner.invoke(cli, ["whoami"])

        assert result.exit_code == 0
        assert "alice@active" in result.output
        assert DEV_PUBLIC_KEY in result.output
        assert "https://jungle4.greymass.com" in result.output
        assert Chains.Jungle4.id in result.output

    def test_endpoint_override(self, runner: CliRunner, chain_env: None) -> None:
        with patch.dict(os.environ, {"API_ENDPOINT": "http://localhost:8888"}):
            result = runner.invoke(cli, ["whoami"])

        assert result.exit_code == 0
        assert "http://localhost:8888" in result.output


class TestContextLifecycle:
    def test_context_closed_after_command(self, runner: CliRunner, chain_env: None) -> None:
        with patch.object(ClientContext, "close") as close:
            result = runner.invoke(cli, ["info"])

        assert result.exit_code == 0, result.output
        close.assert_called_once_with()

    def test_context_closed_after_failure(self, runner: CliRunner, chain_env: None, fake_chain: FakeChain) -> None:
        fake_chain.error = (500, {"code": 500, "message": "Internal Service Error", "error": {"what": "boom"}})
        with patch.object(ClientContext, "close") as close:
            result = runner.invoke(cli, ["destroy", "1"])

        assert result.exit_code == 1
        close.assert_called_once_with()


class TestInfo:
    def test_info(self, runner: CliRunner, chain_env: None) -> None:
        result = runner.invoke(cli, ["info"])

        assert result.exit_code == 0
        assert Chains.Jungle4.id in result.output
        assert "WARNING" not in result.output

    def test_info_other_chain(self, runner: CliRunner, chain_env: None, fake_chain: FakeChain) -> None:
        fake_chain.info["chain_id"] = Chains.EOS.id
        result = runner.invoke(cli, ["info"])

        assert result.exit_code == 0
        assert "WARNING" in result.output


class TestDropsCommands:
    def test_balance(self, runner: CliRunner, chain_env: None, fake_chain: FakeChain) -> None:
        fake_chain.add_rows("drops", "accounts", "account", {"account": "alice", "drops": 3})

        result = runner.invoke(cli, ["balance"])

        assert result.exit_code == 0
        assert "alice" in result.output
        assert "3" in result.output

    def test_generate_dry_run(self, runner: CliRunner, chain_env: None, fake_chain: FakeChain) -> None:
        result = runner.invoke(cli, ["generate", "2", SEED, "--quantity", "1.0000 EOS", "--dry-run"])

        assert result.exit_code == 0, result.output
        assert "not broadcast" in result.output
        assert "SIG_K1_" in result.output
        assert fake_chain.pushed == []

    def test_generate_broadcast(self, runner: CliRunner, chain_env: None, fake_chain: FakeChain) -> None:
        result = runner.invoke(cli, ["generate", "1", SEED, "--quantity", "1.0000 EOS"])

        assert result.exit_code == 0, result.output
        assert "SUCCESS" in result.output
        assert len(fake_chain.pushed) == 1

    def test_generate_invalid_data(self, runner: CliRunner, chain_env: None, fake_chain: FakeChain) -> None:
        result = runner.invoke(cli, ["generate", "1", "short", "--quantity", "1.0000 EOS"])

        assert result.exit_code == 1
        assert "more than 32 characters" in result.output
        assert fake_chain.pushed == []

    def test_transfer(self, runner: CliRunner, chain_env: None, fake_chain: FakeChain) -> None:
        result = runner.invoke(cli, ["transfer", "bob", "1", "2", "--memo", "hi"])

        assert result.exit_code == 0, result.output
        assert len(fake_chain.pushed) == 1

    def test_chain_rejection(self, runner: CliRunner, chain_env: None, fake_chain: FakeChain) -> None:
        fake_chain.error = (500, {"code": 500, "message": "Internal Service Error", "error": {"what": "boom"}})

        result = runner.invoke(cli, ["destroy", "1"])

        assert result.exit_code == 1
        assert "Destroy failed: boom" in result.output


class TestEpochCommands:
    def _seed_epoch(self, fake_chain: FakeChain) -> None:
        fake_chain.add_rows("epoch.drops", "state", "id", {"id": 1, "epoch": 7, "enabled": True})
        fake_chain.add_rows("epoch.drops", "epochs", "epoch", {
            "epoch": 7,
            "start": "2024-01-01T00:00:00",
            "end": "2024-01-02T00:00:00",
            "oracles": ["oracle1"],
            "completed": 0,
        })

    def test_epoch(self, runner: CliRunner, chain_env: None, fake_chain: FakeChain) -> None:
        self._seed_epoch(fake_chain)

        result = runner.invoke(cli, ["epoch"])

        assert result.exit_code == 0, result.output
        assert "Epoch #7" in result.output
        assert "oracle1" in result.output

    def test_epoch_not_found(self, runner: CliRunner, chain_env: None) -> None:
        result = runner.invoke(cli, ["epoch", "-n", "99"])

        assert result.exit_code == 1
        assert "Epoch not found" in result.output

    def test_enroll_current_epoch(self, runner: CliRunner, chain_env: None, fake_chain: FakeChain) -> None:
        self._seed_epoch(fake_chain)

        result = runner.invoke(cli, ["enroll", "--dry-run"])

        assert result.exit_code == 0, result.output
        assert "Signed enroll for alice in epoch 7 (not broadcast)" in result.output
        assert "Enrolled" not in result.output
        assert fake_chain.pushed == []

    def test_enroll_broadcast(self, runner: CliRunner, chain_env: None, fake_chain: FakeChain) -> None:
        result = runner.invoke(cli, ["enroll", "--epoch", "3"])

        assert result.exit_code == 0, result.output
        assert "Enrolled alice in epoch 3" in result.output
        assert len(fake_chain.pushed) == 1
