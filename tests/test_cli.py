"""
CLI and migration entry point tests.
"""

import json
import os
import sys

import pytest
from click.testing import CliRunner

# ── Path setup ────────────────────────────────────────────────────────
ROOT = os.path.dirname(os.path.dirname(os.path.abspath(__file__)))
if ROOT not in sys.path:
    sys.path.insert(0, ROOT)

from tierstake.cli.stake import cli
from tierstake.migrations import deploy as migration


@pytest.fixture
def runner():
    return CliRunner()


class TestTiersCommand:

    def test_default_tiers(self, runner):
        result = runner.invoke(cli, ["tiers"])
        assert result.exit_code == 0, result.output
        assert "Basic" in result.output
        assert "Premium" in result.output
        assert "138.8889" in result.output
        assert "231.4815" in result.output

    def test_tiers_from_config(self, runner, tmp_path):
        path = tmp_path / "config.toml"
        path.write_text('[[staking.tiers]]\nstake_type = 9\nname = "Solo"\nrate_bps = 500\n')
        result = runner.invoke(cli, ["tiers", "--config", str(path)])
        assert result.exit_code == 0, result.output
        assert "Solo" in result.output
        assert "Basic" not in result.output

    def test_tiers_bad_env_config(self, runner, monkeypatch):
        monkeypatch.setenv("TIERSTAKE_REWARD_PERIOD_SECONDS", "abc")
        result = runner.invoke(cli, ["tiers"])
        assert result.exit_code == 1
        assert "Invalid configuration" in result.output


class TestSimulateCommand:

    def test_simulate_one_hour(self, runner):
        result = runner.invoke(cli, ["simulate", "--amount", "1000000", "--stake-type", "0", "--hours", "1"])
        assert result.exit_code == 0, result.output
        assert "Staking time: 3600 seconds" in result.output
        assert "138.888888888888888888" in result.output

    def test_simulate_below_minimum(self, runner):
        result = runner.invoke(cli, ["simulate", "--amount", "999"])
        assert result.exit_code != 0
        assert "below minimum" in result.output

    def test_simulate_unknown_type(self, runner):
        result = runner.invoke(cli, ["simulate", "--amount", "1000", "--stake-type", "8"])
        assert result.exit_code != 0
        assert "Unknown stake type 8" in result.output

    def test_simulate_negative_hours(self, runner):
        result = runner.invoke(cli, ["simulate", "--amount", "1000", "--hours", "-1"])
        assert result.exit_code != 0

    @pytest.mark.parametrize("amount", ["abc", "NaN", "-5"])
    def test_simulate_invalid_amount(self, runner, amount):
        result = runner.invoke(cli, ["simulate", "--amount", amount])
        assert result.exit_code == 2
        assert "not a valid token amount" in result.output


class TestDeployMigration:

    def test_main_prints_addresses(self, monkeypatch, capsys):
        monkeypatch.setattr(sys, "argv", ["deploy_staking", "--fund-rewards", "1000"])
        migration.main()
        out = json.loads(capsys.readouterr().out)
        assert set(out) == {"deployer", "stakingToken", "rewardToken", "staking", "block"}
        assert out["stakingToken"] != out["rewardToken"]

    def test_main_rejects_invalid_amount(self, monkeypatch, capsys):
        monkeypatch.setattr(sys, "argv", ["deploy_staking", "--fund-rewards", "abc"])
        with pytest.raises(SystemExit) as exc:
            migration.main()
        assert exc.value.code == 2
        assert "invalid token amount" in capsys.readouterr().err
