"""
Tests for CLI argument parsing and validation.

This module tests the command-line interface, including argument parsing,
password handling, exit codes and summary output.
"""

import json
import pytest
from argparse import Namespace
from unittest.mock import patch

from nalanda_bot.cli import create_parser, validate_args, read_password, cmd_run, main
from nalanda_bot.errors import RunAborted
from nalanda_bot.models import DaySummary, RunSummary


def run_args(**overrides):
    """Parsed 'run' arguments with optional overrides."""
    args = create_parser().parse_args(['run', '--username', 'jdoe'])
    for key, value in overrides.items():
        setattr(args, key, value)
    return args


def sample_summary():
    summary = RunSummary()
    summary.add_day(DaySummary("05/01/2025", 3, ["Obra Norte"]))
    summary.add_month("01/2025", True)
    return summary


class TestCreateParser:
    """Tests for create_parser function."""

    def test_parser_creation(self):
        """Test that parser is created successfully."""
        parser = create_parser()
        assert parser.prog == 'nalanda_bot'

    def test_run_defaults(self):
        """Test the run command's defaults."""
        args = create_parser().parse_args(['run', '--username', 'jdoe'])
        assert args.command == 'run'
        assert args.username == 'jdoe'
        assert args.password_env == 'NALANDA_PASSWORD'
        assert args.months_back == 6
        assert args.browser_mode == 'launch'
        assert args.discovery == 'auto'
        assert args.headed is False
        assert args.force is False

    def test_username_required(self):
        with pytest.raises(SystemExit):
            create_parser().parse_args(['run'])

    def test_no_password_argument(self):
        """Test the password can never be passed on the command line."""
        with pytest.raises(SystemExit):
            create_parser().parse_args(['run', '--username', 'jdoe', '--password', 'secret'])

    def test_browser_mode_choices(self):
        args = create_parser().parse_args(['run', '--username', 'jdoe', '--browser-mode', 'attach'])
        assert args.browser_mode == 'attach'

        with pytest.raises(SystemExit):
            create_parser().parse_args(['run', '--username', 'jdoe', '--browser-mode', 'remote'])

    def test_check_command(self):
        args = create_parser().parse_args(['check', '--cdp-url', 'http://127.0.0.1:9222'])
        assert args.command == 'check'
        assert args.cdp_url == 'http://127.0.0.1:9222'
        assert args.timeout == 10

    def test_gui_command(self):
        assert create_parser().parse_args(['gui']).command == 'gui'


class TestValidateArgs:
    """Tests for validate_args function."""

    def test_valid(self):
        assert validate_args(run_args()) is True

    def test_months_back_minimum(self):
        assert validate_args(run_args(months_back=0)) is False

    def test_existing_output_without_force(self, tmp_path):
        target = tmp_path / "run.json"
        target.write_text("{}")
        assert validate_args(run_args(summary_json=str(target))) is False

    def test_existing_output_with_force(self, tmp_path):
        target = tmp_path / "run.json"
        target.write_text("{}")
        assert validate_args(run_args(summary_json=str(target), force=True)) is True

    def test_other_commands_pass(self):
        assert validate_args(Namespace(command='gui')) is True


class TestReadPassword:
    """Tests for read_password function."""

    def test_from_environment(self, monkeypatch):
        monkeypatch.setenv('MY_PW', 'secret')
        assert read_password('MY_PW') == 'secret'

    def test_prompt_when_unset(self, monkeypatch):
        monkeypatch.delenv('MY_PW', raising=False)
        with patch('nalanda_bot.cli.sys.stdin') as stdin, \
                patch('nalanda_bot.cli.getpass.getpass', return_value='typed') as prompt:
            stdin.isatty.return_value = True
            assert read_password('MY_PW') == 'typed'
        prompt.assert_called_once()

    def test_none_when_not_interactive(self, monkeypatch):
        monkeypatch.delenv('MY_PW', raising=False)
        with patch('nalanda_bot.cli.sys.stdin') as stdin:
            stdin.isatty.return_value = False
            assert read_password('MY_PW') is None


class TestCmdRun:
    """Tests for cmd_run function."""

    @patch('nalanda_bot.cli.RunOrchestrator')
    def test_success(self, mock_orchestrator, monkeypatch):
        monkeypatch.setenv('NALANDA_PASSWORD', 'secret')
        mock_orchestrator.return_value.run.return_value = sample_summary()

        assert cmd_run(run_args(months_back=2)) == 0

        args = mock_orchestrator.return_value.run.call_args[0]
        assert args[0] == 'jdoe'
        assert args[1] == 'secret'
        assert args[2] == 2

    @patch('nalanda_bot.cli.RunOrchestrator')
    def test_config_from_arguments(self, mock_orchestrator, monkeypatch):
        monkeypatch.setenv('NALANDA_PASSWORD', 'secret')
        mock_orchestrator.return_value.run.return_value = sample_summary()

        cmd_run(run_args(headed=True, browser_mode='auto', discovery='field'))

        config = mock_orchestrator.call_args[0][0]
        assert config.headless is False
        assert config.browser_mode == 'auto'
        assert config.discovery == 'field'

    @patch('nalanda_bot.cli.RunOrchestrator')
    def test_missing_password(self, mock_orchestrator, monkeypatch):
        monkeypatch.delenv('NALANDA_PASSWORD', raising=False)
        with patch('nalanda_bot.cli.read_password', return_value=None):
            assert cmd_run(run_args()) == 1
        mock_orchestrator.assert_not_called()

    @patch('nalanda_bot.cli.RunOrchestrator')
    def test_fatal_abort(self, mock_orchestrator, monkeypatch):
        monkeypatch.setenv('NALANDA_PASSWORD', 'secret')
        mock_orchestrator.return_value.run.side_effect = RunAborted(
            "Login error: Invalid username or password.", RunSummary()
        )

        assert cmd_run(run_args()) == 1

    @patch('nalanda_bot.cli.RunOrchestrator')
    def test_abort_writes_partial_summary(self, mock_orchestrator, monkeypatch, tmp_path):
        monkeypatch.setenv('NALANDA_PASSWORD', 'secret')
        mock_orchestrator.return_value.run.side_effect = RunAborted("browser gone", sample_summary())
        target = tmp_path / "run.json"

        assert cmd_run(run_args(summary_json=str(target))) == 1
        assert json.loads(target.read_text())['totalValidated'] == 3

    @patch('nalanda_bot.cli.RunOrchestrator')
    def test_keyboard_interrupt(self, mock_orchestrator, monkeypatch):
        monkeypatch.setenv('NALANDA_PASSWORD', 'secret')
        mock_orchestrator.return_value.run.side_effect = KeyboardInterrupt()

        assert cmd_run(run_args()) == 130

    @patch('nalanda_bot.cli.RunOrchestrator')
    def test_writes_reports(self, mock_orchestrator, monkeypatch, tmp_path):
        monkeypatch.setenv('NALANDA_PASSWORD', 'secret')
        mock_orchestrator.return_value.run.return_value = sample_summary()
        json_path = tmp_path / "run.json"
        csv_path = tmp_path / "days.csv"

        code = cmd_run(run_args(summary_json=str(json_path), summary_csv=str(csv_path)))

        assert code == 0
        assert json.loads(json_path.read_text())['daysByDate'][0]['date'] == "05/01/2025"
        assert "05/01/2025" in csv_path.read_text()

    def test_invalid_config(self, monkeypatch):
        monkeypatch.setenv('NALANDA_PASSWORD', 'secret')
        assert cmd_run(run_args(cdp_url='nowhere', browser_mode='attach')) == 1


class TestMain:
    """Tests for main entry point."""

    def test_no_command(self):
        assert main([]) == 1

    @patch('nalanda_bot.cli.check_site_connectivity', return_value=(True, ""))
    def test_check_success(self, mock_check):
        assert main(['check']) == 0
        mock_check.assert_called_once()

    @patch('nalanda_bot.cli.check_site_connectivity', return_value=(False, "DNS resolution failed"))
    def test_check_failure(self, mock_check):
        assert main(['check']) == 1

    @patch('nalanda_bot.cli.is_cdp_available', return_value=False)
    @patch('nalanda_bot.cli.check_site_connectivity', return_value=(True, ""))
    def test_check_cdp_down(self, mock_check, mock_cdp):
        assert main(['check', '--cdp-url', 'http://127.0.0.1:9222']) == 1
        mock_cdp.assert_called_once_with('http://127.0.0.1:9222', timeout=10)
