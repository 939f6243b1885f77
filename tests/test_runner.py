"""Tests for guarded command execution"""
import os
import signal
import sys
from unittest.mock import MagicMock, patch

import pytest

from gslock.core.exceptions import GuardedCommandError
from gslock.runner import exit_code_from_returncode, run_command

PYTHON = sys.executable


class TestExitCodeFromReturncode:
    """Test wait-status to exit-code mapping"""

    @pytest.mark.parametrize("returncode", [0, 1, 2, 42, 255])
    def test_normal_exit_passes_through(self, returncode):
        """Test that ordinary exit codes are returned unchanged"""
        assert exit_code_from_returncode(returncode) == returncode

    @pytest.mark.parametrize("signum, expected", [(2, 130), (9, 137), (15, 143)])
    def test_signal_uses_shell_convention(self, signum, expected):
        """Test that death by signal N becomes 128 + N"""
        assert exit_code_from_returncode(-signum) == expected


class TestRunCommand:
    """Test spawning the guarded command"""

    def test_success(self):
        """Test that a successful command returns 0"""
        assert run_command(PYTHON, ["-c", "raise SystemExit(0)"]) == 0

    def test_failure_code_propagates(self):
        """Test that the child's own exit code is returned"""
        assert run_command(PYTHON, ["-c", "raise SystemExit(1)"]) == 1
        assert run_command(PYTHON, ["-c", "raise SystemExit(42)"]) == 42

    def test_arguments_are_passed_verbatim(self, tmp_path):
        """Test that arguments reach the child untouched, including option-like ones"""
        output = tmp_path / "argv.txt"
        script = "import sys; open(sys.argv[1], 'w').write('|'.join(sys.argv[2:]))"
        assert run_command(PYTHON, ["-c", script, str(output), "--flag", "two words", "-x"]) == 0
        assert output.read_text() == "--flag|two words|-x"

    def test_child_shares_parent_environment_and_cwd(self, tmp_path, monkeypatch):
        """Test that the child runs with the caller's environment and working directory"""
        monkeypatch.chdir(tmp_path)
        monkeypatch.setenv("GSLOCK_TEST_MARKER", "present")
        script = "import os; open('seen.txt', 'w').write(os.environ['GSLOCK_TEST_MARKER'])"
        assert run_command(PYTHON, ["-c", script]) == 0
        assert (tmp_path / "seen.txt").read_text() == "present"

    @pytest.mark.skipif(os.name != "posix", reason="POSIX signals only")
    def test_killed_by_signal(self):
        """Test that a child killed by a signal reports 128 + signal number"""
        script = "import os, signal; os.kill(os.getpid(), signal.SIGKILL)"
        assert run_command(PYTHON, ["-c", script]) == 128 + signal.SIGKILL

    def test_missing_executable_raises(self, tmp_path):
        """Test that a command that cannot start raises GuardedCommandError"""
        missing = str(tmp_path / "definitely-not-a-command")
        with pytest.raises(GuardedCommandError) as exc_info:
            run_command(missing, [])
        assert exc_info.value.command == missing
        assert isinstance(exc_info.value.original_error, FileNotFoundError)

    def test_interrupt_waits_for_child_before_propagating(self):
        """Test that KeyboardInterrupt while waiting still reaps the child"""
        proc = MagicMock()
        proc.wait.side_effect = [KeyboardInterrupt(), 0]
        with patch("gslock.runner.subprocess.Popen", return_value=proc):
            with pytest.raises(KeyboardInterrupt):
                run_command("sleep", ["60"])
        assert proc.wait.call_count == 2

    def test_repeated_interrupts_still_wait_for_child(self, caplog):
        """Test that further Ctrl-C presses do not abandon a running child"""
        proc = MagicMock()
        proc.wait.side_effect = [KeyboardInterrupt(), KeyboardInterrupt(), KeyboardInterrupt(), 0]
        with patch("gslock.runner.subprocess.Popen", return_value=proc):
            with pytest.raises(KeyboardInterrupt):
                run_command("sleep", ["60"])
        assert proc.wait.call_count == 4
        assert "Still waiting for the guarded command" in caplog.text
