"""Tests for the ``serika doctor`` command (cli/doctor.py).

All external dependencies (ffmpeg, ffplay, yt-dlp, requests) are mocked
— no system dependency, no internet.

Coverage:
* Doctor runs and returns SUCCESS when everything is present.
* Missing ffmpeg / ffplay is a warning with install guidance.
* Missing Python dependencies fail the run.
* Individual check functions return correct tuples.
* CLI routing dispatches to ``run_doctor``.
"""

from __future__ import annotations

from pathlib import Path
from unittest.mock import MagicMock, patch

import pytest

from serika_cli.cli import exit_codes
from serika_cli.infra.ffmpeg_detector import ToolStatus


# ---------------------------------------------------------------------------
# Helpers
# ---------------------------------------------------------------------------

def _found(name: str) -> ToolStatus:
    return ToolStatus(
        name=name,
        found=True,
        path=Path(f"/usr/bin/{name}"),
        version_hint=f"found at /usr/bin/{name}",
        install_commands=(),
    )


def _missing(name: str, commands: tuple[str, ...] = ("sudo apt install ffmpeg",)) -> ToolStatus:
    return ToolStatus(
        name=name,
        found=False,
        path=None,
        version_hint="not found",
        install_commands=commands,
    )


# ---------------------------------------------------------------------------
# Individual check functions
# ---------------------------------------------------------------------------

class TestPythonVersionCheck:
    def test_returns_tuple(self) -> None:
        from serika_cli.cli.doctor import _python_version_check

        label, value, status = _python_version_check()
        assert label == "Python"
        assert isinstance(value, str)
        assert "OK" in status


class TestYtdlpVersionCheck:
    def test_installed(self) -> None:
        from serika_cli.cli.doctor import _ytdlp_version_check

        label, _value, status = _ytdlp_version_check()
        assert label == "yt-dlp"
        assert "OK" in status

    @patch.dict("sys.modules", {"yt_dlp": None, "yt_dlp.version": None})
    def test_not_installed(self) -> None:
        from serika_cli.cli.doctor import _ytdlp_version_check

        label, value, status = _ytdlp_version_check()
        assert label == "yt-dlp"
        assert value == "NOT INSTALLED"
        assert "FAIL" in status


class TestRequestsVersionCheck:
    def test_installed(self) -> None:
        from serika_cli.cli.doctor import _requests_version_check

        label, _value, status = _requests_version_check()
        assert label == "requests"
        assert "OK" in status

    @patch.dict("sys.modules", {"requests": None})
    def test_not_installed(self) -> None:
        from serika_cli.cli.doctor import _requests_version_check

        _label, value, status = _requests_version_check()
        assert value == "NOT INSTALLED"
        assert "FAIL" in status


class TestToolChecks:
    @patch("serika_cli.cli.doctor.detect_ffmpeg")
    def test_ffmpeg_found(self, mock_detect: MagicMock) -> None:
        from serika_cli.cli.doctor import _ffmpeg_check

        mock_detect.return_value = _found("ffmpeg")
        label, value, status = _ffmpeg_check()
        assert label == "ffmpeg"
        assert value == str(Path("/usr/bin/ffmpeg"))
        assert "OK" in status

    @patch("serika_cli.cli.doctor.detect_ffplay")
    def test_ffplay_missing_is_warning(self, mock_detect: MagicMock) -> None:
        from serika_cli.cli.doctor import _ffplay_check

        mock_detect.return_value = _missing("ffplay")
        label, value, status = _ffplay_check()
        assert label == "ffplay"
        assert value == "not found"
        assert "WARN" in status


class TestTerminalCheck:
    @patch("serika_cli.cli.doctor.supports_ansi", return_value=False)
    def test_no_ansi_is_warning(self, _mock: MagicMock) -> None:
        from serika_cli.cli.doctor import _terminal_check

        _label, value, status = _terminal_check()
        assert "ASCII mode disabled" in value
        assert "WARN" in status


class TestOsCheck:
    @patch("serika_cli.cli.doctor.platform.machine", return_value="arm64")
    @patch("serika_cli.cli.doctor.platform.release", return_value="23.4.0")
    @patch("serika_cli.cli.doctor.platform.system", return_value="Darwin")
    def test_darwin_is_displayed_as_macos(
        self,
        _mock_system: MagicMock,
        _mock_release: MagicMock,
        _mock_machine: MagicMock,
    ) -> None:
        from serika_cli.cli.doctor import _os_check

        _label, value, _status = _os_check()
        assert value == "macOS 23.4.0 (arm64)"


class TestSerikaVersionCheck:
    def test_returns_current_version(self) -> None:
        from serika_cli.cli.doctor import _serika_version_check
        from serika_cli.version import __version__

        label, value, status = _serika_version_check()
        assert label == "serika-cli"
        assert value == __version__
        assert "OK" in status


# ---------------------------------------------------------------------------
# run_doctor integration
# ---------------------------------------------------------------------------

class TestRunDoctor:
    @patch("serika_cli.cli.doctor.detect_ffplay")
    @patch("serika_cli.cli.doctor.detect_ffmpeg")
    def test_all_pass_returns_success(self, mock_ffmpeg: MagicMock, mock_ffplay: MagicMock) -> None:
        from serika_cli.cli.doctor import run_doctor

        mock_ffmpeg.return_value = _found("ffmpeg")
        mock_ffplay.return_value = _found("ffplay")
        assert run_doctor() == exit_codes.SUCCESS

    @patch("serika_cli.cli.doctor.detect_ffplay")
    @patch("serika_cli.cli.doctor.detect_ffmpeg")
    def test_tools_missing_still_succeeds(self, mock_ffmpeg: MagicMock, mock_ffplay: MagicMock) -> None:
        """Missing ffmpeg is a WARN, not a FAIL."""
        from serika_cli.cli.doctor import run_doctor

        mock_ffmpeg.return_value = _missing("ffmpeg")
        mock_ffplay.return_value = _missing("ffplay")
        assert run_doctor() == exit_codes.SUCCESS

    @patch("serika_cli.cli.doctor.detect_ffplay")
    @patch("serika_cli.cli.doctor.detect_ffmpeg")
    @patch.dict("sys.modules", {"requests": None})
    def test_missing_requests_fails(self, mock_ffmpeg: MagicMock, mock_ffplay: MagicMock) -> None:
        from serika_cli.cli.doctor import run_doctor

        mock_ffmpeg.return_value = _found("ffmpeg")
        mock_ffplay.return_value = _found("ffplay")
        assert run_doctor() == exit_codes.GENERAL_ERROR

    @patch("serika_cli.cli.doctor.platform.machine", return_value="arm64")
    @patch("serika_cli.cli.doctor.platform.release", return_value="23.4.0")
    @patch("serika_cli.cli.doctor.platform.system", return_value="Darwin")
    @patch("serika_cli.cli.doctor.detect_ffplay")
    @patch("serika_cli.cli.doctor.detect_ffmpeg")
    @patch.dict("sys.modules", {"rich": None, "rich.console": None, "rich.table": None})
    def test_darwin_plain_output_shows_macos_and_brew_guidance(
        self,
        mock_ffmpeg: MagicMock,
        mock_ffplay: MagicMock,
        _mock_system: MagicMock,
        _mock_release: MagicMock,
        _mock_machine: MagicMock,
        capsys: pytest.CaptureFixture[str],
    ) -> None:
        from serika_cli.cli.doctor import run_doctor

        mock_ffmpeg.return_value = _found("ffmpeg")
        mock_ffplay.return_value = _missing("ffplay", ("brew install ffmpeg",))

        _ = run_doctor()
        captured = capsys.readouterr()
        assert "macOS" in captured.err
        assert "ffplay not installed." in captured.err
        assert "brew install ffmpeg" in captured.err


# ---------------------------------------------------------------------------
# CLI routing
# ---------------------------------------------------------------------------

class TestDoctorRouting:
    @patch("serika_cli.cli.doctor.run_doctor", return_value=exit_codes.SUCCESS)
    def test_doctor_dispatches(self, mock_run: MagicMock) -> None:
        from serika_cli.cli.app import main

        assert main(["doctor"]) == exit_codes.SUCCESS
        mock_run.assert_called_once()

    @patch("serika_cli.cli.doctor.run_doctor", return_value=exit_codes.GENERAL_ERROR)
    def test_doctor_failure_propagates(self, _mock_run: MagicMock) -> None:
        from serika_cli.cli.app import main

        assert main(["doctor"]) == exit_codes.GENERAL_ERROR
