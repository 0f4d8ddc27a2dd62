"""Tests for the command line entry point."""

from __future__ import annotations

import logging
from datetime import UTC, datetime, timedelta
from pathlib import Path

import pytest

from log_sweeper.config import SweepConfig, SweepConfigError
from log_sweeper.main import build_config, main, parse_args, report_exit

MATCH = r"^app-(?P<date>\d{8})\.log$"


def _stamp(days_ago: int) -> str:
    """Return a YYYYMMDD stamp for ``days_ago`` days before today (UTC)."""
    return (datetime.now(UTC) - timedelta(days=days_ago)).strftime("%Y%m%d")


@pytest.fixture
def log_dir(tmp_path: Path) -> Path:
    """Create a log directory with one stale and one recent file."""
    root = tmp_path / "logs"
    root.mkdir()
    (root / f"app-{_stamp(30)}.log").write_text("old")
    (root / f"app-{_stamp(1)}.log").write_text("new")
    (root / "app.log").write_text("current")
    return root


@pytest.fixture(autouse=True)
def no_default_config(tmp_path: Path, monkeypatch: pytest.MonkeyPatch) -> None:
    """Point the default config path somewhere empty."""
    monkeypatch.setattr(SweepConfig, "get_config_path", classmethod(lambda cls: tmp_path / "default.yaml"))


class TestParseArgs:
    """Tests for argument parsing."""

    def test_defaults_are_none(self) -> None:
        """Test that unset flags do not override the config file."""
        args = parse_args([])
        assert args.dir is None
        assert args.match is None
        assert args.keep is None
        assert args.dry is None
        assert args.init_config is False

    def test_all_flags(self) -> None:
        """Test parsing of every sweep flag."""
        args = parse_args(["--dir", "/var/log", "--match", MATCH, "--layout", "%Y%m%d", "--keep", "7", "--dry"])
        assert args.dir == "/var/log"
        assert args.match == MATCH
        assert args.layout == "%Y%m%d"
        assert args.keep == 7
        assert args.dry is True

    def test_non_integer_keep_is_usage_error(self) -> None:
        """Test that argparse rejects a non-numeric keep."""
        with pytest.raises(SystemExit) as exc_info:
            parse_args(["--keep", "seven"])
        assert exc_info.value.code == 2

    def test_no_dry(self) -> None:
        """Test that --no-dry sets dry to False explicitly."""
        assert parse_args(["--no-dry"]).dry is False

    def test_log_level_is_case_insensitive(self) -> None:
        """Test that --log-level accepts lower case names."""
        assert parse_args(["--log-level", "debug"]).log_level == "DEBUG"


class TestBuildConfig:
    """Tests for merging the config file with flags."""

    def test_flags_override_file(self, tmp_path: Path) -> None:
        """Test that command line flags win over the config file."""
        config_path = tmp_path / "config.yaml"
        config_path.write_text("keep: 30\nlayout: '%Y%m%d'\ndry: true\n")

        config = build_config(parse_args(["-c", str(config_path), "--keep", "7"]))

        assert config.keep_days == 7
        assert config.layout == "%Y%m%d"
        assert config.dry_run is True

    def test_no_dry_overrides_file(self, tmp_path: Path) -> None:
        """Test that --no-dry switches off dry mode set in the config file."""
        config_path = tmp_path / "config.yaml"
        config_path.write_text("dry: true\n")

        assert build_config(parse_args(["-c", str(config_path)])).dry_run is True
        assert build_config(parse_args(["-c", str(config_path), "--no-dry"])).dry_run is False

    def test_blank_dir_means_current_directory(self) -> None:
        """Test that an empty --dir walks the current directory."""
        assert build_config(parse_args(["--dir", "  "])).directory == Path(".")

    def test_dir_is_stripped(self, tmp_path: Path) -> None:
        """Test that whitespace around --dir is ignored."""
        assert build_config(parse_args(["--dir", f" {tmp_path} "])).directory == tmp_path


class TestReportExit:
    """Tests for the top-level exit wrapper."""

    def test_success(self, caplog: pytest.LogCaptureFixture) -> None:
        """Test that a clean block logs 'exited' with status 0."""
        logger = logging.getLogger("test-exit")
        with caplog.at_level(logging.INFO), report_exit(logger) as status:
            pass

        assert status.code == 0
        assert caplog.records[-1].getMessage() == "exited"

    @pytest.mark.parametrize("error", [SweepConfigError("missing --match"), FileNotFoundError("gone")])
    def test_handled_errors(self, error: Exception, caplog: pytest.LogCaptureFixture) -> None:
        """Test that configuration and I/O errors become status 1."""
        logger = logging.getLogger("test-exit")
        with caplog.at_level(logging.INFO), report_exit(logger) as status:
            raise error

        assert status.code == 1
        assert caplog.records[-1].getMessage() == f"exited with error: {error}"

    def test_other_errors_propagate(self) -> None:
        """Test that unexpected errors are not swallowed."""
        with pytest.raises(RuntimeError), report_exit(logging.getLogger("test-exit")):
            raise RuntimeError("boom")


class TestMain:
    """End-to-end tests for main."""

    def test_sweep_deletes_stale_logs(self, log_dir: Path) -> None:
        """Test a normal run removes only the stale file."""
        code = main(["--dir", str(log_dir), "--match", MATCH, "--layout", "%Y%m%d", "--keep", "7"])

        assert code == 0
        assert not (log_dir / f"app-{_stamp(30)}.log").exists()
        assert (log_dir / f"app-{_stamp(1)}.log").exists()
        assert (log_dir / "app.log").exists()

    def test_dry_run_keeps_everything(self, log_dir: Path) -> None:
        """Test that --dry only reports."""
        code = main(["--dir", str(log_dir), "--match", MATCH, "--layout", "%Y%m%d", "--keep", "7", "--dry"])

        assert code == 0
        assert (log_dir / f"app-{_stamp(30)}.log").exists()

    @pytest.mark.parametrize(
        "argv",
        [
            ["--layout", "%Y%m%d", "--keep", "7"],  # --match omitted
            ["--match", r"^app-(\d{8})\.log$", "--layout", "%Y%m%d", "--keep", "7"],
            ["--match", r"^app-(?P<date>\d{8}\.log$", "--layout", "%Y%m%d", "--keep", "7"],
            ["--match", MATCH, "--layout", "%Y%m%d"],  # --keep omitted
            ["--match", MATCH, "--layout", "%Y%m%d", "--keep", "-1"],
            ["--match", MATCH, "--layout", "%Y%m%d", "--keep", "1000000000"],  # beyond timedelta range
        ],
    )
    def test_configuration_errors_exit_1_before_walk(self, log_dir: Path, argv: list[str]) -> None:
        """Test that invalid options abort before any file is touched."""
        before = sorted(log_dir.iterdir())

        assert main(["--dir", str(log_dir), *argv]) == 1
        assert sorted(log_dir.iterdir()) == before

    def test_missing_directory_exits_1(self, tmp_path: Path, caplog: pytest.LogCaptureFixture) -> None:
        """Test that a traversal error is reported with status 1."""
        with caplog.at_level(logging.INFO):
            code = main(["--dir", str(tmp_path / "missing"), "--match", MATCH, "--layout", "%Y%m%d", "--keep", "7"])

        assert code == 1
        assert "exited with error" in caplog.text

    def test_invalid_config_file_exits_1(self, tmp_path: Path) -> None:
        """Test that a broken config file is a configuration error."""
        config_path = tmp_path / "bad.yaml"
        config_path.write_text("match: [\n")

        assert main(["-c", str(config_path)]) == 1

    def test_options_from_config_file(self, log_dir: Path, tmp_path: Path) -> None:
        """Test that a config file can supply every option."""
        config_path = tmp_path / "config.yaml"
        SweepConfig(directory=log_dir, match=MATCH, layout="%Y%m%d", keep_days=7).save(config_path)

        assert main(["-c", str(config_path)]) == 0
        assert not (log_dir / f"app-{_stamp(30)}.log").exists()

    def test_log_file_written(self, log_dir: Path, tmp_path: Path) -> None:
        """Test that --log-file receives the decision lines."""
        log_file = tmp_path / "sweeper.log"

        main(["--dir", str(log_dir), "--match", MATCH, "--layout", "%Y%m%d", "--keep", "7", "--log-file", str(log_file)])

        logging.getLogger("log-sweeper").handlers[-1].flush()
        text = log_file.read_text(encoding="utf-8")
        assert "deleted" in text
        assert "no match" in text
        assert "exited" in text


class TestInitConfig:
    """Tests for --init-config."""

    def test_writes_config(self, tmp_path: Path) -> None:
        """Test that the effective options are written out."""
        config_path = tmp_path / "new.yaml"

        code = main(["-c", str(config_path), "--init-config", "--match", MATCH, "--keep", "7"])

        assert code == 0
        config = SweepConfig.load(config_path)
        assert config.match == MATCH
        assert config.keep_days == 7

    def test_refuses_to_overwrite(self, tmp_path: Path) -> None:
        """Test that an existing file is left alone."""
        config_path = tmp_path / "existing.yaml"
        config_path.write_text("keep: 3\n")

        assert main(["-c", str(config_path), "--init-config"]) == 1
        assert config_path.read_text() == "keep: 3\n"

    def test_default_location(self, tmp_path: Path) -> None:
        """Test that the default path is used without --config."""
        assert main(["--init-config", "--keep", "5"]) == 0
        assert SweepConfig.load(tmp_path / "default.yaml").keep_days == 5
