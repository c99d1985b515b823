"""Tests for the progress demo harness."""

from __future__ import annotations

import pytest

from jobpool import demo


@pytest.fixture(autouse=True)
def clean_env(monkeypatch: pytest.MonkeyPatch) -> None:
    for name in (
        "JOBPOOL_MAX_AT_ONCE",
        "JOBPOOL_LOG_LEVEL",
        "JOBPOOL_LOG_FILE",
        "JOBPOOL_PROGRESS_INTERVAL",
    ):
        monkeypatch.delenv(name, raising=False)
    monkeypatch.setattr(demo, "load_dotenv", lambda: False)


class TestColorize:
    """Tests for progress coloring."""

    def test_thresholds(self) -> None:
        """Test each step range gets its color."""
        assert demo.colorize(2, "20%") == "20%"
        assert demo.colorize(3, "30%") == f"{demo.COLORS['blue']}30%{demo.RESET_COLOR}"
        assert demo.colorize(7, "70%") == f"{demo.COLORS['yellow']}70%{demo.RESET_COLOR}"
        assert demo.colorize(10, "100%") == f"{demo.COLORS['green']}100%{demo.RESET_COLOR}"


class TestDemoMain:
    """Tests for running the harness end to end."""

    def test_runs_all_rounds(self, capsys: pytest.CaptureFixture) -> None:
        """Test every job reaches 100% in each round."""
        demo.main(
            ["--count", "3", "--max-at-once", "2", "--rounds", "2", "--pause", "0", "--step-delay", "0"]
        )

        out = capsys.readouterr().out
        assert "Round 1 of jobs completed" in out
        assert out.rstrip().endswith("All done!")
        finished = f"{demo.COLORS['green']}100%{demo.RESET_COLOR}"
        for value in (1, 2, 3):
            assert out.count(f"{value}: {finished}") == 2

    def test_config_file_and_flag_precedence(self, tmp_path, monkeypatch) -> None:
        """Test CLI flags override the environment, which overrides the file."""
        cfg_path = tmp_path / "pool.yaml"
        cfg_path.write_text("max_at_once: 3\nlog_level: ERROR\n")
        monkeypatch.setenv("JOBPOOL_MAX_AT_ONCE", "5")

        args = demo.build_parser().parse_args(["--config", str(cfg_path), "--log-level", "DEBUG"])
        config = demo.resolve_config(args)

        assert config.max_at_once == 5
        assert config.log_level == "DEBUG"

        args = demo.build_parser().parse_args(["--config", str(cfg_path), "--max-at-once", "1"])
        assert demo.resolve_config(args).max_at_once == 1
