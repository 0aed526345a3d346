"""
Tests for the command-line entry point
"""

import json
import logging

import pytest

import serverbench.__main__
from serverbench._config import StderrHandler
from serverbench.__main__ import main
from tests.conftest import SAMPLE_RECORD


@pytest.fixture(autouse=True)
def restore_logging():
    """Drop the handler main() installs so tests stay isolated"""
    root = logging.getLogger()
    level = root.level
    yield
    for handler in list(root.handlers):
        if isinstance(handler, StderrHandler):
            root.removeHandler(handler)
    root.setLevel(level)


class TestMain:
    """Test main()"""

    def test_run_and_save(self, clean_env, fake_rewrk, capsys):
        """Test a full run prints the report and saves with --save"""
        cache_file = clean_env / "cache.json"
        code = main(["--name", "express", "--save", "--cache", str(cache_file)])
        assert code == 0
        out = capsys.readouterr().out
        assert out.startswith("**express**\n| Parameter | Old | New | Diff |")
        assert json.loads(cache_file.read_text()) == {"express": SAMPLE_RECORD}

    def test_legacy_positional_save(self, clean_env, fake_rewrk):
        """Test `true` as positional argument enables saving"""
        cache_file = clean_env / "cache.json"
        assert main(["--name", "express", "--cache", str(cache_file), "true"]) == 0
        assert cache_file.exists()

    def test_legacy_positional_false(self, clean_env, fake_rewrk):
        cache_file = clean_env / "cache.json"
        assert main(["--name", "express", "--cache", str(cache_file), "false"]) == 0
        assert not cache_file.exists()

    def test_name_from_environment(self, clean_env, fake_rewrk, monkeypatch, capsys):
        """Test CURRENT_BENCH selects the active benchmark"""
        monkeypatch.setenv("CURRENT_BENCH", "fastify")
        assert main(["--cache", str(clean_env / "cache.json")]) == 0
        assert capsys.readouterr().out.startswith("**fastify**\n")

    def test_missing_name(self, clean_env, fake_rewrk):
        """Test running without a benchmark name is a usage error"""
        with pytest.raises(SystemExit) as exc_info:
            main([])
        assert exc_info.value.code == 2
        assert fake_rewrk.calls == []

    def test_profile_flags(self, clean_env, fake_rewrk):
        """Test load profile flags reach the rewrk command line"""
        main([
            "--name", "express",
            "-t", "2", "-c", "50", "-d", "5",
            "--url", "http://127.0.0.1:9000",
            "--rewrk", "/opt/rewrk",
            "--timeout", "60",
            "--cache", str(clean_env / "cache.json"),
        ])
        cmd, kwargs = fake_rewrk.calls[0]
        assert cmd == ["/opt/rewrk", "--json", "-t", "2", "-c", "50", "-d", "5s",
                       "-h", "http://127.0.0.1:9000"]
        assert kwargs["timeout"] == 60.0

    def test_invalid_profile(self, clean_env, fake_rewrk):
        """Test a zero thread count is rejected before running"""
        with pytest.raises(SystemExit) as exc_info:
            main(["--name", "express", "-t", "0"])
        assert exc_info.value.code == 2
        assert fake_rewrk.calls == []

    def test_env_file_flag(self, clean_env, fake_rewrk, capsys):
        """Test --env-file supplies defaults"""
        env_file = clean_env / "ci.env"
        cache_file = clean_env / "from-env.json"
        env_file.write_text(f"CURRENT_BENCH=actix\nSERVERBENCH_CACHE_FILE={cache_file}\n")
        assert main(["--env-file", str(env_file), "--save"]) == 0
        assert json.loads(cache_file.read_text()) == {"actix": SAMPLE_RECORD}

    def test_invalid_env_value(self, clean_env, fake_rewrk, monkeypatch, capsys):
        monkeypatch.setenv("SERVERBENCH_DURATION", "thirty")
        assert main(["--name", "express"]) == 2
        assert "SERVERBENCH_DURATION" in capsys.readouterr().err

    def test_fatal_error_exit_code(self, clean_env, fake_rewrk, capsys):
        """Test a failing load generator exits 1 with nothing on stdout"""
        fake_rewrk.returncode = 2
        assert main(["--name", "express", "--cache", str(clean_env / "c.json")]) == 1
        assert capsys.readouterr().out == ""


def test_module_logger_name():
    """Test the entry point logs under its module name"""
    assert serverbench.__main__.logger.name == serverbench.__main__.__name__
