"""
Tests for the layered run configuration (defaults → env → CLI flags).
"""

import pytest

from sitebook.__main__ import build_parser
from sitebook.errors import ErrorKind
from sitebook.run_config import RunConfig


class TestDefaults:

    def test_defaults(self):
        cfg = RunConfig()
        assert cfg.output_dir == "out"
        assert cfg.headless is True
        assert cfg.navigation_timeout_ms == 30_000
        assert cfg.concurrency is None
        assert cfg.blocked_resource_types == ("image", "stylesheet", "font", "media")

    def test_empty_env_is_defaults(self):
        assert RunConfig.from_env({}) == RunConfig()


class TestFromEnv:

    def test_all_variables(self):
        cfg = RunConfig.from_env({
            "SITEBOOK_OUTPUT_DIR": "pdfs",
            "SITEBOOK_CHROME_PATH": "/usr/bin/chromium",
            "SITEBOOK_HEADLESS": "false",
            "SITEBOOK_TIMEOUT": "2.5",
            "SITEBOOK_CONCURRENCY": "3",
        })
        assert cfg.output_dir == "pdfs"
        assert cfg.executable_path == "/usr/bin/chromium"
        assert cfg.headless is False
        assert cfg.navigation_timeout_ms == 2500
        assert cfg.concurrency == 3

    def test_bad_number(self):
        with pytest.raises(ValueError):
            RunConfig.from_env({"SITEBOOK_CONCURRENCY": "many"})


class TestCliOverlay:

    def test_flags_win(self):
        args = build_parser().parse_args([
            "https://a.com", "--concurrency", "4", "--output-dir", "build",
            "--timeout", "5", "--headed", "--chrome-path", "/opt/chrome",
        ])
        base = RunConfig.from_env({"SITEBOOK_OUTPUT_DIR": "pdfs", "SITEBOOK_CONCURRENCY": "2"})
        cfg = base.with_cli_args(args)
        assert cfg.concurrency == 4
        assert cfg.output_dir == "build"
        assert cfg.navigation_timeout_ms == 5000
        assert cfg.headless is False
        assert cfg.executable_path == "/opt/chrome"
        assert base.output_dir == "pdfs"

    def test_unset_flags_keep_values(self):
        args = build_parser().parse_args(["https://a.com"])
        base = RunConfig.from_env({"SITEBOOK_OUTPUT_DIR": "pdfs", "SITEBOOK_CONCURRENCY": "2"})
        assert base.with_cli_args(args) == base


class TestSeedRequest:

    def test_uses_configured_concurrency(self):
        request = RunConfig(concurrency=5).to_seed_request("https://a.com").unwrap()
        assert request.concurrency_limit == 5

    def test_zero_concurrency_rejected(self):
        result = RunConfig(concurrency=0).to_seed_request("https://a.com")
        assert result.error.kind == ErrorKind.INVALID_ARGUMENT
