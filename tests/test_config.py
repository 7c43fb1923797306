"""Tests for configuration loading and the CLI wrapper."""

import pytest
from unittest.mock import patch
from repofeed.cli import main
from repofeed.core.config import load_settings, DEFAULT_MODELS
from repofeed.core.feed import build_feed


@pytest.fixture(autouse=True)
def clean_env(monkeypatch):
    for var in ("GITHUB_TOKEN", "REPOFEED_USERNAME", "REPOFEED_MODELS", "REPOFEED_ENDPOINT",
                "REPOFEED_BATCH_SIZE", "REPOFEED_DELAY", "REPOFEED_OUTPUT"):
        monkeypatch.delenv(var, raising=False)
    # keep a developer's .env out of the tests
    monkeypatch.setattr("repofeed.core.config.load_dotenv", lambda: None)


class TestConfiguration:
    """Test configuration loading."""

    def test_load_settings_default(self, tmp_path):
        settings = load_settings(str(tmp_path / "nonexistent_config.toml"))
        assert settings.username == "moses-y"
        assert settings.models == DEFAULT_MODELS
        assert settings.batch_size == 10
        assert settings.github_token is None
        assert not settings.generation_enabled

    def test_toml_values(self, tmp_path):
        cfg = tmp_path / "config.toml"
        cfg.write_text(
            '[github]\nusername = "octocat"\nmax_repos = 9\n'
            '[generator]\nmodels = ["x/one"]\n'
            '[batch]\nsize = 4\ndelay_seconds = 1.5\n'
            '[output]\npath = "site/forks.json"\n',
            encoding="utf-8",
        )
        settings = load_settings(str(cfg))
        assert settings.username == "octocat"
        assert settings.max_repos == 9
        assert settings.models == ["x/one"]
        assert settings.batch_size == 4
        assert settings.delay_seconds == 1.5
        assert settings.output == "site/forks.json"

    def test_env_overrides_toml(self, tmp_path, monkeypatch):
        cfg = tmp_path / "config.toml"
        cfg.write_text('[batch]\nsize = 4\n', encoding="utf-8")
        monkeypatch.setenv("REPOFEED_BATCH_SIZE", "2")
        monkeypatch.setenv("REPOFEED_MODELS", "a, b ,")
        monkeypatch.setenv("GITHUB_TOKEN", "secret")

        settings = load_settings(str(cfg))

        assert settings.batch_size == 2
        assert settings.models == ["a", "b"]
        assert settings.generation_enabled


class TestCli:
    """Test the command-line entry point."""

    def test_flags_override_settings(self, tmp_path, capsys):
        out = tmp_path / "feed.json"
        with patch("repofeed.core.pipeline.run", return_value=build_feed([], "x")) as run:
            main(["octocat", "--out", str(out), "--batch-size", "1", "--no-forks",
                  "--model", "m1", "--model", "m2", "--config", str(tmp_path / "none.toml")])

        s = run.call_args.args[0]
        assert s.username == "octocat"
        assert s.output == str(out)
        assert s.batch_size == 1
        assert s.include_forks is False
        assert s.models == ["m1", "m2"]
        assert "wrote" in capsys.readouterr().out

    def test_error_exits_with_status_1(self, tmp_path, capsys):
        with patch("repofeed.core.pipeline.run", side_effect=RuntimeError("GitHub API error: 502")):
            with pytest.raises(SystemExit) as exc:
                main(["--config", str(tmp_path / "none.toml")])

        assert exc.value.code == 1
        assert "GitHub API error: 502" in capsys.readouterr().err
