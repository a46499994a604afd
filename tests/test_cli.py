"""Tests for the command line interface."""

from unittest.mock import patch

import pytest

from depload import cli
from depload.constants import Constants, ExitCodes
from depload.exceptions import InstallIOError

from conftest import build_installed, build_nupkg


@pytest.fixture(autouse=True)
def _no_logging_setup(monkeypatch):
    monkeypatch.setattr(cli, "configure_logging", lambda level, log_file: None)
    monkeypatch.delenv(Constants.ENV_PACKAGES_PATH, raising=False)
    monkeypatch.delenv(Constants.ENV_TARGET_FRAMEWORK, raising=False)


@pytest.fixture
def config_file(tmp_path, feed_dir):
    path = tmp_path / "depload.yml"
    path.write_text(
        f"default_source: false\nsources:\n  - {feed_dir}\npackages:\n  - Theme\n",
        encoding="utf-8",
    )
    return path


class TestParseArgs:
    """Argument parsing."""

    def test_install_flags(self):
        args = cli.parse_args(["install", "-s", "a", "-s", "b", "-p", "Pkg:1.0", "-u", "--on-not-found", "ABORT"])
        assert args.COMMAND == "install"
        assert args.SOURCES == ["a", "b"]
        assert args.PACKAGES == ["Pkg:1.0"]
        assert args.UPDATE
        assert args.ON_NOT_FOUND == "abort"

    def test_command_required(self):
        with pytest.raises(SystemExit):
            cli.parse_args([])


class TestBuildConfig:
    """Merging file, environment and flags."""

    def test_cli_sources_rank_first(self, config_file, feed_dir):
        args = cli.parse_args(["install", "-c", str(config_file), "-s", "extra", "-p", "More"])
        config = cli.build_config(args)
        assert config.sources == ("extra", str(feed_dir))
        assert [p.package_id for p in config.packages] == ["Theme", "More"]
        assert not config.include_default_source

    def test_without_config_file(self):
        config = cli.build_config(cli.parse_args(["assemblies", "-f", "net472"]))
        assert config.target_framework == "net472"
        assert config.packages == ()


class TestMain:
    """End-to-end runs against a local feed."""

    def test_install(self, config_file, feed_dir, site_dir, capsys):
        build_nupkg(feed_dir, "Theme", "1.0.0", ["content/site.css"])

        code = cli.main(["install", "-c", str(config_file), "--root", str(site_dir)])

        assert code == ExitCodes.SUCCESS.value
        out = capsys.readouterr().out
        assert "Theme 1.0.0" in out
        assert f"input path: {site_dir / 'packages' / 'Theme.1.0.0' / 'content'}" in out

    def test_install_missing_with_error_on_warnings(self, config_file, site_dir):
        code = cli.main(["install", "-c", str(config_file), "--root", str(site_dir), "--error-on-warnings", "-q"])
        assert code == ExitCodes.PACKAGE_NOT_FOUND.value

    def test_install_missing_skipped(self, config_file, site_dir, capsys):
        code = cli.main(["install", "-c", str(config_file), "--root", str(site_dir)])
        assert code == ExitCodes.SUCCESS.value
        assert "Theme: not found" in capsys.readouterr().out

    def test_install_missing_abort(self, config_file, site_dir):
        code = cli.main(["install", "-c", str(config_file), "--root", str(site_dir), "--on-not-found", "abort"])
        assert code == ExitCodes.PACKAGE_NOT_FOUND.value

    def test_missing_config_file(self, tmp_path):
        assert cli.main(["install", "-c", str(tmp_path / "nope.yml")]) == ExitCodes.FILE_ERROR.value

    def test_bad_framework(self):
        assert cli.main(["assemblies", "-f", "notaframework"]) == ExitCodes.CONFIG_ERROR.value

    def test_fetch_failure(self, config_file, site_dir):
        with patch("depload.repository.local.LocalFolderRepository.find", side_effect=InstallIOError("disk gone")):
            code = cli.main(["install", "-c", str(config_file), "--root", str(site_dir)])
        assert code == ExitCodes.CONNECTION_ERROR.value

    def test_assemblies(self, site_dir, capsys):
        package = build_installed(site_dir / "packages", "Lib", "1.0.0", ["lib/net45/Lib.dll", "lib/net6.0/Lib.dll"])

        code = cli.main(["assemblies", "--root", str(site_dir), "-f", "net46"])

        assert code == ExitCodes.SUCCESS.value
        assert capsys.readouterr().out.splitlines() == [str(package / "lib" / "net45" / "Lib.dll")]
