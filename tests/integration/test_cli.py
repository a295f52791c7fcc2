import json
from datetime import UTC, datetime, timedelta
from pathlib import Path

import pytest
from typer.testing import CliRunner

from syld.cache import EnrichmentCache
from syld.cli import app
from syld.config import Config
from syld.discoverers import DiscoveryError, FlatpakDiscoverer, PacmanDiscoverer
from syld.models import UpstreamProject
from syld.storage import ScanStore

runner = CliRunner()

FIXTURES = Path(__file__).parent.parent / "fixtures"


@pytest.fixture
def config(tmp_path, mocker):
    """Point the CLI at a temporary data directory."""
    config = Config(data_dir=tmp_path / "data")
    mocker.patch("syld.cli.Config.load", return_value=config)
    return config


@pytest.fixture
def saved_scan(config, sample_packages, scanned_at):
    ScanStore(config.scan_db_path).save_scan(sample_packages, scanned_at)
    return sample_packages


def test_scan_command(config, mocker):
    """Test that scan stores what the discoverers find."""
    mocker.patch(
        "syld.cli.active_discoverers",
        return_value=[PacmanDiscoverer(FIXTURES / "pacman_local")],
    )

    result = runner.invoke(app, ["scan"])

    assert result.exit_code == 0
    assert "pacman: 2 packages" in result.stdout
    _, packages = ScanStore(config.scan_db_path).load_latest_scan()
    assert [p.name for p in packages] == ["avahi", "linux"]


def test_scan_continues_after_failing_discoverer(config, mocker):
    """Test that one broken package manager does not abort the scan."""
    flatpak = FlatpakDiscoverer()
    mocker.patch.object(flatpak, "_run", side_effect=DiscoveryError("flatpak list failed"))
    mocker.patch(
        "syld.cli.active_discoverers",
        return_value=[flatpak, PacmanDiscoverer(FIXTURES / "pacman_local")],
    )

    result = runner.invoke(app, ["scan"])

    assert result.exit_code == 0
    assert "Error listing flatpak packages" in result.output
    assert "pacman: 2 packages" in result.stdout
    _, packages = ScanStore(config.scan_db_path).load_latest_scan()
    assert len(packages) == 2


def test_scan_without_package_manager(config, mocker):
    mocker.patch("syld.cli.active_discoverers", return_value=[])

    result = runner.invoke(app, ["scan"])

    assert result.exit_code == 1
    assert "No supported package manager found" in result.output


def test_report_without_scan(config):
    result = runner.invoke(app, ["report"])

    assert result.exit_code == 1
    assert "syld scan" in result.output


def test_report_terminal(saved_scan):
    result = runner.invoke(app, ["report", "--no-enrich"])

    assert result.exit_code == 0
    assert "Total packages:         5" in result.stdout
    assert "0pointer.de/projects" in result.stdout


def test_report_json_to_file(saved_scan, tmp_path):
    output_file = tmp_path / "report.json"

    result = runner.invoke(
        app, ["report", "--format", "json", "--no-enrich", "--output", str(output_file)]
    )

    assert result.exit_code == 0
    assert "Generated:" in result.stdout
    data = json.loads(output_file.read_text())
    assert data["total_projects"] == 3
    assert data["enriched_projects"] == 0


def test_report_unknown_format(saved_scan):
    result = runner.invoke(app, ["report", "--format", "pdf"])

    assert result.exit_code == 1
    assert "Unknown report format" in result.output


def test_report_with_enrichment_uses_cache(config, saved_scan, mocker):
    """Test that enrichment results come from the cache when fresh."""
    EnrichmentCache(config.cache_db_path).set(
        "https://www.kernel.org/",
        UpstreamProject(name="linux", repo_url="https://www.kernel.org/", stars=1234),
    )
    mocker.patch("syld.cli.active_enrichers", return_value=[])

    result = runner.invoke(app, ["report", "--format", "json", "--enrich"])

    assert result.exit_code == 0
    data = json.loads(result.stdout)
    by_url = {p["url"]: p for p in data["projects"]}
    assert by_url["kernel.org"]["project"]["stars"] == 1234
    assert data["enriched_projects"] == 3


def test_report_enrich_defaults_to_config(config, saved_scan, mocker):
    config.enrich = True
    enrich = mocker.patch("syld.cli._enrich", return_value={})

    result = runner.invoke(app, ["report", "--format", "json"])

    assert result.exit_code == 0
    enrich.assert_called_once()


def test_cache_show(config):
    result = runner.invoke(app, ["cache", "show"])

    assert result.exit_code == 0
    assert "Entries:" in result.stdout
    assert "enrichment_cache.db" in result.stdout


def test_cache_show_counts_stale_entries(config, mocker):
    """Test that entries past the seven-day TTL are reported as stale."""
    cache = EnrichmentCache(config.cache_db_path)
    cache.set("https://a.org", UpstreamProject(name="a", homepage="https://a.org"))
    old = EnrichmentCache(
        config.cache_db_path,
        clock=lambda: datetime.now(UTC) - timedelta(days=30),
    )
    old.set("https://b.org", UpstreamProject(name="b", homepage="https://b.org"))

    result = runner.invoke(app, ["cache", "show"])

    assert result.exit_code == 0
    assert "Entries: 2" in result.stdout
    assert "Fresh entries: 1" in result.stdout
    assert "Stale entries: 1" in result.stdout


def test_cache_clear_single_key(config):
    cache = EnrichmentCache(config.cache_db_path)
    cache.set("https://a.org", UpstreamProject(name="a", homepage="https://a.org"))
    cache.set("https://b.org", UpstreamProject(name="b", homepage="https://b.org"))

    result = runner.invoke(app, ["cache", "clear", "https://a.org"])

    assert result.exit_code == 0
    assert "Cleared cache for:" in result.stdout
    assert cache.get("https://a.org") is None
    assert cache.get("https://b.org") is not None


def test_cache_clear_all(config):
    cache = EnrichmentCache(config.cache_db_path)
    cache.set("https://a.org", UpstreamProject(name="a", homepage="https://a.org"))

    result = runner.invoke(app, ["cache", "clear"])

    assert result.exit_code == 0
    assert cache.info()["count"] == 0


def test_cache_unknown_action(config):
    result = runner.invoke(app, ["cache", "purge"])

    assert result.exit_code != 0
    assert "No such command" in result.output


@pytest.mark.parametrize("args", [["config", "show"], ["config"]])
def test_config_show(config, mocker, tmp_path, args):
    """Test that the effective config is printed as TOML, and bare 'config' shows it too."""
    mocker.patch("syld.cli.Config.config_path", return_value=tmp_path / "config.toml")

    result = runner.invoke(app, args)

    assert result.exit_code == 0
    assert "enrich = false" in result.stdout
    assert "enrichers = [" in result.stdout
    assert '"open_collective"' in result.stdout
    assert "Config file:" in result.output
    assert str(tmp_path / "config.toml") in result.output


def test_config_show_reflects_loaded_file(tmp_path, mocker, monkeypatch):
    monkeypatch.delenv("GITHUB_TOKEN", raising=False)
    path = tmp_path / "config.toml"
    path.write_text('enrich = true\ngithub_token = "ghp_file"\nenrichers = ["github"]\n')
    mocker.patch("syld.config.Config.config_path", return_value=path)

    result = runner.invoke(app, ["config", "show"])

    assert result.exit_code == 0
    assert "enrich = true" in result.stdout
    assert '"github"' in result.stdout
    assert '"liberapay"' not in result.stdout
    assert "ghp_file" not in result.output


def test_invalid_config(mocker):
    mocker.patch("syld.cli.Config.load", side_effect=ValueError("Invalid TOML in x"))

    result = runner.invoke(app, ["cache", "show"])

    assert result.exit_code == 1
    assert "Invalid TOML" in result.output
