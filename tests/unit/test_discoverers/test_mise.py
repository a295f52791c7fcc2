"""Tests for the mise discoverer."""

from pathlib import Path

import pytest

from syld.discoverers.base import DiscoveryError
from syld.discoverers.mise import MiseDiscoverer, parse_mise_ls
from syld.models import PackageSource

FIXTURE = Path(__file__).parent.parent.parent / "fixtures" / "mise_ls.json"


class TestParseMiseLs:
    """Test suite for parse_mise_ls()."""

    def test_fixture(self, caplog) -> None:
        packages = parse_mise_ls(FIXTURE.read_text())

        assert [(p.name, p.version) for p in packages] == [
            ("node", "20.12.2"),
            ("python", "3.11.9"),
            ("python", "3.12.3"),
        ]
        assert all(p.source == PackageSource.MISE for p in packages)
        assert "Skipping mise entry without version for broken" in caplog.text

    def test_descriptions(self) -> None:
        packages = {(p.name, p.version): p for p in parse_mise_ls(FIXTURE.read_text())}

        assert packages[("python", "3.12.3")].description == (
            "python (from mise.toml: /home/user/project/mise.toml)"
        )
        assert packages[("python", "3.11.9")].description == "python (installed via mise)"
        assert packages[("node", "20.12.2")].description == "node (from .tool-versions)"

    def test_empty_output(self) -> None:
        assert parse_mise_ls("  \n") == []

    @pytest.mark.parametrize("output", ["not json", "[1, 2]"])
    def test_invalid_output(self, output: str) -> None:
        with pytest.raises(ValueError, match="Invalid mise ls output"):
            parse_mise_ls(output)


class TestMiseDiscoverer:
    """Test suite for MiseDiscoverer."""

    def test_discover(self, mocker) -> None:
        run = mocker.patch.object(MiseDiscoverer, "_run", return_value=FIXTURE.read_text())

        packages = MiseDiscoverer().discover()

        run.assert_called_once_with("ls", "--json")
        assert len(packages) == 3

    def test_invalid_output_is_a_discovery_error(self, mocker) -> None:
        mocker.patch.object(MiseDiscoverer, "_run", return_value="{")

        with pytest.raises(DiscoveryError):
            MiseDiscoverer().discover()
