"""Tests for the Snap discoverer."""

from pathlib import Path

import pytest

from syld.discoverers.snap import SnapDiscoverer, parse_snap_list, parse_snap_yaml
from syld.models import PackageSource

FIXTURES = Path(__file__).parent.parent.parent / "fixtures"
SNAP_LIST = (FIXTURES / "snap_list.txt").read_text()


class TestParseSnapList:
    """Test suite for parse_snap_list()."""

    def test_skips_header(self) -> None:
        packages = parse_snap_list(SNAP_LIST)

        assert [(p.name, p.version) for p in packages] == [
            ("core22", "20240408"),
            ("firefox", "126.0-2"),
            ("lxd", "5.21.1-d46c406"),
        ]
        assert all(p.source == PackageSource.SNAP for p in packages)

    def test_header_only(self) -> None:
        assert parse_snap_list("Name  Version  Rev  Tracking  Publisher  Notes\n") == []

    def test_empty_output(self) -> None:
        assert parse_snap_list("") == []


class TestParseSnapYaml:
    """Test suite for parse_snap_yaml()."""

    def test_summary_and_license(self) -> None:
        meta = parse_snap_yaml(
            (FIXTURES / "snap_root" / "firefox" / "current" / "meta" / "snap.yaml").read_text()
        )

        assert meta == {
            "description": "Mozilla Firefox web browser",
            "licenses": ("MPL-2.0",),
        }

    def test_description_without_summary(self) -> None:
        meta = parse_snap_yaml("name: x\ndescription: |\n  Long text.\n")

        assert meta == {"description": "Long text."}

    def test_not_a_mapping(self) -> None:
        assert parse_snap_yaml("just a string\n") == {}

    def test_invalid_yaml_raises(self) -> None:
        with pytest.raises(ValueError, match="Invalid snap.yaml"):
            parse_snap_yaml("summary: [unclosed\n")


class TestSnapDiscoverer:
    """Test suite for SnapDiscoverer."""

    def test_discover_adds_metadata(self, mocker, caplog) -> None:
        """Test that snap.yaml fills description and license where readable."""
        mocker.patch.object(SnapDiscoverer, "_run", return_value=SNAP_LIST)
        discoverer = SnapDiscoverer(snap_root=FIXTURES / "snap_root")

        packages = {p.name: p for p in discoverer.discover()}

        assert packages["firefox"].description == "Mozilla Firefox web browser"
        assert packages["firefox"].licenses == ("MPL-2.0",)
        assert packages["firefox"].version == "126.0-2"
        # no snap.yaml
        assert packages["core22"].description is None
        # unreadable snap.yaml
        assert packages["lxd"].description is None
        assert "Failed to read" in caplog.text

    def test_name(self) -> None:
        assert SnapDiscoverer().name == "snap"
