"""Tests for the filesystem SDK scan."""

from __future__ import annotations

import itertools
from pathlib import Path

import pytest

from ticli.infra.sdk_registry import SDKRegistry


@pytest.fixture()
def registry() -> SDKRegistry:
    return SDKRegistry()


class TestScan:
    def test_finds_sdks_with_manifest(
        self, sdk_root: Path, registry: SDKRegistry, make_sdk,
    ) -> None:
        make_sdk(sdk_root, "3.1.0.GA", "3.1.0")
        make_sdk(sdk_root, "4.0.0.GA", "4.0.0")
        (sdk_root / "not-an-sdk").mkdir()

        found = registry.scan([sdk_root])
        assert [sdk.name for sdk in found] == ["3.1.0.GA", "4.0.0.GA"]
        assert found[0].version == "3.1.0"
        assert found[0].path == sdk_root / "3.1.0.GA"

    def test_missing_search_path_is_ignored(self, tmp_path: Path, registry: SDKRegistry) -> None:
        assert registry.scan([tmp_path / "nowhere"]) == ()

    def test_platforms_are_sorted(
        self, sdk_root: Path, registry: SDKRegistry, make_sdk,
    ) -> None:
        make_sdk(sdk_root, "3.1.0", "3.1.0", platforms=["iphone", "android"])
        (sdk,) = registry.scan([sdk_root])
        assert [p.name for p in sdk.platforms] == ["android", "iphone"]
        assert sdk.platform("iphone").path == sdk_root / "3.1.0" / "platforms" / "iphone"
        assert sdk.platform("windows") is None

    def test_malformed_manifest_is_skipped(
        self, sdk_root: Path, registry: SDKRegistry, make_sdk,
        caplog: pytest.LogCaptureFixture,
    ) -> None:
        bad = sdk_root / "broken"
        bad.mkdir()
        (bad / "manifest.json").write_text("{", encoding="utf-8")
        make_sdk(sdk_root, "3.1.0", "3.1.0")

        found = registry.scan([sdk_root])
        assert [sdk.name for sdk in found] == ["3.1.0"]
        assert "unreadable manifest" in caplog.text

    def test_manifest_without_version_falls_back_to_name(
        self, sdk_root: Path, registry: SDKRegistry, make_sdk,
    ) -> None:
        make_sdk(sdk_root, "5.0.0.GA")
        (sdk,) = registry.scan([sdk_root])
        assert sdk.manifest.version is None
        assert sdk.version == "5.0.0.GA"


class TestDuplicates:
    @pytest.fixture()
    def search_paths(self, tmp_path: Path, make_sdk) -> list[Path]:
        paths = []
        for label in ("first", "second", "third"):
            root = tmp_path / label
            make_sdk(root, "3.1.0", "3.1.0")
            make_sdk(root, f"only-{label}", "3.0.0")
            paths.append(root)
        return paths

    def test_earliest_path_wins_for_every_ordering(
        self, search_paths: list[Path], registry: SDKRegistry,
    ) -> None:
        for ordering in itertools.permutations(search_paths):
            found = registry.scan(ordering)
            shared = [sdk for sdk in found if sdk.name == "3.1.0"]
            assert len(shared) == 1
            assert shared[0].path == ordering[0] / "3.1.0"

    def test_repeated_scans_are_identical(
        self, search_paths: list[Path], registry: SDKRegistry,
    ) -> None:
        assert registry.scan(search_paths) == registry.scan(search_paths)
        assert len(registry.scan(search_paths)) == 4


class TestResolveDelegation:
    def test_resolve_and_compatibility(
        self, sdk_root: Path, registry: SDKRegistry, make_sdk,
    ) -> None:
        make_sdk(sdk_root, "2.9.0", "2.9.0")
        make_sdk(sdk_root, "3.2.0", "3.2.0")
        found = registry.scan([sdk_root])

        latest = registry.resolve("latest", found)
        assert latest.name == "3.2.0"
        assert registry.is_compatible(latest, "3.0.0")
        assert not registry.is_compatible(registry.resolve("2.9.0", found), "3.0.0")
