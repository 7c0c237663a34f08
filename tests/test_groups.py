"""
Tests for package group resolution: manifest > config arrays > defaults.
"""

from ghostarch.core.models.config import InstallConfig
from ghostarch.core.models.groups import GroupSource, PackageManifest
from ghostarch.core.services.groups import (
    BUILTIN_GROUP_NAMES,
    format_group_listing,
    is_truthy,
    resolve_groups,
    skip_flag_name,
    validate_manifest,
)


def _manifest(groups: dict) -> PackageManifest:
    return PackageManifest.model_validate({"groups": groups})


class TestSkipFlagName:
    def test_simple(self):
        assert skip_flag_name("networking") == "SKIP_NETWORKING"

    def test_non_alphanumeric(self):
        assert skip_flag_name("web-tools") == "SKIP_WEB_TOOLS"
        assert skip_flag_name("re.con 2") == "SKIP_RE_CON_2"


class TestIsTruthy:
    def test_values(self):
        assert is_truthy("true")
        assert is_truthy("TRUE")
        assert is_truthy("1")
        assert is_truthy("yes")
        assert not is_truthy("false")
        assert not is_truthy("")
        assert not is_truthy(None)

    def test_other_words_are_false(self):
        assert not is_truthy("on")
        assert not is_truthy("y")
        assert not is_truthy("enabled")

    def test_env_on_does_not_skip(self):
        resolution = resolve_groups(None, InstallConfig(), env={"SKIP_RECON": "on"})
        assert not resolution.get("recon").skipped


class TestConfigMode:
    def test_defaults(self):
        resolution = resolve_groups(None, InstallConfig(), env={})
        assert resolution.mode == "config"
        assert [g.name for g in resolution.groups] == list(BUILTIN_GROUP_NAMES)
        assert all(g.source == GroupSource.DEFAULT for g in resolution.groups)
        pentest = resolution.get("pentest")
        assert pentest.packages == ["nmap", "ettercap", "wireshark-cli"]
        assert pentest.description == "Pentest Tools"
        assert pentest.skip_flag == "SKIP_PENTEST"

    def test_config_array_overrides_default(self):
        config = InstallConfig(recon_packages=["amass"])
        resolution = resolve_groups(None, config, env={})
        recon = resolution.get("recon")
        assert recon.packages == ["amass"]
        assert recon.source == GroupSource.CONFIG
        assert resolution.get("pentest").source == GroupSource.DEFAULT

    def test_empty_config_array_falls_back(self):
        config = InstallConfig(recon_packages=[])
        recon = resolve_groups(None, config, env={}).get("recon")
        assert recon.source == GroupSource.DEFAULT
        assert "theharvester" in recon.packages

    def test_networking_defaults_complete(self):
        networking = resolve_groups(None, None, env={}).get("networking")
        assert len(networking.packages) == 17
        assert networking.packages[0] == "net-tools"
        assert networking.packages[-1] == "p7zip"


class TestManifestMode:
    def test_manifest_wins_over_config(self):
        manifest = _manifest({"web": {"description": "Web", "packages": ["nikto"]}})
        config = InstallConfig(networking_packages=["curl"])
        resolution = resolve_groups(manifest, config, env={})
        assert resolution.mode == "manifest"
        assert [g.name for g in resolution.groups] == ["web"]
        assert resolution.groups[0].source == GroupSource.MANIFEST

    def test_declaration_order(self):
        manifest = _manifest({"zeta": "a", "alpha": "b", "mid": "c"})
        resolution = resolve_groups(manifest, env={})
        assert [g.name for g in resolution.groups] == ["zeta", "alpha", "mid"]

    def test_missing_description(self):
        resolution = resolve_groups(_manifest({"extras": "tmux"}), env={})
        group = resolution.groups[0]
        assert group.description == ""
        assert group.title == "extras"
        assert "    Description: N/A" in format_group_listing(resolution)

    def test_validation_warnings(self):
        resolution = resolve_groups(_manifest({"extras": "", "web": {"description": "Web"}}), env={})
        assert "Group 'extras' has no description (consider adding one to the manifest)" in resolution.warnings
        assert "Group 'extras' has empty package list" in resolution.warnings
        assert "Group 'web' has empty package list" in resolution.warnings

    def test_empty_group_not_active(self):
        resolution = resolve_groups(_manifest({"extras": "", "web": "nikto"}), env={})
        assert [g.name for g in resolution.active()] == ["web"]


class TestSkipping:
    def test_cli_skip(self):
        resolution = resolve_groups(None, skip=["recon"], env={})
        assert resolution.get("recon").skipped
        assert not resolution.get("pentest").skipped

    def test_env_skip(self):
        resolution = resolve_groups(None, env={"SKIP_PENTEST": "true", "SKIP_RECON": "false"})
        assert resolution.get("pentest").skipped
        assert not resolution.get("recon").skipped

    def test_env_skip_manifest_group(self):
        manifest = _manifest({"web-tools": "nikto"})
        resolution = resolve_groups(manifest, env={"SKIP_WEB_TOOLS": "1"})
        assert resolution.groups[0].skipped
        assert resolution.active() == []

    def test_unknown_skip_warns(self):
        resolution = resolve_groups(None, skip=["wireless"], env={})
        assert "Unknown group 'wireless' in --skip, ignored" in resolution.warnings

    def test_skip_is_logged(self, caplog):
        with caplog.at_level("INFO"):
            resolve_groups(None, env={"SKIP_RECON": "yes"})
        assert "SKIP_RECON" in caplog.text


class TestValidateManifest:
    def test_none(self):
        assert validate_manifest(None) == []

    def test_complete_group(self):
        assert validate_manifest(_manifest({"web": {"description": "Web", "packages": "nikto"}})) == []


class TestListing:
    def test_format(self):
        manifest = _manifest({"web": {"description": "Web Tools", "packages": "nikto gobuster"}, "extras": ""})
        text = format_group_listing(resolve_groups(manifest, skip=["web"], env={}))
        assert text.startswith("Available package groups:")
        assert "Description: Web Tools" in text
        assert "Packages: nikto gobuster" in text
        assert "Skip flag: SKIP_WEB" in text
        assert "Packages: N/A" in text
        assert "Status: skipped" in text
