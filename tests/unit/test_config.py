"""Unit tests for protobuild.config."""
from __future__ import annotations

from pathlib import Path

import pytest

from protobuild.config import DEFAULT_ROOTS, BuildConfig
from protobuild.errors import ConfigError


def _write(tmp_path: Path, text: str) -> Path:
    path = tmp_path / "protobuild.yaml"
    path.write_text(text, encoding="utf-8")
    return path


class TestDefaults:
    def test_defaults(self, monkeypatch: pytest.MonkeyPatch) -> None:
        monkeypatch.delenv("OUT_DIR", raising=False)
        config = BuildConfig.from_env()
        assert config.roots == DEFAULT_ROOTS
        assert config.out_dir == "build"
        assert config.output_dir == Path("build/protos")
        assert config.vendored_root == "vendored_protoc"
        assert config.manifest_name == "protos.deps"
        assert config.target == "python"
        assert config.timeout is None
        assert config.strict_manifest is True

    def test_out_dir_from_environment(self, monkeypatch: pytest.MonkeyPatch) -> None:
        monkeypatch.setenv("OUT_DIR", "/tmp/scratch")
        assert BuildConfig.from_env().out_dir == "/tmp/scratch"


class TestLoad:
    def test_full_file(self, tmp_path: Path) -> None:
        path = _write(
            tmp_path,
            "roots:\n"
            "  - protos/a.proto\n"
            "  - protos/b.proto\n"
            "project_root: src\n"
            "out_dir: out\n"
            "output_subdir: gen\n"
            "target: python+pyi\n"
            "timeout: 60\n"
            "strict_manifest: false\n",
        )
        config = BuildConfig.load(path)
        assert config.roots == ("protos/a.proto", "protos/b.proto")
        assert config.project_root == "src"
        assert config.output_dir == Path("out/gen")
        assert config.target == "python+pyi"
        assert config.timeout == 60.0
        assert config.strict_manifest is False

    def test_empty_file_uses_defaults(self, tmp_path: Path) -> None:
        assert BuildConfig.load(_write(tmp_path, "")).roots == DEFAULT_ROOTS

    def test_env_reference(self, tmp_path: Path, monkeypatch: pytest.MonkeyPatch) -> None:
        monkeypatch.setenv("PROTO_OUT", "/var/build")
        config = BuildConfig.load(_write(tmp_path, "out_dir: ${PROTO_OUT}\n"))
        assert config.out_dir == "/var/build"

    def test_unset_out_dir_reference_falls_back(self, tmp_path: Path, monkeypatch: pytest.MonkeyPatch) -> None:
        monkeypatch.delenv("OUT_DIR", raising=False)
        monkeypatch.delenv("UNSET_DIR", raising=False)
        config = BuildConfig.load(_write(tmp_path, "out_dir: ${UNSET_DIR}\n"))
        assert config.out_dir == "build"

    def test_unknown_key(self, tmp_path: Path) -> None:
        with pytest.raises(ConfigError, match="unknown key"):
            BuildConfig.load(_write(tmp_path, "rootz: [a.proto]\n"))

    @pytest.mark.parametrize("roots", ["a.proto", "[]", "[1, 2]", "['']"])
    def test_bad_roots(self, tmp_path: Path, roots: str) -> None:
        with pytest.raises(ConfigError, match="root"):
            BuildConfig.load(_write(tmp_path, f"roots: {roots}\n"))

    def test_bad_timeout(self, tmp_path: Path) -> None:
        with pytest.raises(ConfigError, match="timeout"):
            BuildConfig.load(_write(tmp_path, "timeout: soon\n"))

    def test_not_a_mapping(self, tmp_path: Path) -> None:
        with pytest.raises(ConfigError, match="mapping"):
            BuildConfig.load(_write(tmp_path, "- a\n- b\n"))

    def test_invalid_yaml(self, tmp_path: Path) -> None:
        with pytest.raises(ConfigError, match="invalid YAML"):
            BuildConfig.load(_write(tmp_path, "roots: [unclosed\n"))

    def test_missing_file(self, tmp_path: Path) -> None:
        with pytest.raises(ConfigError, match="cannot read"):
            BuildConfig.load(tmp_path / "absent.yaml")

    def test_error_stage(self, tmp_path: Path) -> None:
        with pytest.raises(ConfigError) as excinfo:
            BuildConfig.load(tmp_path / "absent.yaml")
        assert excinfo.value.stage == "config"


class TestOverrides:
    def test_none_values_ignored(self) -> None:
        config = BuildConfig(out_dir="out")
        assert config.with_overrides(out_dir=None, timeout=None) == config

    def test_values_applied(self) -> None:
        config = BuildConfig(out_dir="out").with_overrides(
            roots=("x.proto",), timeout=5.0, strict_manifest=False
        )
        assert config.roots == ("x.proto",)
        assert config.timeout == 5.0
        assert config.strict_manifest is False

    def test_frozen(self) -> None:
        with pytest.raises(AttributeError):
            BuildConfig().target = "rust"  # type: ignore[misc]
