"""Unit tests for config copying."""

from pathlib import Path

import pytest

from create_rust_github_repo.exceptions import ConfigCopyError
from create_rust_github_repo.execution import copy_configs


def snapshot(root: Path) -> dict:
    """Map every file under root to its bytes, keyed by relative posix path."""
    return {
        path.relative_to(root).as_posix(): path.read_bytes()
        for path in sorted(root.rglob("*"))
        if path.is_file()
    }


@pytest.fixture
def source_tree(tmp_path):
    """Create a config source tree with nested directories."""
    source = tmp_path / "source"
    (source / ".github" / "workflows").mkdir(parents=True)
    (source / ".github" / "workflows" / "ci.yml").write_text("name: CI\non: [push]\n")
    (source / ".github" / "dependabot.yml").write_text("version: 2\n")
    (source / "lint").mkdir()
    (source / "lint" / ".rc").write_text("strict = true\n")
    (source / "rustfmt.toml").write_text("max_width = 100\n")
    (source / "clippy.toml").write_bytes(b"msrv = \"1.70\"\n\x00binary-ish")
    (source / "unrelated.txt").write_text("not copied\n")
    return source


class TestCopyConfigs:
    """Tests for copy_configs."""

    def test_copies_files_and_directories(self, source_tree, tmp_path):
        """Test the target tree mirrors the requested source paths exactly."""
        target = tmp_path / "target"

        copy_configs(source_tree, [".github", "rustfmt.toml", "clippy.toml", "lint"], target)

        expected = {k: v for k, v in snapshot(source_tree).items() if k != "unrelated.txt"}
        assert snapshot(target) == expected

    def test_returns_written_files(self, source_tree, tmp_path):
        target = tmp_path / "target"

        copied = copy_configs(source_tree, [".github", "rustfmt.toml"], target)

        assert sorted(p.relative_to(target).as_posix() for p in copied) == [
            ".github/dependabot.yml",
            ".github/workflows/ci.yml",
            "rustfmt.toml",
        ]

    def test_nested_file_creates_intermediate_directories(self, source_tree, tmp_path):
        """Test a file path under a subdirectory lands at the same relative place."""
        target = tmp_path / "target"

        copy_configs(source_tree, ["lint/.rc", ".github/workflows/ci.yml"], target)

        assert (target / "lint" / ".rc").read_text() == "strict = true\n"
        assert (target / ".github" / "workflows" / "ci.yml").read_text() == "name: CI\non: [push]\n"
        assert not (target / ".github" / "dependabot.yml").exists()

    def test_overwrites_existing_files(self, source_tree, tmp_path):
        """Test existing destination files are replaced without confirmation."""
        target = tmp_path / "target"
        (target / ".github" / "workflows").mkdir(parents=True)
        (target / ".github" / "workflows" / "ci.yml").write_text("old\n")
        (target / "rustfmt.toml").write_text("old\n")
        (target / "Cargo.toml").write_text("[package]\n")

        copy_configs(source_tree, [".github", "rustfmt.toml"], target)

        assert (target / ".github" / "workflows" / "ci.yml").read_text() == "name: CI\non: [push]\n"
        assert (target / "rustfmt.toml").read_text() == "max_width = 100\n"
        assert (target / "Cargo.toml").read_text() == "[package]\n"

    def test_missing_source_path(self, source_tree, tmp_path):
        """Test a missing source path fails with the offending path."""
        target = tmp_path / "target"

        with pytest.raises(ConfigCopyError, match="does not exist") as exc_info:
            copy_configs(source_tree, ["rustfmt.toml", "deny.toml"], target)

        assert exc_info.value.path == source_tree / "deny.toml"
        # Paths before the missing one were already copied
        assert (target / "rustfmt.toml").exists()

    def test_empty_path_list(self, source_tree, tmp_path):
        target = tmp_path / "target"

        assert copy_configs(source_tree, [], target) == []
        assert not target.exists()

    def test_filesystem_error_wrapped(self, source_tree, tmp_path, monkeypatch):
        """Test OSErrors during the copy surface as ConfigCopyError."""
        def failing_copy(src, dst, *args, **kwargs):
            raise PermissionError(13, "Permission denied", str(dst))

        monkeypatch.setattr("create_rust_github_repo.execution.copier.shutil.copy2", failing_copy)

        with pytest.raises(ConfigCopyError, match="Permission denied") as exc_info:
            copy_configs(source_tree, ["rustfmt.toml"], tmp_path / "target")

        assert exc_info.value.path == tmp_path / "target" / "rustfmt.toml"
