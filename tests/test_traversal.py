"""Tests for file system traversal functionality."""

import logging
from pathlib import Path

import pytest

from detector.traversal import (
    DEFAULT_IGNORE_DIRS,
    find_source_files,
    should_ignore_directory,
)


class TestDirectoryFiltering:
    """Test directory filtering logic."""

    def test_should_ignore_directory_in_set(self):
        assert should_ignore_directory(Path("node_modules"), DEFAULT_IGNORE_DIRS)
        assert should_ignore_directory(Path("project/.git"), DEFAULT_IGNORE_DIRS)

    def test_should_not_ignore_regular_directories(self):
        assert not should_ignore_directory(Path("src"), DEFAULT_IGNORE_DIRS)
        assert not should_ignore_directory(Path("lib"), DEFAULT_IGNORE_DIRS)


class TestFindSourceFiles:
    """Test find_source_files() against a small project tree."""

    @pytest.fixture
    def project(self, tmp_path: Path) -> Path:
        """
        project/
            app.js
            tool.py
            notes.md
            scripts/deploy.sh
            lib/model.rb
            build.gradle
            node_modules/dep/index.js
            dist/bundle.js
        """
        for rel in (
            "app.js",
            "tool.py",
            "notes.md",
            "scripts/deploy.sh",
            "lib/model.rb",
            "build.gradle",
            "node_modules/dep/index.js",
            "dist/bundle.js",
        ):
            path = tmp_path / rel
            path.parent.mkdir(parents=True, exist_ok=True)
            path.write_text("x = 1\n", encoding="utf-8")
        return tmp_path

    def test_collects_supported_files_sorted(self, project: Path):
        files = find_source_files(project)
        names = [p.relative_to(project.resolve()).as_posix() for p in files]
        assert names == ["app.js", "build.gradle", "lib/model.rb", "scripts/deploy.sh", "tool.py"]

    def test_custom_ignore_dirs(self, project: Path):
        files = find_source_files(project, ignore_dirs={"lib", "scripts"})
        names = {p.relative_to(project.resolve()).as_posix() for p in files}
        assert "lib/model.rb" not in names
        assert "node_modules/dep/index.js" in names
        assert "dist/bundle.js" in names

    def test_filter_fn(self, project: Path):
        files = find_source_files(project, filter_fn=lambda p: p.suffix == ".py")
        assert [p.name for p in files] == ["tool.py"]

    def test_logs_summary(self, project: Path, caplog):
        caplog.set_level(logging.INFO, logger="detector.traversal")
        find_source_files(project)
        assert any("found 5 source file(s)" in r.getMessage() for r in caplog.records)

    def test_missing_root(self, tmp_path: Path):
        with pytest.raises(FileNotFoundError):
            find_source_files(tmp_path / "nope")

    def test_root_is_a_file(self, tmp_path: Path):
        target = tmp_path / "single.js"
        target.write_text("", encoding="utf-8")
        with pytest.raises(NotADirectoryError):
            find_source_files(target)

    def test_empty_directory(self, tmp_path: Path):
        assert find_source_files(tmp_path) == []
