"""Tests for the total size limit (max_size_mb)."""

import errno
import os

import pytest

from treefs import NoSpace, TreeFS, configure

MB = 1024 * 1024


def open_new(fs, path):
    fs.create(path, 0o644)
    return fs.open(path, os.O_RDWR)


class TestSizeLimit:
    """Tests for TreeFS max_size_mb limit."""

    def test_no_limit_allows_any_size(self):
        """Test that an unconfigured tree accepts large writes."""
        fs = TreeFS()
        fd = open_new(fs, "/large.bin")

        content = b"x" * (10 * MB)
        assert fs.write("/large.bin", fd, content, len(content), 0) == len(content)

    def test_limit_allows_within_budget(self):
        """Test that writes within limit succeed."""
        fs = TreeFS(config=configure(max_size_mb=1))
        fd = open_new(fs, "/file.bin")

        content = b"x" * (500 * 1024)
        assert fs.write("/file.bin", fd, content, len(content), 0) == len(content)

    def test_limit_blocks_oversized_single_write(self):
        """Test that a single write over the limit fails with ENOSPC."""
        fs = TreeFS(config=configure(max_size_mb=1))
        fd = open_new(fs, "/large.bin")

        content = b"x" * (2 * MB)
        with pytest.raises(NoSpace, match="Tree size limit exceeded") as excinfo:
            fs.write("/large.bin", fd, content, len(content), 0)

        assert excinfo.value.errno == errno.ENOSPC
        assert fs.getattr("/large.bin").st_size == 0

    def test_limit_blocks_cumulative_overflow(self):
        """Test that writes across files count against one shared limit."""
        fs = TreeFS(config=configure(max_size_mb=1))
        first = open_new(fs, "/file1.bin")
        second = open_new(fs, "/file2.bin")

        fs.write("/file1.bin", first, b"x" * (500 * 1024), 500 * 1024, 0)

        with pytest.raises(NoSpace):
            fs.write("/file2.bin", second, b"y" * (600 * 1024), 600 * 1024, 0)

    def test_overwrite_in_place_is_free(self):
        """Test that overwriting existing bytes does not grow the tree."""
        fs = TreeFS(config=configure(max_size_mb=1))
        fd = open_new(fs, "/file.bin")
        fs.write("/file.bin", fd, b"x" * (900 * 1024), 900 * 1024, 0)

        assert fs.write("/file.bin", fd, b"y" * (900 * 1024), 900 * 1024, 0) == 900 * 1024

    def test_truncate_growth_counts(self):
        """Test that growing a file with truncate counts against the limit."""
        fs = TreeFS(config=configure(max_size_mb=1))
        open_new(fs, "/file.bin")

        with pytest.raises(NoSpace):
            fs.truncate("/file.bin", 2 * MB)

        assert fs.getattr("/file.bin").st_size == 0

    def test_truncate_shrink_always_allowed(self):
        """Test that shrinking a file is always allowed."""
        fs = TreeFS(config=configure(max_size_mb=1))
        fd = open_new(fs, "/file.bin")
        fs.write("/file.bin", fd, b"x" * MB, MB, 0)

        assert fs.truncate("/file.bin", 10) == 0
        assert fs.total_size() == 10

    def test_total_size_counts_nested_files(self):
        """Test that total_size sums files in every directory."""
        fs = TreeFS()
        fs.mkdir("/a", 0o755)
        fd = open_new(fs, "/a/one")
        fs.write("/a/one", fd, b"12345", 5, 0)
        fd = open_new(fs, "/two")
        fs.write("/two", fd, b"123", 3, 0)

        assert fs.total_size() == 8
