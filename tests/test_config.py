"""Tests for configuration dataclasses and the configure() factory."""

import pytest

from treefs import MountConfig, TreeFS, TreeFSConfig, configure


class TestConfigure:
    """Tests for the configure() factory."""

    def test_defaults(self):
        """Test that configure() with no options gives the defaults."""
        config = configure()

        assert config == TreeFSConfig()
        assert config.directory_size == 4096
        assert config.recycle_descriptors is False
        assert config.max_size_mb is None
        assert config.max_size_bytes is None

    def test_options(self):
        """Test that options are carried into the config."""
        config = configure(directory_size=1024, recycle_descriptors=True, max_size_mb=2)

        assert config.directory_size == 1024
        assert config.recycle_descriptors is True
        assert config.max_size_bytes == 2 * 1024 * 1024

    def test_unknown_option_raises(self):
        """Test that unknown options are rejected."""
        with pytest.raises(ValueError, match="Unexpected arguments"):
            configure(root="/tmp")

    @pytest.mark.parametrize("key", ["directory_size", "max_size_mb"])
    def test_negative_values_raise(self, key):
        """Test that negative sizes are rejected."""
        with pytest.raises(ValueError, match=key):
            configure(**{key: -1})


def test_treefs_uses_config():
    """Test that TreeFS builds its descriptor table from the config."""
    fs = TreeFS(config=configure(recycle_descriptors=True))

    assert fs.fds.recycle is True


def test_treefs_default_config():
    """Test that TreeFS falls back to a default config."""
    fs = TreeFS()

    assert fs.config == TreeFSConfig()
    assert fs.fds.recycle is False


def test_mount_config_defaults():
    """Test MountConfig defaults."""
    config = MountConfig(mountpoint="/tmp/mnt")

    assert config.foreground is True
    assert config.debug is False
    assert config.allow_other is False
    assert config.seed is None
