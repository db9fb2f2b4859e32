"""Pytest configuration and fixtures."""

import os
import sys
from pathlib import Path

import pytest

# Add src to path (for 'packetzip.*' imports without installing)
repo_root = Path(__file__).parent.parent
sys.path.insert(0, str(repo_root / "src"))


@pytest.fixture(autouse=True)
def _isolate_runtime(monkeypatch):
    """Keep env overrides, buses and verbosity from leaking between tests."""
    from packetzip.core.events import get_event_bus
    from packetzip.core.log_bus import get_log_bus
    from packetzip.core.logging import get_verbosity, set_verbosity

    for key in list(os.environ):
        if key.startswith("PACKETZIP_"):
            monkeypatch.delenv(key, raising=False)

    verbosity = get_verbosity()
    get_event_bus().clear()
    get_log_bus().clear()
    yield
    get_event_bus().clear()
    get_log_bus().clear()
    set_verbosity(verbosity)


@pytest.fixture
def config_resolver(tmp_path):
    """ConfigResolver with built-in defaults and no user/system config files.

    Args:
        tmp_path: pytest temporary directory

    Returns:
        ConfigResolver instance
    """
    from packetzip.core.config import ConfigResolver

    return ConfigResolver(
        cli_args={},
        user_config_path=tmp_path / "no_user_config.yaml",
        system_config_path=tmp_path / "no_system_config.yaml",
    )


@pytest.fixture
def archive_service(config_resolver):
    """ArchiveService bound to the isolated resolver."""
    from packetzip.archive import ArchiveService

    return ArchiveService(config_resolver)


@pytest.fixture
def sample_tree(tmp_path):
    """Create a small directory tree with nested, empty and hidden entries.

    Layout:
        docs/readme.txt
        docs/sub/data.bin
        docs/sub/deeper/note.txt
        docs/empty/
        docs/.secret
        docs/.cache/blob.bin

    Returns:
        Path to the 'docs' directory
    """
    root = tmp_path / "src" / "docs"
    (root / "sub" / "deeper").mkdir(parents=True)
    (root / "empty").mkdir()
    (root / ".cache").mkdir()
    (root / "readme.txt").write_bytes(b"hello archive\n")
    (root / "sub" / "data.bin").write_bytes(bytes(range(256)) * 9)
    (root / "sub" / "deeper" / "note.txt").write_bytes(b"nested")
    (root / ".secret").write_bytes(b"do not pack")
    (root / ".cache" / "blob.bin").write_bytes(b"cached")
    return root
