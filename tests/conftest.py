"""
Pytest configuration and fixtures
"""

import json
from pathlib import Path
from typing import Dict, Optional
from unittest.mock import Mock

import pytest
import yaml

from deskstat.theme.packages import PackageLocator


def write_package(
    root: Path,
    name: str,
    files: Dict[str, str],
    main: Optional[str] = None,
) -> Path:
    """Create ``root/node_modules/<name>`` with a manifest and the given files"""
    package_dir = root / "node_modules" / name
    package_dir.mkdir(parents=True, exist_ok=True)

    manifest = {"name": name, "version": "1.0.0"}
    if main:
        manifest["main"] = main
    (package_dir / "package.json").write_text(json.dumps(manifest))

    for relative, content in files.items():
        path = package_dir / relative
        path.parent.mkdir(parents=True, exist_ok=True)
        path.write_text(content)
    return package_dir


@pytest.fixture
def make_package(tmp_path):
    """Factory creating installed packages under the test project"""

    def factory(name, files=None, main=None, root=None):
        return write_package(root or tmp_path, name, files or {}, main=main)

    return factory


@pytest.fixture
def theme_dir(tmp_path):
    """Empty theme directory inside the test project"""
    path = tmp_path / "theme"
    path.mkdir()
    return path


@pytest.fixture
def package_locator():
    """Package locator that never asks npm for the global root"""
    return PackageLocator(use_npm=False)


@pytest.fixture
def sample_config():
    """Sample configuration for testing"""
    return {
        "theme": "deskstat-theme-minimal",
        "refresh": 2000,
        "refresh-battery": 15000,
        "watch": True,
        "module_blacklist": ["electron", "lodash", "jquery"],
        "stats_modules": ["cpu", "memory", "power"],
        "stats_settings": {"disk": {"paths": ["/"]}},
    }


@pytest.fixture
def config_file(tmp_path, sample_config):
    """Create a temporary config file"""
    config_path = tmp_path / "test_config.yaml"
    with open(config_path, "w") as f:
        yaml.dump(sample_config, f)
    return config_path


@pytest.fixture
def mock_window():
    """Mock window host"""
    window = Mock()
    window.is_open.return_value = True
    return window


@pytest.fixture
def mock_platform():
    """Mock platform implementation"""
    platform = Mock()
    platform.name = "test"
    platform.detect.return_value = True
    platform.apply_window_hints.return_value = True
    return platform


@pytest.fixture(autouse=True)
def isolated_environment(monkeypatch):
    """Keep global package directories of the host out of tests"""
    monkeypatch.delenv("NODE_PATH", raising=False)


@pytest.fixture(autouse=True)
def no_subprocess_calls(monkeypatch):
    """Prevent actual subprocess calls during testing"""
    mock_popen = Mock()
    mock_popen.returncode = 0
    mock_popen.poll.return_value = None
    monkeypatch.setattr("subprocess.Popen", Mock(return_value=mock_popen))
    monkeypatch.setattr(
        "subprocess.run", Mock(return_value=Mock(returncode=0, stdout="", stderr=""))
    )
