"""Pytest configuration and shared fixtures.

This module contains fixtures used across all test modules.
"""

from pathlib import Path

import pytest
from drupalctl.models.config import GitSettings, InstallerConfig
from drupalctl.models.release import Release, ReleaseHistory
from fakes import FakeRunner


@pytest.fixture
def fake_runner() -> FakeRunner:
    """Command runner that never touches a real git binary."""
    return FakeRunner()


@pytest.fixture
def project_dir(tmp_path: Path) -> Path:
    """Empty project working tree."""
    path = tmp_path / "project"
    path.mkdir()
    return path


@pytest.fixture
def scratch_parent(tmp_path: Path) -> Path:
    """Directory preservation scratch directories are created in."""
    path = tmp_path / "scratch"
    path.mkdir()
    return path


@pytest.fixture
def default_config() -> InstallerConfig:
    """Configuration with every option at its default."""
    return InstallerConfig()


@pytest.fixture
def branching_config() -> InstallerConfig:
    """Configuration that commits and branches from master."""
    return InstallerConfig(
        git=GitSettings(commit=True, base_branch="master", commit_prefix="[drupal] "),
    )


@pytest.fixture
def views_history() -> ReleaseHistory:
    """Release history of views 7.x with one security release at 7.x-3.11."""
    return ReleaseHistory(
        project="views",
        major="7",
        releases=(
            Release(version="7.x-3.12", terms={"Release type": ("Bug fixes",)}),
            Release(
                version="7.x-3.11",
                terms={"Release type": ("Security update", "Bug fixes")},
            ),
            Release(version="7.x-3.10", terms={"Release type": ("New features",)}),
        ),
    )


@pytest.fixture
def sample_release_xml() -> str:
    """Release history XML as served by the update status service."""
    return """<?xml version="1.0" encoding="utf-8"?>
<project xmlns:dc="http://purl.org/dc/elements/1.1/">
  <title>Views</title>
  <short_name>views</short_name>
  <api_version>7.x</api_version>
  <releases>
    <release>
      <name>views 7.x-3.12</name>
      <version>7.x-3.12</version>
      <terms>
        <term><name>Release type</name><value>Bug fixes</value></term>
      </terms>
    </release>
    <release>
      <name>views 7.x-3.11</name>
      <version>7.x-3.11</version>
      <terms>
        <term><name>Release type</name><value>Security update</value></term>
        <term><name>Release type</name><value>Bug fixes</value></term>
      </terms>
    </release>
    <release>
      <name>views 7.x-3.10</name>
      <version>7.x-3.10</version>
    </release>
  </releases>
</project>
"""
