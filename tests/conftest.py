"""Pytest configuration and shared fixtures."""

import os
import tempfile
from unittest.mock import MagicMock

import pytest
import yaml

from vglink.clients.gitlab import Group, Project
from vglink.renewal.scheduler import RenewalScheduler


@pytest.fixture
def temp_directory():
    """Create a temporary directory for testing."""
    temp_dir = tempfile.mkdtemp()
    yield temp_dir
    # Cleanup
    import shutil
    shutil.rmtree(temp_dir, ignore_errors=True)


@pytest.fixture
def sample_policy():
    """Policy document with one group default and two project overrides."""
    return {
        "default": {
            "repositorySpec": {
                "buildKey": "VAULT_TOKEN",
                "enabled": True,
                "renewPeriod": "1h",
            },
            "tokenSpec": {"policies": ["ci-read"], "ttl": "2h"},
        },
        "groups": {
            "infra": {
                "default": {
                    "repositorySpec": {"renewPeriod": "30m"},
                    "tokenSpec": {"policies": ["infra-deploy"], "ttl": "1h"},
                },
                "projects": {
                    "terraform": {"repositorySpec": {"renewPeriod": "10m"}},
                    "legacy": {"repositorySpec": {"enabled": False}},
                },
            },
            "web": {
                "projects": {
                    "frontend": {"repositorySpec": {"buildKey": "FRONTEND_VAULT_TOKEN"}},
                },
            },
        },
    }


@pytest.fixture
def policy_file(temp_directory, sample_policy):
    """Write the sample policy to disk and return its path."""
    path = os.path.join(temp_directory, "vglink.yml")
    with open(path, "w", encoding="utf-8") as f:
        yaml.safe_dump(sample_policy, f)
    return path


@pytest.fixture
def mock_platform():
    """GitLab client reporting one group with one project, infra/app (id 42)."""
    platform = MagicMock()
    platform.list_groups.return_value = [Group(id=1, full_path="infra")]
    platform.list_projects.return_value = [Project(id=42, path_with_namespace="infra/app")]
    return platform


@pytest.fixture
def mock_issuer():
    """Vault client that always issues the same token."""
    issuer = MagicMock()
    issuer.issue.return_value = "s.fresh-token"
    return issuer


@pytest.fixture
def scheduler():
    """Renewal scheduler whose jobs are stopped after the test."""
    renewal_scheduler = RenewalScheduler()
    yield renewal_scheduler
    renewal_scheduler.shutdown(timeout=1)


@pytest.fixture(autouse=True)
def isolate_environment(temp_directory, monkeypatch):
    """Run every test in a temporary directory without vglink variables set."""
    for name in (
        "VGL_CONFIG_PATH",
        "VGL_DISCOVERY_INTERVAL",
        "VGL_REQUEST_TIMEOUT",
        "GITLAB_BASE_URL",
        "GITLAB_TOKEN",
        "VAULT_ADDR",
        "VAULT_TOKEN",
        "VAULT_NAMESPACE",
        "VAULT_SKIP_VERIFY",
    ):
        monkeypatch.delenv(name, raising=False)
    monkeypatch.chdir(temp_directory)
    return temp_directory
