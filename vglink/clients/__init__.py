"""Clients for the services vglink talks to."""

from .gitlab import GitLabPlatform, Group, Project
from .vault import VaultTokenIssuer

__all__ = ["GitLabPlatform", "Group", "Project", "VaultTokenIssuer"]
