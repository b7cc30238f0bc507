"""vglink - rotate Vault tokens into GitLab CI/CD variables."""

__version__ = "0.1.0"
__author__ = "vglink maintainers"
