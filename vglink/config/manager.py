"""Policy file management for vglink."""

import logging
import os
from typing import Any, Dict, Optional

import yaml
from jinja2 import Environment, FileSystemLoader

from ..policy.models import GlobalSpec
from ..policy.resolver import PolicyResolver
from ..utils.errors import ConfigurationError, create_error_suggestions
from .validator import ConfigValidationError, ConfigValidator

logger = logging.getLogger(__name__)

DEFAULT_POLICY_FILE = "vglink.yml"


class ConfigManager:
    """Loads, validates and scaffolds vglink policy files."""

    def __init__(self, path: Optional[str] = None):
        """
        Initialize configuration manager.

        Args:
            path: Optional working directory (defaults to current directory)
        """
        self.path = path or os.getcwd()
        self.validator = ConfigValidator()

        templates_dir = os.path.join(os.path.dirname(__file__), "..", "templates")
        self.jinja_env = Environment(loader=FileSystemLoader(templates_dir), trim_blocks=True, lstrip_blocks=True)

    def resolve_config_path(self, config_path: Optional[str] = None) -> str:
        """
        Pick the policy file to use.

        An explicit path wins, then ``VGL_CONFIG_PATH``, then ``vglink.yml``
        in the working directory.

        Raises:
            ConfigurationError: If no candidate exists
        """
        candidate = config_path or os.environ.get("VGL_CONFIG_PATH")
        if candidate:
            return candidate

        local = os.path.join(self.path, DEFAULT_POLICY_FILE)
        if os.path.exists(local):
            return local

        raise ConfigurationError(
            "No policy file configured",
            suggestions=create_error_suggestions("configuration_missing"),
        )

    def read_policy_document(self, config_path: str) -> Dict[str, Any]:
        """
        Read and schema-validate a policy file.

        Args:
            config_path: Path to the policy file

        Returns:
            Dict[str, Any]: Parsed policy document

        Raises:
            ConfigurationError: If the file cannot be read or parsed
            ConfigValidationError: If the document violates the schema
        """
        try:
            with open(config_path, encoding="utf-8") as f:
                document = yaml.safe_load(f)
        except FileNotFoundError as e:
            raise ConfigurationError(
                f"Policy file not found: {config_path}",
                suggestions=create_error_suggestions("configuration_missing"),
            ) from e
        except yaml.YAMLError as e:
            raise ConfigurationError(
                f"Invalid YAML in {config_path}",
                details=str(e),
                suggestions=create_error_suggestions("configuration_invalid"),
            ) from e
        except OSError as e:
            raise ConfigurationError(f"Error reading policy file {config_path}", details=str(e)) from e

        if document is None:
            raise ConfigValidationError(["Policy file is empty"])

        errors = self.validator.validate_policy(document)
        if errors:
            raise ConfigValidationError(errors)

        return document

    def load_policy(self, config_path: Optional[str] = None) -> PolicyResolver:
        """
        Load the policy tree and merge it.

        Args:
            config_path: Path to the policy file (see ``resolve_config_path``)

        Returns:
            PolicyResolver: Resolver over the merged tree

        Raises:
            ConfigurationError: If the policy cannot be used; startup must stop
        """
        path = self.resolve_config_path(config_path)
        document = self.read_policy_document(path)
        resolver = PolicyResolver(GlobalSpec.from_dict(document))
        logger.info("Loaded policy from %s (%d group(s))", path, len(resolver.tree.groups))
        return resolver

    def create_default_policy(
        self,
        build_key: str = "VAULT_TOKEN",
        renew_period: str = "1h",
        policies: Optional[list] = None,
        ttl: str = "2h",
    ) -> str:
        """
        Render a starter policy document.

        Args:
            build_key: CI/CD variable name for the global default
            renew_period: Renewal period for the global default
            policies: Vault policies attached to issued tokens
            ttl: Vault token TTL

        Returns:
            str: Policy document as YAML text
        """
        template = self.jinja_env.get_template("vglink.yml.j2")
        return template.render(
            build_key=build_key,
            renew_period=renew_period,
            policies=policies or ["ci-read"],
            ttl=ttl,
        )

    def initialize_policy(self, config_path: Optional[str] = None, force: bool = False, **template_vars) -> str:
        """
        Write a starter policy file.

        Args:
            config_path: Destination (defaults to ``vglink.yml`` in the working directory)
            force: Overwrite an existing file
            **template_vars: Passed to ``create_default_policy``

        Returns:
            str: Path to created policy file
        """
        config_path = config_path or os.path.join(self.path, DEFAULT_POLICY_FILE)
        if os.path.exists(config_path) and not force:
            raise ConfigurationError(
                f"Policy file already exists: {config_path}",
                suggestions=["Use --force to overwrite it"],
            )

        content = self.create_default_policy(**template_vars)

        # The rendered file has to load cleanly before it is written
        errors = self.validator.validate_policy(yaml.safe_load(content))
        if errors:
            raise ConfigValidationError(errors)

        directory = os.path.dirname(config_path)
        if directory:
            os.makedirs(directory, exist_ok=True)

        with open(config_path, "w", encoding="utf-8") as f:
            f.write(content)

        return config_path
