"""Policy file validation for vglink."""

from typing import Any, Dict, List

import jsonschema
import yaml

from ..policy.duration import parse_positive_duration
from ..utils.errors import ConfigurationError, format_validation_errors
from .schemas import POLICY_CONFIG_SCHEMA


class ConfigValidationError(ConfigurationError):
    """Raised when policy validation fails."""

    def __init__(self, errors: List[str]):
        self.errors = errors
        super().__init__(
            "Policy validation failed",
            details=format_validation_errors(errors),
        )


class ConfigValidator:
    """Validates vglink policy documents."""

    def validate_policy(self, config: Dict[str, Any]) -> List[str]:
        """
        Validate a policy document.

        Args:
            config: Parsed policy document

        Returns:
            List[str]: List of validation errors (empty if valid)
        """
        errors = []

        validator = jsonschema.Draft7Validator(POLICY_CONFIG_SCHEMA)
        for error in sorted(validator.iter_errors(config), key=lambda e: list(e.path)):
            location = ".".join(str(part) for part in error.path) or "<root>"
            errors.append(f"{location}: {error.message}")

        if errors or not isinstance(config, dict):
            return errors

        # Durations are checked at every level where they are written
        errors.extend(self._validate_renew_period(config["default"].get("repositorySpec"), "default"))
        for group_name, group in (config.get("groups") or {}).items():
            group = group or {}
            group_default = group.get("default") or {}
            errors.extend(
                self._validate_renew_period(
                    group_default.get("repositorySpec"),
                    f"groups.{group_name}.default",
                )
            )
            for project_name, project in (group.get("projects") or {}).items():
                project = project or {}
                errors.extend(
                    self._validate_renew_period(
                        project.get("repositorySpec"),
                        f"groups.{group_name}.projects.{project_name}",
                    )
                )

        return errors

    def validate_policy_file(self, file_path: str) -> List[str]:
        """
        Validate a policy file on disk.

        Args:
            file_path: Path to the policy file

        Returns:
            List[str]: List of validation errors (empty if valid)
        """
        try:
            with open(file_path, encoding="utf-8") as f:
                config = yaml.safe_load(f)
        except FileNotFoundError:
            return [f"Policy file not found: {file_path}"]
        except yaml.YAMLError as e:
            return [f"YAML parsing error: {e}"]
        except OSError as e:
            return [f"Error reading policy file: {e}"]

        if config is None:
            return ["Policy file is empty"]

        return self.validate_policy(config)

    def _validate_renew_period(self, repo_spec: Any, location: str) -> List[str]:
        """Validate the renewPeriod of one repositorySpec, if it sets one."""
        if not repo_spec or not repo_spec.get("renewPeriod"):
            return []

        try:
            parse_positive_duration(repo_spec["renewPeriod"])
        except ValueError as e:
            return [f"{location}.repositorySpec.renewPeriod: {e}"]
        return []
