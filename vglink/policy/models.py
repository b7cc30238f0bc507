"""Policy tree: which token goes into which CI variable, at global, group and project level."""

from dataclasses import dataclass, field
from datetime import timedelta
from typing import Any, Dict, Optional

from .duration import parse_positive_duration

# Opaque Vault token-create request, forwarded as-is
TokenSpec = Dict[str, Any]


@dataclass(frozen=True)
class RepoSpec:
    """Where the token is written and how often it is renewed."""

    build_key: Optional[str] = None
    enabled: Optional[bool] = None
    renew_period: Optional[str] = None

    @property
    def is_complete(self) -> bool:
        return bool(self.build_key) and self.enabled is not None and bool(self.renew_period)

    @property
    def renew_interval(self) -> timedelta:
        """Renewal period as a timedelta."""
        if not self.renew_period:
            raise ValueError("renewPeriod is not set")
        return parse_positive_duration(self.renew_period)

    def inherit(self, parent: "RepoSpec") -> "RepoSpec":
        """Return a copy with every unset field taken from ``parent``."""
        return RepoSpec(
            build_key=self.build_key or parent.build_key,
            enabled=parent.enabled if self.enabled is None else self.enabled,
            renew_period=self.renew_period or parent.renew_period,
        )

    @classmethod
    def from_dict(cls, data: Optional[Dict[str, Any]]) -> Optional["RepoSpec"]:
        if data is None:
            return None
        return cls(
            build_key=data.get("buildKey") or None,
            enabled=data.get("enabled"),
            renew_period=data.get("renewPeriod") or None,
        )

    def to_dict(self) -> Dict[str, Any]:
        result: Dict[str, Any] = {}
        if self.build_key:
            result["buildKey"] = self.build_key
        if self.enabled is not None:
            result["enabled"] = self.enabled
        if self.renew_period:
            result["renewPeriod"] = self.renew_period
        return result


@dataclass(frozen=True)
class LinkSpec:
    """Links a repository to the Vault token issued for it."""

    repository_spec: Optional[RepoSpec] = None
    token_spec: Optional[TokenSpec] = None

    @classmethod
    def from_dict(cls, data: Optional[Dict[str, Any]]) -> "LinkSpec":
        data = data or {}
        token_spec = data.get("tokenSpec")
        return cls(
            repository_spec=RepoSpec.from_dict(data.get("repositorySpec")),
            token_spec=dict(token_spec) if token_spec is not None else None,
        )

    def to_dict(self) -> Dict[str, Any]:
        result: Dict[str, Any] = {}
        if self.repository_spec is not None:
            result["repositorySpec"] = self.repository_spec.to_dict()
        if self.token_spec is not None:
            result["tokenSpec"] = dict(self.token_spec)
        return result


@dataclass(frozen=True)
class GroupSpec:
    """Default link for a GitLab group plus per-project overrides."""

    default: LinkSpec = field(default_factory=LinkSpec)
    projects: Dict[str, LinkSpec] = field(default_factory=dict)

    @classmethod
    def from_dict(cls, data: Optional[Dict[str, Any]]) -> "GroupSpec":
        data = data or {}
        projects = data.get("projects") or {}
        return cls(
            default=LinkSpec.from_dict(data.get("default")),
            projects={str(name): LinkSpec.from_dict(spec) for name, spec in projects.items()},
        )

    def to_dict(self) -> Dict[str, Any]:
        result: Dict[str, Any] = {"default": self.default.to_dict()}
        if self.projects:
            result["projects"] = {name: spec.to_dict() for name, spec in self.projects.items()}
        return result


@dataclass(frozen=True)
class GlobalSpec:
    """Root of the policy tree."""

    default: LinkSpec = field(default_factory=LinkSpec)
    groups: Dict[str, GroupSpec] = field(default_factory=dict)

    @classmethod
    def from_dict(cls, data: Optional[Dict[str, Any]]) -> "GlobalSpec":
        data = data or {}
        groups = data.get("groups") or {}
        return cls(
            default=LinkSpec.from_dict(data.get("default")),
            groups={str(name): GroupSpec.from_dict(spec) for name, spec in groups.items()},
        )

    def to_dict(self) -> Dict[str, Any]:
        result: Dict[str, Any] = {"default": self.default.to_dict()}
        if self.groups:
            result["groups"] = {name: spec.to_dict() for name, spec in self.groups.items()}
        return result
