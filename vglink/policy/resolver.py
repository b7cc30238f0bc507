"""Policy inheritance and per-project lookup.

The policy tree has three levels: the global default, one default per
GitLab group, and optional overrides per project inside a group. Unset
fields cascade downwards once, when the tree is loaded; lookups afterwards
only pick the most specific level that exists for a project path.
"""

import logging
from typing import Dict, List

from ..utils.errors import PolicyError, create_error_suggestions
from .duration import parse_positive_duration
from .models import GlobalSpec, GroupSpec, LinkSpec, RepoSpec

logger = logging.getLogger(__name__)


def _check_renew_period(repo_spec: RepoSpec, level: str) -> None:
    try:
        parse_positive_duration(repo_spec.renew_period or "")
    except ValueError as e:
        raise PolicyError(
            f"Invalid renewPeriod {repo_spec.renew_period!r} in {level}",
            details=str(e),
            suggestions=create_error_suggestions("configuration_invalid"),
        ) from e


def _validate_global_default(default: LinkSpec) -> None:
    """The global default is the root of inheritance, so every field must be present."""
    missing: List[str] = []
    repo_spec = default.repository_spec
    if repo_spec is None:
        missing.append("repositorySpec")
    else:
        if not repo_spec.build_key:
            missing.append("repositorySpec.buildKey")
        if repo_spec.enabled is None:
            missing.append("repositorySpec.enabled")
        if not repo_spec.renew_period:
            missing.append("repositorySpec.renewPeriod")
    if default.token_spec is None:
        missing.append("tokenSpec")

    if missing:
        raise PolicyError(
            "The default policy is incomplete",
            details=f"Missing: {', '.join(missing)}",
            suggestions=create_error_suggestions("configuration_invalid"),
        )

    _check_renew_period(repo_spec, "default")


def _inherit_link(link: LinkSpec, parent: LinkSpec, level: str) -> LinkSpec:
    repo_spec = link.repository_spec or RepoSpec()
    merged = LinkSpec(
        repository_spec=repo_spec.inherit(parent.repository_spec),
        # tokenSpec is opaque, it is inherited whole or not at all
        token_spec=link.token_spec if link.token_spec is not None else parent.token_spec,
    )
    _check_renew_period(merged.repository_spec, level)
    return merged


def merge_policy(raw: GlobalSpec) -> GlobalSpec:
    """
    Fill every unset field of the tree from its parent level.

    Groups inherit from the global default, projects inherit from their
    (already merged) group default. The input tree is left untouched.

    Args:
        raw: Policy tree as read from the configuration file

    Returns:
        GlobalSpec: Tree where every level is fully populated

    Raises:
        PolicyError: If the global default is incomplete or a renewPeriod
            does not parse to a positive duration
    """
    _validate_global_default(raw.default)

    groups: Dict[str, GroupSpec] = {}
    for group_name, group in raw.groups.items():
        group_default = _inherit_link(group.default, raw.default, f"groups.{group_name}.default")
        projects = {
            project_name: _inherit_link(
                project,
                group_default,
                f"groups.{group_name}.projects.{project_name}",
            )
            for project_name, project in group.projects.items()
        }
        groups[group_name] = GroupSpec(default=group_default, projects=projects)

    logger.debug(
        "Merged policy tree with %d group(s) and %d project override(s)",
        len(groups),
        sum(len(group.projects) for group in groups.values()),
    )
    return GlobalSpec(default=raw.default, groups=groups)


def resolve(tree: GlobalSpec, path: str) -> LinkSpec:
    """
    Return the effective link for a project path such as ``"infra/app"``.

    Only the first two path segments are looked at; ``tree`` must already
    be merged.

    Raises:
        PolicyError: If the path has fewer than two segments
    """
    parts = path.split("/")
    if len(parts) < 2 or not parts[0] or not parts[1]:
        raise PolicyError(f"Project path must look like <group>/<project>: {path!r}")

    group_name, project_name = parts[0], parts[1]
    link = tree.default
    group = tree.groups.get(group_name)
    if group is not None:
        link = group.default
        project = group.projects.get(project_name)
        if project is not None:
            link = project
    return link


class PolicyResolver:
    """Holds a merged policy tree and answers lookups against it."""

    def __init__(self, raw: GlobalSpec):
        """
        Merge the raw tree eagerly.

        Args:
            raw: Policy tree as read from the configuration file

        Raises:
            PolicyError: If the tree fails validation
        """
        self.raw = raw
        self.tree = merge_policy(raw)

    def resolve(self, path: str) -> LinkSpec:
        """Effective link for a project path."""
        return resolve(self.tree, path)

    @property
    def group_names(self) -> List[str]:
        return sorted(self.tree.groups)
