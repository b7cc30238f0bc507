"""Policy model and inheritance for vglink."""

from .duration import format_duration, parse_duration, parse_positive_duration
from .models import GlobalSpec, GroupSpec, LinkSpec, RepoSpec, TokenSpec
from .resolver import PolicyResolver, merge_policy, resolve

__all__ = [
    "GlobalSpec",
    "GroupSpec",
    "LinkSpec",
    "PolicyResolver",
    "RepoSpec",
    "TokenSpec",
    "format_duration",
    "merge_policy",
    "parse_duration",
    "parse_positive_duration",
    "resolve",
]
