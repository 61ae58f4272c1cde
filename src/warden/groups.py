"""Service groups and the dependency policies declared between them.

Groups serve two purposes: bulk retrieval of related services, and scoping of
"who may depend on whom". A group's policy is a pair of lists naming other
groups whose members it is allowed or denied to depend on. Lists hold group
names, not keys, so a policy always reflects current membership.

A group with neither list is unlimited and may depend on anything. For a
limited group a key is accessible if it is explicitly allowed, or otherwise if
it is not denied.
"""

from typing import Iterable, Optional, Union

from warden.domain import ResolvedPolicy, UNLIMITED

__all__ = ["GroupIndex", "GroupNames", "normalise_groups"]

GroupNames = Optional[Union[str, Iterable[str]]]
"""A single group name, several of them, or None for no groups."""


def normalise_groups(groups: GroupNames) -> list[str]:
    if groups is None:
        return []
    if isinstance(groups, str):
        return [groups]
    return list(groups)


def _append_unique(target: list[str], items: Iterable[str]) -> list[str]:
    for item in items:
        if item not in target:
            target.append(item)
    return target


class GroupIndex:
    """Many-to-many mapping of service keys to groups, plus group policies.

    A child index sees its parent's memberships and policy lists in addition to
    its own, while its own declarations never reach the parent.
    """

    def __init__(self, parent: Optional["GroupIndex"] = None):
        self._parent = parent
        self._members: dict[str, list[str]] = {}
        self._allowed: dict[str, list[str]] = {}
        self._denied: dict[str, list[str]] = {}

    def add_to_groups(self, groups: GroupNames, key: str) -> None:
        for group in normalise_groups(groups):
            members = self._members.setdefault(group, [])
            if key not in members:
                members.append(key)

    def allow_group_dependency(self, group: str, dependency_group: str) -> None:
        _append_unique(self._allowed.setdefault(group, []), [dependency_group])

    def deny_group_dependency(self, group: str, dependency_group: str) -> None:
        _append_unique(self._denied.setdefault(group, []), [dependency_group])

    def __contains__(self, group: str) -> bool:
        return group in self._members or bool(self._parent and group in self._parent)

    def members(self, group: str) -> list[str]:
        """Keys in ``group`` in insertion order; empty for an unknown group."""
        inherited = self._parent.members(group) if self._parent else []
        return _append_unique(list(inherited), self._members.get(group, []))

    def groups_of(self, key: str) -> list[str]:
        """Every group that has ``key`` as a member."""
        names = self._parent.groups_of(key) if self._parent else []
        return _append_unique(
            names, (group for group, members in self._members.items() if key in members)
        )

    def allowed_groups(self, group: str) -> list[str]:
        inherited = self._parent.allowed_groups(group) if self._parent else []
        return _append_unique(list(inherited), self._allowed.get(group, []))

    def denied_groups(self, group: str) -> list[str]:
        inherited = self._parent.denied_groups(group) if self._parent else []
        return _append_unique(list(inherited), self._denied.get(group, []))

    def resolve_policy(self, group: str) -> ResolvedPolicy:
        """Expand ``group``'s allow/deny group lists into member keys.

        Args:
            group: The requesting group.

        Returns:
            The policy for ``group``. It is limited iff either list is non-empty,
            regardless of whether the referenced groups have any members.
        """
        allowed_groups = self.allowed_groups(group)
        denied_groups = self.denied_groups(group)
        if not allowed_groups and not denied_groups:
            return UNLIMITED
        return ResolvedPolicy(
            True,
            self._collect_members(allowed_groups),
            self._collect_members(denied_groups),
        )

    def aggregate_policy(self, groups: GroupNames) -> ResolvedPolicy:
        """Union the policies of every limited group in ``groups``.

        Unlimited constituents contribute nothing; if none is limited the
        aggregate is unlimited.
        """
        allowed: set[str] = set()
        denied: set[str] = set()
        limited = False
        for group in normalise_groups(groups):
            policy = self.resolve_policy(group)
            if policy.limited:
                limited = True
                allowed |= policy.allowed_keys
                denied |= policy.denied_keys

        if not limited:
            return UNLIMITED
        return ResolvedPolicy(True, frozenset(allowed), frozenset(denied))

    def _collect_members(self, groups: Iterable[str]) -> frozenset[str]:
        return frozenset(key for group in groups for key in self.members(group))
