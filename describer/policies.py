"""
Authorization policy matrix.

Every permission check answers one question: may ``actor`` perform
``action`` on a record of ``kind``? Organization-scoped kinds are
resolved from a fixed table of minimum roles; users and representations
add ownership rules on top. Nothing here touches the database.

Routers call ``authorize`` before loading or mutating anything; a denial
raises ``AuthorizationDenied`` and the request ends there.
"""

from __future__ import annotations

import enum
import itertools
from dataclasses import dataclass
from typing import Any
from uuid import UUID

from sqlalchemy import Select, false

from describer.core.exceptions import AuthorizationDenied
from describer.models.assignment import Assignment
from describer.models.membership import Membership, MembershipRole
from describer.models.organization import Organization
from describer.models.representation import Representation
from describer.models.resource import Resource
from describer.models.resource_group import ResourceGroup
from describer.models.resource_link import ResourceLink
from describer.models.user import User


class Action(str, enum.Enum):
    index = "index"
    show = "show"
    new = "new"
    create = "create"
    edit = "edit"
    update = "update"
    destroy = "destroy"


class ResourceKind(str, enum.Enum):
    resource = "resource"
    representation = "representation"
    resource_link = "resource_link"
    resource_group = "resource_group"
    assignment = "assignment"
    membership = "membership"
    endpoint = "endpoint"
    user = "user"


# new/edit render the forms for create/update and share their answers
_ACTION_ALIASES = {Action.new: Action.create, Action.edit: Action.update}

_V = MembershipRole.viewer
_A = MembershipRole.author
_E = MembershipRole.editor
_ADMIN = MembershipRole.admin
_NOBODY = None

# (kind) -> {action: minimum role}
_MINIMUM_ROLES: dict[ResourceKind, dict[Action, MembershipRole | None]] = {
    ResourceKind.resource: {
        Action.index: _V, Action.show: _V, Action.create: _A, Action.update: _E, Action.destroy: _E,
    },
    ResourceKind.representation: {
        Action.index: _V, Action.show: _V, Action.create: _A, Action.update: _E, Action.destroy: _E,
    },
    ResourceKind.resource_link: {
        Action.index: _NOBODY, Action.show: _V, Action.create: _A, Action.update: _E, Action.destroy: _E,
    },
    ResourceKind.resource_group: {
        Action.index: _V, Action.show: _V, Action.create: _ADMIN, Action.update: _ADMIN, Action.destroy: _ADMIN,
    },
    ResourceKind.assignment: {
        Action.index: _V, Action.show: _V, Action.create: _ADMIN, Action.update: _ADMIN, Action.destroy: _ADMIN,
    },
    ResourceKind.membership: {
        Action.index: _V, Action.show: _V, Action.create: _ADMIN, Action.update: _ADMIN, Action.destroy: _ADMIN,
    },
    ResourceKind.endpoint: {
        Action.index: _V, Action.show: _V, Action.create: _ADMIN, Action.update: _ADMIN, Action.destroy: _ADMIN,
    },
}

_ORG_SCOPED_MODELS: dict[ResourceKind, Any] = {
    ResourceKind.resource: Resource,
    ResourceKind.resource_link: ResourceLink,
    ResourceKind.resource_group: ResourceGroup,
    ResourceKind.membership: Membership,
}


@dataclass(frozen=True)
class OrganizationUser:
    """
    The acting user within one organization.

    ``organization`` and ``role`` are None when acting outside any
    organization (viewing a user profile). Staff act as owners everywhere.
    """

    user: User
    organization: Organization | None = None
    role: MembershipRole | None = None

    @property
    def id(self) -> UUID:
        return self.user.id

    @property
    def staff(self) -> bool:
        return bool(self.user.staff)

    @property
    def effective_role(self) -> MembershipRole | None:
        if self.staff:
            return MembershipRole.owner
        return self.role


def _build_table() -> dict[tuple[MembershipRole, ResourceKind, Action], bool]:
    table: dict[tuple[MembershipRole, ResourceKind, Action], bool] = {}
    for kind, minimums in _MINIMUM_ROLES.items():
        for role, action in itertools.product(MembershipRole, Action):
            required = minimums[_ACTION_ALIASES.get(action, action)]
            table[(role, kind, action)] = required is not None and role.at_least(required)
    return table


def _check_exhaustive(table: dict[tuple[MembershipRole, ResourceKind, Action], bool]) -> None:
    table_kinds = [kind for kind in ResourceKind if kind is not ResourceKind.user]
    missing = [
        key
        for key in itertools.product(MembershipRole, table_kinds, Action)
        if key not in table
    ]
    if missing:
        raise RuntimeError(f"Policy matrix has no decision for {missing[:5]}")


PERMISSIONS = _build_table()
_check_exhaustive(PERMISSIONS)


def _user_policy(actor: OrganizationUser, action: Action, target: Any) -> bool:
    action = _ACTION_ALIASES.get(action, action)
    if action is Action.show:
        return True
    if action is Action.update:
        return actor.staff or (target is not None and getattr(target, "id", None) == actor.id)
    if action is Action.destroy:
        return actor.staff
    return False


def _owns_representation(actor: OrganizationUser, target: Any) -> bool:
    return (
        target is not None
        and actor.role is not None
        and actor.role.at_least(MembershipRole.author)
        and getattr(target, "author_id", None) == actor.id
    )


def permits(
    actor: OrganizationUser | None,
    kind: ResourceKind,
    action: Action,
    target: Any = None,
) -> bool:
    """Return whether ``actor`` may perform ``action`` on ``target`` of ``kind``."""
    if actor is None or actor.user.is_active is False:
        return False

    if kind is ResourceKind.user:
        return _user_policy(actor, action, target)

    role = actor.effective_role
    if role is None:
        return False
    if PERMISSIONS[(role, kind, action)]:
        return True

    if kind is ResourceKind.representation and _ACTION_ALIASES.get(action, action) in (
        Action.update,
        Action.destroy,
    ):
        return _owns_representation(actor, target)
    return False


def authorize(
    actor: OrganizationUser | None,
    kind: ResourceKind,
    action: Action,
    target: Any = None,
) -> None:
    """Raise ``AuthorizationDenied`` unless the policy permits the action."""
    if not permits(actor, kind, action, target):
        raise AuthorizationDenied(action.value, kind.value)


def policy_scope(actor: OrganizationUser | None, kind: ResourceKind, query: Select) -> Select:
    """Restrict a list query to the records ``actor`` may see."""
    if actor is None:
        return query.where(false())

    if kind is ResourceKind.user:
        if actor.staff:
            return query
        return query.where(User.id == actor.id)

    if kind is ResourceKind.endpoint:
        return query

    if actor.organization is None:
        return query.where(false())

    if kind is ResourceKind.representation:
        return query.join(Resource, Resource.id == Representation.resource_id).where(
            Resource.org_id == actor.organization.id
        )
    if kind is ResourceKind.assignment:
        return query.join(Resource, Resource.id == Assignment.resource_id).where(
            Resource.org_id == actor.organization.id
        )

    model = _ORG_SCOPED_MODELS[kind]
    return query.where(model.org_id == actor.organization.id)
