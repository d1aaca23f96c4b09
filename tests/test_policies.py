"""
Authorization policy matrix tests. Pure: no database.
"""

from uuid import uuid4

import pytest
from sqlalchemy import select

from describer.core.exceptions import AuthorizationDenied
from describer.models import MembershipRole, Organization, Representation, Resource, User
from describer.policies import (
    PERMISSIONS,
    Action,
    OrganizationUser,
    ResourceKind,
    authorize,
    permits,
    policy_scope,
)


# ---------------------------------------------------------------------------
# Helpers
# ---------------------------------------------------------------------------

ORG = Organization(id=uuid4(), name="Museum", slug="museum")


def user(staff=False, active=True):
    return User(
        id=uuid4(),
        email=f"{uuid4().hex[:8]}@example.org",
        display_name="Someone",
        staff=staff,
        is_active=active,
    )


def actor(role, staff=False):
    return OrganizationUser(user=user(staff=staff), organization=ORG, role=role)


CREATE_ACTIONS = (Action.new, Action.create)
EDIT_ACTIONS = (Action.edit, Action.update)


# ---------------------------------------------------------------------------
# Resource links: index nobody, show viewer, create author, edit editor
# ---------------------------------------------------------------------------

def test_viewer_on_resource_links():
    viewer = actor(MembershipRole.viewer)
    kind = ResourceKind.resource_link

    assert not permits(viewer, kind, Action.index)
    assert permits(viewer, kind, Action.show)
    assert not any(permits(viewer, kind, a) for a in CREATE_ACTIONS)
    assert not any(permits(viewer, kind, a) for a in EDIT_ACTIONS)
    assert not permits(viewer, kind, Action.destroy)


def test_author_on_resource_links():
    author = actor(MembershipRole.author)
    kind = ResourceKind.resource_link

    assert all(permits(author, kind, a) for a in CREATE_ACTIONS)
    assert not any(permits(author, kind, a) for a in EDIT_ACTIONS)
    assert not permits(author, kind, Action.destroy)


def test_editor_on_resource_links():
    editor = actor(MembershipRole.editor)
    kind = ResourceKind.resource_link

    for action in (Action.show, *CREATE_ACTIONS, *EDIT_ACTIONS, Action.destroy):
        assert permits(editor, kind, action), f"editor should be allowed to {action.value}"
    assert not permits(editor, kind, Action.index)


# ---------------------------------------------------------------------------
# Users: self or staff
# ---------------------------------------------------------------------------

def test_anyone_may_edit_their_own_user_record():
    me = OrganizationUser(user=user())
    for action in EDIT_ACTIONS:
        assert permits(me, ResourceKind.user, action, me.user)


def test_non_staff_may_not_touch_another_user():
    me = OrganizationUser(user=user())
    other = user()
    for action in (*EDIT_ACTIONS, Action.destroy):
        assert not permits(me, ResourceKind.user, action, other)


def test_non_staff_may_not_destroy_themselves():
    me = OrganizationUser(user=user())
    assert not permits(me, ResourceKind.user, Action.destroy, me.user)


def test_staff_may_edit_and_destroy_any_user():
    staff = OrganizationUser(user=user(staff=True))
    other = user()
    for action in (*EDIT_ACTIONS, Action.destroy):
        assert permits(staff, ResourceKind.user, action, other)


def test_any_user_may_view_profiles_but_not_list_or_create():
    me = OrganizationUser(user=user())
    assert permits(me, ResourceKind.user, Action.show, user())
    assert not permits(me, ResourceKind.user, Action.index)
    assert not permits(me, ResourceKind.user, Action.create)


# ---------------------------------------------------------------------------
# Resources and groups
# ---------------------------------------------------------------------------

@pytest.mark.parametrize(
    "role, allowed",
    [
        (MembershipRole.viewer, {Action.index, Action.show}),
        (MembershipRole.author, {Action.index, Action.show, Action.new, Action.create}),
        (MembershipRole.editor, set(Action)),
        (MembershipRole.admin, set(Action)),
        (MembershipRole.owner, set(Action)),
    ],
)
def test_resource_matrix(role, allowed):
    member = actor(role)
    granted = {a for a in Action if permits(member, ResourceKind.resource, a)}
    assert granted == allowed


def test_resource_groups_need_admin_to_change():
    kind = ResourceKind.resource_group
    assert permits(actor(MembershipRole.viewer), kind, Action.index)
    assert not permits(actor(MembershipRole.editor), kind, Action.create)
    assert permits(actor(MembershipRole.admin), kind, Action.create)
    assert permits(actor(MembershipRole.owner), kind, Action.destroy)


def test_staff_act_as_owner_without_membership():
    staff = OrganizationUser(user=user(staff=True), organization=ORG, role=None)
    assert permits(staff, ResourceKind.resource_group, Action.destroy)
    assert permits(staff, ResourceKind.resource, Action.create)


def test_no_role_and_no_actor_are_denied():
    outsider = OrganizationUser(user=user(), organization=ORG, role=None)
    assert not permits(outsider, ResourceKind.resource, Action.show)
    assert not permits(None, ResourceKind.resource, Action.show)
    assert not permits(None, ResourceKind.user, Action.show)


def test_inactive_users_are_denied():
    inactive = OrganizationUser(user=user(active=False), organization=ORG, role=MembershipRole.owner)
    assert not permits(inactive, ResourceKind.resource, Action.show)


def test_authors_may_edit_their_own_representations():
    author = actor(MembershipRole.author)
    own = Representation(author_id=author.id)
    theirs = Representation(author_id=uuid4())

    assert permits(author, ResourceKind.representation, Action.update, own)
    assert permits(author, ResourceKind.representation, Action.destroy, own)
    assert not permits(author, ResourceKind.representation, Action.update, theirs)
    assert not permits(actor(MembershipRole.viewer), ResourceKind.representation, Action.update, own)


def test_matrix_is_exhaustive():
    kinds = [k for k in ResourceKind if k is not ResourceKind.user]
    assert len(PERMISSIONS) == len(MembershipRole) * len(kinds) * len(Action)


def test_authorize_raises_on_denial():
    with pytest.raises(AuthorizationDenied) as exc_info:
        authorize(actor(MembershipRole.viewer), ResourceKind.resource, Action.destroy)
    assert exc_info.value.status_code == 403
    assert exc_info.value.message == "Not allowed to destroy this resource"


# ---------------------------------------------------------------------------
# Scopes
# ---------------------------------------------------------------------------

def test_policy_scope_restricts_to_organization():
    query = policy_scope(actor(MembershipRole.viewer), ResourceKind.resource, select(Resource))
    compiled = query.compile()
    assert "resources.org_id" in str(compiled)
    assert ORG.id in compiled.params.values()


def test_policy_scope_limits_users_to_themselves_unless_staff():
    me = OrganizationUser(user=user())
    staff = OrganizationUser(user=user(staff=True))

    assert "WHERE" in str(policy_scope(me, ResourceKind.user, select(User)))
    assert "WHERE" not in str(policy_scope(staff, ResourceKind.user, select(User)))


def test_policy_scope_without_organization_matches_nothing():
    query = policy_scope(OrganizationUser(user=user()), ResourceKind.resource, select(Resource))
    assert "WHERE" in str(query)
    assert "false" in str(query.compile(compile_kwargs={"literal_binds": True})).lower()
