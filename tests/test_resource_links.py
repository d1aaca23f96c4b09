"""
Resource link service and verb dictionary tests.
"""

import pytest

from describer.core.exceptions import NotFound, ValidationFailure
from describer.models import VERBS, ResourceType, reverse_verb
from describer.models.resource_link import check_involution
from describer.schemas.resource import ResourceCreateRequest
from describer.schemas.resource_link import ResourceLinkCreateRequest, ResourceLinkUpdateRequest
from describer.services.resource_link_service import ResourceLinkService
from describer.services.resource_service import ResourceService


# ---------------------------------------------------------------------------
# Verb dictionary
# ---------------------------------------------------------------------------

def test_verbs_reverse_both_ways():
    assert reverse_verb("hasPart") == "isPartOf"
    assert reverse_verb("isPartOf") == "hasPart"
    for verb in VERBS:
        assert reverse_verb(reverse_verb(verb)) == verb


def test_unknown_verb_has_no_reverse():
    with pytest.raises(ValueError):
        reverse_verb("likes")


def test_involution_check_rejects_one_way_verbs():
    with pytest.raises(ValueError):
        check_involution({"hasPart": "isPartOf", "isPartOf": "hasVersion"})


# ---------------------------------------------------------------------------
# Service
# ---------------------------------------------------------------------------

async def make_resource(db, tenant, title):
    return await ResourceService(db).create_resource(
        tenant.organization, ResourceCreateRequest(title=title, resource_type=ResourceType.image)
    )


def link_request(subject, verb, obj):
    return ResourceLinkCreateRequest(
        subject_resource_id=subject.id, verb=verb, object_resource_id=obj.id
    )


async def test_create_link(db, tenant):
    whole = await make_resource(db, tenant, "Altarpiece")
    part = await make_resource(db, tenant, "Panel")

    link = await ResourceLinkService(db).create_link(
        tenant.organization.id, link_request(whole, "hasPart", part)
    )
    assert link.verb == "hasPart"
    assert link.reverse_verb == "isPartOf"
    assert link.org_id == tenant.organization.id


async def test_unknown_verb_is_rejected(db, tenant):
    a = await make_resource(db, tenant, "A")
    b = await make_resource(db, tenant, "B")

    with pytest.raises(ValidationFailure) as exc_info:
        await ResourceLinkService(db).create_link(tenant.organization.id, link_request(a, "likes", b))
    assert exc_info.value.errors == {"verb": ["is not included in the list"]}


async def test_self_link_is_rejected(db, tenant):
    a = await make_resource(db, tenant, "A")

    with pytest.raises(ValidationFailure) as exc_info:
        await ResourceLinkService(db).create_link(tenant.organization.id, link_request(a, "hasPart", a))
    assert "object_resource_id" in exc_info.value.errors


async def test_duplicate_link_is_rejected(db, tenant):
    a = await make_resource(db, tenant, "A")
    b = await make_resource(db, tenant, "B")
    service = ResourceLinkService(db)
    await service.create_link(tenant.organization.id, link_request(a, "hasPart", b))

    with pytest.raises(ValidationFailure) as exc_info:
        await service.create_link(tenant.organization.id, link_request(a, "hasPart", b))
    assert exc_info.value.errors == {"verb": ["has already been taken"]}

    other_verb = await service.create_link(tenant.organization.id, link_request(a, "references", b))
    assert other_verb.verb == "references"


async def test_both_ends_must_be_in_the_organization(db, tenant, other_tenant):
    a = await make_resource(db, tenant, "A")
    foreign = await make_resource(db, other_tenant, "Foreign")

    with pytest.raises(NotFound):
        await ResourceLinkService(db).create_link(
            tenant.organization.id, link_request(a, "hasPart", foreign)
        )


async def test_update_link_verb_and_object(db, tenant):
    a = await make_resource(db, tenant, "A")
    b = await make_resource(db, tenant, "B")
    c = await make_resource(db, tenant, "C")
    service = ResourceLinkService(db)
    link = await service.create_link(tenant.organization.id, link_request(a, "hasPart", b))

    link = await service.update_link(
        link.id,
        tenant.organization.id,
        ResourceLinkUpdateRequest(verb="hasVersion", object_resource_id=c.id),
    )
    assert link.verb == "hasVersion"
    assert link.object_resource_id == c.id

    with pytest.raises(ValidationFailure):
        await service.update_link(
            link.id, tenant.organization.id, ResourceLinkUpdateRequest(object_resource_id=a.id)
        )


async def test_delete_link(db, tenant):
    a = await make_resource(db, tenant, "A")
    b = await make_resource(db, tenant, "B")
    service = ResourceLinkService(db)
    link = await service.create_link(tenant.organization.id, link_request(a, "requires", b))

    await service.delete_link(link.id, tenant.organization.id)
    with pytest.raises(NotFound):
        await service.get_link(link.id, tenant.organization.id)
