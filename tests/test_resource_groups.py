"""
Resource group service tests.
"""

import pytest

from describer.core.exceptions import NotFound, ValidationFailure
from describer.models import ResourceType
from describer.schemas.resource import ResourceCreateRequest
from describer.schemas.resource_group import ResourceGroupCreateRequest, ResourceGroupUpdateRequest
from describer.services.resource_group_service import (
    DEFAULT_GROUP_UNDELETABLE,
    GROUP_NOT_EMPTY,
    ResourceGroupService,
)
from describer.services.resource_service import ResourceService


async def test_list_puts_default_first(db, tenant):
    service = ResourceGroupService(db)
    await service.create_group(tenant.organization.id, ResourceGroupCreateRequest(title="Audio Tour"))
    await service.create_group(tenant.organization.id, ResourceGroupCreateRequest(title="Web"))

    listing = await service.list_groups(tenant.organization.id)
    assert [g.title for g in listing.resource_groups] == ["Uncategorized", "Audio Tour", "Web"]
    assert listing.resource_groups[0].title_with_default_annotation == "Uncategorized (default)"
    assert listing.total == 3


async def test_titles_are_unique_per_organization(db, tenant, other_tenant):
    service = ResourceGroupService(db)
    with pytest.raises(ValidationFailure) as exc_info:
        await service.create_group(
            tenant.organization.id, ResourceGroupCreateRequest(title="Uncategorized")
        )
    assert exc_info.value.errors == {"title": ["has already been taken"]}

    group = await service.create_group(
        other_tenant.organization.id, ResourceGroupCreateRequest(title="Web")
    )
    assert group.org_id == other_tenant.organization.id


async def test_only_one_default_group(db, tenant):
    service = ResourceGroupService(db)
    with pytest.raises(ValidationFailure) as exc_info:
        await service.create_group(
            tenant.organization.id, ResourceGroupCreateRequest(title="Web", default=True)
        )
    assert exc_info.value.errors == {"default": ["has already been taken"]}


async def test_default_can_move_once_released(db, tenant):
    service = ResourceGroupService(db)
    web = await service.create_group(tenant.organization.id, ResourceGroupCreateRequest(title="Web"))

    await service.update_group(
        tenant.default_group.id, tenant.organization.id, ResourceGroupUpdateRequest(default=False)
    )
    web = await service.update_group(
        web.id, tenant.organization.id, ResourceGroupUpdateRequest(default=True)
    )
    assert web.is_default


async def test_update_webhook_uri(db, tenant):
    service = ResourceGroupService(db)
    group = await service.update_group(
        tenant.default_group.id,
        tenant.organization.id,
        ResourceGroupUpdateRequest(webhook_uri="https://hooks.example.org/x"),
    )
    assert group.has_webhook

    group = await service.update_group(
        group.id, tenant.organization.id, ResourceGroupUpdateRequest(webhook_uri="")
    )
    assert group.webhook_uri is None
    assert not group.has_webhook


async def test_default_group_cannot_be_deleted(db, tenant):
    with pytest.raises(ValidationFailure) as exc_info:
        await ResourceGroupService(db).delete_group(tenant.default_group.id, tenant.organization.id)
    assert exc_info.value.errors == {"base": [DEFAULT_GROUP_UNDELETABLE]}


async def test_group_with_resources_cannot_be_deleted(db, tenant):
    service = ResourceGroupService(db)
    web = await service.create_group(tenant.organization.id, ResourceGroupCreateRequest(title="Web"))
    await ResourceService(db).create_resource(
        tenant.organization,
        ResourceCreateRequest(
            title="Mona Lisa", resource_type=ResourceType.image, resource_group_ids=[web.id]
        ),
    )

    with pytest.raises(ValidationFailure) as exc_info:
        await service.delete_group(web.id, tenant.organization.id)
    assert exc_info.value.errors == {"base": [GROUP_NOT_EMPTY]}


async def test_delete_empty_group(db, tenant):
    service = ResourceGroupService(db)
    web = await service.create_group(tenant.organization.id, ResourceGroupCreateRequest(title="Web"))
    await service.delete_group(web.id, tenant.organization.id)

    with pytest.raises(NotFound):
        await service.get_group(web.id, tenant.organization.id)


async def test_groups_are_scoped_to_organization(db, tenant, other_tenant):
    with pytest.raises(NotFound):
        await ResourceGroupService(db).get_group(
            tenant.default_group.id, other_tenant.organization.id
        )
