"""
Searchable attributes and named scopes for resources.
"""

from __future__ import annotations

from typing import Any
from uuid import UUID

from sqlalchemy import Select

from describer.models.assignment import Assignment
from describer.models.representation import Representation, RepresentationStatus
from describer.models.resource import Resource
from describer.models.resource_group import ResourceGroup
from describer.services.query_builder import SearchAttribute, SearchDefinition, SearchScope

DEFAULT_RESOURCE_ORDER = ("order_by_priority_and_date",)


# ---------------------------------------------------------------------------
# Scopes
# ---------------------------------------------------------------------------

def represented(query: Select) -> Select:
    return query.where(Resource.representations.any())


def unrepresented(query: Select) -> Select:
    return query.where(~Resource.representations.any())


def assigned(query: Select) -> Select:
    return query.where(Resource.assignments.any())


def unassigned(query: Select) -> Select:
    return query.where(~Resource.assignments.any())


def assigned_unrepresented(query: Select) -> Select:
    return assigned(unrepresented(query))


def unassigned_unrepresented(query: Select) -> Select:
    return unassigned(unrepresented(query))


def with_approved_representations(query: Select) -> Select:
    return query.where(
        Resource.representations.any(Representation.status == RepresentationStatus.approved)
    )


def by_date(query: Select) -> Select:
    return query.order_by(Resource.created_at.desc())


def by_priority(query: Select) -> Select:
    return query.order_by(Resource.priority_flag.desc())


def order_by_priority_and_date(query: Select) -> Select:
    return by_date(by_priority(query))


def represented_by(query: Select, user_id: Any) -> Select:
    """Resources with at least one representation written by ``user_id``."""
    author_id = user_id if isinstance(user_id, UUID) else UUID(str(user_id))
    return query.where(Resource.representations.any(Representation.author_id == author_id))


# ---------------------------------------------------------------------------
# Definition
# ---------------------------------------------------------------------------

RESOURCE_SEARCH = SearchDefinition(
    attributes={
        "identifier": SearchAttribute(Resource.identifier),
        "canonical_id": SearchAttribute(Resource.canonical_id),
        "title": SearchAttribute(Resource.title),
        "resource_type": SearchAttribute(Resource.resource_type),
        "source_uri": SearchAttribute(Resource.source_uri),
        "priority_flag": SearchAttribute(Resource.priority_flag),
        "ordinality": SearchAttribute(Resource.ordinality),
        "created_at": SearchAttribute(Resource.created_at),
        "updated_at": SearchAttribute(Resource.updated_at),
        "representations_text": SearchAttribute(
            Representation.text, through=Resource.representations
        ),
        "representations_status": SearchAttribute(
            Representation.status, through=Resource.representations
        ),
        "representations_author_id": SearchAttribute(
            Representation.author_id, through=Resource.representations
        ),
        "resource_groups_id": SearchAttribute(ResourceGroup.id, through=Resource.resource_groups),
        "assignments_user_id": SearchAttribute(Assignment.user_id, through=Resource.assignments),
    },
    scopes={
        "represented": SearchScope(represented),
        "unrepresented": SearchScope(unrepresented),
        "assigned": SearchScope(assigned),
        "unassigned": SearchScope(unassigned),
        "assigned_unrepresented": SearchScope(assigned_unrepresented),
        "unassigned_unrepresented": SearchScope(unassigned_unrepresented),
        "with_approved_representations": SearchScope(with_approved_representations),
        "by_date": SearchScope(by_date),
        "by_priority": SearchScope(by_priority),
        "order_by_priority_and_date": SearchScope(order_by_priority_and_date),
        "represented_by": SearchScope(represented_by, takes_argument=True),
    },
)
