"""
SQLAlchemy ORM models.

All models imported here to ensure they are registered with Base.metadata.
Import order matters: base models before dependent models.
"""

from describer.models.base import Base, TimestampMixin, UUIDMixin
from describer.models.organization import Organization
from describer.models.user import User
from describer.models.membership import Membership, MembershipRole
from describer.models.endpoint import Endpoint
from describer.models.license import License
from describer.models.metum import Metum
from describer.models.resource_group import ResourceGroup, resource_group_resources
from describer.models.resource_link import VERBS, ResourceLink, reverse_verb
from describer.models.representation import Representation, RepresentationStatus
from describer.models.assignment import Assignment
from describer.models.resource import Resource, ResourceStatus, ResourceType

__all__ = [
    "Base",
    "TimestampMixin",
    "UUIDMixin",
    "Organization",
    "User",
    "Membership",
    "MembershipRole",
    "Endpoint",
    "License",
    "Metum",
    "ResourceGroup",
    "resource_group_resources",
    "ResourceLink",
    "VERBS",
    "reverse_verb",
    "Representation",
    "RepresentationStatus",
    "Assignment",
    "Resource",
    "ResourceStatus",
    "ResourceType",
]
