"""create_resources_and_groups

Revision ID: 8b2e4d6f1a35
Revises: 3f1a9c2d7b10
Create Date: 2026-10-12 09:15:00

"""
from typing import Sequence, Union

from alembic import op

revision: str = '8b2e4d6f1a35'
down_revision: Union[str, None] = '3f1a9c2d7b10'
branch_labels: Union[str, Sequence[str], None] = None
depends_on: Union[str, Sequence[str], None] = None


def upgrade() -> None:
    op.execute("""
        CREATE TYPE resource_type AS ENUM (
            'collection', 'dataset', 'event', 'image', 'interactive_resource',
            'moving_image', 'physical_object', 'service', 'software', 'sound',
            'still_image', 'text'
        )
    """)
    op.execute("""
        CREATE TABLE resources (
            id UUID PRIMARY KEY DEFAULT gen_random_uuid(),
            org_id UUID NOT NULL REFERENCES organizations(id) ON DELETE RESTRICT,
            identifier VARCHAR(255) NOT NULL,
            canonical_id VARCHAR(255) NOT NULL,
            title VARCHAR(500) NOT NULL DEFAULT '(no title provided)',
            resource_type resource_type NOT NULL,
            source_uri VARCHAR(2048),
            host_uris VARCHAR[] NOT NULL DEFAULT '{}',
            priority_flag BOOLEAN NOT NULL DEFAULT FALSE,
            ordinality INTEGER,
            created_at TIMESTAMPTZ NOT NULL DEFAULT now(),
            updated_at TIMESTAMPTZ NOT NULL DEFAULT now(),
            CONSTRAINT uq_resources_org_canonical_id UNIQUE (org_id, canonical_id)
        )
    """)
    op.execute("CREATE UNIQUE INDEX ix_resources_identifier ON resources(identifier)")
    op.execute("CREATE INDEX ix_resources_org_id ON resources(org_id)")
    op.execute("CREATE INDEX ix_resources_priority_flag ON resources(priority_flag)")
    op.execute(
        "CREATE UNIQUE INDEX uq_resources_org_source_uri ON resources(org_id, source_uri) "
        "WHERE source_uri IS NOT NULL"
    )

    op.execute("""
        CREATE TABLE resource_groups (
            id UUID PRIMARY KEY DEFAULT gen_random_uuid(),
            org_id UUID NOT NULL REFERENCES organizations(id) ON DELETE CASCADE,
            title VARCHAR(255) NOT NULL,
            "default" BOOLEAN NOT NULL DEFAULT FALSE,
            webhook_uri VARCHAR(2048),
            created_at TIMESTAMPTZ NOT NULL DEFAULT now(),
            updated_at TIMESTAMPTZ NOT NULL DEFAULT now(),
            CONSTRAINT uq_resource_groups_org_title UNIQUE (org_id, title)
        )
    """)
    op.execute("CREATE INDEX ix_resource_groups_org_id ON resource_groups(org_id)")
    op.execute(
        'CREATE UNIQUE INDEX uq_resource_groups_org_default ON resource_groups(org_id) '
        'WHERE "default" IS TRUE'
    )

    op.execute("""
        CREATE TABLE resource_group_resources (
            resource_id UUID NOT NULL REFERENCES resources(id) ON DELETE CASCADE,
            resource_group_id UUID NOT NULL REFERENCES resource_groups(id) ON DELETE CASCADE,
            PRIMARY KEY (resource_id, resource_group_id)
        )
    """)


def downgrade() -> None:
    op.execute("DROP TABLE IF EXISTS resource_group_resources")
    op.execute("DROP TABLE IF EXISTS resource_groups")
    op.execute("DROP TABLE IF EXISTS resources")
    op.execute("DROP TYPE IF EXISTS resource_type")
