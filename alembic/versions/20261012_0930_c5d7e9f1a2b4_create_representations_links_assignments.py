"""create_representations_links_assignments

Revision ID: c5d7e9f1a2b4
Revises: 8b2e4d6f1a35
Create Date: 2026-10-12 09:30:00

"""
from typing import Sequence, Union

from alembic import op

revision: str = 'c5d7e9f1a2b4'
down_revision: Union[str, None] = '8b2e4d6f1a35'
branch_labels: Union[str, Sequence[str], None] = None
depends_on: Union[str, Sequence[str], None] = None


def upgrade() -> None:
    op.execute("""
        CREATE TABLE endpoints (
            id UUID PRIMARY KEY DEFAULT gen_random_uuid(),
            name VARCHAR(100) NOT NULL UNIQUE,
            created_at TIMESTAMPTZ NOT NULL DEFAULT now(),
            updated_at TIMESTAMPTZ NOT NULL DEFAULT now()
        )
    """)
    op.execute("""
        CREATE TABLE licenses (
            id UUID PRIMARY KEY DEFAULT gen_random_uuid(),
            name VARCHAR(50) NOT NULL UNIQUE,
            title VARCHAR(255) NOT NULL,
            url VARCHAR(500),
            created_at TIMESTAMPTZ NOT NULL DEFAULT now(),
            updated_at TIMESTAMPTZ NOT NULL DEFAULT now()
        )
    """)
    op.execute("""
        CREATE TABLE meta (
            id UUID PRIMARY KEY DEFAULT gen_random_uuid(),
            org_id UUID NOT NULL REFERENCES organizations(id) ON DELETE CASCADE,
            title VARCHAR(255) NOT NULL,
            instructions TEXT,
            created_at TIMESTAMPTZ NOT NULL DEFAULT now(),
            updated_at TIMESTAMPTZ NOT NULL DEFAULT now(),
            CONSTRAINT uq_meta_org_title UNIQUE (org_id, title)
        )
    """)
    op.execute("CREATE INDEX ix_meta_org_id ON meta(org_id)")

    op.execute("CREATE TYPE representation_status AS ENUM ('ready_to_review', 'approved', 'not_approved')")
    op.execute("""
        CREATE TABLE representations (
            id UUID PRIMARY KEY DEFAULT gen_random_uuid(),
            resource_id UUID NOT NULL REFERENCES resources(id) ON DELETE CASCADE,
            author_id UUID NOT NULL REFERENCES users(id) ON DELETE RESTRICT,
            endpoint_id UUID NOT NULL REFERENCES endpoints(id) ON DELETE RESTRICT,
            license_id UUID NOT NULL REFERENCES licenses(id) ON DELETE RESTRICT,
            metum_id UUID NOT NULL REFERENCES meta(id) ON DELETE RESTRICT,
            status representation_status NOT NULL DEFAULT 'ready_to_review',
            text TEXT,
            content_type VARCHAR(100) NOT NULL DEFAULT 'text/plain',
            content_uri VARCHAR(2048),
            language VARCHAR(10) NOT NULL DEFAULT 'en',
            notes TEXT,
            ordinality INTEGER,
            created_at TIMESTAMPTZ NOT NULL DEFAULT now(),
            updated_at TIMESTAMPTZ NOT NULL DEFAULT now()
        )
    """)
    op.execute("CREATE INDEX ix_representations_resource_id ON representations(resource_id)")
    op.execute("CREATE INDEX ix_representations_author_id ON representations(author_id)")
    op.execute("CREATE INDEX ix_representations_metum_id ON representations(metum_id)")
    op.execute("CREATE INDEX ix_representations_status ON representations(status)")

    op.execute("""
        CREATE TABLE resource_links (
            id UUID PRIMARY KEY DEFAULT gen_random_uuid(),
            org_id UUID NOT NULL REFERENCES organizations(id) ON DELETE CASCADE,
            subject_resource_id UUID NOT NULL REFERENCES resources(id) ON DELETE CASCADE,
            verb VARCHAR(50) NOT NULL,
            object_resource_id UUID NOT NULL REFERENCES resources(id) ON DELETE CASCADE,
            created_at TIMESTAMPTZ NOT NULL DEFAULT now(),
            updated_at TIMESTAMPTZ NOT NULL DEFAULT now(),
            CONSTRAINT uq_resource_links_subject_verb_object
                UNIQUE (subject_resource_id, verb, object_resource_id)
        )
    """)
    op.execute("CREATE INDEX ix_resource_links_org_id ON resource_links(org_id)")
    op.execute("CREATE INDEX ix_resource_links_subject ON resource_links(subject_resource_id)")
    op.execute("CREATE INDEX ix_resource_links_object ON resource_links(object_resource_id)")

    op.execute("""
        CREATE TABLE assignments (
            id UUID PRIMARY KEY DEFAULT gen_random_uuid(),
            resource_id UUID NOT NULL REFERENCES resources(id) ON DELETE CASCADE,
            user_id UUID NOT NULL REFERENCES users(id) ON DELETE CASCADE,
            created_at TIMESTAMPTZ NOT NULL DEFAULT now(),
            updated_at TIMESTAMPTZ NOT NULL DEFAULT now(),
            CONSTRAINT uq_assignments_resource_user UNIQUE (resource_id, user_id)
        )
    """)
    op.execute("CREATE INDEX ix_assignments_resource_id ON assignments(resource_id)")
    op.execute("CREATE INDEX ix_assignments_user_id ON assignments(user_id)")

    # Defaults used when nested representations leave them out
    op.execute("INSERT INTO endpoints (name) VALUES ('Any')")
    op.execute("""
        INSERT INTO licenses (name, title, url) VALUES
        ('cc0-1.0', 'Creative Commons Zero v1.0 Universal',
         'https://creativecommons.org/publicdomain/zero/1.0/')
    """)


def downgrade() -> None:
    op.execute("DROP TABLE IF EXISTS assignments")
    op.execute("DROP TABLE IF EXISTS resource_links")
    op.execute("DROP TABLE IF EXISTS representations")
    op.execute("DROP TYPE IF EXISTS representation_status")
    op.execute("DROP TABLE IF EXISTS meta")
    op.execute("DROP TABLE IF EXISTS licenses")
    op.execute("DROP TABLE IF EXISTS endpoints")
