"""create_ui_component_tables

Revision ID: a1b2c3d4e5f6
Revises:
Create Date: 2026-10-19 10:00:00.000000

"""

from collections.abc import Sequence

from alembic import op

# revision identifiers, used by Alembic.
revision: str = "a1b2c3d4e5f6"
down_revision: str | None = None
branch_labels: str | Sequence[str] | None = None
depends_on: str | Sequence[str] | None = None


def upgrade() -> None:
    op.execute(
        """
        CREATE TABLE IF NOT EXISTS users (
            id UUID PRIMARY KEY,
            auth_id VARCHAR(255) NOT NULL UNIQUE,
            email VARCHAR(320),
            first_name VARCHAR(100),
            last_name VARCHAR(100),
            role VARCHAR(20) NOT NULL DEFAULT 'guest',
            last_sign_in_at TIMESTAMP WITH TIME ZONE,
            created_at TIMESTAMP WITH TIME ZONE DEFAULT NOW() NOT NULL,
            updated_at TIMESTAMP WITH TIME ZONE DEFAULT NOW() NOT NULL
        )
        """
    )
    op.execute("CREATE INDEX IF NOT EXISTS idx_users_auth_id ON users(auth_id)")

    op.execute(
        """
        CREATE TABLE IF NOT EXISTS ui_components (
            id UUID PRIMARY KEY,
            name VARCHAR(100) NOT NULL UNIQUE,
            display_name VARCHAR(200) NOT NULL,
            description TEXT,

            category VARCHAR(50) NOT NULL,
            component_type VARCHAR(50) NOT NULL,

            -- Presentation data
            config JSONB NOT NULL DEFAULT '{}'::jsonb,
            template TEXT,
            styles JSONB,
            interactions JSONB,
            responsive JSONB,

            is_active BOOLEAN NOT NULL DEFAULT TRUE,
            is_public BOOLEAN NOT NULL DEFAULT TRUE,
            usage_count INTEGER NOT NULL DEFAULT 0,
            version INTEGER NOT NULL DEFAULT 1,

            -- Audit trail
            created_by UUID REFERENCES users(id) ON DELETE SET NULL,
            updated_by UUID REFERENCES users(id) ON DELETE SET NULL,
            created_at TIMESTAMP WITH TIME ZONE DEFAULT NOW() NOT NULL,
            updated_at TIMESTAMP WITH TIME ZONE DEFAULT NOW() NOT NULL
        )
        """
    )
    op.execute("CREATE INDEX IF NOT EXISTS idx_ui_components_name ON ui_components(name)")
    op.execute("CREATE INDEX IF NOT EXISTS idx_ui_components_category ON ui_components(category)")
    op.execute(
        "CREATE INDEX IF NOT EXISTS idx_ui_components_is_active ON ui_components(is_active)"
    )
    op.execute(
        "CREATE INDEX IF NOT EXISTS idx_ui_components_created_at ON ui_components(created_at)"
    )

    # No foreign key on component_id: usage history survives component deletion
    op.execute(
        """
        CREATE TABLE IF NOT EXISTS component_usage (
            id UUID PRIMARY KEY,
            component_id UUID NOT NULL,
            user_id UUID,
            page VARCHAR(500) NOT NULL,
            context JSONB,
            performance_metrics JSONB,
            load_time_ms FLOAT,
            user_agent TEXT,
            created_at TIMESTAMP WITH TIME ZONE DEFAULT NOW() NOT NULL
        )
        """
    )
    op.execute(
        "CREATE INDEX IF NOT EXISTS idx_component_usage_component_id "
        "ON component_usage(component_id)"
    )
    op.execute(
        "CREATE INDEX IF NOT EXISTS idx_component_usage_created_at ON component_usage(created_at)"
    )


def downgrade() -> None:
    op.execute("DROP TABLE IF EXISTS component_usage")
    op.execute("DROP TABLE IF EXISTS ui_components")
    op.execute("DROP TABLE IF EXISTS users")
