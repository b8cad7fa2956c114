"""seed default scoring config

Revision ID: 1b2c3d4e5f60
Revises: 0a1b2c3d4e5f
Create Date: 2026-10-17 09:30:00.000000

Inserts the built-in criteria as the singleton ``scoring_configs`` row
unless one already exists.  ON CONFLICT DO NOTHING keeps the migration
idempotent and never overwrites an admin-saved configuration.

The criteria come from ``app.core.default_scoring_criteria``; change
them there, not here.
"""

from typing import Sequence, Union

import json
from alembic import op

# revision identifiers, used by Alembic.
revision: str = "1b2c3d4e5f60"
down_revision: Union[str, None] = "0a1b2c3d4e5f"
branch_labels: Union[str, Sequence[str], None] = None
depends_on: Union[str, Sequence[str], None] = None

from app.core.constants import SCORING_CONFIG_ID  # noqa: E402
from app.core.default_scoring_criteria import DEFAULT_SCORING_CRITERIA  # noqa: E402


def upgrade() -> None:
    criteria_json = json.dumps(DEFAULT_SCORING_CRITERIA).replace("'", "''")
    op.execute(
        f"""
        INSERT INTO scoring_configs (config_id, criteria, generation, updated_by)
        VALUES ({SCORING_CONFIG_ID}, '{criteria_json}'::jsonb, 1, 'migration')
        ON CONFLICT (config_id) DO NOTHING;
        """
    )


def downgrade() -> None:
    # Remove the row only if it is still the untouched seed
    op.execute(
        f"DELETE FROM scoring_configs "
        f"WHERE config_id = {SCORING_CONFIG_ID} AND updated_by = 'migration';"
    )
