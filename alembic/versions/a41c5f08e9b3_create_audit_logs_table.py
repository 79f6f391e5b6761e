"""create audit_logs table with partitioning

Revision ID: a41c5f08e9b3
Revises: 3b7e91c2d4a0
Create Date: 2026-10-12 11:02:17.540981
"""
from typing import Sequence, Union
from alembic import op
import sqlalchemy as sa  # noqa


# revision identifiers, used by Alembic.
revision: str = "a41c5f08e9b3"
down_revision: Union[str, Sequence[str], None] = "3b7e91c2d4a0"
branch_labels: Union[str, Sequence[str], None] = None
depends_on: Union[str, Sequence[str], None] = None


def upgrade() -> None:
    op.execute("CREATE SCHEMA IF NOT EXISTS audit")

    op.execute(
        """
        CREATE TABLE IF NOT EXISTS audit.audit_logs(
            id BIGINT GENERATED ALWAYS AS IDENTITY,
            ts_utc timestamptz NOT NULL DEFAULT now(),
            request_id text,
            scope text NOT NULL,
            action text NOT NULL,
            actor text,
            actor_ip inet,
            route text,
            object_type text,
            object_id bigint,
            event_id bigint,
            seat_code text,
            booking_date date,
            status text NOT NULL,
            reason text,
            meta jsonb NOT NULL DEFAULT '{}'::jsonb,
            CONSTRAINT chk_audit_status CHECK (status IN ('SUCCESS','FAIL')),
            PRIMARY KEY (ts_utc, id)
        ) PARTITION BY RANGE (ts_utc)
        """
    )

    op.execute("CREATE INDEX IF NOT EXISTS ix_audit_logs_ts ON audit.audit_logs (ts_utc DESC)")
    op.execute("CREATE INDEX IF NOT EXISTS ix_audit_logs_actor_ts ON audit.audit_logs (actor, ts_utc DESC)")
    op.execute("CREATE INDEX IF NOT EXISTS ix_audit_logs_action_ts ON audit.audit_logs (action, ts_utc DESC)")
    op.execute("CREATE INDEX IF NOT EXISTS ix_audit_logs_obj ON audit.audit_logs (object_type, object_id)")
    op.execute("CREATE INDEX IF NOT EXISTS ix_audit_logs_event ON audit.audit_logs (event_id)")
    op.execute("CREATE INDEX IF NOT EXISTS ix_audit_logs_booking ON audit.audit_logs (booking_date, seat_code)")
    op.execute("CREATE INDEX IF NOT EXISTS ix_audit_logs_meta_gin ON audit.audit_logs USING gin (meta jsonb_path_ops)")

    for start, end in (("2026-10-01", "2026-11-01"), ("2026-11-01", "2026-12-01"), ("2026-12-01", "2027-01-01")):
        suffix = start[:7].replace("-", "_")
        op.execute(
            f"""
            CREATE TABLE IF NOT EXISTS audit.audit_logs_{suffix}
              PARTITION OF audit.audit_logs
              FOR VALUES FROM (TIMESTAMPTZ '{start} 00:00:00+00') TO (TIMESTAMPTZ '{end} 00:00:00+00')
            """
        )
    op.execute(
        """
        CREATE TABLE IF NOT EXISTS audit.audit_logs_default
          PARTITION OF audit.audit_logs DEFAULT
        """
    )


def downgrade() -> None:
    op.execute("DROP SCHEMA IF EXISTS audit CASCADE")
