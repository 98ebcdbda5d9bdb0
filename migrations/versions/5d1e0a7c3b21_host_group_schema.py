"""host_group_schema

Create host groups, hosts, the tables that reference host groups
(scripts, action operations, maintenances, correlations, host prototypes)
and user group rights / tag filters.

Revision ID: 5d1e0a7c3b21
Revises:
Create Date: 2026-10-17 09:12:00.000000
"""

from alembic import op
import sqlalchemy as sa
from sqlalchemy import inspect as sa_inspect


# revision identifiers, used by Alembic.
revision = "5d1e0a7c3b21"
down_revision = None
branch_labels = None
depends_on = None


def _fk_id(column, target, *, cascade=True, nullable=False):
    return sa.Column(
        column, sa.Integer(),
        sa.ForeignKey(target, ondelete="CASCADE" if cascade else None),
        nullable=nullable,
    )


def upgrade():
    bind = op.get_bind()
    inspector = sa_inspect(bind)
    existing_tables = set(inspector.get_table_names())

    # ── Host groups and hosts ────────────────────────────────────────────
    if "hstgrp" not in existing_tables:
        op.create_table(
            "hstgrp",
            sa.Column("groupid", sa.Integer(), primary_key=True),
            sa.Column("name", sa.String(length=255), nullable=False, unique=True),
            sa.Column("flags", sa.Integer(), nullable=False, server_default="0"),
            sa.Column("internal", sa.Boolean(), nullable=False, server_default=sa.false()),
            sa.Column("discovery_rule", sa.String(length=255), nullable=True),
        )

    if "hosts" not in existing_tables:
        op.create_table(
            "hosts",
            sa.Column("hostid", sa.Integer(), primary_key=True),
            sa.Column("host", sa.String(length=128), nullable=False, unique=True),
            sa.Column("status", sa.Integer(), nullable=False, server_default="0"),
        )

    if "hosts_groups" not in existing_tables:
        op.create_table(
            "hosts_groups",
            sa.Column("hostgroupid", sa.Integer(), primary_key=True),
            _fk_id("hostid", "hosts.hostid"),
            _fk_id("groupid", "hstgrp.groupid"),
            sa.UniqueConstraint("hostid", "groupid", name="uq_hosts_groups"),
        )
        op.create_index("ix_hosts_groups_groupid", "hosts_groups", ["groupid"])

    # ── Global scripts ───────────────────────────────────────────────────
    if "scripts" not in existing_tables:
        op.create_table(
            "scripts",
            sa.Column("scriptid", sa.Integer(), primary_key=True),
            sa.Column("name", sa.String(length=255), nullable=False, unique=True),
            sa.Column("command", sa.Text(), nullable=False, server_default=""),
            _fk_id("groupid", "hstgrp.groupid", cascade=False, nullable=True),
        )

    # ── Actions ──────────────────────────────────────────────────────────
    if "actions" not in existing_tables:
        op.create_table(
            "actions",
            sa.Column("actionid", sa.Integer(), primary_key=True),
            sa.Column("name", sa.String(length=255), nullable=False, unique=True),
            sa.Column("eventsource", sa.Integer(), nullable=False, server_default="0"),
            sa.Column("status", sa.Integer(), nullable=False, server_default="0"),
        )

    if "operations" not in existing_tables:
        op.create_table(
            "operations",
            sa.Column("operationid", sa.Integer(), primary_key=True),
            _fk_id("actionid", "actions.actionid"),
            sa.Column("operationtype", sa.Integer(), nullable=False),
        )

    if "opgroup" not in existing_tables:
        op.create_table(
            "opgroup",
            sa.Column("opgroupid", sa.Integer(), primary_key=True),
            _fk_id("operationid", "operations.operationid"),
            _fk_id("groupid", "hstgrp.groupid", cascade=False),
        )

    # ── Maintenances ─────────────────────────────────────────────────────
    if "maintenances" not in existing_tables:
        op.create_table(
            "maintenances",
            sa.Column("maintenanceid", sa.Integer(), primary_key=True),
            sa.Column("name", sa.String(length=128), nullable=False, unique=True),
            sa.Column("active_since", sa.Integer(), nullable=False, server_default="0"),
            sa.Column("active_till", sa.Integer(), nullable=False, server_default="0"),
        )

    if "maintenances_groups" not in existing_tables:
        op.create_table(
            "maintenances_groups",
            sa.Column("maintenance_groupid", sa.Integer(), primary_key=True),
            _fk_id("maintenanceid", "maintenances.maintenanceid"),
            _fk_id("groupid", "hstgrp.groupid", cascade=False),
        )

    if "maintenances_hosts" not in existing_tables:
        op.create_table(
            "maintenances_hosts",
            sa.Column("maintenance_hostid", sa.Integer(), primary_key=True),
            _fk_id("maintenanceid", "maintenances.maintenanceid"),
            _fk_id("hostid", "hosts.hostid", cascade=False),
        )

    # ── Correlations ─────────────────────────────────────────────────────
    if "correlation" not in existing_tables:
        op.create_table(
            "correlation",
            sa.Column("correlationid", sa.Integer(), primary_key=True),
            sa.Column("name", sa.String(length=255), nullable=False, unique=True),
        )

    if "corr_condition_group" not in existing_tables:
        op.create_table(
            "corr_condition_group",
            sa.Column("corr_conditionid", sa.Integer(), primary_key=True),
            _fk_id("correlationid", "correlation.correlationid"),
            _fk_id("groupid", "hstgrp.groupid", cascade=False),
        )

    # ── Host prototypes ──────────────────────────────────────────────────
    if "host_prototypes" not in existing_tables:
        op.create_table(
            "host_prototypes",
            sa.Column("hostprototypeid", sa.Integer(), primary_key=True),
            sa.Column("host", sa.String(length=128), nullable=False),
            sa.Column("discovery_rule", sa.String(length=255), nullable=False),
        )

    if "group_prototype" not in existing_tables:
        op.create_table(
            "group_prototype",
            sa.Column("group_prototypeid", sa.Integer(), primary_key=True),
            _fk_id("hostprototypeid", "host_prototypes.hostprototypeid"),
            _fk_id("groupid", "hstgrp.groupid", cascade=False),
        )

    # ── User groups, rights, tag filters ─────────────────────────────────
    if "usrgrp" not in existing_tables:
        op.create_table(
            "usrgrp",
            sa.Column("usrgrpid", sa.Integer(), primary_key=True),
            sa.Column("name", sa.String(length=64), nullable=False, unique=True),
        )

    if "rights" not in existing_tables:
        op.create_table(
            "rights",
            sa.Column("rightid", sa.Integer(), primary_key=True),
            _fk_id("usrgrpid", "usrgrp.usrgrpid"),
            _fk_id("groupid", "hstgrp.groupid"),
            sa.Column("permission", sa.Integer(), nullable=False, server_default="0"),
            sa.UniqueConstraint("usrgrpid", "groupid", name="uq_rights_usrgrp_group"),
        )

    if "tag_filter" not in existing_tables:
        op.create_table(
            "tag_filter",
            sa.Column("tag_filterid", sa.Integer(), primary_key=True),
            _fk_id("usrgrpid", "usrgrp.usrgrpid"),
            _fk_id("groupid", "hstgrp.groupid"),
            sa.Column("tag", sa.String(length=255), nullable=False, server_default=""),
            sa.Column("value", sa.String(length=255), nullable=False, server_default=""),
        )


def downgrade():
    for table in (
        "tag_filter",
        "rights",
        "usrgrp",
        "group_prototype",
        "host_prototypes",
        "corr_condition_group",
        "correlation",
        "maintenances_hosts",
        "maintenances_groups",
        "maintenances",
        "opgroup",
        "operations",
        "actions",
        "scripts",
        "hosts_groups",
        "hosts",
        "hstgrp",
    ):
        op.drop_table(table)
