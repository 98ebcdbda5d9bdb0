"""
Dependent models — configuration objects that reference host groups.

A host group cannot be deleted while one of these still needs it:
  - global scripts restricted to the group
  - maintenance windows whose only target is the group
  - correlation conditions on the group
  - host prototypes creating hosts in the group
Action operations are the exception: their group rows go away with the group.
"""

from groupadmin.models import db


# ═══════════════════════════════════════════════════════════════
# 1. GLOBAL SCRIPTS
# ═══════════════════════════════════════════════════════════════
class Script(db.Model):
    __tablename__ = "scripts"

    scriptid = db.Column(db.Integer, primary_key=True)
    name = db.Column(db.String(255), unique=True, nullable=False)
    command = db.Column(db.Text, nullable=False, default="")
    groupid = db.Column(db.Integer, db.ForeignKey("hstgrp.groupid"))  # NULL = all groups


# ═══════════════════════════════════════════════════════════════
# 2. ACTIONS + OPERATIONS + OPGROUP
# ═══════════════════════════════════════════════════════════════
class Action(db.Model):
    __tablename__ = "actions"

    actionid = db.Column(db.Integer, primary_key=True)
    name = db.Column(db.String(255), unique=True, nullable=False)
    eventsource = db.Column(db.Integer, nullable=False, default=0)
    status = db.Column(db.Integer, nullable=False, default=0)

    operations = db.relationship(
        "Operation", back_populates="action", lazy="dynamic",
        cascade="all, delete-orphan",
    )


class Operation(db.Model):
    __tablename__ = "operations"

    operationid = db.Column(db.Integer, primary_key=True)
    actionid = db.Column(
        db.Integer, db.ForeignKey("actions.actionid", ondelete="CASCADE"), nullable=False,
    )
    operationtype = db.Column(db.Integer, nullable=False)

    action = db.relationship("Action", back_populates="operations")
    groups = db.relationship(
        "OperationGroup", back_populates="operation", lazy="dynamic",
        cascade="all, delete-orphan",
    )


class OperationGroup(db.Model):
    __tablename__ = "opgroup"

    opgroupid = db.Column(db.Integer, primary_key=True)
    operationid = db.Column(
        db.Integer, db.ForeignKey("operations.operationid", ondelete="CASCADE"), nullable=False,
    )
    groupid = db.Column(db.Integer, db.ForeignKey("hstgrp.groupid"), nullable=False)

    operation = db.relationship("Operation", back_populates="groups")


# ═══════════════════════════════════════════════════════════════
# 3. MAINTENANCE WINDOWS
# ═══════════════════════════════════════════════════════════════
class Maintenance(db.Model):
    __tablename__ = "maintenances"

    maintenanceid = db.Column(db.Integer, primary_key=True)
    name = db.Column(db.String(128), unique=True, nullable=False)
    active_since = db.Column(db.Integer, nullable=False, default=0)
    active_till = db.Column(db.Integer, nullable=False, default=0)

    groups = db.relationship("MaintenanceGroup", lazy="dynamic", cascade="all, delete-orphan")
    hosts = db.relationship("MaintenanceHost", lazy="dynamic", cascade="all, delete-orphan")


class MaintenanceGroup(db.Model):
    __tablename__ = "maintenances_groups"

    maintenance_groupid = db.Column(db.Integer, primary_key=True)
    maintenanceid = db.Column(
        db.Integer, db.ForeignKey("maintenances.maintenanceid", ondelete="CASCADE"), nullable=False,
    )
    groupid = db.Column(db.Integer, db.ForeignKey("hstgrp.groupid"), nullable=False)


class MaintenanceHost(db.Model):
    __tablename__ = "maintenances_hosts"

    maintenance_hostid = db.Column(db.Integer, primary_key=True)
    maintenanceid = db.Column(
        db.Integer, db.ForeignKey("maintenances.maintenanceid", ondelete="CASCADE"), nullable=False,
    )
    hostid = db.Column(db.Integer, db.ForeignKey("hosts.hostid"), nullable=False)


# ═══════════════════════════════════════════════════════════════
# 4. EVENT CORRELATION
# ═══════════════════════════════════════════════════════════════
class Correlation(db.Model):
    __tablename__ = "correlation"

    correlationid = db.Column(db.Integer, primary_key=True)
    name = db.Column(db.String(255), unique=True, nullable=False)

    conditions = db.relationship(
        "CorrelationConditionGroup", lazy="dynamic", cascade="all, delete-orphan",
    )


class CorrelationConditionGroup(db.Model):
    __tablename__ = "corr_condition_group"

    corr_conditionid = db.Column(db.Integer, primary_key=True)
    correlationid = db.Column(
        db.Integer, db.ForeignKey("correlation.correlationid", ondelete="CASCADE"), nullable=False,
    )
    groupid = db.Column(db.Integer, db.ForeignKey("hstgrp.groupid"), nullable=False)


# ═══════════════════════════════════════════════════════════════
# 5. HOST PROTOTYPES (LLD)
# ═══════════════════════════════════════════════════════════════
class HostPrototype(db.Model):
    __tablename__ = "host_prototypes"

    hostprototypeid = db.Column(db.Integer, primary_key=True)
    host = db.Column(db.String(128), nullable=False)
    discovery_rule = db.Column(db.String(255), nullable=False)

    group_links = db.relationship("GroupPrototype", lazy="dynamic", cascade="all, delete-orphan")


class GroupPrototype(db.Model):
    __tablename__ = "group_prototype"

    group_prototypeid = db.Column(db.Integer, primary_key=True)
    hostprototypeid = db.Column(
        db.Integer, db.ForeignKey("host_prototypes.hostprototypeid", ondelete="CASCADE"),
        nullable=False,
    )
    groupid = db.Column(db.Integer, db.ForeignKey("hstgrp.groupid"), nullable=False)
