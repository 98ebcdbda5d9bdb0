"""
Seed Service — fixture data for the host group form scenarios.

Three layers, each safe to run on an existing database (existing names are
reused, not duplicated):

  seed_base_groups()     built-in groups every installation has
  seed_group_data()      groups with one dependent each, for update/delete
  seed_subgroup_data()   a nested hierarchy plus a user group with rights

``seed_all()`` runs all three and returns the ids the scenarios need.
"""

import logging

from groupadmin.models import db
from groupadmin.models.dependents import (
    Action,
    Correlation,
    CorrelationConditionGroup,
    GroupPrototype,
    HostPrototype,
    Maintenance,
    MaintenanceGroup,
    Operation,
    OperationGroup,
    Script,
)
from groupadmin.models.hostgroup import GROUP_FLAG_DISCOVERED, Host, HostGroup, HostGroupLink
from groupadmin.models.permission import (
    PERM_DENY,
    PERM_READ,
    PERM_READ_WRITE,
    Right,
    TagFilter,
    UserGroup,
)
from groupadmin.services.hostgroup_service import OPERATION_TYPE_GROUP_ADD

logger = logging.getLogger(__name__)

# Built-in groups
ZABBIX_SERVERS = "Zabbix servers"
TEMPLATES = "Templates"
DISCOVERED_HOSTS = "Discovered hosts"

# Discovered group and the LLD rule that owns it
DISCOVERED_GROUP = "Group created from host prototype 1"
LLD = "LLD for Discovered host tests"

UPDATE_GROUP = "Group for Update test"
DELETE_GROUP = "Group for Delete test"
LONE_HOST_GROUP = "One group for Delete"
SCRIPT_GROUP = "Group for Script"
ACTION_GROUP = "Group for Action"
MAINTENANCE_GROUP = "Group for Maintenance"
PROTOTYPE_GROUP = "Group for Host prototype"
CORRELATION_GROUP = "Group for Correlation"

LONE_HOST = "Host for host group testing"
HOST_PROTOTYPE = "Host prototype {#KEY} for host group testing"
SCRIPT = "Script for host group testing"
ACTION = "Discovery action for host group testing"
MAINTENANCE = "Maintenance for host group testing"
CORRELATION = "Corellation for host group testing"

SUBGROUP_USER_GROUP = "User group to check subgroup permissions"


def _add_groups(names, **attrs) -> dict[str, int]:
    """Create the named groups that don't exist yet; return name → groupid."""
    ids = {}
    for name in names:
        group = HostGroup.query.filter_by(name=name).first()
        if group is None:
            group = HostGroup(name=name, **attrs)
            db.session.add(group)
            db.session.flush()
        ids[name] = group.groupid
    return ids


def _first_or_add(model, lookup: dict, **attrs):
    obj = model.query.filter_by(**lookup).first()
    if obj is None:
        obj = model(**lookup, **attrs)
        db.session.add(obj)
        db.session.flush()
        return obj, True
    return obj, False


def seed_base_groups() -> dict[str, int]:
    ids = _add_groups([ZABBIX_SERVERS, TEMPLATES])
    ids.update(_add_groups([DISCOVERED_HOSTS], internal=True))
    ids.update(_add_groups([DISCOVERED_GROUP], flags=GROUP_FLAG_DISCOVERED, discovery_rule=LLD))
    db.session.commit()
    return ids


def seed_group_data() -> dict[str, int]:
    """Groups for the update/clone/delete scenarios, one dependent each."""
    ids = _add_groups([
        UPDATE_GROUP,
        DELETE_GROUP,
        LONE_HOST_GROUP,
        SCRIPT_GROUP,
        ACTION_GROUP,
        MAINTENANCE_GROUP,
        PROTOTYPE_GROUP,
        CORRELATION_GROUP,
    ])

    host, created = _first_or_add(Host, {"host": LONE_HOST})
    if created:
        db.session.add(HostGroupLink(hostid=host.hostid, groupid=ids[LONE_HOST_GROUP]))

    prototype, created = _first_or_add(
        HostPrototype, {"host": HOST_PROTOTYPE}, discovery_rule="LLD for host group test",
    )
    if created:
        db.session.add(GroupPrototype(
            hostprototypeid=prototype.hostprototypeid, groupid=ids[PROTOTYPE_GROUP],
        ))

    _first_or_add(Script, {"name": SCRIPT}, command="return 1", groupid=ids[SCRIPT_GROUP])

    action, created = _first_or_add(Action, {"name": ACTION}, eventsource=1)
    if created:
        operation = Operation(actionid=action.actionid, operationtype=OPERATION_TYPE_GROUP_ADD)
        db.session.add(operation)
        db.session.flush()
        db.session.add(OperationGroup(operationid=operation.operationid,
                                      groupid=ids[ACTION_GROUP]))

    maintenance, created = _first_or_add(
        Maintenance, {"name": MAINTENANCE}, active_since=1358844540, active_till=1390466940,
    )
    if created:
        db.session.add(MaintenanceGroup(maintenanceid=maintenance.maintenanceid,
                                        groupid=ids[MAINTENANCE_GROUP]))

    correlation, created = _first_or_add(Correlation, {"name": CORRELATION})
    if created:
        db.session.add(CorrelationConditionGroup(correlationid=correlation.correlationid,
                                                 groupid=ids[CORRELATION_GROUP]))

    db.session.commit()
    return ids


def seed_subgroup_data() -> int:
    """Nested groups and a user group with rights on some of them.

    Returns the user group id.
    """
    ids = _add_groups([
        "Europe",
        "Europe/Latvia",
        "Europe/Latvia/Riga/Zabbix",
        "Europe/Test",
        "Europe/Test/Zabbix",
        # parent and subgroup of these get created by the scenarios
        "Streets",
        "Cities/Cesis",
        "Europe group for test on search page",
    ])

    usrgrp, created = _first_or_add(UserGroup, {"name": SUBGROUP_USER_GROUP})
    if created:
        for name, permission in (
            ("Europe", PERM_DENY),
            ("Europe/Latvia", PERM_READ),
            ("Europe/Test", PERM_READ_WRITE),
            ("Streets", PERM_DENY),
            ("Cities/Cesis", PERM_READ),
        ):
            db.session.add(Right(usrgrpid=usrgrp.usrgrpid, groupid=ids[name],
                                 permission=permission))
        for name, tag, value in (
            ("Europe", "world", ""),
            ("Europe/Test", "country", "test"),
            ("Streets", "street", ""),
            ("Cities/Cesis", "city", "Cesis"),
        ):
            db.session.add(TagFilter(usrgrpid=usrgrp.usrgrpid, groupid=ids[name],
                                     tag=tag, value=value))

    db.session.commit()
    return usrgrp.usrgrpid


def seed_all() -> dict:
    """Seed everything; return the names and ids the scenarios start from."""
    seed_base_groups()
    seed_group_data()
    usrgrpid = seed_subgroup_data()
    logger.info("Seeded host group fixture data (user group %d)", usrgrpid,
                extra={"usrgrpid": usrgrpid})
    return {
        "update_group": UPDATE_GROUP,
        "delete_group": DELETE_GROUP,
        "user_groupid": usrgrpid,
    }
