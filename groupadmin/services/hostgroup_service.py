"""
Host Group Service — create, update and delete host groups.

Rules enforced here (the HTTP layer only checks that a name was sent):
  - names are trimmed before any comparison or write
  - a name may not start or end with "/" or contain an empty path segment
  - names are unique
  - a discovered group keeps the name its LLD rule gave it
  - a group cannot be deleted while a dependent still needs it

Every rule is checked before the session is touched, so a rejected request
leaves no partial write behind.
"""

import logging
import re

from sqlalchemy import func

from groupadmin.core.exceptions import (
    ConflictError,
    NotFoundError,
    ReferentialIntegrityError,
    ValidationError,
)
from groupadmin.models import db
from groupadmin.models.dependents import (
    Correlation,
    CorrelationConditionGroup,
    GroupPrototype,
    HostPrototype,
    Maintenance,
    MaintenanceGroup,
    MaintenanceHost,
    Operation,
    OperationGroup,
    Script,
)
from groupadmin.models.hostgroup import NAME_MAX_LENGTH, Host, HostGroup, HostGroupLink
from groupadmin.models.permission import Right, TagFilter
from groupadmin.services import permission_service

logger = logging.getLogger(__name__)

RESOURCE = "Host group"

# Segments separated by single slashes; no leading, trailing or doubled "/".
_NAME_RE = re.compile(r"^[^/]+(?:/[^/]+)*$")

# operations.operationtype values that carry opgroup rows
OPERATION_TYPE_GROUP_ADD = 4
OPERATION_TYPE_GROUP_REMOVE = 5


# ═══════════════════════════════════════════════════════════════
# Name rules
# ═══════════════════════════════════════════════════════════════

def normalize_name(raw) -> str:
    """Trim leading/trailing whitespace; ``None`` becomes an empty name."""
    return (raw or "").strip()


def validate_name(name: str, *, exclude_groupid: int | None = None) -> None:
    """Raise if *name* (already normalized) cannot be stored."""
    if not name:
        raise ValidationError('Invalid parameter "/1/name": cannot be empty.')
    if len(name) > NAME_MAX_LENGTH:
        raise ValidationError('Invalid parameter "/1/name": value is too long.')
    if not _NAME_RE.match(name):
        raise ValidationError('Invalid parameter "/1/name": invalid host group name.')

    q = HostGroup.query.filter(HostGroup.name == name)
    if exclude_groupid is not None:
        q = q.filter(HostGroup.groupid != exclude_groupid)
    if q.first():
        raise ConflictError(RESOURCE, "name", name)


# ═══════════════════════════════════════════════════════════════
# Reads
# ═══════════════════════════════════════════════════════════════

def list_groups(name: str | None = None, search: str | None = None) -> list[HostGroup]:
    """Return host groups ordered by name, optionally filtered."""
    q = HostGroup.query
    if name is not None:
        q = q.filter(HostGroup.name == normalize_name(name))
    if search:
        q = q.filter(HostGroup.name.contains(search, autoescape=True))
    return q.order_by(HostGroup.name).all()


def get_group(groupid: int) -> HostGroup:
    group = db.session.get(HostGroup, groupid)
    if not group:
        raise NotFoundError(resource=RESOURCE, resource_id=groupid)
    return group


def get_group_by_name(name: str) -> HostGroup | None:
    return HostGroup.query.filter_by(name=normalize_name(name)).first()


# ═══════════════════════════════════════════════════════════════
# Writes
# ═══════════════════════════════════════════════════════════════

def create_group(data: dict) -> HostGroup:
    """Create a host group.

    The new group copies user group rights and tag filters from its nearest
    existing ancestor, so "Streets/Dzelzavas" starts with whatever "Streets"
    grants.
    """
    name = normalize_name(data.get("name"))
    validate_name(name)

    group = HostGroup(name=name)
    db.session.add(group)
    db.session.flush()

    inherited_from = permission_service.inherit_from_parent(group)
    db.session.commit()
    logger.info(
        "Created host group '%s'%s", name,
        f" (inherited permissions from '{inherited_from}')" if inherited_from else "",
        extra={"groupid": group.groupid, "group_name": name},
    )
    return group


def update_group(groupid: int, data: dict) -> HostGroup:
    """Rename a host group and/or push its permissions down to its subgroups.

    ``data["subgroups"]`` set to true applies the group's rights and tag
    filters to every existing descendant. Renaming never inherits.
    """
    group = get_group(groupid)

    if "name" in data:
        name = normalize_name(data.get("name"))
        if name != group.name:
            if group.is_discovered:
                raise ValidationError(
                    'Invalid parameter "/1/name": cannot update a discovered host group.'
                )
            validate_name(name, exclude_groupid=group.groupid)
            group.name = name

    if data.get("subgroups"):
        db.session.flush()
        permission_service.apply_to_subgroups(group.name)

    db.session.commit()
    logger.info("Updated host group '%s'", group.name,
                extra={"groupid": group.groupid, "group_name": group.name})
    return group


def delete_group(groupid: int) -> None:
    """Delete a host group after checking every table that can reference it."""
    group = get_group(groupid)

    blocker = find_delete_blocker(group)
    if blocker is not None:
        raise blocker

    name = group.name
    _detach_action_operations(groupid)
    MaintenanceGroup.query.filter_by(groupid=groupid).delete()
    HostGroupLink.query.filter_by(groupid=groupid).delete()
    Right.query.filter_by(groupid=groupid).delete()
    TagFilter.query.filter_by(groupid=groupid).delete()
    db.session.delete(group)
    db.session.commit()
    logger.info("Deleted host group '%s'", name, extra={"groupid": groupid, "group_name": name})


def find_delete_blocker(group: HostGroup) -> ReferentialIntegrityError | None:
    """Return the first dependent that prevents deleting *group*, if any."""
    name = group.name
    gid = group.groupid

    if group.internal:
        return ReferentialIntegrityError(
            f'Host group "{name}" is internal and cannot be deleted.', "group", name,
        )

    other_groups = db.select(HostGroupLink.hostid).where(HostGroupLink.groupid != gid)
    lone_host = (
        Host.query
        .join(HostGroupLink, HostGroupLink.hostid == Host.hostid)
        .filter(HostGroupLink.groupid == gid)
        .filter(~Host.hostid.in_(other_groups))
        .order_by(Host.hostid)
        .first()
    )
    if lone_host:
        return ReferentialIntegrityError(
            f'Host "{lone_host.host}" cannot be without host group.', "host", lone_host.host,
        )

    prototype = (
        HostPrototype.query
        .join(GroupPrototype, GroupPrototype.hostprototypeid == HostPrototype.hostprototypeid)
        .filter(GroupPrototype.groupid == gid)
        .first()
    )
    if prototype:
        return ReferentialIntegrityError(
            f'Group "{name}" cannot be deleted, because it is used by a host prototype.',
            "host prototype", prototype.host,
        )

    script = Script.query.filter_by(groupid=gid).first()
    if script:
        return ReferentialIntegrityError(
            f'Host group "{name}" cannot be deleted, because it is used in a global script.',
            "script", script.name,
        )

    correlation = (
        Correlation.query
        .join(CorrelationConditionGroup,
              CorrelationConditionGroup.correlationid == Correlation.correlationid)
        .filter(CorrelationConditionGroup.groupid == gid)
        .first()
    )
    if correlation:
        return ReferentialIntegrityError(
            f'Group "{name}" cannot be deleted, because it is used in a correlation condition.',
            "correlation", correlation.name,
        )

    maintenances = (
        Maintenance.query
        .join(MaintenanceGroup, MaintenanceGroup.maintenanceid == Maintenance.maintenanceid)
        .filter(MaintenanceGroup.groupid == gid)
        .order_by(Maintenance.maintenanceid)
        .all()
    )
    for maintenance in maintenances:
        other_targets = (
            MaintenanceGroup.query
            .filter(MaintenanceGroup.maintenanceid == maintenance.maintenanceid,
                    MaintenanceGroup.groupid != gid)
            .count()
            + MaintenanceHost.query.filter_by(maintenanceid=maintenance.maintenanceid).count()
        )
        if other_targets == 0:
            return ReferentialIntegrityError(
                f'Cannot delete host group "{name}" because maintenance "{maintenance.name}"'
                " must contain at least one host or host group.",
                "maintenance", maintenance.name,
            )

    return None


def _detach_action_operations(groupid: int) -> None:
    """Drop opgroup rows for the group and any group operation left empty."""
    operationids = [
        row.operationid
        for row in OperationGroup.query.filter_by(groupid=groupid).all()
    ]
    if not operationids:
        return
    OperationGroup.query.filter_by(groupid=groupid).delete()
    db.session.flush()

    empty = (
        Operation.query
        .filter(Operation.operationid.in_(operationids))
        .filter(Operation.operationtype.in_(
            (OPERATION_TYPE_GROUP_ADD, OPERATION_TYPE_GROUP_REMOVE)))
        .outerjoin(OperationGroup, OperationGroup.operationid == Operation.operationid)
        .group_by(Operation.operationid)
        .having(func.count(OperationGroup.opgroupid) == 0)
        .all()
    )
    for operation in empty:
        logger.debug("Removing empty group operation %d of action %d",
                     operation.operationid, operation.actionid)
        db.session.delete(operation)
