"""
Host group repository — the persistence view the conformance runner reads.

Writes go through the host group service so the same rules apply as over
HTTP; reads, counts and hashes go straight to the database.
"""

from sqlalchemy import func

from groupadmin.models import db
from groupadmin.models.dependents import (
    CorrelationConditionGroup,
    GroupPrototype,
    MaintenanceGroup,
    OperationGroup,
    Script,
)
from groupadmin.models.hostgroup import HostGroup, HostGroupLink
from groupadmin.models.permission import Right, TagFilter
from groupadmin.services import hostgroup_service
from groupadmin.services.snapshot import SNAPSHOT_QUERIES, SnapshotService

# Every table with a column pointing at hstgrp.groupid
DEPENDENT_TABLES = {
    "hosts_groups": HostGroupLink,
    "scripts": Script,
    "opgroup": OperationGroup,
    "maintenances_groups": MaintenanceGroup,
    "corr_condition_group": CorrelationConditionGroup,
    "group_prototype": GroupPrototype,
    "rights": Right,
    "tag_filter": TagFilter,
}


class HostGroupRepository:
    """create/read/update/delete/list plus hash and count over host groups."""

    def create(self, fields: dict) -> dict:
        return hostgroup_service.create_group(fields).to_dict()

    def read(self, name: str) -> dict | None:
        # Requests may have written through another session.
        db.session.expire_all()
        group = hostgroup_service.get_group_by_name(name)
        return group.to_dict() if group else None

    def update(self, name: str, fields: dict) -> dict:
        group = self._require(name)
        return hostgroup_service.update_group(group.groupid, fields).to_dict()

    def delete(self, name: str) -> None:
        hostgroup_service.delete_group(self._require(name).groupid)

    def list_groups(self) -> list[dict]:
        db.session.expire_all()
        return [g.to_dict() for g in hostgroup_service.list_groups()]

    def hash(self, query: str) -> str:
        return SnapshotService.content_hash(query)

    def snapshot(self, queries=SNAPSHOT_QUERIES) -> dict[str, str]:
        return SnapshotService.capture(queries)

    def count(self, *criteria) -> int:
        """Count host groups matching SQLAlchemy *criteria*."""
        return db.session.query(func.count(HostGroup.groupid)).filter(*criteria).scalar()

    def count_names(self, *names: str) -> int:
        return self.count(HostGroup.name.in_(names))

    def dependents(self, groupid: int) -> dict[str, int]:
        """Rows per dependent table that still reference *groupid* (zeros omitted)."""
        counts = {}
        for table, model in DEPENDENT_TABLES.items():
            n = model.query.filter(model.groupid == groupid).count()
            if n:
                counts[table] = n
        return counts

    @staticmethod
    def _require(name: str) -> HostGroup:
        group = hostgroup_service.get_group_by_name(name)
        if group is None:
            raise LookupError(f'Host group "{name}" does not exist')
        return group
