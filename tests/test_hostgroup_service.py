"""
Host Group Service Tests

Items tested:
    1  Name rules (trim, empty, length, slash placement, uniqueness)
    2  Create (trimmed storage, inheritance from nearest ancestor)
    3  Update (rename, discovered groups, apply to subgroups)
    4  Delete (blockers in order, cascading cleanup)
"""

import pytest

from groupadmin.core.exceptions import (
    ConflictError,
    NotFoundError,
    ReferentialIntegrityError,
    ValidationError,
)
from groupadmin.models import db
from groupadmin.models.dependents import (
    Maintenance,
    MaintenanceGroup,
    Operation,
    OperationGroup,
)
from groupadmin.models.hostgroup import GROUP_FLAG_DISCOVERED, HostGroup, HostGroupLink
from groupadmin.models.permission import PERM_DENY, PERM_READ, Right, TagFilter
from groupadmin.services import hostgroup_service as svc
from groupadmin.services import seed_service as seed


# ═══════════════════════════════════════════════════════════════
# 1 — Name rules
# ═══════════════════════════════════════════════════════════════


class TestNameRules:

    def test_normalize_trims(self):
        assert svc.normalize_name("   trim    ") == "trim"
        assert svc.normalize_name(None) == ""

    @pytest.mark.parametrize("name", [
        "Test/Test/",
        "Test/Test\\/",
        "/Test",
        "Test//Test",
        "/",
    ])
    def test_invalid_names(self, name):
        with pytest.raises(ValidationError) as exc:
            svc.validate_name(name)
        assert str(exc.value) == 'Invalid parameter "/1/name": invalid host group name.'

    @pytest.mark.parametrize("name", [
        "Group/Subgroup1/Subgroup2",
        "~!@#$%^&*()_+=[]{}null☺æų",
        "single",
    ])
    def test_valid_names(self, name):
        svc.validate_name(name)

    def test_empty_name(self):
        with pytest.raises(ValidationError):
            svc.validate_name("")

    def test_name_too_long(self):
        with pytest.raises(ValidationError) as exc:
            svc.validate_name("x" * 256)
        assert "too long" in str(exc.value)

    def test_duplicate_name(self, seeded):
        with pytest.raises(ConflictError) as exc:
            svc.validate_name(seed.ZABBIX_SERVERS)
        assert str(exc.value) == 'Host group "Zabbix servers" already exists.'

    def test_duplicate_check_skips_own_row(self, seeded, group_id):
        svc.validate_name(seed.UPDATE_GROUP, exclude_groupid=group_id(seed.UPDATE_GROUP))


# ═══════════════════════════════════════════════════════════════
# 2 — Create
# ═══════════════════════════════════════════════════════════════


class TestCreate:

    def test_create_stores_trimmed_name(self):
        group = svc.create_group({"name": "   trim    "})
        assert group.name == "trim"
        assert HostGroup.query.filter_by(name="trim").count() == 1

    def test_recreate_reports_existing(self):
        svc.create_group({"name": "Created once"})
        with pytest.raises(ConflictError) as exc:
            svc.create_group({"name": "  Created once "})
        assert str(exc.value) == 'Host group "Created once" already exists.'

    def test_create_duplicate_writes_nothing(self, seeded):
        before = HostGroup.query.count()
        with pytest.raises(ConflictError):
            svc.create_group({"name": seed.TEMPLATES})
        assert HostGroup.query.count() == before

    def test_create_inherits_from_direct_parent(self, seeded):
        group = svc.create_group({"name": "Streets/Dzelzavas"})
        right = Right.query.filter_by(groupid=group.groupid).one()
        assert right.permission == PERM_DENY
        assert [t.tag for t in TagFilter.query.filter_by(groupid=group.groupid)] == ["street"]

    def test_create_inherits_from_nearest_existing_ancestor(self, seeded):
        # "Europe/Latvia/Riga" does not exist; "Europe/Latvia" is the closest
        group = svc.create_group({"name": "Europe/Latvia/Riga/Old Town"})
        right = Right.query.filter_by(groupid=group.groupid).one()
        assert right.permission == PERM_READ
        assert TagFilter.query.filter_by(groupid=group.groupid).count() == 0

    def test_create_without_ancestor_gets_nothing(self, seeded):
        group = svc.create_group({"name": "Nowhere/Else"})
        assert Right.query.filter_by(groupid=group.groupid).count() == 0


# ═══════════════════════════════════════════════════════════════
# 3 — Update
# ═══════════════════════════════════════════════════════════════


class TestUpdate:

    def test_rename(self, seeded, group_id):
        gid = group_id(seed.UPDATE_GROUP)
        group = svc.update_group(gid, {"name": "  Renamed group "})
        assert group.name == "Renamed group"

    def test_rename_to_existing_name(self, seeded, group_id):
        with pytest.raises(ConflictError):
            svc.update_group(group_id(seed.UPDATE_GROUP), {"name": seed.ZABBIX_SERVERS})
        assert HostGroup.query.filter_by(name=seed.UPDATE_GROUP).count() == 1

    def test_unchanged_name_is_accepted(self, seeded, group_id):
        gid = group_id(seed.UPDATE_GROUP)
        assert svc.update_group(gid, {"name": seed.UPDATE_GROUP}).groupid == gid

    def test_discovered_group_cannot_be_renamed(self, seeded, group_id):
        gid = group_id(seed.DISCOVERED_GROUP)
        with pytest.raises(ValidationError) as exc:
            svc.update_group(gid, {"name": "Something else"})
        assert "discovered host group" in str(exc.value)
        assert db.session.get(HostGroup, gid).flags == GROUP_FLAG_DISCOVERED

    def test_update_missing_group(self):
        with pytest.raises(NotFoundError):
            svc.update_group(999999, {"name": "x"})

    def test_apply_to_subgroups(self, seeded, group_id):
        svc.update_group(group_id("Europe"), {"subgroups": True})
        for name in ("Europe/Latvia", "Europe/Latvia/Riga/Zabbix", "Europe/Test"):
            right = Right.query.filter_by(groupid=group_id(name)).one()
            assert right.permission == PERM_DENY
        # Same prefix without the separator is not a subgroup.
        outsider = group_id("Europe group for test on search page")
        assert Right.query.filter_by(groupid=outsider).count() == 0


# ═══════════════════════════════════════════════════════════════
# 4 — Delete
# ═══════════════════════════════════════════════════════════════


class TestDelete:

    @pytest.mark.parametrize("name,dependent_type", [
        (seed.DISCOVERED_HOSTS, "group"),
        (seed.LONE_HOST_GROUP, "host"),
        (seed.PROTOTYPE_GROUP, "host prototype"),
        (seed.SCRIPT_GROUP, "script"),
        (seed.CORRELATION_GROUP, "correlation"),
        (seed.MAINTENANCE_GROUP, "maintenance"),
    ])
    def test_delete_blocked(self, seeded, group_id, name, dependent_type):
        gid = group_id(name)
        with pytest.raises(ReferentialIntegrityError) as exc:
            svc.delete_group(gid)
        assert exc.value.dependent_type == dependent_type
        assert db.session.get(HostGroup, gid) is not None

    def test_delete_plain_group(self, seeded, group_id):
        gid = group_id(seed.DELETE_GROUP)
        svc.delete_group(gid)
        assert db.session.get(HostGroup, gid) is None

    def test_delete_removes_rights_and_tag_filters(self, seeded, group_id):
        gid = group_id("Streets")
        svc.delete_group(gid)
        assert Right.query.filter_by(groupid=gid).count() == 0
        assert TagFilter.query.filter_by(groupid=gid).count() == 0

    def test_delete_drops_empty_action_operation(self, seeded, group_id):
        gid = group_id(seed.ACTION_GROUP)
        svc.delete_group(gid)
        assert OperationGroup.query.filter_by(groupid=gid).count() == 0
        assert Operation.query.filter_by(operationtype=svc.OPERATION_TYPE_GROUP_ADD).count() == 0

    def test_maintenance_with_other_target_does_not_block(self, seeded, group_id):
        maintenance = Maintenance.query.filter_by(name=seed.MAINTENANCE).one()
        db.session.add(MaintenanceGroup(maintenanceid=maintenance.maintenanceid,
                                        groupid=group_id(seed.ZABBIX_SERVERS)))
        db.session.commit()

        svc.delete_group(group_id(seed.MAINTENANCE_GROUP))
        assert maintenance.groups.count() == 1

    def test_host_in_two_groups_does_not_block(self, seeded, group_id):
        host_link = HostGroupLink.query.filter_by(groupid=group_id(seed.LONE_HOST_GROUP)).one()
        db.session.add(HostGroupLink(hostid=host_link.hostid,
                                     groupid=group_id(seed.ZABBIX_SERVERS)))
        db.session.commit()

        svc.delete_group(group_id(seed.LONE_HOST_GROUP))
        assert HostGroup.query.filter_by(name=seed.LONE_HOST_GROUP).count() == 0

    def test_delete_missing_group(self):
        with pytest.raises(NotFoundError) as exc:
            svc.delete_group(999999)
        assert str(exc.value) == "No permissions to referred object or it does not exist!"
