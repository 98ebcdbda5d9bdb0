"""
Scenario catalog for the host group form.

The create catalog is the base; update and clone scenarios are derived from
it so that a new create case automatically gets an update counterpart.

All functions are pure: they build scenarios from the fixture names in
``groupadmin.services.seed_service`` and never touch the database. Clone
names embed a wall-clock timestamp so repeated runs against the same
database never collide; pass ``stamp`` to make them reproducible.
"""

import time

from groupadmin.conformance.scenarios import Expected, Operation, Scenario, SubgroupScenario
from groupadmin.services.hostgroup_form import NAME_FIELD
from groupadmin.services.seed_service import (
    CORRELATION_GROUP,
    DELETE_GROUP,
    DISCOVERED_GROUP,
    DISCOVERED_HOSTS,
    LONE_HOST,
    LONE_HOST_GROUP,
    MAINTENANCE,
    MAINTENANCE_GROUP,
    PROTOTYPE_GROUP,
    SCRIPT_GROUP,
    TEMPLATES,
    UPDATE_GROUP,
    ZABBIX_SERVERS,
)

EMPTY_NAME_ERROR = 'Incorrect value for field "Group name": cannot be empty.'
INVALID_NAME_ERROR = 'Invalid parameter "/1/name": invalid host group name.'
INCORRECT_DATA = "Page received incorrect data"


def _exists(name: str) -> str:
    return f'Host group "{name}" already exists.'


def get_layout_scenarios() -> tuple[Scenario, ...]:
    """The new form, the edit form of a plain group and of a discovered one."""
    return (
        Scenario(Operation.LAYOUT),
        Scenario(Operation.LAYOUT, name=UPDATE_GROUP),
        Scenario(Operation.LAYOUT, name=DISCOVERED_GROUP, discovered=True),
    )


def get_create_scenarios() -> tuple[Scenario, ...]:
    create = Operation.CREATE
    bad = Expected.FAILURE
    return (
        Scenario(create, bad, {NAME_FIELD: ZABBIX_SERVERS}, error=_exists(ZABBIX_SERVERS)),
        Scenario(create, bad, {NAME_FIELD: TEMPLATES}, error=_exists(TEMPLATES)),
        Scenario(create, bad, {NAME_FIELD: DISCOVERED_GROUP}, error=_exists(DISCOVERED_GROUP)),
        Scenario(create, bad, error=EMPTY_NAME_ERROR, message=INCORRECT_DATA),
        Scenario(create, bad, {NAME_FIELD: " "}, error=EMPTY_NAME_ERROR, message=INCORRECT_DATA),
        Scenario(create, bad, {NAME_FIELD: "Test/Test/"}, error=INVALID_NAME_ERROR),
        Scenario(create, bad, {NAME_FIELD: "Test/Test\\/"}, error=INVALID_NAME_ERROR),
        Scenario(create, bad, {NAME_FIELD: "/Test"}, error=INVALID_NAME_ERROR),
        Scenario(create, bad, {NAME_FIELD: "Test//Test"}, error=INVALID_NAME_ERROR),
        Scenario(create, fields={NAME_FIELD: "~!@#$%^&*()_+=[]{}null☺æų"}),
        Scenario(create, fields={NAME_FIELD: "   trim    "}, trim=True),
        Scenario(create, fields={NAME_FIELD: "Group/Subgroup1/Subgroup2"}),
    )


def get_update_scenarios() -> tuple[Scenario, ...]:
    """Create scenarios replayed as updates of the update group.

    Success names get an "update" suffix so they don't collide with the
    groups the create scenarios left behind; failures are kept as they are.
    """
    scenarios = []
    for scenario in get_create_scenarios():
        fields = dict(scenario.fields)
        if scenario.expected is Expected.SUCCESS:
            fields[NAME_FIELD] = (
                "   trim update    " if scenario.trim else fields[NAME_FIELD] + "update"
            )
        scenarios.append(Scenario(
            Operation.UPDATE, scenario.expected, fields,
            error=scenario.error, message=scenario.message, trim=scenario.trim,
        ))
    return tuple(scenarios)


def get_clone_scenarios(stamp: float | None = None) -> tuple[Scenario, ...]:
    if stamp is None:
        stamp = time.time()
    clone = Operation.CLONE
    return (
        # Clone without renaming collides with the source group.
        Scenario(clone, Expected.FAILURE, name=DELETE_GROUP, error=_exists(DELETE_GROUP)),
        Scenario(clone, name=DELETE_GROUP, fields={NAME_FIELD: f"{stamp:.6f} cloned group"}),
        Scenario(clone, name=DISCOVERED_GROUP, fields={NAME_FIELD: f"{DISCOVERED_GROUP} cloned group"},
                 discovered=True),
    )


def get_cancel_scenarios() -> tuple[Scenario, ...]:
    return tuple(
        Scenario(Operation.CANCEL, action=action)
        for action in ("Add", "Update", "Clone", "Delete")
    )


def get_delete_scenarios() -> tuple[Scenario, ...]:
    delete = Operation.DELETE
    bad = Expected.FAILURE
    return (
        Scenario(delete, bad, name=LONE_HOST_GROUP,
                 error=f'Host "{LONE_HOST}" cannot be without host group.'),
        Scenario(delete, bad, name=MAINTENANCE_GROUP,
                 error=f'Cannot delete host group "{MAINTENANCE_GROUP}" because maintenance'
                       f' "{MAINTENANCE}" must contain at least one host or host group.'),
        Scenario(delete, bad, name=CORRELATION_GROUP,
                 error=f'Group "{CORRELATION_GROUP}" cannot be deleted, because it is used'
                       ' in a correlation condition.'),
        Scenario(delete, bad, name=SCRIPT_GROUP,
                 error=f'Host group "{SCRIPT_GROUP}" cannot be deleted, because it is used'
                       ' in a global script.'),
        Scenario(delete, bad, name=PROTOTYPE_GROUP,
                 error=f'Group "{PROTOTYPE_GROUP}" cannot be deleted, because it is used'
                       ' by a host prototype.'),
        Scenario(delete, bad, name=DISCOVERED_HOSTS,
                 error=f'Host group "{DISCOVERED_HOSTS}" is internal and cannot be deleted.'),
        Scenario(delete, name=DELETE_GROUP),
    )


def get_subgroup_scenarios() -> tuple[SubgroupScenario, ...]:
    """Permission propagation cases; the second builds on the first."""
    return (
        SubgroupScenario(
            apply_permissions="Europe/Test",
            create="Cities",
            groups_after=(
                ("Cities/Cesis", "Read"),
                ("Europe", "Deny"),
                ("Europe/Latvia", "Read"),
                ("Europe/Latvia/Riga/Zabbix", "None"),
                ("Europe/Test (including subgroups)", "Read-write"),
                ("Streets", "Deny"),
            ),
            tags_after=(
                ("Cities/Cesis", "city: Cesis"),
                ("Europe", "world"),
                ("Europe/Test", "country: test"),
                ("Europe/Test/Zabbix", "country: test"),
                ("Streets", "street"),
            ),
        ),
        SubgroupScenario(
            apply_permissions="Europe",
            create="Streets/Dzelzavas",
            groups_after=(
                ("Cities/Cesis", "Read"),
                ("Europe (including subgroups)", "Deny"),
                ("Streets (including subgroups)", "Deny"),
            ),
            tags_after=(
                ("Cities/Cesis", "city: Cesis"),
                ("Europe", "world"),
                ("Europe/Latvia", "world"),
                ("Europe/Latvia/Riga/Zabbix", "world"),
                ("Europe/Test", "world"),
                ("Europe/Test/Zabbix", "world"),
                ("Streets", "street"),
                ("Streets/Dzelzavas", "street"),
            ),
        ),
    )


_CATALOG = {
    Operation.LAYOUT: get_layout_scenarios,
    Operation.CREATE: get_create_scenarios,
    Operation.UPDATE: get_update_scenarios,
    Operation.CLONE: get_clone_scenarios,
    Operation.CANCEL: get_cancel_scenarios,
    Operation.DELETE: get_delete_scenarios,
    Operation.SUBGROUPS: get_subgroup_scenarios,
}

# Order in which a full run replays the catalog; later steps rely on earlier ones.
DEFAULT_ORDER = (
    Operation.LAYOUT,
    Operation.CREATE,
    Operation.UPDATE,
    Operation.CLONE,
    Operation.CANCEL,
    Operation.DELETE,
    Operation.SUBGROUPS,
)


def get_scenarios(operation) -> tuple:
    """Return the ordered scenarios for *operation* (an Operation or its value)."""
    return _CATALOG[Operation(operation)]()
