"""
Conformance runner — replays form scenarios and checks what the application did.

Per scenario:
  1. failure expected → snapshot every table a host group write can touch
  2. submit the form through the driver
  3. success → success message, stored name equals the trimmed input
  4. failure → failure title + detail message, snapshot unchanged
Delete additionally checks the row count; cancel checks nothing was written.
Layout scenarios only open a form and compare its fields and buttons.

Scenarios run one at a time against one shared database. A divergence is
reported as a failed result; an unexpected exception marks that scenario
errored and the run moves on to the next one. Nothing is retried.
"""

import logging
import time

from groupadmin.conformance import catalog
from groupadmin.conformance.driver import FlaskFormDriver
from groupadmin.conformance.repository import HostGroupRepository
from groupadmin.conformance.scenarios import (
    AssertionMismatch,
    ConformanceReport,
    Expected,
    FixtureContext,
    FormResult,
    Operation,
    Outcome,
    ScenarioResult,
)
from groupadmin.models.hostgroup import GROUP_FLAG_PLAIN, NAME_MAX_LENGTH, HostGroup
from groupadmin.models.permission import UserGroup
from groupadmin.services.hostgroup_form import DISCOVERED_BY_FIELD, NAME_FIELD, SUBGROUPS_FIELD
from groupadmin.services.snapshot import GROUPS_SQL

logger = logging.getLogger(__name__)

GOOD_MESSAGES = {
    Operation.CREATE: "Group added",
    Operation.CLONE: "Group added",
    Operation.UPDATE: "Group updated",
    Operation.DELETE: "Group deleted",
}
BAD_MESSAGES = {
    Operation.CREATE: "Cannot add group",
    Operation.CLONE: "Cannot add group",
    Operation.UPDATE: "Cannot update group",
    Operation.DELETE: "Cannot delete group",
}


def _expect(actual, expected, what: str) -> None:
    if actual != expected:
        raise AssertionMismatch(f"{what}: expected {expected!r}, got {actual!r}")


class ConformanceRunner:
    """Runs host group form scenarios against a driver and a repository."""

    def __init__(self, driver, repository, context: FixtureContext, *, clock=time.time):
        self.driver = driver
        self.repository = repository
        self.context = context
        self.clock = clock
        self._checks = {
            Operation.LAYOUT: self.check_layout,
            Operation.CREATE: self.check_form,
            Operation.UPDATE: self.check_form,
            Operation.CLONE: self.check_clone,
            Operation.CANCEL: self.check_cancel,
            Operation.DELETE: self.check_delete,
            Operation.SUBGROUPS: self.check_subgroups,
        }

    # ── Running ───────────────────────────────────────────────────────────

    def run(self, scenario) -> ScenarioResult:
        """Run one scenario and report whether the application behaved."""
        extra = {"scenario": scenario.label, "operation": scenario.operation.value}
        try:
            self._checks[scenario.operation](scenario)
        except AssertionMismatch as exc:
            logger.warning("FAIL %s", exc, extra={**extra, "outcome": "failed"})
            return ScenarioResult(scenario, passed=False, reason=str(exc))
        except Exception as exc:
            logger.exception("ERROR while running scenario", extra={**extra, "outcome": "error"})
            return ScenarioResult(scenario, passed=False, reason=repr(exc), errored=True)
        logger.info("PASS", extra={**extra, "outcome": "passed"})
        return ScenarioResult(scenario, passed=True)

    def run_all(self, scenarios) -> ConformanceReport:
        return ConformanceReport([self.run(scenario) for scenario in scenarios])

    # ── Assertions ────────────────────────────────────────────────────────

    @staticmethod
    def assert_message(result: FormResult, outcome: Outcome, title: str,
                       detail: str | None = None) -> None:
        _expect(result.outcome, outcome, "form outcome")
        _expect(result.title, title, "message title")
        if detail is not None and detail not in result.details:
            raise AssertionMismatch(
                f"message details: expected {detail!r} in {list(result.details)!r}"
            )

    def assert_unchanged(self, before: dict[str, str]) -> None:
        after = self.repository.snapshot(tuple(before))
        changed = [query for query, digest in before.items() if after[query] != digest]
        if changed:
            raise AssertionMismatch(f"rejected request changed data: {changed}")

    def _stored_name(self, name: str) -> str:
        stored = self.repository.read(name)
        if stored is None:
            raise AssertionMismatch(f'host group "{name}" was not stored')
        return stored["name"]

    # ── Checks per operation ──────────────────────────────────────────────

    def check_layout(self, scenario) -> None:
        """Fields, flags and buttons of the new form or of a group's edit form."""
        form = self.driver.open_form(scenario.name)

        if scenario.name is None:
            labels, buttons = [NAME_FIELD], ["Add", "Cancel"]
        else:
            labels = [NAME_FIELD, SUBGROUPS_FIELD]
            if scenario.discovered:
                labels.insert(0, DISCOVERED_BY_FIELD)
            buttons = ["Update", "Clone", "Delete", "Cancel"]
        _expect([f.name for f in form.fields], labels, "form fields")
        _expect(form.buttons, buttons, "form buttons")

        name = form.get_field(NAME_FIELD)
        _expect(name.maxlength, NAME_MAX_LENGTH, "name maxlength")
        _expect(name.required, True, "name required")
        _expect(name.enabled, not scenario.discovered, "name editable")
        if scenario.name is not None:
            _expect(name.value, scenario.name, "name value")
        if scenario.discovered:
            discovered_by = form.get_field(DISCOVERED_BY_FIELD)
            _expect(discovered_by.enabled, False, "discovered by editable")
            _expect(discovered_by.value, self.repository.read(scenario.name)["discovery_rule"],
                    "discovered by value")

    def check_form(self, scenario) -> None:
        """Create or update a group from the form."""
        operation = scenario.operation
        before = self.repository.snapshot() if scenario.expected is Expected.FAILURE else None

        fields = dict(scenario.fields)
        target = None
        if operation is Operation.UPDATE:
            target = self.context.update_group
            # An update scenario without a name clears the field.
            fields.setdefault(NAME_FIELD, "")

        result = self.driver.submit(operation, fields, target=target)

        if scenario.expected is Expected.SUCCESS:
            self.assert_message(result, Outcome.SUCCESS, GOOD_MESSAGES[operation])
            name = scenario.get(NAME_FIELD).strip()
            _expect(self._stored_name(name), name, "stored group name")
            if operation is Operation.UPDATE:
                self.context.update_group = name
        else:
            title = scenario.message or BAD_MESSAGES[operation]
            self.assert_message(result, Outcome.FAILURE, title, scenario.error)
            self.assert_unchanged(before)

    def check_clone(self, scenario) -> None:
        before = self.repository.snapshot() if scenario.expected is Expected.FAILURE else None

        result = self.driver.submit(Operation.CLONE, dict(scenario.fields), target=scenario.name)

        if scenario.expected is Expected.SUCCESS:
            self.assert_message(result, Outcome.SUCCESS, GOOD_MESSAGES[Operation.CLONE])
            name = scenario.get(NAME_FIELD).strip()
            _expect(self._stored_name(name), name, "stored clone name")
            _expect(self.repository.count_names(scenario.name, name), 2,
                    "source and clone rows")
            if scenario.discovered:
                # The clone is an ordinary group, not another LLD result.
                _expect(self.repository.read(name)["flags"], GROUP_FLAG_PLAIN, "clone flags")
        else:
            self.assert_message(result, Outcome.FAILURE, BAD_MESSAGES[Operation.CLONE],
                                scenario.error)
            self.assert_unchanged(before)

    def check_delete(self, scenario) -> None:
        stored = self.repository.read(scenario.name)
        if stored is None:
            raise AssertionMismatch(f'host group "{scenario.name}" missing before delete')
        count_before = self.repository.count(HostGroup.name == scenario.name)
        before = self.repository.snapshot() if scenario.expected is Expected.FAILURE else None

        result = self.driver.submit(Operation.DELETE, {}, target=scenario.name)

        if scenario.expected is Expected.SUCCESS:
            self.assert_message(result, Outcome.SUCCESS, GOOD_MESSAGES[Operation.DELETE])
            _expect(self.repository.count(HostGroup.name == scenario.name), 0,
                    "rows left after delete")
            _expect(self.repository.dependents(stored["groupid"]), {},
                    "rows still referencing the deleted group")
        else:
            self.assert_message(result, Outcome.FAILURE, BAD_MESSAGES[Operation.DELETE],
                                scenario.error)
            self.assert_unchanged(before)
            _expect(self.repository.count(HostGroup.name == scenario.name), count_before,
                    "rows after refused delete")

    def check_cancel(self, scenario) -> None:
        before = self.repository.snapshot()
        new_name = f"{self.clock()} Cancel {self.context.delete_group}"
        target = None if scenario.action == "Add" else self.context.delete_group

        result = self.driver.submit(Operation.CANCEL, {NAME_FIELD: new_name},
                                    target=target, action=scenario.action)

        _expect(result.outcome, Outcome.CANCELLED, "form outcome")
        self.assert_unchanged(before)

    def check_subgroups(self, scenario) -> None:
        """Create a group if asked, apply permissions to subgroups, compare the user group."""
        if scenario.create:
            operation = Operation.UPDATE if scenario.open_form else Operation.CREATE
            result = self.driver.submit(operation, {NAME_FIELD: scenario.create},
                                        target=scenario.open_form)
            self.assert_message(result, Outcome.SUCCESS, GOOD_MESSAGES[operation])

        result = self.driver.submit(Operation.UPDATE, {SUBGROUPS_FIELD: True},
                                    target=scenario.apply_permissions)
        self.assert_message(result, Outcome.SUCCESS, GOOD_MESSAGES[Operation.UPDATE])

        if self.context.user_groupid is None:
            raise AssertionMismatch("no user group to check permissions against")
        usrgrp = self.driver.open_user_group(self.context.user_groupid)
        rights = tuple((row["group"], row["permission"]) for row in usrgrp["rights"])
        tags = tuple((row["group"], row["tags"]) for row in usrgrp["tag_filters"])
        _expect(rights, scenario.groups_after, "user group permissions")
        _expect(tags, scenario.tags_after, "user group tag filters")

    def simple_update(self, name: str) -> None:
        """Submit a group's form unchanged; nothing may change."""
        old_hash = self.repository.hash(GROUPS_SQL)
        values = self.driver.open_form(name).values()

        result = self.driver.submit(Operation.UPDATE, {}, target=name)

        self.assert_message(result, Outcome.SUCCESS, GOOD_MESSAGES[Operation.UPDATE])
        _expect(self.repository.hash(GROUPS_SQL), old_hash, "groups hash")
        _expect(self.driver.open_form(name).values(), values, "form values")


def run_suite(app, operations=None, *, seed: bool = True) -> ConformanceReport:
    """Seed fixtures (optionally) and replay the catalog against *app*.

    *operations* restricts the run; the catalog order is kept either way.
    """
    from groupadmin.services import seed_service

    wanted = {Operation(op) for op in operations} if operations else set(catalog.DEFAULT_ORDER)
    report = ConformanceReport()

    with app.app_context():
        if seed:
            context = FixtureContext.from_seed(seed_service.seed_all())
        else:
            usrgrp = UserGroup.query.filter_by(
                name=app.config["CONFORMANCE_USER_GROUP"]).first()
            context = FixtureContext(
                update_group=seed_service.UPDATE_GROUP,
                delete_group=seed_service.DELETE_GROUP,
                user_groupid=usrgrp.usrgrpid if usrgrp else None,
            )

        runner = ConformanceRunner(
            FlaskFormDriver(app.test_client()), HostGroupRepository(), context,
        )
        for operation in catalog.DEFAULT_ORDER:
            if operation in wanted:
                report.extend(runner.run_all(catalog.get_scenarios(operation)))

    logger.info("Conformance run: %d passed, %d failed, %d errored",
                report.passed, report.failed, report.errored)
    return report
