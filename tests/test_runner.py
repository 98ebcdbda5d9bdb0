"""
Conformance runner tests.

Items tested:
    1  Full catalog replay against the application
    2  Single scenarios through the Flask form driver
    3  Divergence and error reporting (stub driver)
    4  CLI entry point
    5  Repository
"""

import pytest

from groupadmin.conformance import catalog
from groupadmin.conformance.driver import FlaskFormDriver, HostGroupForm
from groupadmin.conformance.repository import HostGroupRepository
from groupadmin.conformance.runner import ConformanceRunner, run_suite
from groupadmin.conformance.scenarios import (
    AssertionMismatch,
    Expected,
    FixtureContext,
    FormResult,
    Operation,
    Outcome,
    Scenario,
)
from groupadmin.models.hostgroup import GROUP_FLAG_PLAIN, HostGroup
from groupadmin.services import seed_service as seed
from groupadmin.services.hostgroup_form import NAME_FIELD, build_form


@pytest.fixture()
def runner(client, seeded):
    return ConformanceRunner(
        FlaskFormDriver(client), HostGroupRepository(), FixtureContext.from_seed(seeded),
        clock=lambda: 1700000000.0,
    )


class StubDriver:
    """Answers every submit with the same result."""

    def __init__(self, result=None, exc=None):
        self.result = result
        self.exc = exc
        self.calls = []

    def submit(self, operation, fields, *, target=None, action=None):
        self.calls.append((operation, dict(fields), target))
        if self.exc:
            raise self.exc
        return self.result


# ═══════════════════════════════════════════════════════════════
# 1 — Full run
# ═══════════════════════════════════════════════════════════════


class TestFullRun:

    def test_whole_catalog_passes(self, app):
        report = run_suite(app)
        failures = [r.to_dict() for r in report.results if not r.passed]
        assert failures == []
        assert report.passed == 3 + 12 + 12 + 3 + 4 + 7 + 2

    def test_restricted_run(self, app):
        report = run_suite(app, ["create"])
        assert report.ok
        assert len(report.results) == 12
        assert {r.scenario.operation for r in report.results} == {Operation.CREATE}

    def test_unseeded_run_uses_existing_data(self, app, seeded):
        report = run_suite(app, ["delete"], seed=False)
        assert report.ok


# ═══════════════════════════════════════════════════════════════
# 2 — Single scenarios
# ═══════════════════════════════════════════════════════════════


class TestScenarios:

    def test_update_moves_target(self, runner):
        result = runner.run(Scenario(Operation.UPDATE, fields={NAME_FIELD: "   moved    "}))
        assert result.passed, result.reason
        assert runner.context.update_group == "moved"

    def test_update_failure_keeps_target(self, runner):
        scenario = Scenario(Operation.UPDATE, Expected.FAILURE, {NAME_FIELD: seed.TEMPLATES},
                            error=f'Host group "{seed.TEMPLATES}" already exists.')
        assert runner.run(scenario).passed
        assert runner.context.update_group == seed.UPDATE_GROUP

    def test_clone_creates_second_row(self, runner):
        scenario = Scenario(Operation.CLONE, name=seed.DELETE_GROUP,
                            fields={NAME_FIELD: "cloned copy"})
        assert runner.run(scenario).passed
        assert HostGroup.query.filter_by(name="cloned copy").count() == 1

    def test_clone_of_discovered_group_is_plain(self, runner):
        scenario = Scenario(Operation.CLONE, name=seed.DISCOVERED_GROUP, discovered=True,
                            fields={NAME_FIELD: "cloned discovered"})
        result = runner.run(scenario)
        assert result.passed, result.reason
        assert HostGroup.query.filter_by(name="cloned discovered").one().flags == GROUP_FLAG_PLAIN

    def test_layout(self, runner):
        for scenario in catalog.get_layout_scenarios():
            result = runner.run(scenario)
            assert result.passed, result.reason

    def test_cancel_writes_nothing(self, runner):
        for scenario in catalog.get_cancel_scenarios():
            assert runner.run(scenario).passed
        assert HostGroup.query.filter(HostGroup.name.contains("Cancel")).count() == 0

    def test_subgroups(self, runner):
        for scenario in catalog.get_subgroup_scenarios():
            result = runner.run(scenario)
            assert result.passed, result.reason

    def test_simple_update(self, runner):
        runner.simple_update(seed.UPDATE_GROUP)
        runner.simple_update(seed.DISCOVERED_GROUP)

    def test_wrong_expectation_is_reported(self, runner):
        # Templates exists, so expecting success must fail
        result = runner.run(Scenario(Operation.CREATE, fields={NAME_FIELD: seed.TEMPLATES}))
        assert not result.passed
        assert not result.errored
        assert "message title" in result.reason or "form outcome" in result.reason


class TestDriver:

    def test_read_only_field(self, client, seeded):
        form = FlaskFormDriver(client).open_form(seed.DISCOVERED_GROUP)
        with pytest.raises(ValueError):
            form.fill({NAME_FIELD: "new"})

    def test_missing_button(self):
        form = HostGroupForm(groupid=None, buttons=["Add", "Cancel"])
        with pytest.raises(AssertionMismatch):
            form.require_button("Delete")

    def test_payload_trims(self, client):
        form = FlaskFormDriver(client).open_form()
        form.fill({NAME_FIELD: "  padded  "})
        assert form.payload() == {"name": "padded"}

    def test_unknown_group(self, client):
        with pytest.raises(LookupError):
            FlaskFormDriver(client).find_groupid("No such group")


# ═══════════════════════════════════════════════════════════════
# 3 — Divergence reporting
# ═══════════════════════════════════════════════════════════════


class TestReporting:

    def _runner(self, driver, seeded):
        return ConformanceRunner(driver, HostGroupRepository(), FixtureContext.from_seed(seeded))

    def test_wrong_title_fails(self, seeded):
        driver = StubDriver(FormResult(Outcome.FAILURE, "Something else", ("x",)))
        scenario = catalog.get_create_scenarios()[0]
        result = self._runner(driver, seeded).run(scenario)
        assert not result.passed
        assert "message title" in result.reason

    def test_missing_detail_fails(self, seeded):
        driver = StubDriver(FormResult(Outcome.FAILURE, "Cannot add group", ("other",)))
        result = self._runner(driver, seeded).run(catalog.get_create_scenarios()[0])
        assert not result.passed
        assert "message details" in result.reason

    def test_unstored_success_fails(self, seeded):
        driver = StubDriver(FormResult(Outcome.SUCCESS, "Group added"))
        result = self._runner(driver, seeded).run(
            Scenario(Operation.CREATE, fields={NAME_FIELD: "never written"}))
        assert not result.passed
        assert "was not stored" in result.reason

    def test_exception_marks_errored(self, seeded):
        driver = StubDriver(exc=RuntimeError("browser gone"))
        report = self._runner(driver, seeded).run_all(catalog.get_create_scenarios()[:2])
        assert report.errored == 2
        assert not report.ok
        assert "browser gone" in report.results[0].reason

    def test_layout_with_editable_discovered_name_fails(self, seeded):
        driver = StubDriver()
        form = HostGroupForm.from_dict(build_form(
            HostGroup.query.filter_by(name=seed.DISCOVERED_GROUP).one()))
        form.get_field(NAME_FIELD).enabled = True
        driver.open_form = lambda name=None, clone=False: form
        result = self._runner(driver, seeded).run(catalog.get_layout_scenarios()[2])
        assert not result.passed
        assert "name editable" in result.reason

    def test_layout_with_wrong_maxlength_fails(self, seeded):
        driver = StubDriver()
        form = HostGroupForm.from_dict(build_form())
        form.get_field(NAME_FIELD).maxlength = 128
        driver.open_form = lambda name=None, clone=False: form
        result = self._runner(driver, seeded).run(catalog.get_layout_scenarios()[0])
        assert not result.passed
        assert "name maxlength" in result.reason

    def test_cancel_with_submitted_result_fails(self, seeded):
        driver = StubDriver(FormResult(Outcome.SUCCESS, "Group added"))
        result = self._runner(driver, seeded).run(catalog.get_cancel_scenarios()[0])
        assert not result.passed


# ═══════════════════════════════════════════════════════════════
# 4 — CLI
# ═══════════════════════════════════════════════════════════════


class TestCli:

    def test_run_conformance_command(self, app):
        result = app.test_cli_runner().invoke(args=["run-conformance", "--operation", "cancel"])
        assert result.exit_code == 0, result.output

    def test_seed_command(self, app):
        result = app.test_cli_runner().invoke(args=["seed-groups"])
        assert result.exit_code == 0, result.output
        assert HostGroup.query.filter_by(name=seed.UPDATE_GROUP).count() == 1


class TestRepository:

    def test_crud(self, seeded):
        repo = HostGroupRepository()
        created = repo.create({"name": "  Repo group "})
        assert created["name"] == "Repo group"
        assert repo.read("Repo group")["groupid"] == created["groupid"]

        repo.update("Repo group", {"name": "Repo group renamed"})
        assert repo.read("Repo group") is None
        assert repo.count_names("Repo group renamed") == 1

        repo.delete("Repo group renamed")
        assert repo.count(HostGroup.name == "Repo group renamed") == 0

    def test_list_groups_sorted(self, seeded):
        names = [g["name"] for g in HostGroupRepository().list_groups()]
        assert names == sorted(names)

    def test_missing_group(self):
        with pytest.raises(LookupError):
            HostGroupRepository().delete("No such group")

    def test_dependents(self, seeded, group_id):
        repo = HostGroupRepository()
        assert repo.dependents(group_id(seed.SCRIPT_GROUP)) == {"scripts": 1}
        assert repo.dependents(group_id(seed.DELETE_GROUP)) == {}
