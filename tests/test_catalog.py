"""
Scenario catalog tests — shape of the catalog and the scenario records.
"""

import pytest

from groupadmin.conformance import catalog
from groupadmin.conformance.scenarios import (
    ConformanceReport,
    Expected,
    FixtureContext,
    Operation,
    Scenario,
    ScenarioResult,
)
from groupadmin.services import seed_service as seed
from groupadmin.services.hostgroup_form import NAME_FIELD


class TestScenarioRecords:

    def test_failure_needs_error(self):
        with pytest.raises(ValueError):
            Scenario(Operation.CREATE, Expected.FAILURE, {NAME_FIELD: "x"})

    def test_fields_are_read_only(self):
        scenario = Scenario(Operation.CREATE, fields={NAME_FIELD: "x"})
        with pytest.raises(TypeError):
            scenario.fields[NAME_FIELD] = "y"

    def test_source_mapping_is_copied(self):
        fields = {NAME_FIELD: "x"}
        scenario = Scenario(Operation.CREATE, fields=fields)
        fields[NAME_FIELD] = "y"
        assert scenario.get(NAME_FIELD) == "x"

    def test_get_default(self):
        assert Scenario(Operation.CREATE).get(NAME_FIELD) == ""

    def test_fixture_context_from_seed(self):
        ctx = FixtureContext.from_seed({"update_group": "a", "delete_group": "b"})
        assert (ctx.update_group, ctx.delete_group, ctx.user_groupid) == ("a", "b", None)

    def test_report_counts(self):
        s = Scenario(Operation.CREATE)
        report = ConformanceReport([
            ScenarioResult(s, passed=True),
            ScenarioResult(s, passed=False, reason="x"),
            ScenarioResult(s, passed=False, reason="boom", errored=True),
        ])
        assert (report.passed, report.failed, report.errored) == (1, 1, 1)
        assert not report.ok
        assert report.to_dict()["results"][1]["reason"] == "x"

    def test_empty_report_is_ok(self):
        assert ConformanceReport().ok


class TestCreateCatalog:

    def test_shape(self):
        scenarios = catalog.get_create_scenarios()
        assert len(scenarios) == 12
        assert sum(s.expected is Expected.FAILURE for s in scenarios) == 9
        assert all(s.operation is Operation.CREATE for s in scenarios)

    def test_empty_name_cases_use_form_title(self):
        empty = [s for s in catalog.get_create_scenarios() if s.error == catalog.EMPTY_NAME_ERROR]
        assert len(empty) == 2
        assert all(s.message == catalog.INCORRECT_DATA for s in empty)

    def test_duplicates_name_existing_groups(self):
        errors = {s.error for s in catalog.get_create_scenarios()}
        for name in (seed.ZABBIX_SERVERS, seed.TEMPLATES, seed.DISCOVERED_GROUP):
            assert f'Host group "{name}" already exists.' in errors


class TestUpdateCatalog:

    def test_mirrors_create(self):
        create = catalog.get_create_scenarios()
        update = catalog.get_update_scenarios()
        assert len(update) == len(create)
        assert [s.expected for s in update] == [s.expected for s in create]
        assert all(s.operation is Operation.UPDATE for s in update)

    def test_success_names_get_suffix(self):
        names = [s.get(NAME_FIELD) for s in catalog.get_update_scenarios()
                 if s.expected is Expected.SUCCESS]
        assert names == [
            "~!@#$%^&*()_+=[]{}null☺æųupdate",
            "   trim update    ",
            "Group/Subgroup1/Subgroup2update",
        ]

    def test_failures_unchanged(self):
        create = [s for s in catalog.get_create_scenarios() if s.expected is Expected.FAILURE]
        update = [s for s in catalog.get_update_scenarios() if s.expected is Expected.FAILURE]
        assert [dict(s.fields) for s in update] == [dict(s.fields) for s in create]


class TestOtherCatalogs:

    def test_clone_uses_stamp(self):
        scenarios = catalog.get_clone_scenarios(stamp=1.5)
        assert scenarios[1].get(NAME_FIELD) == "1.500000 cloned group"
        assert scenarios[0].expected is Expected.FAILURE
        assert scenarios[2].discovered

    def test_cancel_actions(self):
        assert [s.action for s in catalog.get_cancel_scenarios()] == [
            "Add", "Update", "Clone", "Delete",
        ]

    def test_delete_ends_with_success(self):
        scenarios = catalog.get_delete_scenarios()
        assert scenarios[-1].name == seed.DELETE_GROUP
        assert scenarios[-1].expected is Expected.SUCCESS
        assert all(s.expected is Expected.FAILURE for s in scenarios[:-1])

    def test_layout_forms(self):
        new, edit, discovered = catalog.get_layout_scenarios()
        assert new.name is None
        assert edit.name == seed.UPDATE_GROUP and not edit.discovered
        assert discovered.name == seed.DISCOVERED_GROUP and discovered.discovered
        assert catalog.DEFAULT_ORDER[0] is Operation.LAYOUT

    def test_subgroup_cases(self):
        first, second = catalog.get_subgroup_scenarios()
        assert first.operation is Operation.SUBGROUPS
        assert ("Europe/Test (including subgroups)", "Read-write") in first.groups_after
        assert second.create == "Streets/Dzelzavas"

    @pytest.mark.parametrize("operation", list(Operation))
    def test_get_scenarios_by_value(self, operation):
        assert catalog.get_scenarios(operation.value)

    def test_default_order_covers_every_operation(self):
        assert set(catalog.DEFAULT_ORDER) == set(Operation)
