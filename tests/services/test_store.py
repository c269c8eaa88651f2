"""Unit tests for the entity store."""

import pytest

from print_quote_calculator.models.entities import LaborTask, Printer, StoreData
from print_quote_calculator.services.store import (
    EntityNotFoundError,
    EntityStore,
    ImmutableFieldError,
    default_data,
)


class TestEntityLifecycle:
    """Create, update and delete of store entities."""

    def test_default_data(self, store: EntityStore):
        assert [p.name for p in store.printers] == ["Ender 3 V3"]
        assert [f.name for f in store.filaments] == ["PLA", "ABS", "PETG"]
        assert store.currency == "USD"

    def test_create_mints_increasing_ids(self, store: EntityStore):
        first = store.create_printer()
        second = store.create_printer(name="Voron")

        assert first.id == "printer-2"
        assert second.id == "printer-3"
        assert second.name == "Voron"

    def test_ids_not_reused_after_delete(self, store: EntityStore):
        created = store.create_filament()
        store.delete_filament(created.id)

        assert store.create_filament().id == "filament-5"

    def test_update_coerces_numbers(self, store: EntityStore):
        printer = store.update_printer("printer-1", "kwPerHour", "abc")

        assert printer.kw_per_hour == 0.0

    def test_update_passes_strings_and_booleans(self, store: EntityStore):
        store.update_printer("printer-1", "name", "Workhorse")
        store.update_printer("printer-1", "include_depreciation", False)

        printer = store.get_printer("printer-1")
        assert printer.name == "Workhorse"
        assert printer.include_depreciation is False

    def test_update_unknown_id_is_ignored(self, store: EntityStore):
        assert store.update_filament("filament-99", "pricePerKg", 10) is None

    def test_id_cannot_be_changed(self, store: EntityStore):
        with pytest.raises(ImmutableFieldError):
            store.update_printer("printer-1", "id", "printer-9")

    def test_unknown_field_rejected(self, store: EntityStore):
        with pytest.raises(ImmutableFieldError):
            store.update_filament("filament-1", "colour", "red")

    def test_get_missing_printer_raises(self, store: EntityStore):
        with pytest.raises(EntityNotFoundError):
            store.get_printer("printer-42")

    def test_delete_reports_result(self, store: EntityStore):
        assert store.delete_printer("printer-1") is True
        assert store.delete_printer("printer-1") is False
        assert store.printers == []


class TestLegacyDocuments:
    """Loading documents written before ids existed."""

    def test_missing_ids_assigned_by_position(self):
        store = EntityStore(
            StoreData.model_validate(
                {
                    "printers": [{"name": "A"}, {"id": "printer-7", "name": "B"}],
                    "filaments": [{"name": "PLA"}],
                }
            )
        )

        assert [p.id for p in store.printers] == ["printer-1", "printer-7"]
        assert store.filaments[0].id == "filament-1"
        assert store.create_printer().id == "printer-8"

    def test_missing_ids_skip_taken_positions(self):
        store = EntityStore(
            StoreData.model_validate(
                {
                    "printers": [{"name": "Old"}, {"id": "printer-1", "name": "New"}],
                    "filaments": [
                        {"name": "PLA"},
                        {"id": "filament-1", "name": "PETG"},
                        {"name": "ABS"},
                    ],
                }
            )
        )

        assert [p.id for p in store.printers] == ["printer-2", "printer-1"]
        assert [f.id for f in store.filaments] == ["filament-4", "filament-1", "filament-3"]
        assert store.create_filament().id == "filament-5"

        store.delete_printer("printer-1")
        assert [p.name for p in store.printers] == ["Old"]

    def test_repeated_ids_reassigned(self):
        store = EntityStore(
            StoreData.model_validate(
                {
                    "printers": [
                        {"id": "printer-1", "name": "A"},
                        {"id": "printer-1", "name": "B"},
                        {"id": "printer-2", "name": "C"},
                    ]
                }
            )
        )

        ids = [p.id for p in store.printers]
        assert ids[0] == "printer-1"
        assert ids[2] == "printer-2"
        assert len(set(ids)) == 3
        assert store.resolve_printer(ids[1]).name == "B"

    def test_labor_tasks_get_unique_ids(self):
        store = EntityStore(
            StoreData.model_validate(
                {
                    "laborTasks": {
                        "pre": [{"name": "Prep"}, {"id": "labor-3", "name": "Level"}],
                        "post": [{"id": "labor-3", "name": "Dup"}],
                    }
                }
            )
        )

        ids = [t.id for t in store.labor_tasks.pre + store.labor_tasks.post]
        assert len(set(ids)) == 3
        assert "labor-3" in ids

    def test_replace_does_not_alias_input(self):
        data = default_data()
        store = EntityStore(data)

        store.update_printer("printer-1", "cost", 500)

        assert data.printers[0].cost == 199

    def test_snapshot_is_a_copy(self, store: EntityStore):
        snapshot = store.snapshot()
        store.update_filament("filament-1", "pricePerKg", 99)

        assert snapshot.filaments[0].price_per_kg == 20.0


class TestResolution:
    """Id-first, then name, lookups."""

    def test_resolve_by_id_then_name(self, store: EntityStore):
        assert store.resolve_filament("filament-2").name == "ABS"
        assert store.resolve_filament("PETG").id == "filament-3"
        assert store.resolve_filament("Nylon") is None
        assert store.resolve_filament("") is None

    def test_id_wins_over_name(self, store: EntityStore):
        store.create_printer(name="printer-1")

        assert store.resolve_printer("printer-1").name == "Ender 3 V3"


class TestMaintenanceAndLabor:
    """Nested maintenance tasks and phase-scoped labor tasks."""

    def test_maintenance_task_lifecycle(self, store: EntityStore):
        task = store.add_maintenance_task("printer-1")
        assert task.interval_hours == 1000.0

        store.update_maintenance_task("printer-1", 0, "cost", "12.5")
        assert store.get_printer("printer-1").maintenance_tasks[0].cost == 12.5

        assert store.update_maintenance_task("printer-1", 5, "cost", 1) is None
        assert store.remove_maintenance_task("printer-1", 0) is True
        assert store.get_printer("printer-1").maintenance_tasks == []

    def test_add_maintenance_to_missing_printer(self, store: EntityStore):
        before = store.snapshot()

        assert store.add_maintenance_task("printer-99") is None
        assert store.snapshot() == before

    def test_labor_task_defaults_to_configured_rate(self):
        store = EntityStore(default_labor_rate=35)

        task = store.add_labor_task("pre")

        assert task.id == "labor-1"
        assert task.rate == 35
        assert store.labor_tasks.pre == [task]

    def test_labor_task_update_and_remove_by_id(self, store: EntityStore):
        first = store.add_labor_task("post", name="Sanding")
        second = store.add_labor_task("post", name="Painting")

        store.remove_labor_task("post", first.id)
        store.update_labor_task("post", second.id, "minutes", "45")

        assert [t.name for t in store.labor_tasks.post] == ["Painting"]
        assert store.labor_tasks.post[0].minutes == 45.0
        assert store.remove_labor_task("pre", second.id) is False

    def test_replace_labor_tasks(self, store: EntityStore):
        store.add_labor_task("pre", name="Old")

        store.replace_labor_tasks(pre=[], post=[LaborTask(name="Support removal")])

        assert store.labor_tasks.pre == []
        assert store.labor_tasks.post[0].name == "Support removal"
        assert store.labor_tasks.post[0].id is not None
        assert store.add_labor_task("pre").id != store.labor_tasks.post[0].id

    def test_set_currency(self, store: EntityStore):
        store.set_currency("GBP")

        assert store.snapshot().currency == "GBP"


def test_printer_model_defaults_used_on_create():
    store = EntityStore()

    printer = store.create_printer()

    assert printer.model_dump(exclude={"id"}) == Printer().model_dump(exclude={"id"})
