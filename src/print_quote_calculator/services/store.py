"""In-memory entity store for printers, filaments and labor tasks."""

import logging
import re
import threading
from collections.abc import Iterable
from typing import Any

from print_quote_calculator.models.entities import (
    EntityKind,
    Filament,
    LaborPhase,
    LaborTask,
    LaborTasks,
    MaintenanceTask,
    Printer,
    StoreData,
)

logger = logging.getLogger(__name__)


class EntityNotFoundError(LookupError):
    """Raised when a required entity does not exist."""

    pass


class ImmutableFieldError(ValueError):
    """Raised for updates to unknown or read-only fields."""

    pass


def _field_name(model: type[Printer | Filament | LaborTask | MaintenanceTask], field: str) -> str:
    """Map a snake_case or camelCase field name to the model attribute."""
    for name, info in model.model_fields.items():
        if field in (name, info.alias):
            if name == "id":
                raise ImmutableFieldError("Entity ids cannot be changed")
            return name
    raise ImmutableFieldError(f"Unknown {model.__name__} field: {field}")


def _max_suffix(ids: Iterable[str | None], kind: EntityKind) -> int:
    pattern = re.compile(rf"{kind.value}-(\d+)")
    numbers = [0]
    for entity_id in ids:
        match = pattern.search(entity_id or "")
        if match:
            numbers.append(int(match.group(1)))
    return max(numbers)


class EntityStore:
    """
    Single-writer store of the quote database.

    Every mutation and every read that must be consistent runs under `lock`,
    so calculations never observe a half-applied edit.
    """

    def __init__(
        self: "EntityStore", data: StoreData | None = None, default_labor_rate: float = 20.0
    ) -> None:
        self.lock = threading.RLock()
        self.default_labor_rate = default_labor_rate
        self._data = StoreData()
        self._counters = {kind: 1 for kind in EntityKind}
        self.replace(data or StoreData())

    # -- whole-store operations ------------------------------------------

    @property
    def data(self: "EntityStore") -> StoreData:
        return self._data

    @property
    def printers(self: "EntityStore") -> list[Printer]:
        return self._data.printers

    @property
    def filaments(self: "EntityStore") -> list[Filament]:
        return self._data.filaments

    @property
    def labor_tasks(self: "EntityStore") -> LaborTasks:
        return self._data.labor_tasks

    @property
    def currency(self: "EntityStore") -> str:
        return self._data.currency

    def replace(self: "EntityStore", data: StoreData) -> None:
        """Replace the whole store, normalizing legacy documents."""
        data = data.model_copy(deep=True)
        with self.lock:
            self._data = data
            self._reseed_counters()
            self._assign_ids(data.printers, EntityKind.PRINTER)
            self._assign_ids(data.filaments, EntityKind.FILAMENT)
            self._assign_labor_ids()

    def snapshot(self: "EntityStore") -> StoreData:
        """Deep copy for persistence."""
        with self.lock:
            return self._data.model_copy(deep=True)

    def set_currency(self: "EntityStore", code: str) -> None:
        with self.lock:
            self._data.currency = code

    def _reseed_counters(self: "EntityStore") -> None:
        labor_ids = [t.id for t in self._data.labor_tasks.pre + self._data.labor_tasks.post]
        self._counters[EntityKind.PRINTER] = _max_suffix(
            (p.id for p in self._data.printers), EntityKind.PRINTER
        ) + 1
        self._counters[EntityKind.FILAMENT] = _max_suffix(
            (f.id for f in self._data.filaments), EntityKind.FILAMENT
        ) + 1
        self._counters[EntityKind.LABOR] = _max_suffix(labor_ids, EntityKind.LABOR) + 1

    def _assign_ids(
        self: "EntityStore", entities: list[Printer] | list[Filament], kind: EntityKind
    ) -> None:
        """
        Make ids unique within one kind.

        Records without an id, or repeating an earlier one, get their positional
        id (`<kind>-<index+1>`) when no other record holds it, else a fresh one.
        """
        taken: set[str] = set()
        missing = []
        for index, entity in enumerate(entities):
            if entity.id and entity.id not in taken:
                taken.add(entity.id)
            else:
                missing.append((index, entity))

        unplaced = []
        for index, entity in missing:
            positional = f"{kind.value}-{index + 1}"
            if positional in taken:
                unplaced.append(entity)
            else:
                entity.id = positional
                taken.add(positional)

        self._counters[kind] = _max_suffix(taken, kind) + 1
        for entity in unplaced:
            entity.id = self._mint_id(kind)

    def _assign_labor_ids(self: "EntityStore") -> None:
        """Give every labor task a unique id; legacy tasks have none."""
        seen: set[str] = set()
        for task in self._data.labor_tasks.pre + self._data.labor_tasks.post:
            if not task.id or task.id in seen:
                task.id = self._mint_id(EntityKind.LABOR)
            seen.add(task.id)

    def _mint_id(self: "EntityStore", kind: EntityKind) -> str:
        entity_id = f"{kind.value}-{self._counters[kind]}"
        self._counters[kind] += 1
        return entity_id

    # -- lookups ---------------------------------------------------------

    def resolve_printer(self: "EntityStore", ref: str | None) -> Printer | None:
        """Find a printer by id, then by name for records that predate ids."""
        if not ref:
            return None
        with self.lock:
            return next((p for p in self.printers if p.id == ref), None) or next(
                (p for p in self.printers if p.name == ref), None
            )

    def resolve_filament(self: "EntityStore", ref: str | None) -> Filament | None:
        """Find a filament by id, then by name for records that predate ids."""
        if not ref:
            return None
        with self.lock:
            return next((f for f in self.filaments if f.id == ref), None) or next(
                (f for f in self.filaments if f.name == ref), None
            )

    def _find_printer(self: "EntityStore", printer_id: str) -> Printer | None:
        return next((p for p in self.printers if p.id == printer_id), None)

    def get_printer(self: "EntityStore", printer_id: str) -> Printer:
        printer = self._find_printer(printer_id)
        if printer is None:
            raise EntityNotFoundError(f"Printer not found: {printer_id}")
        return printer

    # -- printers ----------------------------------------------------------

    def create_printer(self: "EntityStore", **fields: Any) -> Printer:
        with self.lock:
            printer = Printer(id=self._mint_id(EntityKind.PRINTER), **fields)
            self._data.printers.append(printer)
        logger.debug(f"Created printer {printer.id}")
        return printer

    def update_printer(
        self: "EntityStore", printer_id: str, field: str, value: Any
    ) -> Printer | None:
        """Set one printer field; numeric fields are coerced, unknown ids ignored."""
        name = _field_name(Printer, field)
        with self.lock:
            printer = self._find_printer(printer_id)
            if printer is None:
                return None
            setattr(printer, name, value)
            return printer

    def delete_printer(self: "EntityStore", printer_id: str) -> bool:
        """Remove a printer; quote references to it simply stop resolving."""
        with self.lock:
            before = len(self._data.printers)
            self._data.printers = [p for p in self._data.printers if p.id != printer_id]
            return len(self._data.printers) < before

    # -- maintenance tasks -------------------------------------------------

    def add_maintenance_task(self: "EntityStore", printer_id: str) -> MaintenanceTask | None:
        """Append a default task; unknown printers are ignored."""
        with self.lock:
            printer = self._find_printer(printer_id)
            if printer is None:
                return None
            task = MaintenanceTask()
            printer.maintenance_tasks.append(task)
            return task

    def update_maintenance_task(
        self, printer_id: str, index: int, field: str, value: Any
    ) -> MaintenanceTask | None:
        name = _field_name(MaintenanceTask, field)
        with self.lock:
            printer = self._find_printer(printer_id)
            if printer is None or not 0 <= index < len(printer.maintenance_tasks):
                return None
            task = printer.maintenance_tasks[index]
            setattr(task, name, value)
            return task

    def remove_maintenance_task(self: "EntityStore", printer_id: str, index: int) -> bool:
        with self.lock:
            printer = self._find_printer(printer_id)
            if printer is None or not 0 <= index < len(printer.maintenance_tasks):
                return False
            del printer.maintenance_tasks[index]
            return True

    # -- filaments ---------------------------------------------------------

    def create_filament(self: "EntityStore", **fields: Any) -> Filament:
        with self.lock:
            filament = Filament(id=self._mint_id(EntityKind.FILAMENT), **fields)
            self._data.filaments.append(filament)
        logger.debug(f"Created filament {filament.id}")
        return filament

    def update_filament(
        self: "EntityStore", filament_id: str, field: str, value: Any
    ) -> Filament | None:
        name = _field_name(Filament, field)
        with self.lock:
            filament = next((f for f in self.filaments if f.id == filament_id), None)
            if filament is None:
                return None
            setattr(filament, name, value)
            return filament

    def delete_filament(self: "EntityStore", filament_id: str) -> bool:
        with self.lock:
            before = len(self._data.filaments)
            self._data.filaments = [f for f in self._data.filaments if f.id != filament_id]
            return len(self._data.filaments) < before

    # -- labor tasks -------------------------------------------------------

    def add_labor_task(self: "EntityStore", phase: LaborPhase | str, **fields: Any) -> LaborTask:
        phase = LaborPhase(phase)
        fields.setdefault("rate", self.default_labor_rate)
        with self.lock:
            task = LaborTask(id=self._mint_id(EntityKind.LABOR), **fields)
            self._data.labor_tasks.for_phase(phase).append(task)
            return task

    def update_labor_task(
        self, phase: LaborPhase | str, task_id: str, field: str, value: Any
    ) -> LaborTask | None:
        name = _field_name(LaborTask, field)
        with self.lock:
            tasks = self._data.labor_tasks.for_phase(LaborPhase(phase))
            task = next((t for t in tasks if t.id == task_id), None)
            if task is None:
                return None
            setattr(task, name, value)
            return task

    def remove_labor_task(self: "EntityStore", phase: LaborPhase | str, task_id: str) -> bool:
        with self.lock:
            tasks = self._data.labor_tasks.for_phase(LaborPhase(phase))
            for index, task in enumerate(tasks):
                if task.id == task_id:
                    del tasks[index]
                    return True
            return False

    def replace_labor_tasks(
        self, pre: list[LaborTask] | None = None, post: list[LaborTask] | None = None
    ) -> None:
        """Replace labor lists wholesale; a None list is left as is."""
        with self.lock:
            if pre is not None:
                self._data.labor_tasks.pre = [t.model_copy(deep=True) for t in pre]
            if post is not None:
                self._data.labor_tasks.post = [t.model_copy(deep=True) for t in post]
            self._counters[EntityKind.LABOR] = max(
                self._counters[EntityKind.LABOR],
                _max_suffix(
                    (t.id for t in self.labor_tasks.pre + self.labor_tasks.post),
                    EntityKind.LABOR,
                )
                + 1,
            )
            self._assign_labor_ids()


def default_data(currency: str = "USD") -> StoreData:
    """Starter database used when nothing has been saved yet."""
    return StoreData(
        currency=currency,
        printers=[
            Printer(
                id="printer-1",
                name="Ender 3 V3",
                kw_per_hour=0.25,
                cost_per_kwh=0.18,
                cost=199,
                expected_lifetime_hours=5000,
                include_depreciation=True,
            )
        ],
        filaments=[
            Filament(id="filament-1", name="PLA", price_per_kg=20.0),
            Filament(id="filament-2", name="ABS", price_per_kg=25.0),
            Filament(id="filament-3", name="PETG", price_per_kg=28.0),
        ],
    )
