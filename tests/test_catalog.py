from __future__ import annotations

import sys
from decimal import Decimal
from pathlib import Path

import pytest

sys.path.append(str(Path(__file__).resolve().parents[1]))

from piecework.core import settings
from piecework.core.catalog import KnownTask, TaskCatalog, UnresolvedTask, load_default_catalog
from piecework.core.schema import TaskDefinition
from piecework.core.validation import CatalogError


@pytest.fixture()
def catalog() -> TaskCatalog:
    return TaskCatalog(
        [
            TaskDefinition(id=1, description="Bettrave", category="Réception", unit="par quintal", price=Decimal("1.20")),
            TaskDefinition(id=48, description="Céréales", category="Conditionnement", unit="par quintal", price=Decimal("1.25")),
            TaskDefinition(id=3, description="Céréales 50 kg", category="Réception", unit="par quintal", price=Decimal("1.35")),
        ]
    )


def test_price_lookup_and_fallback(catalog):
    assert catalog.price_of(48) == Decimal("1.25")
    assert catalog.price_of(404) == Decimal("0")


def test_resolve_returns_tagged_variant(catalog):
    known = catalog.resolve(1)
    assert isinstance(known, KnownTask)
    assert known.task.description == "Bettrave"

    missing = catalog.resolve(404)
    assert isinstance(missing, UnresolvedTask)
    placeholder = missing.placeholder()
    assert placeholder.category == "À METTRE À JOUR"
    assert placeholder.description == "Tâche obsolète (ID: 404)"
    assert placeholder.price == 0


def test_all_tasks_groups_by_category_in_insertion_order(catalog):
    groups = catalog.all_tasks()
    assert [group.category for group in groups] == ["Réception", "Conditionnement"]
    assert [task.id for task in groups[0].tasks] == [1, 3]


def test_set_price_returns_new_snapshot(catalog):
    updated = catalog.set_price(1, Decimal("1.50"))

    assert updated.version == catalog.version + 1
    assert updated.price_of(1) == Decimal("1.50")
    assert catalog.price_of(1) == Decimal("1.20")


def test_set_price_rejects_unknown_task_and_negative_price(catalog):
    with pytest.raises(CatalogError):
        catalog.set_price(404, Decimal("1"))
    with pytest.raises(CatalogError):
        catalog.set_price(1, Decimal("-0.5"))


def test_add_task_assigns_next_id_within_its_category(catalog):
    updated, task = catalog.add_task("Réception", "Engrais", "par quintal", Decimal("1.10"))

    assert task.id == 49
    assert updated.version == 2
    assert [item.id for item in updated.all_tasks()[0].tasks] == [1, 3, 49]
    assert 49 not in catalog

    again, other = updated.add_task("Traitement", "Avoine", "par quintal", Decimal("1.95"))
    assert other.id == 50
    assert again.all_tasks()[-1].category == "Traitement"


def test_duplicate_ids_are_rejected():
    task = TaskDefinition(id=1, description="x", category="c", unit="u", price=Decimal("1"))
    with pytest.raises(CatalogError):
        TaskCatalog([task, task])


def test_default_catalog_carries_allowance_tasks():
    catalog = load_default_catalog()

    assert catalog.price_of(settings.milk_task_id()) == Decimal("7.00")
    assert catalog.price_of(settings.meal_task_id()) == Decimal("10.00")
    assert catalog.price_of(71) == Decimal("1.05")
    assert catalog.all_tasks()[0].category == "Réception"


def test_config_path_can_be_overridden(tmp_path, monkeypatch):
    path = tmp_path / "payroll.yaml"
    path.write_text(
        "allowances:\n"
        "  milk_task_id: 5\n"
        "  meal_task_id: 6\n"
        "contributions:\n"
        "  combined_rate: \"0.05\"\n"
        "task_groups:\n"
        "  - category: \"Tests\"\n"
        "    tasks:\n"
        "      - {id: 5, description: \"Lait\", unit: \"par jour\", price: \"3.50\"}\n",
        encoding="utf-8",
    )
    monkeypatch.setenv("PIECEWORK_CONFIG", str(path))
    settings.reset_settings()
    try:
        catalog = load_default_catalog()
        config = settings.combined_config()
        assert len(catalog) == 1
        assert catalog.price_of(5) == Decimal("3.50")
        assert config.contribution_rate == Decimal("0.05")
        assert config.allowance_task_ids == frozenset({5, 6})
    finally:
        monkeypatch.delenv("PIECEWORK_CONFIG")
        settings.reset_settings()
