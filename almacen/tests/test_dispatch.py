import threading
from concurrent.futures import ThreadPoolExecutor

import pytest
from sqlalchemy import insert

from almacen.app.db.models.stock import panel_antibiotic
from almacen.services.dispatch import linked_codes, register_dispatch
from almacen.services.exceptions import (
    DanglingReferenceError,
    InsufficientStockError,
    NoLinkedItemsError,
    ValidationError,
)


def test_dispatch_decrements_every_linked_antibiotic_ordered_by_name(db_session, seed, quantities):
    """
    GIVEN
    - antibiograma 3 con X (5) e Y (5)
    WHEN
    - salida de 2 unidades
    THEN
    - X == 3, Y == 3, devueltos por nombre
    """
    seed(
        antibiotics=[("X", "Xilina", 5, 1), ("Y", "Yodomicina", 5, 1), ("Z", "Zetamicina", 9, 0)],
        panels={3: ("Urocultivo", ["Y", "X"])},
    )

    result = register_dispatch(db_session, panel_id=3, units=2)

    assert result.panel_id == 3
    assert result.units == 2
    assert [(a.code, a.quantity) for a in result.affected] == [("X", 3), ("Y", 3)]
    assert quantities() == {"X": 3, "Y": 3, "Z": 9}


def test_affected_is_ordered_by_name_not_code(db_session, seed):
    seed(
        antibiotics=[("AAA", "Zeta", 4, 0), ("ZZZ", "Alfa", 4, 0)],
        panels={1: ("Panel", ["AAA", "ZZZ"])},
    )

    result = register_dispatch(db_session, panel_id=1, units=1)

    assert [a.name for a in result.affected] == ["Alfa", "Zeta"]


def test_insufficient_stock_is_all_or_nothing(db_session, seed, quantities):
    """A (10) y B (2), salida de 5: falla nombrando B, A sigue en 10."""
    seed(
        antibiotics=[("A", "Amikacina", 10, 0), ("B", "Bacitracina", 2, 0)],
        panels={1: ("Hemocultivo", ["A", "B"])},
    )
    before = quantities()

    with pytest.raises(InsufficientStockError) as excinfo:
        register_dispatch(db_session, panel_id=1, units=5)

    assert excinfo.value.extra["shortfall"] == [
        {"code": "B", "name": "Bacitracina", "quantity": 2, "required": 5}
    ]
    assert quantities() == before
    assert quantities()["A"] == 10


def test_shortfall_lists_every_offender(db_session, seed):
    seed(
        antibiotics=[("A", "A", 1, 0), ("B", "B", 0, 0), ("C", "C", 9, 0)],
        panels={1: ("P", ["A", "B", "C"])},
    )

    with pytest.raises(InsufficientStockError) as excinfo:
        register_dispatch(db_session, panel_id=1, units=2)

    assert [s["code"] for s in excinfo.value.extra["shortfall"]] == ["A", "B"]


def test_dispatch_can_drain_stock_to_exactly_zero(db_session, seed, quantities):
    seed(antibiotics=[("A", "A", 3, 1)], panels={1: ("P", ["A"])})

    register_dispatch(db_session, panel_id=1, units=3)

    assert quantities() == {"A": 0}


def test_panel_without_links_cannot_be_dispatched(db_session, seed, quantities):
    seed(antibiotics=[("A", "A", 3, 0)], panels={1: ("Vacío", [])})

    with pytest.raises(NoLinkedItemsError):
        register_dispatch(db_session, panel_id=1, units=1)

    assert quantities() == {"A": 3}


def test_unknown_panel_is_a_validation_error(db_session, seed):
    seed(antibiotics=[("A", "A", 3, 0)])

    with pytest.raises(ValidationError):
        register_dispatch(db_session, panel_id=99, units=1)


@pytest.mark.parametrize(
    "panel_id, units",
    [(0, 1), (-1, 1), (1, 0), (1, -3), (True, 1), (1, True), ("1", 1), (1, 2.5)],
)
def test_invalid_input_fails_before_touching_storage(db_session, panel_id, units):
    # sin esquema sembrado: si llegara a la BD fallaría de otra forma
    with pytest.raises(ValidationError):
        register_dispatch(db_session, panel_id=panel_id, units=units)


def test_dangling_reference_rolls_back(engine, db_session, seed, quantities):
    if engine.dialect.name != "sqlite":
        pytest.skip("crear una referencia colgante requiere desactivar las FK (sólo SQLite)")

    seed(antibiotics=[("A", "A", 5, 0)], panels={1: ("P", ["A"])})
    with engine.connect() as conn:
        conn.exec_driver_sql("PRAGMA foreign_keys=OFF")
        conn.execute(insert(panel_antibiotic).values(antibiograma_id=1, antibiotico_codigo="GHOST"))
        conn.commit()
        conn.exec_driver_sql("PRAGMA foreign_keys=ON")

    with pytest.raises(DanglingReferenceError) as excinfo:
        register_dispatch(db_session, panel_id=1, units=1)

    assert excinfo.value.extra["missing"] == ["GHOST"]
    assert quantities() == {"A": 5}


def test_duplicate_links_are_decremented_once(db_session, seed, quantities):
    seed(antibiotics=[("A", "A", 5, 0)], panels={1: ("P", ["A", "A"])})

    assert linked_codes(db_session, 1) == ["A"]
    result = register_dispatch(db_session, panel_id=1, units=2)

    assert [a.quantity for a in result.affected] == [3]
    assert quantities() == {"A": 3}


def test_concurrent_dispatches_never_go_negative(session_factory, seed, quantities):
    """Dos salidas de 3 sobre A (5): exactamente una gana, final 2."""
    seed(antibiotics=[("A", "Amikacina", 5, 0)], panels={1: ("Hemocultivo", ["A"])})
    barrier = threading.Barrier(2)

    def worker():
        with session_factory() as s:
            barrier.wait()
            try:
                register_dispatch(s, panel_id=1, units=3)
                return "ok"
            except InsufficientStockError:
                return "insufficient"

    with ThreadPoolExecutor(max_workers=2) as pool:
        outcomes = sorted(f.result() for f in [pool.submit(worker), pool.submit(worker)])

    assert outcomes == ["insufficient", "ok"]
    assert quantities() == {"A": 2}
