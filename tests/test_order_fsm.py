import threading

import pytest

from core.errors import InvalidTransition, NotFoundError
from models.status import OrderStatus, TransitionDirection
from services import order_fsm

P, R, E, C = OrderStatus.PENDIENTE, OrderStatus.EN_RUTA, OrderStatus.ENTREGADO, OrderStatus.CANCELADO
ADV, REV, CAN = TransitionDirection.ADVANCE, TransitionDirection.REVERT, TransitionDirection.CANCEL

LEGAL = {
    (P, ADV): R,
    (P, CAN): C,
    (R, ADV): E,
    (R, REV): P,
    (R, CAN): C,
    (E, REV): R,
}

# Pedidos sembrados: 1 Pendiente, 2 Entregado, 3 En Ruta
PENDING_ID, DELIVERED_ID, ON_ROUTE_ID = 1, 2, 3


@pytest.mark.parametrize("current", list(OrderStatus))
@pytest.mark.parametrize("direction", list(TransitionDirection))
def test_transition_table(current, direction):
    expected = LEGAL.get((current, direction))
    if expected is None:
        with pytest.raises(InvalidTransition):
            order_fsm.target_status(current, direction)
    else:
        assert order_fsm.target_status(current, direction) == expected


def test_target_status_accepts_plain_strings():
    assert order_fsm.target_status("Pendiente", "advance") == R


def test_unknown_direction_is_invalid_transition():
    with pytest.raises(InvalidTransition):
        order_fsm.target_status(P, "teleport")


def test_allowed_directions():
    assert order_fsm.allowed_directions(P) == [ADV, CAN]
    assert order_fsm.allowed_directions(E) == [REV]
    assert order_fsm.allowed_directions(C) == []


def test_terminal_states():
    assert order_fsm.is_terminal(E)
    assert order_fsm.is_terminal(C)
    assert not order_fsm.is_terminal(P)
    assert not order_fsm.is_terminal(R)


def test_full_delivery_round_trip_records_history(gateway):
    order_fsm.advance(gateway, PENDING_ID)
    order = order_fsm.advance(gateway, PENDING_ID)
    assert order.status == E

    order = order_fsm.revert(gateway, PENDING_ID)
    assert order.status == R

    history = gateway.orders.history(PENDING_ID)
    assert [(h.from_status, h.to_status) for h in history] == [
        (None, P),
        (P, R),
        (R, E),
        (E, R),
    ]


def test_cancel_from_pending_and_on_route(gateway):
    assert order_fsm.cancel(gateway, PENDING_ID).status == C
    assert order_fsm.cancel(gateway, ON_ROUTE_ID).status == C


def test_delivered_order_cannot_be_cancelled(gateway):
    with pytest.raises(InvalidTransition) as excinfo:
        order_fsm.cancel(gateway, DELIVERED_ID)

    assert excinfo.value.stale is False
    assert gateway.orders.get(DELIVERED_ID).status == E


@pytest.mark.parametrize("direction", list(TransitionDirection))
def test_cancelled_order_is_absorbing(gateway, direction):
    order_fsm.cancel(gateway, PENDING_ID)

    with pytest.raises(InvalidTransition):
        order_fsm.transition(gateway, PENDING_ID, direction)
    assert gateway.orders.get(PENDING_ID).status == C


def test_rejected_transition_leaves_no_history(gateway):
    with pytest.raises(InvalidTransition):
        order_fsm.revert(gateway, PENDING_ID)
    assert len(gateway.orders.history(PENDING_ID)) == 1


def test_missing_order_raises_not_found(gateway):
    with pytest.raises(NotFoundError):
        order_fsm.advance(gateway, 999)


def test_stale_expected_status_is_rejected(gateway, monkeypatch):
    """Si otra petición cambia el pedido entre la lectura y la escritura, se rechaza."""
    real_get = gateway.orders.get

    def get_then_change(order_id):
        order = real_get(order_id)
        snapshot = type(order).model_validate(order.model_dump())
        # Otro usuario cancela el pedido justo después de nuestra lectura
        gateway.orders.update_status(order_id, C, expected_current=order.status)
        return snapshot

    monkeypatch.setattr(gateway.orders, "get", get_then_change)

    with pytest.raises(InvalidTransition) as excinfo:
        order_fsm.advance(gateway, PENDING_ID)

    assert excinfo.value.stale is True
    assert real_get(PENDING_ID).status == C


def test_concurrent_advances_apply_exactly_once(seeded_gateway):
    results = []
    errors = []
    barrier = threading.Barrier(8)

    def worker():
        barrier.wait()
        try:
            results.append(order_fsm.advance(seeded_gateway, PENDING_ID).status)
        except InvalidTransition as e:
            errors.append(e)

    threads = [threading.Thread(target=worker) for _ in range(8)]
    for t in threads:
        t.start()
    for t in threads:
        t.join()

    # Cada avance válido deja una entrada en la bitácora; nunca se repite un paso
    history = [(h.from_status, h.to_status) for h in seeded_gateway.orders.history(PENDING_ID)]
    assert len(results) + len(errors) == 8
    assert len(history) == 1 + len(results)
    assert len(set(history)) == len(history)
    assert seeded_gateway.orders.get(PENDING_ID).status in (R, E)
