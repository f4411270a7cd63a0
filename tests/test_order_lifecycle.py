from datetime import datetime

import pytest

from mioto.errors import InvalidTransition, MissingPrecondition, NotFound, NotOrderParty, StaleRevision
from mioto.models.order import OrderStatus, PaymentMethod, ScheduleStatus
from mioto.services.order_lifecycle import OrderLifecycle


def test_pay_on_site_starts_as_criado(driver_client, make_request):
    order = driver_client.request_service(make_request(payment_method=PaymentMethod.PAY_ON_SITE))
    assert order.status is OrderStatus.CRIADO
    assert order.schedule_status is ScheduleStatus.IMEDIATO
    assert order.revision == 1


def test_credit_card_starts_as_pago(driver_client, make_request):
    order = driver_client.request_service(make_request(payment_method=PaymentMethod.CREDIT_CARD))
    assert order.status is OrderStatus.PAGO


def test_missing_price_means_quote_on_arrival(driver_client, make_request):
    order = driver_client.request_service(make_request(price=None))
    assert order.price is None


def test_creation_date_is_display_formatted(store, driver, make_request):
    lifecycle = OrderLifecycle(store, clock=lambda: datetime(2024, 6, 1, 9, 30))
    order = lifecycle.create_order(driver, make_request())
    assert order.date == "01/06/2024"
    assert store.get_order(order.id).date == "01/06/2024"


def test_blank_service_name_is_rejected(driver_client, make_request):
    with pytest.raises(MissingPrecondition):
        driver_client.request_service(make_request(service_name="   "))


def test_driver_cannot_create_for_someone_else(driver_client, make_request):
    with pytest.raises(NotOrderParty):
        driver_client.request_service(make_request(driver_id="motorista-2"))


def test_blank_vehicle_gets_placeholder(driver_client, make_request):
    order = driver_client.request_service(make_request(vehicle=" "))
    assert order.vehicle == "Veículo não informado"


def test_workshop_self_order(workshop_client, make_request):
    order = workshop_client.request_service(
        make_request(driver_id=None, driver_name=None, vehicle=None, vehicle_plate=None)
    )
    assert order.driver_id == order.workshop_id == "oficina-1"
    assert order.driver_name == "Oficina Central"
    assert order.vehicle == "Uso Administrativo"
    assert order.vehicle_plate == "—"


def test_workshop_cannot_self_order_for_another_workshop(workshop_client, make_request):
    with pytest.raises(NotOrderParty):
        workshop_client.request_service(make_request(workshop_id="oficina-2"))


def test_full_lifecycle_with_review(driver_client, workshop_client, make_request):
    order = driver_client.request_service(
        make_request(service_name="Troca de Óleo", price=150, payment_method=PaymentMethod.PAY_ON_SITE)
    )
    assert order.status is OrderStatus.CRIADO

    assert workshop_client.confirm_payment(order.id).status is OrderStatus.PAGO
    assert workshop_client.depart(order.id).status is OrderStatus.A_CAMINHO
    assert workshop_client.arrive(order.id).status is OrderStatus.CHEGOU

    with pytest.raises(MissingPrecondition):
        workshop_client.finish(order.id, photo=None)
    assert driver_client.get(order.id).status is OrderStatus.CHEGOU

    finished = workshop_client.finish(order.id, photo="img1")
    assert finished.status is OrderStatus.CONCLUIDO
    assert finished.completion_photo_workshop == "img1"

    reviewed = driver_client.review(order.id, rating=5)
    assert reviewed.rating == 5
    assert driver_client.get(order.id).rating == 5


def test_finish_without_photo_does_not_touch_store(driver_client, workshop_client, make_request, store):
    order = driver_client.request_service(make_request(payment_method=PaymentMethod.CREDIT_CARD))
    workshop_client.depart(order.id)
    arrived = workshop_client.arrive(order.id)

    for photo in (None, "", "  "):
        with pytest.raises(MissingPrecondition):
            workshop_client.finish(order.id, photo=photo)

    stored = store.get_order(order.id)
    assert stored.status is OrderStatus.CHEGOU
    assert stored.revision == arrived.revision
    assert stored.completion_photo_workshop is None


def test_steps_cannot_be_skipped(driver_client, workshop_client, make_request):
    order = driver_client.request_service(make_request())
    with pytest.raises(InvalidTransition):
        workshop_client.depart(order.id)
    with pytest.raises(InvalidTransition):
        workshop_client.finish(order.id, photo="img1")


def test_steps_cannot_go_back(driver_client, workshop_client, make_request):
    order = driver_client.request_service(make_request(payment_method=PaymentMethod.CREDIT_CARD))
    workshop_client.depart(order.id)
    with pytest.raises(InvalidTransition):
        workshop_client.confirm_payment(order.id)


def test_same_command_twice_is_a_noop(driver_client, workshop_client, make_request, store):
    order = driver_client.request_service(make_request())
    first = workshop_client.confirm_payment(order.id)
    second = workshop_client.confirm_payment(order.id)
    assert first.status is second.status is OrderStatus.PAGO
    assert second.revision == first.revision
    assert store.get_order(order.id).revision == first.revision


def test_repeated_finish_keeps_first_photo(driver_client, workshop_client, make_request):
    order = driver_client.request_service(make_request(payment_method=PaymentMethod.CREDIT_CARD))
    workshop_client.depart(order.id)
    workshop_client.arrive(order.id)
    first = workshop_client.finish(order.id, photo="img1")
    again = workshop_client.finish(order.id, photo="img2")
    assert again.completion_photo_workshop == "img1"
    assert again.revision == first.revision


@pytest.fixture
def cancelled_order(driver_client, make_request):
    order = driver_client.request_service(make_request())
    return driver_client.cancel(order.id)


@pytest.fixture
def finished_order(driver_client, workshop_client, make_request):
    order = driver_client.request_service(make_request(payment_method=PaymentMethod.CREDIT_CARD))
    workshop_client.depart(order.id)
    workshop_client.arrive(order.id)
    return workshop_client.finish(order.id, photo="img1")


@pytest.mark.parametrize("terminal", ["cancelled_order", "finished_order"])
@pytest.mark.parametrize(
    "command",
    [
        lambda c, oid: c.confirm_payment(oid),
        lambda c, oid: c.depart(oid),
        lambda c, oid: c.arrive(oid),
        lambda c, oid: c.override(oid, OrderStatus.PAGO),
    ],
)
def test_terminal_orders_never_change(request, terminal, command, workshop_client, store):
    order = request.getfixturevalue(terminal)
    with pytest.raises(InvalidTransition):
        command(workshop_client, order.id)
    stored = store.get_order(order.id)
    assert stored.status is order.status
    assert stored.revision == order.revision


def test_finished_order_cannot_be_cancelled(finished_order, workshop_client):
    with pytest.raises(InvalidTransition):
        workshop_client.cancel(finished_order.id)


def test_cancel_twice_is_a_noop(cancelled_order, driver_client):
    again = driver_client.cancel(cancelled_order.id)
    assert again.status is OrderStatus.CANCELADO
    assert again.revision == cancelled_order.revision


def test_driver_cannot_advance_status(driver_client, make_request):
    order = driver_client.request_service(make_request())
    with pytest.raises(NotOrderParty):
        driver_client.confirm_payment(order.id)


def test_other_workshop_cannot_touch_order(store, driver_client, other_workshop, make_request):
    order = driver_client.request_service(make_request())
    lifecycle = OrderLifecycle(store)
    with pytest.raises(NotOrderParty):
        lifecycle.confirm_payment(other_workshop, order.id)
    with pytest.raises(NotOrderParty):
        lifecycle.get_order(other_workshop, order.id)


def test_unknown_order(workshop_client):
    with pytest.raises(NotFound):
        workshop_client.confirm_payment("nao-existe")


def test_driver_cancels_only_while_criado(driver_client, workshop_client, make_request):
    order = driver_client.request_service(make_request())
    workshop_client.confirm_payment(order.id)
    with pytest.raises(InvalidTransition):
        driver_client.cancel(order.id)


def test_workshop_cancels_any_open_order(driver_client, workshop_client, make_request):
    order = driver_client.request_service(make_request(payment_method=PaymentMethod.CREDIT_CARD))
    workshop_client.depart(order.id)
    assert workshop_client.cancel(order.id).status is OrderStatus.CANCELADO


def test_stale_revision_is_rejected(driver_client, workshop_client, make_request, store):
    order = driver_client.request_service(make_request())
    with pytest.raises(StaleRevision):
        workshop_client.confirm_payment(order.id, revision=order.revision + 5)
    assert store.get_order(order.id).status is OrderStatus.CRIADO

    updated = workshop_client.confirm_payment(order.id, revision=order.revision)
    assert updated.revision == order.revision + 1


def test_override_skips_steps(driver_client, workshop_client, make_request):
    order = driver_client.request_service(make_request())
    assert workshop_client.override(order.id, OrderStatus.CHEGOU).status is OrderStatus.CHEGOU


def test_override_to_concluido_does_not_require_photo(driver_client, workshop_client, make_request):
    order = driver_client.request_service(make_request())
    done = workshop_client.override(order.id, OrderStatus.CONCLUIDO)
    assert done.status is OrderStatus.CONCLUIDO
    assert done.completion_photo_workshop is None


def test_override_stores_optional_photo(driver_client, workshop_client, make_request):
    order = driver_client.request_service(make_request())
    done = workshop_client.override(order.id, OrderStatus.CONCLUIDO, photo="img9")
    assert done.completion_photo_workshop == "img9"


def test_override_photo_only_kept_for_concluido(driver_client, workshop_client, make_request):
    order = driver_client.request_service(make_request())
    paid = workshop_client.override(order.id, OrderStatus.PAGO, photo="img9")
    assert paid.status is OrderStatus.PAGO
    assert paid.completion_photo_workshop is None


def test_override_cannot_return_to_criado(driver_client, workshop_client, make_request):
    order = driver_client.request_service(make_request(payment_method=PaymentMethod.CREDIT_CARD))
    with pytest.raises(InvalidTransition):
        workshop_client.override(order.id, OrderStatus.CRIADO)


def test_override_is_workshop_only(driver_client, make_request):
    order = driver_client.request_service(make_request())
    with pytest.raises(NotOrderParty):
        driver_client.override(order.id, OrderStatus.CANCELADO)
