import threading

from mioto.errors import StoreUnavailable
from mioto.services.order_feed import OrderFeed
from mioto.services.order_lifecycle import OrderLifecycle
from mioto.store.local_store import LocalOrderStore


class FlakyStore(LocalOrderStore):
    """Falha as próximas N listagens."""

    def __init__(self):
        super().__init__()
        self.failing = 0

    def list_orders(self, actor_id, role):
        if self.failing:
            self.failing -= 1
            raise StoreUnavailable("rede caiu")
        return super().list_orders(actor_id, role)


def test_driver_sees_workshop_changes(driver_client, workshop_client, make_request):
    events = []
    driver_client.subscribe(events.append)

    order = driver_client.request_service(make_request())
    first = driver_client.refresh()
    assert [(e.kind, e.order.id) for e in first] == [("created", order.id)]

    assert driver_client.refresh() == []

    workshop_client.confirm_payment(order.id)
    changed = driver_client.refresh()
    assert [(e.kind, e.order.status.value) for e in changed] == [("updated", "pago")]
    assert len(events) == 2


def test_noop_command_does_not_emit(driver_client, workshop_client, make_request):
    order = driver_client.request_service(make_request())
    workshop_client.confirm_payment(order.id)
    driver_client.refresh()
    workshop_client.confirm_payment(order.id)
    assert driver_client.refresh() == []


def test_unsubscribe(driver_client, make_request):
    events = []
    unsubscribe = driver_client.subscribe(events.append)
    unsubscribe()
    driver_client.request_service(make_request())
    driver_client.refresh()
    assert events == []


def test_unsubscribe_twice_is_harmless(driver_client, make_request):
    events = []
    unsubscribe = driver_client.subscribe(events.append)
    unsubscribe()
    unsubscribe()
    driver_client.request_service(make_request())
    driver_client.refresh()
    assert events == []


def test_failures_surface_after_repeated_errors(driver):
    store = FlakyStore()
    feed = OrderFeed(store, driver, interval=0, max_failures=3)
    surfaced = []
    feed.on_unavailable(lambda error, count: surfaced.append(count))

    store.failing = 2
    assert feed.poll_once() == []
    assert feed.poll_once() == []
    assert surfaced == []

    store.failing = 2
    feed.poll_once()
    assert surfaced == [3]
    feed.poll_once()
    assert surfaced == [3, 4]


def test_recovery_resets_failures_and_keeps_last_view(driver, make_request):
    store = FlakyStore()
    feed = OrderFeed(store, driver, interval=0, max_failures=3)

    order = OrderLifecycle(store).create_order(driver, make_request())
    feed.poll_once()
    store.failing = 1
    feed.poll_once()
    assert feed.failures == 1
    assert [o.id for o in feed.orders] == [order.id]

    feed.poll_once()
    assert feed.failures == 0


def test_run_until_stopped(driver, make_request):
    store = LocalOrderStore()

    OrderLifecycle(store).create_order(driver, make_request())
    feed = OrderFeed(store, driver, interval=0.01)
    stop = threading.Event()
    seen = []

    def on_event(event):
        seen.append(event)
        stop.set()

    feed.subscribe(on_event)
    feed.run(stop)
    assert len(seen) == 1
