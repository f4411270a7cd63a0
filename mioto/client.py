"""
Cliente de um ator (motorista ou oficina): comandos tipados sobre o motor
de pedidos mais a assinatura das mudanças feitas pela outra parte.
"""

from typing import Callable, Optional

from mioto.config import ORDER_POLL_INTERVAL, ORDER_POLL_MAX_FAILURES
from mioto.models.order import Actor, OrderCreate, OrderStatus, ServiceOrder
from mioto.services.order_feed import OrderEvent, OrderFeed
from mioto.services.order_lifecycle import OrderLifecycle
from mioto.services.order_review import OrderReview
from mioto.services.schedule_negotiation import ScheduleNegotiation
from mioto.store.base import OrderStore


class OrderClient:
    def __init__(
        self,
        store: OrderStore,
        actor: Actor,
        interval: float = ORDER_POLL_INTERVAL,
        max_failures: int = ORDER_POLL_MAX_FAILURES,
    ):
        self.actor = actor
        self.lifecycle = OrderLifecycle(store)
        self.negotiation = ScheduleNegotiation(store)
        self.reviews = OrderReview(store)
        self.feed = OrderFeed(store, actor, interval=interval, max_failures=max_failures)

    # Consultas / assinatura
    def orders(self) -> list[ServiceOrder]:
        return self.lifecycle.list_orders(self.actor)

    def get(self, order_id: str) -> ServiceOrder:
        return self.lifecycle.get_order(self.actor, order_id)

    def subscribe(self, callback: Callable[[OrderEvent], None]) -> Callable[[], None]:
        return self.feed.subscribe(callback)

    def refresh(self) -> list[OrderEvent]:
        return self.feed.poll_once()

    # Ciclo de vida
    def request_service(self, data: OrderCreate) -> ServiceOrder:
        return self.lifecycle.create_order(self.actor, data)

    def confirm_payment(self, order_id: str, revision: Optional[int] = None) -> ServiceOrder:
        return self.lifecycle.confirm_payment(self.actor, order_id, revision)

    def depart(self, order_id: str, revision: Optional[int] = None) -> ServiceOrder:
        return self.lifecycle.depart(self.actor, order_id, revision)

    def arrive(self, order_id: str, revision: Optional[int] = None) -> ServiceOrder:
        return self.lifecycle.arrive(self.actor, order_id, revision)

    def finish(self, order_id: str, photo: Optional[str], revision: Optional[int] = None) -> ServiceOrder:
        return self.lifecycle.finish(self.actor, order_id, photo, revision)

    def cancel(self, order_id: str, revision: Optional[int] = None) -> ServiceOrder:
        return self.lifecycle.cancel(self.actor, order_id, revision)

    def override(
        self,
        order_id: str,
        status: OrderStatus,
        photo: Optional[str] = None,
        revision: Optional[int] = None,
    ) -> ServiceOrder:
        return self.lifecycle.override(self.actor, order_id, status, photo, revision)

    # Agendamento
    def request_schedule(self, order_id: str, date: str, time: str, revision: Optional[int] = None) -> ServiceOrder:
        return self.negotiation.request_schedule(self.actor, order_id, date, time, revision)

    def accept_schedule(self, order_id: str, revision: Optional[int] = None) -> ServiceOrder:
        return self.negotiation.accept_request(self.actor, order_id, revision)

    def counter_propose(self, order_id: str, date: str, time: str, revision: Optional[int] = None) -> ServiceOrder:
        return self.negotiation.counter_propose(self.actor, order_id, date, time, revision)

    def accept_proposal(self, order_id: str, revision: Optional[int] = None) -> ServiceOrder:
        return self.negotiation.accept_proposal(self.actor, order_id, revision)

    def reject_proposal(self, order_id: str, revision: Optional[int] = None) -> ServiceOrder:
        return self.negotiation.reject_proposal(self.actor, order_id, revision)

    # Avaliação
    def review(
        self,
        order_id: str,
        rating: int,
        text: Optional[str] = None,
        photo: Optional[str] = None,
        revision: Optional[int] = None,
    ) -> ServiceOrder:
        return self.reviews.submit_review(self.actor, order_id, rating, text, photo, revision)
