"""
Feed de pedidos por polling.

Não existe canal de push: cada ator consulta a loja em intervalo fixo e
recebe eventos com o que a outra parte mudou desde a última consulta.
"""

import logging
import threading
from typing import Callable, Literal, Optional

from pydantic import BaseModel

from mioto.config import ORDER_POLL_INTERVAL, ORDER_POLL_MAX_FAILURES
from mioto.errors import StoreUnavailable
from mioto.models.order import Actor, ServiceOrder
from mioto.store.base import OrderStore

logger = logging.getLogger(__name__)


class OrderEvent(BaseModel):
    kind: Literal["created", "updated"]
    order: ServiceOrder


class OrderFeed:
    def __init__(
        self,
        store: OrderStore,
        actor: Actor,
        interval: float = ORDER_POLL_INTERVAL,
        max_failures: int = ORDER_POLL_MAX_FAILURES,
    ):
        self.store = store
        self.actor = actor
        self.interval = interval
        self.max_failures = max_failures
        self.failures = 0
        self._revisions: dict[str, int] = {}
        self._orders: list[ServiceOrder] = []
        self._subscribers: list[Callable[[OrderEvent], None]] = []
        self._failure_listeners: list[Callable[[StoreUnavailable, int], None]] = []

    @property
    def orders(self) -> list[ServiceOrder]:
        """Última lista recebida (pode estar desatualizada se a loja caiu)."""
        return list(self._orders)

    def subscribe(self, callback: Callable[[OrderEvent], None]) -> Callable[[], None]:
        self._subscribers.append(callback)

        def unsubscribe() -> None:
            if callback in self._subscribers:
                self._subscribers.remove(callback)

        return unsubscribe

    def on_unavailable(self, callback: Callable[[StoreUnavailable, int], None]) -> None:
        """Chamado quando a loja falha max_failures vezes seguidas (e a cada falha depois disso)."""
        self._failure_listeners.append(callback)

    def poll_once(self) -> list[OrderEvent]:
        try:
            orders = self.store.list_orders(self.actor.id, self.actor.role)
        except StoreUnavailable as e:
            self.failures += 1
            if self.failures >= self.max_failures:
                logger.error(f"Pedidos indisponíveis há {self.failures} tentativas: {e}")
                for listener in list(self._failure_listeners):
                    listener(e, self.failures)
            else:
                logger.warning(f"Falha ao consultar pedidos ({self.failures}/{self.max_failures}), nova tentativa no próximo ciclo")
            return []

        if self.failures:
            logger.info(f"Loja de pedidos voltou após {self.failures} falha(s)")
        self.failures = 0

        events = []
        for order in orders:
            previous = self._revisions.get(order.id)
            if previous is None:
                events.append(OrderEvent(kind="created", order=order))
            elif previous != order.revision:
                events.append(OrderEvent(kind="updated", order=order))
        self._revisions = {o.id: o.revision for o in orders}
        self._orders = orders

        for event in events:
            for callback in list(self._subscribers):
                callback(event)
        return events

    def run(self, stop: Optional[threading.Event] = None) -> None:
        """Consulta até 'stop' ser sinalizado."""
        stop = stop or threading.Event()
        logger.info(f"Feed de pedidos de {self.actor.id} iniciado (intervalo {self.interval}s)")
        while not stop.is_set():
            self.poll_once()
            stop.wait(self.interval)
        logger.info(f"Feed de pedidos de {self.actor.id} encerrado")
