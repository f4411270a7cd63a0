import json
import logging
import threading
from pathlib import Path
from typing import Optional

from mioto.errors import NotFound, StoreUnavailable
from mioto.models.order import ActorRole, OrderStatus, ServiceOrder
from mioto.store.base import OrderStore, apply_review, apply_status_patch, check_revision, filter_for_actor

logger = logging.getLogger(__name__)


class LocalOrderStore(OrderStore):
    """
    Loja local em arquivo JSON (ou só em memória quando path é None).
    Usada como fallback quando o banco remoto está fora do ar.
    """

    def __init__(self, path: Optional[str] = None):
        self.path = Path(path) if path else None
        self._lock = threading.Lock()
        self._orders: dict[str, ServiceOrder] = {}
        self._load()

    def _load(self) -> None:
        if self.path is None or not self.path.exists():
            return
        try:
            raw = json.loads(self.path.read_text(encoding="utf-8") or "[]")
        except (OSError, ValueError) as e:
            raise StoreUnavailable(f"Não foi possível ler {self.path}: {e}") from e
        for item in raw:
            order = ServiceOrder.model_validate(item)
            self._orders[order.id] = order
        logger.info(f"{len(self._orders)} pedidos carregados de {self.path}")

    def _flush(self) -> None:
        if self.path is None:
            return
        data = [o.model_dump(mode="json") for o in self._orders.values()]
        try:
            self.path.write_text(json.dumps(data, ensure_ascii=False, indent=2), encoding="utf-8")
        except OSError as e:
            raise StoreUnavailable(f"Não foi possível gravar {self.path}: {e}") from e

    def _get(self, order_id: str) -> ServiceOrder:
        order = self._orders.get(order_id)
        if order is None:
            raise NotFound(f"Pedido {order_id} não encontrado.", order_id=order_id)
        return order

    def _replace(self, order: ServiceOrder) -> None:
        previous = self._orders.get(order.id)
        self._orders[order.id] = order
        try:
            self._flush()
        except StoreUnavailable:
            # Mantém memória e arquivo coerentes
            if previous is None:
                del self._orders[order.id]
            else:
                self._orders[order.id] = previous
            raise

    def list_orders(self, actor_id: str, role: ActorRole) -> list[ServiceOrder]:
        with self._lock:
            return filter_for_actor(self._orders.values(), actor_id, role)

    def get_order(self, order_id: str) -> ServiceOrder:
        with self._lock:
            return self._get(order_id)

    def create_order(self, order: ServiceOrder) -> str:
        with self._lock:
            self._replace(order)
        return order.id

    def update_order_status(
        self,
        order_id: str,
        new_status: OrderStatus,
        patch: Optional[dict] = None,
        expected_revision: Optional[int] = None,
    ) -> ServiceOrder:
        with self._lock:
            current = self._get(order_id)
            check_revision(current, expected_revision)
            updated = apply_status_patch(current, new_status, patch)
            self._replace(updated)
            return updated

    def add_review(
        self,
        order_id: str,
        rating: int,
        text: Optional[str] = None,
        photo: Optional[str] = None,
        expected_revision: Optional[int] = None,
    ) -> ServiceOrder:
        with self._lock:
            current = self._get(order_id)
            check_revision(current, expected_revision)
            updated = apply_review(current, rating, text, photo)
            self._replace(updated)
            return updated

    def mirror(self, order: ServiceOrder) -> None:
        """Copia um registro já gravado no remoto, sem checar revisão."""
        with self._lock:
            self._replace(order)
