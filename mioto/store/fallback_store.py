import logging
from typing import Optional

from mioto.errors import NotFound, StoreUnavailable
from mioto.models.order import ActorRole, OrderStatus, ServiceOrder
from mioto.store.base import OrderStore
from mioto.store.local_store import LocalOrderStore

logger = logging.getLogger(__name__)


class FallbackOrderStore(OrderStore):
    """
    Remoto com fallback local.

    Leituras vão ao remoto e caem para o local quando ele está fora.
    Escritas bem-sucedidas no remoto são espelhadas no local; com o remoto
    fora, a escrita fica só no local. Os dois fora = StoreUnavailable.
    Pedido que só existe no remoto também dá StoreUnavailable, não NotFound.
    """

    def __init__(self, remote: OrderStore, local: LocalOrderStore):
        self.remote = remote
        self.local = local

    def _mirror(self, order: ServiceOrder) -> None:
        try:
            self.local.mirror(order)
        except StoreUnavailable as e:
            logger.warning(f"Cópia local do pedido {order.id} não gravada: {e}")

    def list_orders(self, actor_id: str, role: ActorRole) -> list[ServiceOrder]:
        try:
            return self.remote.list_orders(actor_id, role)
        except StoreUnavailable as e:
            logger.warning(f"Remoto indisponível, listando pedidos locais: {e}")
            return self.local.list_orders(actor_id, role)

    def get_order(self, order_id: str) -> ServiceOrder:
        try:
            return self.remote.get_order(order_id)
        except StoreUnavailable as e:
            logger.warning(f"Remoto indisponível, lendo pedido {order_id} localmente: {e}")
            try:
                return self.local.get_order(order_id)
            except NotFound:
                raise e from None

    def create_order(self, order: ServiceOrder) -> str:
        try:
            self.remote.create_order(order)
        except StoreUnavailable as e:
            logger.warning(f"Remoto indisponível, pedido {order.id} criado só localmente: {e}")
            return self.local.create_order(order)
        self._mirror(order)
        return order.id

    def update_order_status(
        self,
        order_id: str,
        new_status: OrderStatus,
        patch: Optional[dict] = None,
        expected_revision: Optional[int] = None,
    ) -> ServiceOrder:
        try:
            updated = self.remote.update_order_status(order_id, new_status, patch, expected_revision)
        except StoreUnavailable as e:
            logger.warning(f"Remoto indisponível, pedido {order_id} atualizado só localmente: {e}")
            try:
                return self.local.update_order_status(order_id, new_status, patch, expected_revision)
            except NotFound:
                raise e from None
        self._mirror(updated)
        return updated

    def add_review(
        self,
        order_id: str,
        rating: int,
        text: Optional[str] = None,
        photo: Optional[str] = None,
        expected_revision: Optional[int] = None,
    ) -> ServiceOrder:
        try:
            updated = self.remote.add_review(order_id, rating, text, photo, expected_revision)
        except StoreUnavailable as e:
            logger.warning(f"Remoto indisponível, avaliação do pedido {order_id} gravada só localmente: {e}")
            try:
                return self.local.add_review(order_id, rating, text, photo, expected_revision)
            except NotFound:
                raise e from None
        self._mirror(updated)
        return updated

    def check_connection(self) -> tuple[bool, Optional[str]]:
        return self.remote.check_connection()
