"""Contrato da loja de pedidos e regras de escrita comuns às implementações."""

from abc import ABC, abstractmethod
from typing import Iterable, Optional

from mioto.errors import AlreadyReviewed, StaleRevision
from mioto.models.order import MUTABLE_FIELDS, ActorRole, OrderStatus, ServiceOrder


class OrderStore(ABC):
    """
    Persistência dos pedidos. Última escrita vence por registro, mas toda
    escrita pode exigir a revisão lida (expected_revision) e é rejeitada
    com StaleRevision quando ela não confere.
    """

    @abstractmethod
    def list_orders(self, actor_id: str, role: ActorRole) -> list[ServiceOrder]:
        """Pedidos em que o ator é a parte motorista ou oficina, mais novos primeiro."""

    @abstractmethod
    def get_order(self, order_id: str) -> ServiceOrder:
        """Levanta NotFound se o id não existir."""

    @abstractmethod
    def create_order(self, order: ServiceOrder) -> str:
        ...

    @abstractmethod
    def update_order_status(
        self,
        order_id: str,
        new_status: OrderStatus,
        patch: Optional[dict] = None,
        expected_revision: Optional[int] = None,
    ) -> ServiceOrder:
        """Grava o status junto com os campos do patch (None limpa o campo)."""

    @abstractmethod
    def add_review(
        self,
        order_id: str,
        rating: int,
        text: Optional[str] = None,
        photo: Optional[str] = None,
        expected_revision: Optional[int] = None,
    ) -> ServiceOrder:
        ...

    def check_connection(self) -> tuple[bool, Optional[str]]:
        return True, None


def filter_for_actor(orders: Iterable[ServiceOrder], actor_id: str, role: ActorRole) -> list[ServiceOrder]:
    role = ActorRole(role)
    if role is ActorRole.MOTORISTA:
        selected = [o for o in orders if o.driver_id == actor_id]
    else:
        selected = [o for o in orders if o.workshop_id == actor_id]
    return sorted(selected, key=lambda o: o.created_at, reverse=True)


def check_revision(order: ServiceOrder, expected_revision: Optional[int]) -> None:
    if expected_revision is not None and expected_revision != order.revision:
        raise StaleRevision(
            f"Pedido {order.id} está na revisão {order.revision}, não {expected_revision}.",
            order_id=order.id,
            current_revision=order.revision,
        )


def apply_status_patch(order: ServiceOrder, new_status: OrderStatus, patch: Optional[dict] = None) -> ServiceOrder:
    """Devolve uma cópia com status, patch aplicado e revisão incrementada."""
    patch = dict(patch or {})
    invalid = set(patch) - MUTABLE_FIELDS
    if invalid:
        raise ValueError(f"Campos não alteráveis: {', '.join(sorted(invalid))}")
    patch["status"] = OrderStatus(new_status)
    patch["revision"] = order.revision + 1
    return order.model_copy(update=patch)


def apply_review(order: ServiceOrder, rating: int, text: Optional[str], photo: Optional[str]) -> ServiceOrder:
    if order.has_review:
        raise AlreadyReviewed(f"Pedido {order.id} já foi avaliado.", order_id=order.id)
    return order.model_copy(update={
        "rating": rating,
        "review": text,
        "completion_photo_driver": photo,
        "revision": order.revision + 1,
    })
