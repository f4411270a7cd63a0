import logging
from typing import Optional

from mioto.errors import AlreadyReviewed, InvalidTransition, MissingPrecondition
from mioto.models.order import Actor, ActorRole, OrderStatus, ServiceOrder
from mioto.services.guards import require_party
from mioto.store.base import OrderStore, check_revision

logger = logging.getLogger(__name__)


class OrderReview:
    """Avaliação do motorista após a conclusão. Uma única vez, sem edição."""

    def __init__(self, store: OrderStore):
        self.store = store

    def submit_review(
        self,
        actor: Actor,
        order_id: str,
        rating: Optional[int],
        text: Optional[str] = None,
        photo: Optional[str] = None,
        expected_revision: Optional[int] = None,
    ) -> ServiceOrder:
        order = self.store.get_order(order_id)
        require_party(order, actor, ActorRole.MOTORISTA)
        if order.status is not OrderStatus.CONCLUIDO:
            raise InvalidTransition(
                f"Só é possível avaliar pedidos concluídos (atual: {order.status.value}).",
                order_id=order.id,
            )
        if order.has_review:
            logger.warning(f"Pedido {order.id}: segunda avaliação rejeitada")
            raise AlreadyReviewed(f"Pedido {order.id} já foi avaliado.", order_id=order.id)
        if isinstance(rating, bool) or not isinstance(rating, int) or not 1 <= rating <= 5:
            raise MissingPrecondition("A nota deve ser de 1 a 5 estrelas.", order_id=order.id)
        check_revision(order, expected_revision)

        updated = self.store.add_review(
            order.id,
            rating,
            text=(text or None),
            photo=(photo or None),
            expected_revision=order.revision,
        )
        logger.info(f"Pedido {order.id} avaliado com {rating} estrela(s)")
        return updated
