"""Checagens compartilhadas pelos comandos de pedido."""

import logging
from datetime import datetime
from typing import Optional

from mioto.errors import InvalidTransition, MissingPrecondition, NotOrderParty
from mioto.models.order import Actor, ActorRole, ServiceOrder

logger = logging.getLogger(__name__)


def party_id(order: ServiceOrder, role: ActorRole) -> str:
    return order.driver_id if role is ActorRole.MOTORISTA else order.workshop_id


def require_party(order: ServiceOrder, actor: Actor, role: ActorRole) -> None:
    """Só a parte dona do papel pode emitir o comando."""
    if actor.role is not role or actor.id != party_id(order, role):
        logger.warning(f"Ator {actor.id} ({actor.role.value}) não é a parte {role.value} do pedido {order.id}")
        raise NotOrderParty(
            f"Apenas a parte '{role.value}' do pedido pode executar esta ação.",
            order_id=order.id,
        )


def require_any_party(order: ServiceOrder, actor: Actor) -> None:
    require_party(order, actor, actor.role)


def require_open(order: ServiceOrder, action: str) -> None:
    if order.is_terminal:
        logger.warning(f"Pedido {order.id}: '{action}' rejeitado, status terminal {order.status.value}")
        raise InvalidTransition(
            f"Pedido {order.status.value} não aceita '{action}'.",
            order_id=order.id,
        )


def parse_slot(date: Optional[str], time: Optional[str], order_id: str = None) -> tuple[str, str]:
    """Valida um par data (YYYY-MM-DD) + hora (HH:MM) e devolve os valores normalizados."""
    if not date or not time:
        raise MissingPrecondition("Informe data e hora do agendamento.", order_id=order_id)
    try:
        parsed_date = datetime.strptime(date.strip(), "%Y-%m-%d")
        parsed_time = datetime.strptime(time.strip(), "%H:%M")
    except ValueError:
        raise MissingPrecondition(f"Data/hora inválida: {date} {time}", order_id=order_id)
    return parsed_date.strftime("%Y-%m-%d"), parsed_time.strftime("%H:%M")


def require_photo(photo: Optional[str], order_id: str = None) -> str:
    if not photo or not photo.strip():
        raise MissingPrecondition("É obrigatório enviar a foto do serviço concluído.", order_id=order_id)
    return photo
