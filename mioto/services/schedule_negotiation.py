"""
Negociação de agendamento entre motorista e oficina.

    imediato --motorista pede data--> pendente
    pendente --oficina aceita--> confirmado
    pendente/negociacao --oficina sugere outra--> negociacao
    negociacao --motorista aceita--> confirmado (data sugerida vira a data do pedido)
    negociacao --motorista recusa--> pedido cancelado

Não há limite de rodadas: cada contraproposta sobrescreve a anterior.
"""

import logging
from typing import Optional

from mioto.errors import InvalidTransition
from mioto.models.order import Actor, ActorRole, OrderStatus, ScheduleStatus, ServiceOrder
from mioto.services.guards import parse_slot, require_open, require_party
from mioto.store.base import OrderStore, check_revision

logger = logging.getLogger(__name__)


class ScheduleNegotiation:
    def __init__(self, store: OrderStore):
        self.store = store

    def _load(self, actor: Actor, order_id: str, role: ActorRole, action: str) -> ServiceOrder:
        order = self.store.get_order(order_id)
        require_party(order, actor, role)
        require_open(order, action)
        return order

    def _expect(self, order: ServiceOrder, allowed: tuple, action: str) -> None:
        if order.schedule_status not in allowed:
            logger.warning(f"Pedido {order.id}: '{action}' rejeitado com agendamento {order.schedule_status.value}")
            raise InvalidTransition(
                f"Não é possível '{action}' com agendamento {order.schedule_status.value}.",
                order_id=order.id,
            )

    def _write(self, order: ServiceOrder, patch: dict, status: OrderStatus = None) -> ServiceOrder:
        status = status or order.status
        updated = self.store.update_order_status(order.id, status, patch, expected_revision=order.revision)
        logger.info(
            f"Pedido {order.id}: agendamento {order.schedule_status.value} → {updated.schedule_status.value}"
            f" status={updated.status.value} (rev {updated.revision})"
        )
        return updated

    # --- Motorista ---------------------------------------------------
    def request_schedule(
        self,
        actor: Actor,
        order_id: str,
        date: Optional[str],
        time: Optional[str],
        expected_revision: Optional[int] = None,
    ) -> ServiceOrder:
        """Motorista pede (ou troca, enquanto pendente) a data/hora do atendimento."""
        order = self._load(actor, order_id, ActorRole.MOTORISTA, "solicitar agendamento")
        date, time = parse_slot(date, time, order.id)
        if (
            order.schedule_status is ScheduleStatus.PENDENTE
            and (order.schedule_date, order.schedule_time) == (date, time)
        ):
            return order
        check_revision(order, expected_revision)
        self._expect(order, (ScheduleStatus.IMEDIATO, ScheduleStatus.PENDENTE), "solicitar agendamento")
        return self._write(order, {
            "schedule_date": date,
            "schedule_time": time,
            "schedule_status": ScheduleStatus.PENDENTE,
        })

    def accept_proposal(self, actor: Actor, order_id: str, expected_revision: Optional[int] = None) -> ServiceOrder:
        """Motorista aceita a data sugerida pela oficina."""
        order = self._load(actor, order_id, ActorRole.MOTORISTA, "aceitar proposta")
        if order.schedule_status is ScheduleStatus.CONFIRMADO:
            return order
        check_revision(order, expected_revision)
        self._expect(order, (ScheduleStatus.NEGOCIACAO,), "aceitar proposta")
        return self._write(order, {
            "schedule_date": order.workshop_proposed_date,
            "schedule_time": order.workshop_proposed_time,
            "schedule_status": ScheduleStatus.CONFIRMADO,
            "workshop_proposed_date": None,
            "workshop_proposed_time": None,
        })

    def reject_proposal(self, actor: Actor, order_id: str, expected_revision: Optional[int] = None) -> ServiceOrder:
        """Motorista recusa a contraproposta: o pedido é cancelado."""
        order = self.store.get_order(order_id)
        require_party(order, actor, ActorRole.MOTORISTA)
        if order.status is OrderStatus.CANCELADO:
            return order
        require_open(order, "recusar proposta")
        check_revision(order, expected_revision)
        self._expect(order, (ScheduleStatus.NEGOCIACAO,), "recusar proposta")
        return self._write(order, {}, status=OrderStatus.CANCELADO)

    # --- Oficina -----------------------------------------------------
    def accept_request(self, actor: Actor, order_id: str, expected_revision: Optional[int] = None) -> ServiceOrder:
        """Oficina aceita a data pedida pelo motorista."""
        order = self._load(actor, order_id, ActorRole.OFICINA, "aceitar horário")
        if order.schedule_status is ScheduleStatus.CONFIRMADO:
            return order
        check_revision(order, expected_revision)
        self._expect(order, (ScheduleStatus.PENDENTE,), "aceitar horário")
        return self._write(order, {"schedule_status": ScheduleStatus.CONFIRMADO})

    def counter_propose(
        self,
        actor: Actor,
        order_id: str,
        date: Optional[str],
        time: Optional[str],
        expected_revision: Optional[int] = None,
    ) -> ServiceOrder:
        """Oficina sugere outra data/hora; sobrescreve qualquer sugestão anterior."""
        order = self._load(actor, order_id, ActorRole.OFICINA, "sugerir horário")
        date, time = parse_slot(date, time, order.id)
        if (
            order.schedule_status is ScheduleStatus.NEGOCIACAO
            and (order.workshop_proposed_date, order.workshop_proposed_time) == (date, time)
        ):
            return order
        check_revision(order, expected_revision)
        self._expect(order, (ScheduleStatus.PENDENTE, ScheduleStatus.NEGOCIACAO), "sugerir horário")
        return self._write(order, {
            "schedule_status": ScheduleStatus.NEGOCIACAO,
            "workshop_proposed_date": date,
            "workshop_proposed_time": time,
        })
