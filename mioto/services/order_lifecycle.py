"""
Motor do ciclo de vida do pedido.

Caminho normal (comandos da oficina):
    criado --confirm_payment--> pago --depart--> a_caminho --arrive--> chegou --finish(foto)--> concluido

Cancelamento leva a 'cancelado'. A oficina ainda pode forçar qualquer
status pelo override manual, sem seguir a sequência e sem exigir foto.
"""

import logging
from datetime import datetime
from typing import Callable, Optional

from mioto.errors import InvalidTransition, MissingPrecondition, NotOrderParty
from mioto.models.order import (
    Actor,
    ActorRole,
    OrderCreate,
    OrderStatus,
    PaymentMethod,
    ScheduleStatus,
    ServiceOrder,
)
from mioto.services.guards import parse_slot, require_any_party, require_open, require_party, require_photo
from mioto.store.base import OrderStore, check_revision

logger = logging.getLogger(__name__)

# Próximo passo do caminho sequencial
FORWARD_STEPS = {
    OrderStatus.CRIADO: OrderStatus.PAGO,
    OrderStatus.PAGO: OrderStatus.A_CAMINHO,
    OrderStatus.A_CAMINHO: OrderStatus.CHEGOU,
    OrderStatus.CHEGOU: OrderStatus.CONCLUIDO,
}

OVERRIDE_TARGETS = frozenset({
    OrderStatus.PAGO,
    OrderStatus.A_CAMINHO,
    OrderStatus.CHEGOU,
    OrderStatus.CONCLUIDO,
    OrderStatus.CANCELADO,
})

SELF_ORDER_VEHICLE = "Uso Administrativo"
SELF_ORDER_PLATE = "—"
UNKNOWN_VEHICLE = "Veículo não informado"


def initial_status(payment_method: PaymentMethod) -> OrderStatus:
    # Cartão é considerado capturado no envio
    if PaymentMethod(payment_method) is PaymentMethod.CREDIT_CARD:
        return OrderStatus.PAGO
    return OrderStatus.CRIADO


class OrderLifecycle:
    def __init__(self, store: OrderStore, clock: Callable[[], datetime] = datetime.now):
        self.store = store
        self.clock = clock

    # ------------------------------------------------------------------
    # Consultas
    # ------------------------------------------------------------------
    def list_orders(self, actor: Actor) -> list[ServiceOrder]:
        return self.store.list_orders(actor.id, actor.role)

    def get_order(self, actor: Actor, order_id: str) -> ServiceOrder:
        order = self.store.get_order(order_id)
        require_any_party(order, actor)
        return order

    # ------------------------------------------------------------------
    # Criação
    # ------------------------------------------------------------------
    def create_order(self, actor: Actor, data: OrderCreate) -> ServiceOrder:
        """Cria o pedido do motorista, ou o auto-pedido administrativo da oficina."""
        service_name = (data.service_name or "").strip()
        if not service_name:
            raise MissingPrecondition("Selecione um serviço.")

        if actor.role is ActorRole.MOTORISTA:
            if data.driver_id and data.driver_id != actor.id:
                raise NotOrderParty("Motorista só pode criar pedidos em seu próprio nome.")
            if not data.driver_name:
                raise MissingPrecondition("Nome do motorista é obrigatório.")
            parties = {
                "driver_id": actor.id,
                "driver_name": data.driver_name,
                "driver_phone": data.driver_phone,
                "workshop_id": data.workshop_id,
                "workshop_name": data.workshop_name,
                "workshop_phone": data.workshop_phone,
            }
            vehicle = (data.vehicle or "").strip() or UNKNOWN_VEHICLE
            plate = data.vehicle_plate
        else:
            if data.workshop_id != actor.id:
                raise NotOrderParty("Oficina só pode registrar pedidos para si mesma.")
            # No auto-pedido a oficina ocupa as duas partes
            parties = {
                "driver_id": actor.id,
                "driver_name": data.workshop_name,
                "driver_phone": data.workshop_phone,
                "workshop_id": actor.id,
                "workshop_name": data.workshop_name,
                "workshop_phone": data.workshop_phone,
            }
            vehicle = (data.vehicle or "").strip() or SELF_ORDER_VEHICLE
            plate = data.vehicle_plate or SELF_ORDER_PLATE

        schedule = {"schedule_status": ScheduleStatus.IMEDIATO}
        if data.schedule_date or data.schedule_time:
            date, time = parse_slot(data.schedule_date, data.schedule_time)
            schedule = {
                "schedule_date": date,
                "schedule_time": time,
                "schedule_status": ScheduleStatus.PENDENTE,
            }

        order = ServiceOrder(
            **parties,
            **schedule,
            service_name=service_name,
            service_description=data.service_description,
            price=data.price,
            payment_method=data.payment_method,
            vehicle=vehicle,
            vehicle_plate=plate,
            status=initial_status(data.payment_method),
            date=self.clock().strftime("%d/%m/%Y"),
        )
        self.store.create_order(order)
        logger.info(
            f"Pedido {order.id} criado por {actor.role.value} {actor.id}: "
            f"'{order.service_name}' status={order.status.value} agendamento={order.schedule_status.value}"
        )
        return order

    # ------------------------------------------------------------------
    # Comandos sequenciais da oficina
    # ------------------------------------------------------------------
    def confirm_payment(self, actor: Actor, order_id: str, expected_revision: Optional[int] = None) -> ServiceOrder:
        return self._advance(actor, order_id, OrderStatus.PAGO, expected_revision=expected_revision)

    def depart(self, actor: Actor, order_id: str, expected_revision: Optional[int] = None) -> ServiceOrder:
        return self._advance(actor, order_id, OrderStatus.A_CAMINHO, expected_revision=expected_revision)

    def arrive(self, actor: Actor, order_id: str, expected_revision: Optional[int] = None) -> ServiceOrder:
        return self._advance(actor, order_id, OrderStatus.CHEGOU, expected_revision=expected_revision)

    def finish(
        self,
        actor: Actor,
        order_id: str,
        photo: Optional[str],
        expected_revision: Optional[int] = None,
    ) -> ServiceOrder:
        """Finaliza o serviço. A foto de conclusão é obrigatória."""
        return self._advance(
            actor,
            order_id,
            OrderStatus.CONCLUIDO,
            photo=photo,
            expected_revision=expected_revision,
        )

    def _advance(
        self,
        actor: Actor,
        order_id: str,
        target: OrderStatus,
        photo: Optional[str] = None,
        expected_revision: Optional[int] = None,
    ) -> ServiceOrder:
        order = self.store.get_order(order_id)
        require_party(order, actor, ActorRole.OFICINA)
        if order.status is target:
            logger.debug(f"Pedido {order.id} já está em {target.value}, nada a fazer")
            return order
        require_open(order, target.value)
        check_revision(order, expected_revision)
        self._require_schedule_resolved(order, target)

        if FORWARD_STEPS.get(order.status) is not target:
            logger.warning(f"Pedido {order.id}: {order.status.value} → {target.value} fora de sequência")
            raise InvalidTransition(
                f"Não é possível ir de {order.status.value} para {target.value}.",
                order_id=order.id,
            )

        patch = None
        if target is OrderStatus.CONCLUIDO:
            patch = {"completion_photo_workshop": require_photo(photo, order.id)}
        return self._write(order, target, patch)

    # ------------------------------------------------------------------
    # Cancelamento e override manual
    # ------------------------------------------------------------------
    def cancel(self, actor: Actor, order_id: str, expected_revision: Optional[int] = None) -> ServiceOrder:
        """
        Motorista cancela enquanto o pedido está 'criado'; a oficina cancela
        em qualquer status não terminal.
        """
        order = self.store.get_order(order_id)
        require_any_party(order, actor)
        if order.status is OrderStatus.CANCELADO:
            logger.debug(f"Pedido {order.id} já cancelado")
            return order
        require_open(order, "cancelar")
        check_revision(order, expected_revision)
        if actor.role is ActorRole.MOTORISTA and order.status is not OrderStatus.CRIADO:
            raise InvalidTransition(
                f"Motorista só pode cancelar pedidos em 'criado' (atual: {order.status.value}).",
                order_id=order.id,
            )
        return self._write(order, OrderStatus.CANCELADO)

    def override(
        self,
        actor: Actor,
        order_id: str,
        status: OrderStatus,
        photo: Optional[str] = None,
        expected_revision: Optional[int] = None,
    ) -> ServiceOrder:
        """Alteração manual de status pela oficina. Não segue a sequência nem exige foto."""
        target = OrderStatus(status)
        order = self.store.get_order(order_id)
        require_party(order, actor, ActorRole.OFICINA)
        if target not in OVERRIDE_TARGETS:
            raise InvalidTransition(f"Status {target.value} não pode ser escolhido manualmente.", order_id=order.id)
        if order.status is target:
            logger.debug(f"Pedido {order.id} já está em {target.value}, nada a fazer")
            return order
        require_open(order, target.value)
        check_revision(order, expected_revision)
        if target is not OrderStatus.CANCELADO:
            self._require_schedule_resolved(order, target)

        # A foto só faz sentido como evidência de conclusão
        patch = None
        if photo and target is OrderStatus.CONCLUIDO:
            patch = {"completion_photo_workshop": photo}
        logger.info(f"Pedido {order.id}: override manual {order.status.value} → {target.value}")
        return self._write(order, target, patch)

    # ------------------------------------------------------------------
    def _require_schedule_resolved(self, order: ServiceOrder, target: OrderStatus) -> None:
        # Com agendamento em aberto o andamento fica travado até as partes concordarem
        if order.schedule_status.is_unresolved:
            logger.warning(
                f"Pedido {order.id}: {target.value} bloqueado, agendamento {order.schedule_status.value}"
            )
            raise InvalidTransition(
                f"Agendamento em {order.schedule_status.value}; resolva o horário antes de avançar.",
                order_id=order.id,
            )

    def _write(self, order: ServiceOrder, target: OrderStatus, patch: Optional[dict] = None) -> ServiceOrder:
        updated = self.store.update_order_status(order.id, target, patch, expected_revision=order.revision)
        logger.info(f"Pedido {order.id}: {order.status.value} → {target.value} (rev {updated.revision})")
        return updated
