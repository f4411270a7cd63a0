from typing import Optional

from fastapi import APIRouter, Depends
from starlette import status as status_codes

from mioto.auth_utils import get_current_actor
from mioto.contact import counterparty_link
from mioto.models.order import (
    Actor,
    FinishCommand,
    OrderCreate,
    OrderResponse,
    OverrideCommand,
    RevisionedCommand,
    ReviewCommand,
    ScheduleCommand,
    ServiceOrder,
)
from mioto.services.order_lifecycle import OrderLifecycle
from mioto.services.order_review import OrderReview
from mioto.services.schedule_negotiation import ScheduleNegotiation
from mioto.store.base import OrderStore
from mioto.store.factory import get_store

router = APIRouter(prefix="/orders", tags=["orders"])


def _view(order: ServiceOrder, actor: Actor) -> OrderResponse:
    return OrderResponse(**order.model_dump(), contact_link=counterparty_link(order, actor))


def _revision(command: Optional[RevisionedCommand]) -> Optional[int]:
    return command.expected_revision if command else None


# --- Consultas ---------------------------------------------------------
@router.get("/", name="list_orders", response_model=list[OrderResponse])
def list_orders(actor: Actor = Depends(get_current_actor), store: OrderStore = Depends(get_store)):
    return [_view(o, actor) for o in OrderLifecycle(store).list_orders(actor)]


@router.get("/{order_id}", name="show_order", response_model=OrderResponse)
def show_order(order_id: str, actor: Actor = Depends(get_current_actor), store: OrderStore = Depends(get_store)):
    return _view(OrderLifecycle(store).get_order(actor, order_id), actor)


# --- Ciclo de vida -----------------------------------------------------
@router.post("/", name="create_order", response_model=OrderResponse, status_code=status_codes.HTTP_201_CREATED)
def create_order(
    data: OrderCreate,
    actor: Actor = Depends(get_current_actor),
    store: OrderStore = Depends(get_store),
):
    return _view(OrderLifecycle(store).create_order(actor, data), actor)


@router.post("/{order_id}/confirm-payment", name="confirm_payment", response_model=OrderResponse)
def confirm_payment(
    order_id: str,
    command: Optional[RevisionedCommand] = None,
    actor: Actor = Depends(get_current_actor),
    store: OrderStore = Depends(get_store),
):
    return _view(OrderLifecycle(store).confirm_payment(actor, order_id, _revision(command)), actor)


@router.post("/{order_id}/depart", name="depart", response_model=OrderResponse)
def depart(
    order_id: str,
    command: Optional[RevisionedCommand] = None,
    actor: Actor = Depends(get_current_actor),
    store: OrderStore = Depends(get_store),
):
    return _view(OrderLifecycle(store).depart(actor, order_id, _revision(command)), actor)


@router.post("/{order_id}/arrive", name="arrive", response_model=OrderResponse)
def arrive(
    order_id: str,
    command: Optional[RevisionedCommand] = None,
    actor: Actor = Depends(get_current_actor),
    store: OrderStore = Depends(get_store),
):
    return _view(OrderLifecycle(store).arrive(actor, order_id, _revision(command)), actor)


@router.post("/{order_id}/finish", name="finish_order", response_model=OrderResponse)
def finish_order(
    order_id: str,
    command: FinishCommand,
    actor: Actor = Depends(get_current_actor),
    store: OrderStore = Depends(get_store),
):
    order = OrderLifecycle(store).finish(actor, order_id, command.photo, command.expected_revision)
    return _view(order, actor)


@router.post("/{order_id}/cancel", name="cancel_order", response_model=OrderResponse)
def cancel_order(
    order_id: str,
    command: Optional[RevisionedCommand] = None,
    actor: Actor = Depends(get_current_actor),
    store: OrderStore = Depends(get_store),
):
    return _view(OrderLifecycle(store).cancel(actor, order_id, _revision(command)), actor)


@router.post("/{order_id}/override", name="override_status", response_model=OrderResponse)
def override_status(
    order_id: str,
    command: OverrideCommand,
    actor: Actor = Depends(get_current_actor),
    store: OrderStore = Depends(get_store),
):
    order = OrderLifecycle(store).override(
        actor, order_id, command.status, command.photo, command.expected_revision
    )
    return _view(order, actor)


# --- Agendamento -------------------------------------------------------
@router.post("/{order_id}/schedule", name="request_schedule", response_model=OrderResponse)
def request_schedule(
    order_id: str,
    command: ScheduleCommand,
    actor: Actor = Depends(get_current_actor),
    store: OrderStore = Depends(get_store),
):
    order = ScheduleNegotiation(store).request_schedule(
        actor, order_id, command.date, command.time, command.expected_revision
    )
    return _view(order, actor)


@router.post("/{order_id}/schedule/accept", name="accept_schedule", response_model=OrderResponse)
def accept_schedule(
    order_id: str,
    command: Optional[RevisionedCommand] = None,
    actor: Actor = Depends(get_current_actor),
    store: OrderStore = Depends(get_store),
):
    return _view(ScheduleNegotiation(store).accept_request(actor, order_id, _revision(command)), actor)


@router.post("/{order_id}/schedule/counter", name="counter_schedule", response_model=OrderResponse)
def counter_schedule(
    order_id: str,
    command: ScheduleCommand,
    actor: Actor = Depends(get_current_actor),
    store: OrderStore = Depends(get_store),
):
    order = ScheduleNegotiation(store).counter_propose(
        actor, order_id, command.date, command.time, command.expected_revision
    )
    return _view(order, actor)


@router.post("/{order_id}/schedule/accept-proposal", name="accept_proposal", response_model=OrderResponse)
def accept_proposal(
    order_id: str,
    command: Optional[RevisionedCommand] = None,
    actor: Actor = Depends(get_current_actor),
    store: OrderStore = Depends(get_store),
):
    return _view(ScheduleNegotiation(store).accept_proposal(actor, order_id, _revision(command)), actor)


@router.post("/{order_id}/schedule/reject-proposal", name="reject_proposal", response_model=OrderResponse)
def reject_proposal(
    order_id: str,
    command: Optional[RevisionedCommand] = None,
    actor: Actor = Depends(get_current_actor),
    store: OrderStore = Depends(get_store),
):
    return _view(ScheduleNegotiation(store).reject_proposal(actor, order_id, _revision(command)), actor)


# --- Avaliação ---------------------------------------------------------
@router.post("/{order_id}/review", name="review_order", response_model=OrderResponse)
def review_order(
    order_id: str,
    command: ReviewCommand,
    actor: Actor = Depends(get_current_actor),
    store: OrderStore = Depends(get_store),
):
    order = OrderReview(store).submit_review(
        actor, order_id, command.rating, command.review, command.photo, command.expected_revision
    )
    return _view(order, actor)
