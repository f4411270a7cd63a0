import re
from typing import Optional

from mioto.models.order import Actor, ActorRole, ServiceOrder


def whatsapp_link(phone: Optional[str]) -> Optional[str]:
    """Link do WhatsApp para um telefone brasileiro (DDI 55)."""
    if not phone:
        return None
    digits = re.sub(r"\D", "", phone)
    if not digits:
        return None
    return f"https://wa.me/55{digits}"


def counterparty_link(order: ServiceOrder, actor: Actor) -> Optional[str]:
    if actor.role is ActorRole.MOTORISTA:
        return whatsapp_link(order.workshop_phone)
    return whatsapp_link(order.driver_phone)
