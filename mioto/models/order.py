from datetime import datetime, timezone
from enum import Enum
from typing import Optional
from uuid import uuid4

from pydantic import BaseModel, ConfigDict, Field, field_validator
from pydantic.alias_generators import to_camel


# ----------------------------------------------------
# 1. ENUMERADORES
# Os valores são os mesmos gravados no banco e trafegados no JSON.
# ----------------------------------------------------
class OrderStatus(str, Enum):
    """Status do pedido. Caminho normal: criado → pago → a_caminho → chegou → concluido."""
    CRIADO = "criado"
    PAGO = "pago"
    A_CAMINHO = "a_caminho"
    CHEGOU = "chegou"
    CONCLUIDO = "concluido"
    CANCELADO = "cancelado"

    @property
    def is_terminal(self) -> bool:
        return self in (OrderStatus.CONCLUIDO, OrderStatus.CANCELADO)


class PaymentMethod(str, Enum):
    CREDIT_CARD = "credit_card"
    PAY_ON_SITE = "pay_on_site"


class ScheduleStatus(str, Enum):
    """
    Sub-estado do agendamento.
    imediato: sem agendamento (atendimento o quanto antes).
    pendente: motorista pediu data/hora, aguardando a oficina.
    negociacao: oficina sugeriu outra data/hora, aguardando o motorista.
    confirmado: as duas partes concordam com scheduleDate/scheduleTime.
    """
    IMEDIATO = "imediato"
    PENDENTE = "pendente"
    CONFIRMADO = "confirmado"
    NEGOCIACAO = "negociacao"

    @property
    def is_unresolved(self) -> bool:
        return self in (ScheduleStatus.PENDENTE, ScheduleStatus.NEGOCIACAO)


class ActorRole(str, Enum):
    MOTORISTA = "motorista"
    OFICINA = "oficina"


class CamelModel(BaseModel):
    # JSON em camelCase (driverId, scheduleStatus...), atributos em snake_case
    model_config = ConfigDict(alias_generator=to_camel, populate_by_name=True)


class Actor(CamelModel):
    """Quem está emitindo o comando (fornecido pelo serviço de identidade externo)."""
    id: str
    role: ActorRole


# ----------------------------------------------------
# 2. PEDIDO DE SERVIÇO (entidade central)
# ----------------------------------------------------
class ServiceOrder(CamelModel):
    """
    Um pedido de serviço entre motorista e oficina.
    """
    id: str = Field(default_factory=lambda: str(uuid4()), description="Identificador único do pedido.")

    # Partes (imutáveis após a criação)
    driver_id: str
    driver_name: str
    driver_phone: Optional[str] = None
    workshop_id: str
    workshop_name: str
    workshop_phone: Optional[str] = None

    # Detalhes do serviço
    service_name: str = Field(..., min_length=1)
    service_description: Optional[str] = None
    price: Optional[float] = Field(None, ge=0.0, description="Ausente = orçamento no local.")
    payment_method: PaymentMethod = PaymentMethod.PAY_ON_SITE
    vehicle: str
    vehicle_plate: Optional[str] = None

    status: OrderStatus = OrderStatus.CRIADO

    # Agendamento
    schedule_date: Optional[str] = Field(None, description="YYYY-MM-DD")
    schedule_time: Optional[str] = Field(None, description="HH:MM")
    schedule_status: ScheduleStatus = ScheduleStatus.IMEDIATO
    workshop_proposed_date: Optional[str] = None
    workshop_proposed_time: Optional[str] = None

    # Evidência de conclusão
    completion_photo_workshop: Optional[str] = None
    completion_photo_driver: Optional[str] = None

    # Avaliação
    rating: Optional[int] = Field(None, ge=1, le=5)
    review: Optional[str] = None

    date: str = Field(..., description="Data de criação já formatada (dd/mm/aaaa).")
    revision: int = 1
    created_at: datetime = Field(default_factory=lambda: datetime.now(timezone.utc))

    @field_validator("created_at")
    @classmethod
    def created_at_in_utc(cls, v: datetime) -> datetime:
        # SQLite devolve datetimes sem fuso; tudo é gravado em UTC
        if v.tzinfo is None:
            return v.replace(tzinfo=timezone.utc)
        return v.astimezone(timezone.utc)

    @property
    def is_terminal(self) -> bool:
        return self.status.is_terminal

    @property
    def has_review(self) -> bool:
        return self.rating is not None


# Campos que podem ser alterados depois da criação (via patch junto do status)
MUTABLE_FIELDS = frozenset({
    "schedule_date",
    "schedule_time",
    "schedule_status",
    "workshop_proposed_date",
    "workshop_proposed_time",
    "completion_photo_workshop",
    "completion_photo_driver",
    "rating",
    "review",
})


# ----------------------------------------------------
# 3. PAYLOADS DOS COMANDOS
# ----------------------------------------------------
class OrderCreate(CamelModel):
    """Solicitação de serviço, já com o serviço escolhido resolvido em nome/preço/descrição."""
    workshop_id: str
    workshop_name: str
    workshop_phone: Optional[str] = None

    # Ignorados no auto-pedido da oficina (a própria oficina é a parte "motorista")
    driver_id: Optional[str] = None
    driver_name: Optional[str] = None
    driver_phone: Optional[str] = None

    service_name: str
    service_description: Optional[str] = None
    price: Optional[float] = Field(None, ge=0.0)
    payment_method: PaymentMethod = PaymentMethod.PAY_ON_SITE

    vehicle: Optional[str] = None
    vehicle_plate: Optional[str] = None

    schedule_date: Optional[str] = None
    schedule_time: Optional[str] = None


class RevisionedCommand(CamelModel):
    expected_revision: Optional[int] = Field(None, description="Revisão lida pelo cliente.")


class FinishCommand(RevisionedCommand):
    photo: Optional[str] = None


class OverrideCommand(RevisionedCommand):
    status: OrderStatus
    photo: Optional[str] = None


class ScheduleCommand(RevisionedCommand):
    date: Optional[str] = None
    time: Optional[str] = None


class ReviewCommand(RevisionedCommand):
    rating: Optional[int] = None
    review: Optional[str] = None
    photo: Optional[str] = None


class OrderResponse(ServiceOrder):
    """Pedido visto por um ator: inclui o link de WhatsApp da contraparte."""
    contact_link: Optional[str] = None
