from sqlalchemy import Column, DateTime, Float, Integer, String, TEXT

from .database import Base  # Importa o 'Base' compartilhado


# Tabela de Pedidos de Serviço
class ServiceOrderRow(Base):
    __tablename__ = "service_orders"
    id = Column(String(36), primary_key=True)

    # Partes
    driver_id = Column(String(64), nullable=False, index=True)
    driver_name = Column(String(255), nullable=False)
    driver_phone = Column(String(50))
    workshop_id = Column(String(64), nullable=False, index=True)
    workshop_name = Column(String(255), nullable=False)
    workshop_phone = Column(String(50))

    # Serviço
    service_name = Column(String(255), nullable=False)
    service_description = Column(TEXT)
    price = Column(Float)  # NULL = orçamento no local
    payment_method = Column(String(20), nullable=False)
    vehicle = Column(String(255), nullable=False)
    vehicle_plate = Column(String(20))

    status = Column(String(20), nullable=False, index=True)

    # Agendamento
    schedule_date = Column(String(10))
    schedule_time = Column(String(5))
    schedule_status = Column(String(20), nullable=False, default="imediato")
    workshop_proposed_date = Column(String(10))
    workshop_proposed_time = Column(String(5))

    # Fotos podem ser URLs ou data URIs (base64)
    completion_photo_workshop = Column(TEXT)
    completion_photo_driver = Column(TEXT)

    rating = Column(Integer)
    review = Column(TEXT)

    date = Column(String(20), nullable=False)
    revision = Column(Integer, nullable=False, default=1)
    created_at = Column(DateTime(timezone=True), nullable=False, index=True)
