import logging
from enum import Enum
from typing import Optional

from sqlalchemy import text as sql_text
from sqlalchemy.exc import SQLAlchemyError
from sqlalchemy.orm import sessionmaker

from mioto.database_models import ServiceOrderRow
from mioto.errors import NotFound, StaleRevision, StoreUnavailable
from mioto.models.order import ActorRole, OrderStatus, ServiceOrder
from mioto.store.base import OrderStore, apply_review, apply_status_patch, check_revision

logger = logging.getLogger(__name__)


def _to_order(row: ServiceOrderRow) -> ServiceOrder:
    data = {column.name: getattr(row, column.name) for column in ServiceOrderRow.__table__.columns}
    return ServiceOrder.model_validate(data)


def _to_values(order: ServiceOrder) -> dict:
    return {
        key: (value.value if isinstance(value, Enum) else value)
        for key, value in order.model_dump().items()
    }


class SqlOrderStore(OrderStore):
    """Loja "remota" sobre SQLAlchemy. Erros do driver viram StoreUnavailable."""

    def __init__(self, session_factory: sessionmaker):
        self.session_factory = session_factory

    def list_orders(self, actor_id: str, role: ActorRole) -> list[ServiceOrder]:
        db = self.session_factory()
        try:
            query = db.query(ServiceOrderRow)
            if ActorRole(role) is ActorRole.MOTORISTA:
                query = query.filter(ServiceOrderRow.driver_id == actor_id)
            else:
                query = query.filter(ServiceOrderRow.workshop_id == actor_id)
            rows = query.order_by(ServiceOrderRow.created_at.desc()).all()
            return [_to_order(row) for row in rows]
        except SQLAlchemyError as e:
            raise StoreUnavailable(f"Erro ao listar pedidos: {e}") from e
        finally:
            db.close()

    def get_order(self, order_id: str) -> ServiceOrder:
        db = self.session_factory()
        try:
            row = db.get(ServiceOrderRow, order_id)
            if row is None:
                raise NotFound(f"Pedido {order_id} não encontrado.", order_id=order_id)
            return _to_order(row)
        except SQLAlchemyError as e:
            raise StoreUnavailable(f"Erro ao buscar pedido: {e}", order_id=order_id) from e
        finally:
            db.close()

    def create_order(self, order: ServiceOrder) -> str:
        db = self.session_factory()
        try:
            db.add(ServiceOrderRow(**_to_values(order)))
            db.commit()
            return order.id
        except SQLAlchemyError as e:
            db.rollback()
            raise StoreUnavailable(f"Erro ao criar pedido: {e}", order_id=order.id) from e
        finally:
            db.close()

    def update_order_status(
        self,
        order_id: str,
        new_status: OrderStatus,
        patch: Optional[dict] = None,
        expected_revision: Optional[int] = None,
    ) -> ServiceOrder:
        return self._write(order_id, expected_revision, lambda o: apply_status_patch(o, new_status, patch))

    def add_review(
        self,
        order_id: str,
        rating: int,
        text: Optional[str] = None,
        photo: Optional[str] = None,
        expected_revision: Optional[int] = None,
    ) -> ServiceOrder:
        return self._write(order_id, expected_revision, lambda o: apply_review(o, rating, text, photo))

    def _write(self, order_id: str, expected_revision: Optional[int], change) -> ServiceOrder:
        db = self.session_factory()
        try:
            row = db.get(ServiceOrderRow, order_id)
            if row is None:
                raise NotFound(f"Pedido {order_id} não encontrado.", order_id=order_id)
            current = _to_order(row)
            check_revision(current, expected_revision)
            updated = change(current)

            values = _to_values(updated)
            values.pop("id")
            # Compare-and-swap: só grava se ninguém escreveu depois da leitura
            matched = (
                db.query(ServiceOrderRow)
                .filter(ServiceOrderRow.id == order_id, ServiceOrderRow.revision == current.revision)
                .update(values, synchronize_session=False)
            )
            if matched == 0:
                db.rollback()
                raise StaleRevision(
                    f"Pedido {order_id} foi alterado por outra parte.",
                    order_id=order_id,
                )
            db.commit()
            return updated
        except SQLAlchemyError as e:
            db.rollback()
            raise StoreUnavailable(f"Erro ao atualizar pedido: {e}", order_id=order_id) from e
        finally:
            db.close()

    def check_connection(self) -> tuple[bool, Optional[str]]:
        db = self.session_factory()
        try:
            db.execute(sql_text("SELECT 1"))
            return True, None
        except SQLAlchemyError as e:
            logger.warning(f"Banco de pedidos indisponível: {e}")
            return False, str(e)
        finally:
            db.close()
