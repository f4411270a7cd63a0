"""
Erros de domínio dos pedidos de serviço.

Cada classe carrega o status HTTP usado pelo roteador, assim o motor de
ciclo de vida não depende do FastAPI.
"""


class OrderError(Exception):
    """Base de todos os erros levantados pelos comandos de pedido."""

    http_status = 400

    def __init__(self, message: str, order_id: str = None):
        super().__init__(message)
        self.message = message
        self.order_id = order_id


class InvalidTransition(OrderError):
    """Comando não permitido a partir do estado atual."""

    http_status = 409


class MissingPrecondition(OrderError):
    """Falta um dado obrigatório (ex.: foto ao finalizar, nota da avaliação)."""

    http_status = 422


class AlreadyReviewed(OrderError):
    http_status = 409


class NotFound(OrderError):
    http_status = 404


class NotOrderParty(OrderError):
    """O ator não é a parte do pedido que o comando exige."""

    http_status = 403


class StaleRevision(OrderError):
    """A revisão lida pelo cliente não é mais a atual; recarregue e tente de novo."""

    http_status = 409

    def __init__(self, message: str, order_id: str = None, current_revision: int = None):
        super().__init__(message, order_id)
        self.current_revision = current_revision


class StoreUnavailable(OrderError):
    """Persistência inacessível. Recuperável: tente novamente no próximo ciclo."""

    http_status = 503
