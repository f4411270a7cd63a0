import logging
from functools import lru_cache

from mioto.config import LOCAL_ORDERS_FILE, USE_LOCAL_FALLBACK
from mioto.database import Base, SessionLocal, engine
from mioto.store.base import OrderStore
from mioto.store.fallback_store import FallbackOrderStore
from mioto.store.local_store import LocalOrderStore
from mioto.store.sql_store import SqlOrderStore

logger = logging.getLogger(__name__)


def build_store() -> OrderStore:
    """Monta a loja configurada: banco (remoto) com ou sem fallback local."""
    import mioto.database_models  # noqa: F401  registra as tabelas no Base

    Base.metadata.create_all(bind=engine)
    remote = SqlOrderStore(SessionLocal)
    if not USE_LOCAL_FALLBACK:
        logger.info("Loja de pedidos: somente banco")
        return remote
    logger.info(f"Loja de pedidos: banco com fallback local ({LOCAL_ORDERS_FILE or 'memória'})")
    return FallbackOrderStore(remote, LocalOrderStore(LOCAL_ORDERS_FILE))


@lru_cache(maxsize=None)
def get_store() -> OrderStore:
    """Dependência do FastAPI: uma loja por processo."""
    return build_store()
