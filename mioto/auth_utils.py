import logging

from fastapi import HTTPException, Request
from starlette import status

from mioto.models.order import Actor, ActorRole

logger = logging.getLogger(__name__)

ACTOR_ID_HEADER = "X-Actor-Id"
ACTOR_ROLE_HEADER = "X-Actor-Role"


def get_current_actor(request: Request) -> Actor:
    """
    Identifica o ator da requisição.
    A autenticação é feita pelo serviço de identidade externo, que repassa
    o id e o tipo do usuário (motorista/oficina) nos cabeçalhos.
    """
    actor_id = (request.headers.get(ACTOR_ID_HEADER) or "").strip()
    role = (request.headers.get(ACTOR_ROLE_HEADER) or "").strip().lower()
    if not actor_id or not role:
        raise HTTPException(
            status_code=status.HTTP_401_UNAUTHORIZED,
            detail="Ator não identificado.",
        )
    try:
        return Actor(id=actor_id, role=ActorRole(role))
    except ValueError:
        logger.warning(f"Tipo de ator inválido recebido: {role!r}")
        raise HTTPException(
            status_code=status.HTTP_401_UNAUTHORIZED,
            detail=f"Tipo de ator inválido: {role}",
        )
