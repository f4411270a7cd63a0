import logging

import uvicorn
from fastapi import Depends, FastAPI, Request
from fastapi.responses import JSONResponse
from starlette import status as status_codes
from starlette.responses import RedirectResponse

from mioto.config import HOST, LOG_LEVEL, PORT
from mioto.errors import OrderError
# --- Importação dos Roteadores ---
from mioto.routers.orders import router as orders_router
from mioto.store.base import OrderStore
from mioto.store.factory import get_store
# ---------------------------------

logging.basicConfig(
    level=LOG_LEVEL,
    format="%(asctime)s - %(name)s - %(levelname)s - %(message)s",
)
logger = logging.getLogger(__name__)


# Cria a instância principal do FastAPI
app = FastAPI(title="MIOTO - Pedidos de Serviço")

app.include_router(orders_router)


@app.exception_handler(OrderError)
async def order_error_handler(request: Request, exc: OrderError):
    """Erros de domínio viram respostas JSON com o status da própria exceção."""
    if exc.http_status >= 500:
        logger.error(f"{request.method} {request.url.path}: {exc.message}")
    else:
        logger.info(f"{request.method} {request.url.path} rejeitado: {type(exc).__name__}: {exc.message}")
    content = {"detail": exc.message, "error": type(exc).__name__}
    if exc.order_id:
        content["orderId"] = exc.order_id
    current_revision = getattr(exc, "current_revision", None)
    if current_revision is not None:
        content["currentRevision"] = current_revision
    return JSONResponse(status_code=exc.http_status, content=content)


@app.get("/", include_in_schema=False)
def redirect_to_docs():
    return RedirectResponse(url="/docs", status_code=status_codes.HTTP_302_FOUND)


@app.get("/status")
def status(request: Request, store: OrderStore = Depends(get_store)):
    online, message = store.check_connection()
    return {
        "status": "ok",
        "store": "online" if online else "offline",
        "message": message,
        "host": request.client.host if request.client else None,
        "path": request.url.path,
    }


if __name__ == "__main__":
    uvicorn.run(app, host=HOST, port=PORT)
