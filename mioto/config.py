import os
import sys
from pathlib import Path

from dotenv import load_dotenv

# --- LÓGICA DE CAMINHO ---
# (Suporta PyInstaller: quando empacotado, os arquivos ficam em sys._MEIPASS)
if getattr(sys, 'frozen', False):
    BASE_DIR = Path(sys._MEIPASS)
else:
    BASE_DIR = Path(".")

load_dotenv(dotenv_path=BASE_DIR / ".env")


def _env_bool(name: str, default: str) -> bool:
    return os.getenv(name, default).strip().lower() in {"1", "true", "yes", "on"}


# Banco "remoto" (stand-in do backend hospedado)
DATABASE_URL = os.getenv("DATABASE_URL", f"sqlite:///{BASE_DIR / 'mioto.db'}")

# Armazenamento local de fallback. Vazio = somente em memória.
LOCAL_ORDERS_FILE = os.getenv("LOCAL_ORDERS_FILE", str(BASE_DIR / "mioto_orders.json")) or None
USE_LOCAL_FALLBACK = _env_bool("USE_LOCAL_FALLBACK", "true")

# Polling dos pedidos (cada ator consulta a loja em intervalo fixo)
ORDER_POLL_INTERVAL = float(os.getenv("ORDER_POLL_INTERVAL", "5"))
ORDER_POLL_MAX_FAILURES = int(os.getenv("ORDER_POLL_MAX_FAILURES", "3"))

LOG_LEVEL = os.getenv("LOG_LEVEL", "INFO").upper()

HOST = os.getenv("HOST", "127.0.0.1")
PORT = int(os.getenv("PORT", "8000"))
