from sqlalchemy import create_engine
from sqlalchemy.orm import declarative_base, sessionmaker

from mioto.config import DATABASE_URL


def build_engine(url: str = DATABASE_URL, **kwargs):
    """Cria a engine; 'check_same_thread' é necessário apenas para SQLite."""
    if url.startswith("sqlite"):
        kwargs.setdefault("connect_args", {"check_same_thread": False})
    return create_engine(url, **kwargs)


# 1. Engine de Conexão
engine = build_engine()

# 2. Fábrica de Sessões
SessionLocal = sessionmaker(autocommit=False, autoflush=False, bind=engine)

# 3. Base Declarativa
# Nossas classes de modelo herdarão desta
Base = declarative_base()
