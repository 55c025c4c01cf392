import logging
from contextlib import contextmanager

from sqlalchemy import create_engine
from sqlalchemy.exc import OperationalError
from sqlalchemy.orm import Session, sessionmaker, declarative_base
from sqlalchemy.orm.exc import StaleDataError

from pastelaria.config import get_settings
from pastelaria.errors import TransientStoreError

logger = logging.getLogger(__name__)

SQLALCHEMY_DATABASE_URL = get_settings().database_url

# connect_args={"check_same_thread": False} é necessário só para SQLite
connect_args = {"check_same_thread": False} if SQLALCHEMY_DATABASE_URL.startswith("sqlite") else {}

engine = create_engine(SQLALCHEMY_DATABASE_URL, connect_args=connect_args)

SessionLocal = sessionmaker(autocommit=False, autoflush=False, bind=engine)

# Base que todos os modelos devem usar
Base = declarative_base()


# Dependência para obter a sessão nos endpoints
def get_db():
    db = SessionLocal()
    try:
        yield db
    finally:
        db.close()


@contextmanager
def transaction(db: Session):
    """
    Executa um bloco como uma única transação.

    Commit no final; rollback em qualquer exceção. Conflitos de versão e
    falhas de conexão viram TransientStoreError para que o chamador repita
    a sequência inteira de leitura-cálculo-escrita.
    """
    try:
        yield db
        db.commit()
    except (StaleDataError, OperationalError) as e:
        db.rollback()
        logger.warning("Transação abortada por conflito/timeout: %s", e)
        raise TransientStoreError("Conflito ao gravar no banco. Tente novamente.") from e
    except Exception:
        db.rollback()
        raise
