from sqlalchemy import create_engine
from sqlalchemy.orm import sessionmaker

from .config import DATABASE_URL, STORE_BACKEND
from .models import Base
from .sql_store import SqlDocumentStore
from .store import InMemoryDocumentStore

engine = create_engine(DATABASE_URL, pool_pre_ping=True)
SessionLocal = sessionmaker(bind=engine, autoflush=False, expire_on_commit=False)

# process-local store for STORE_BACKEND=memory
_memory_store = InMemoryDocumentStore()


def init_db():
    if STORE_BACKEND == "sql":
        Base.metadata.create_all(bind=engine)


def get_store():
    if STORE_BACKEND == "memory":
        yield _memory_store
        return
    db = SessionLocal()
    try:
        yield SqlDocumentStore(db)
    finally:
        db.close()
