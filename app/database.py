from sqlalchemy import create_engine
from sqlalchemy.orm import declarative_base, sessionmaker
from .config import settings
from .services.datastore import DataStore

# Create engine
engine = create_engine(
    settings.DATABASE_URL,
    connect_args={"check_same_thread": False} if settings.DATABASE_URL.startswith("sqlite") else {},
)

# Create session factory
SessionLocal = sessionmaker(autocommit=False, autoflush=False, bind=engine)

# Create base class for models
Base = declarative_base()

def get_db():
    """Dependency to get database session"""
    db = SessionLocal()
    try:
        yield db
    finally:
        db.close()

def get_store():
    """Dependency to get the store adapter for upload target tables"""
    return DataStore(engine)

def create_tables(bind=None):
    """Create all database tables"""
    from . import models  # noqa: F401  (registers models on Base.metadata)
    Base.metadata.create_all(bind=bind or engine)

def dispose_engine():
    """Release pooled connections at shutdown"""
    engine.dispose()
