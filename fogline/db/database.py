"""Generate database session"""

from sqlalchemy import create_engine
from sqlalchemy.orm import sessionmaker

from fogline.core.config import settings
from fogline.db.schema import Base

engine = create_engine(settings.DATABASE_URL)
SessionLocal = sessionmaker(bind=engine)


def init_db() -> None:
    """Ensure all tables are created"""
    Base.metadata.create_all(bind=engine)

