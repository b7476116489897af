from sqlalchemy import create_engine, Column, Integer, String, DateTime
from sqlalchemy.orm import declarative_base, sessionmaker
from datetime import datetime
from config import settings

connect_args = {"check_same_thread": False} if settings.DATABASE_URL.startswith("sqlite") else {}

engine = create_engine(settings.DATABASE_URL, connect_args=connect_args)
SessionLocal = sessionmaker(autocommit=False, autoflush=False, bind=engine)
Base = declarative_base()

# Request log: one row per authorization decision.
# Nothing reads these rows back to decide validity.
class ValidationAttempt(Base):
    __tablename__ = "validation_attempts"

    id = Column(Integer, primary_key=True, index=True)
    action = Column(String(20), nullable=False)  # download, metadata, check
    email = Column(String(255))
    product_id = Column(String(100), index=True)
    platform = Column(String(255))
    license_key = Column(String(255))  # masked

    # Attempt Result
    result = Column(String(20), nullable=False)  # allowed, denied, license_required, filtered, unfiltered

    attempted_at = Column(DateTime, default=datetime.utcnow, index=True)

# Create tables
Base.metadata.create_all(bind=engine)

def get_db():
    db = SessionLocal()
    try:
        yield db
    finally:
        db.close()
