# clientdb/models/client.py
from datetime import datetime, timezone
from sqlalchemy import Column, Integer, String, DateTime
from clientdb.database import Base


def utcnow() -> datetime:
    return datetime.now(timezone.utc)


class Client(Base):
    __tablename__ = "clients"

    id = Column(Integer, primary_key=True, autoincrement=True)
    first_name = Column(String(255), nullable=False)
    last_name = Column(String(255), nullable=False)
    email = Column(String(255), nullable=False, unique=True, index=True)
    phone = Column(String(255))
    company = Column(String(255))
    address = Column(String(255))
    city = Column(String(255))
    postal_code = Column(String(255))
    country = Column(String(255))
    created_at = Column(DateTime(timezone=True), nullable=False, default=utcnow, index=True)
    updated_at = Column(DateTime(timezone=True), nullable=False, default=utcnow, onupdate=utcnow)

    def __repr__(self) -> str:
        return f"<Client id={self.id} email={self.email!r}>"
