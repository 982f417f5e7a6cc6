import uuid

from sqlalchemy import Column, String, Uuid

from househeroes.db_models.base import Base, UTCDateTime, utc_now


class Family(Base):
    __tablename__ = "families"

    id = Column(Uuid, primary_key=True, index=True, default=uuid.uuid4)
    name = Column(String(200), nullable=False)
    created_at = Column(UTCDateTime, nullable=False, default=utc_now)
