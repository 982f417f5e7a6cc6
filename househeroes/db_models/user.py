import uuid

from sqlalchemy import Column, String, Uuid, Enum as SQLAlchemyEnum, ForeignKey

from househeroes.db_models.base import Base, UTCDateTime, utc_now
from househeroes.db_models.enums import UserRole


class User(Base):
    __tablename__ = "users"

    id = Column(Uuid, primary_key=True, index=True, default=uuid.uuid4)
    external_id = Column(String(256), nullable=False, unique=True, index=True)
    email = Column(String(256), nullable=False)
    first_name = Column(String(100), nullable=False, default="")
    last_name = Column(String(100), nullable=False, default="")
    role = Column(
        SQLAlchemyEnum(UserRole, name="user_role", values_callable=lambda roles: [r.value for r in roles]),
        nullable=False,
        default=UserRole.CHILD,
    )
    # NULL until the user creates or joins a family
    family_id = Column(Uuid, ForeignKey("families.id", ondelete="CASCADE"), nullable=True, index=True)
    created_at = Column(UTCDateTime, nullable=False, default=utc_now)
    last_login_at = Column(UTCDateTime, nullable=True)
