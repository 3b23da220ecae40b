from sqlalchemy import Column, Integer, Text, String, TIMESTAMP
from sqlalchemy.sql import func
from portal.models.base import Base


class User(Base):
    __tablename__ = "users"

    id = Column(Integer, primary_key=True, autoincrement=True)
    full_name = Column("fullName", Text)
    phone_number = Column("phoneNumber", Text)
    email = Column(String(255), unique=True)
    login_time = Column("loginTime", TIMESTAMP(timezone=True), server_default=func.now())
