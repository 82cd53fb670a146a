from sqlalchemy import Column, Integer, BigInteger, String, DateTime
from datetime import datetime
from .db import Base

class RecentCustomer(Base):
    __tablename__ = "recent_customers"
    id = Column(Integer, primary_key=True)
    operator_id = Column(BigInteger, index=True, nullable=False)   # Telegram user id
    name = Column(String, nullable=False)
    used_at = Column(DateTime, default=datetime.utcnow, index=True)
