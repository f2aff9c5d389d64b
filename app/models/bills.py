# app/models/bills.py

from sqlalchemy import Column, Integer, String, DateTime

from app.database import Base


class BillLog(Base):
    __tablename__ = "bills"

    id = Column(Integer, primary_key=True, index=True)
    bill_id = Column(String, nullable=False, index=True)
    mobile = Column(String, nullable=False)
    timestamp = Column(DateTime(timezone=True), nullable=False)
