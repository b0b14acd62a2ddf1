from sqlalchemy import JSON, Column, DateTime, Integer, String, Text, func

from app.database import Base


class ErrorLog(Base):
    __tablename__ = "error_logs"

    id = Column(Integer, primary_key=True, index=True)
    message = Column(Text)
    stack = Column(Text, nullable=True)
    endpoint = Column(String, index=True)
    method = Column(String)
    timestamp = Column(DateTime, server_default=func.now(), index=True)
    request_data = Column(JSON, nullable=True)
    additional = Column(JSON, nullable=True)
