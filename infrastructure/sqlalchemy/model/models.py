from sqlalchemy import Column, String, Text
from infrastructure.sqlalchemy.session.db import Base


class KeyValueModel(Base):
    __tablename__ = "kv_entries"

    namespace = Column(String, primary_key=True)
    key = Column(String, primary_key=True)
    value = Column(Text, nullable=False)
