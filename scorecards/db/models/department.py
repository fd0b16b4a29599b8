from sqlalchemy import Boolean, Column, Integer, String
from sqlalchemy.orm import relationship

from scorecards.db.base import Base


class Department(Base):
    __tablename__ = "departments"

    id = Column(Integer, primary_key=True, index=True)
    name = Column(String(255), nullable=False)
    archived = Column(Boolean, nullable=False, default=False)

    users = relationship("User", back_populates="department")
