from sqlalchemy import Column, Integer, String, DateTime, Enum as SQLEnum, text
from sqlalchemy.orm import relationship
from datetime import datetime
from app.db.base import Base
import enum


class MemberStatus(str, enum.Enum):
    """Member status enum."""
    ACTIVE = "active"
    INACTIVE = "inactive"
    DECEASED = "deceased"


class Member(Base):
    """Association member. Owns ledger entries; deleting a member removes them."""
    __tablename__ = "members"

    id = Column(Integer, primary_key=True, autoincrement=True)
    first_name = Column(String(100), nullable=False)
    last_name = Column(String(100), nullable=False, index=True)
    status = Column(SQLEnum(MemberStatus, native_enum=False, values_callable=lambda obj: [e.value for e in obj]), default=MemberStatus.ACTIVE, nullable=False)
    created_at = Column(DateTime, nullable=False, default=datetime.utcnow, server_default=text("CURRENT_TIMESTAMP"))

    # Relationships
    ledger_entries = relationship("LedgerEntry", back_populates="member", cascade="all, delete-orphan")

    @property
    def full_name(self) -> str:
        return f"{self.last_name}, {self.first_name}"
