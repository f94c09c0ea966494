from datetime import datetime

from sqlalchemy import Integer, Text, TIMESTAMP, Enum as SAEnum, UniqueConstraint, func
from sqlalchemy.orm import Mapped, mapped_column

from postgen.core.database import Base
from postgen.domain.enums import IdentityKind


class GenerationUsage(Base):
    __tablename__ = "generation_usage"
    __table_args__ = (
        UniqueConstraint("identity_kind", "identity", name="uq_generation_usage_identity"),
    )

    id: Mapped[int] = mapped_column(Integer, primary_key=True, autoincrement=True)
    identity_kind: Mapped[IdentityKind] = mapped_column(
        SAEnum(IdentityKind, name="identity_kind", native_enum=False, length=16),
        nullable=False,
    )
    identity: Mapped[str] = mapped_column(Text, nullable=False)
    generation_count: Mapped[int] = mapped_column(Integer, nullable=False, default=0, server_default="0")
    created_at: Mapped[datetime] = mapped_column(
        TIMESTAMP(timezone=True),
        server_default=func.now(),
        nullable=False,
    )
    updated_at: Mapped[datetime] = mapped_column(
        TIMESTAMP(timezone=True),
        server_default=func.now(),
        onupdate=func.now(),
        nullable=False,
    )
