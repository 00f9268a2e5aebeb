"""OBD alert raised from vehicle telemetry (DTC codes, threshold breaches)."""

from datetime import datetime, timezone

from sqlalchemy import DateTime, String, Text
from sqlalchemy.types import JSON
from sqlalchemy.orm import Mapped, mapped_column

from backoffice.db.base import Base


class ObdAlert(Base):
    __tablename__ = "obd_alerts"

    id: Mapped[int] = mapped_column(primary_key=True, autoincrement=True)
    user_id: Mapped[str] = mapped_column(String(64), nullable=False, index=True)
    vehicle_id: Mapped[str] = mapped_column(String(64), nullable=False, index=True)
    code: Mapped[str | None] = mapped_column(String(16), nullable=True)  # e.g. P0301
    severity: Mapped[str] = mapped_column(String(16), nullable=False, default="medium")  # low | medium | high | critical
    status: Mapped[str] = mapped_column(String(16), nullable=False, default="active", index=True)  # active | acknowledged | resolved
    message: Mapped[str | None] = mapped_column(Text, nullable=True)
    data: Mapped[dict | None] = mapped_column(JSON, nullable=True)
    timestamp: Mapped[datetime] = mapped_column(
        DateTime(timezone=True), default=lambda: datetime.now(timezone.utc), index=True
    )
