from datetime import datetime, timezone
from sqlalchemy import Column, Integer, Text, String, TIMESTAMP, JSON, Index
from sqlalchemy.dialects.postgresql import JSONB
from sqlalchemy.sql import func
from portal.models.base import Base
from portal.models.enums import WorkflowStatus, PaymentStatus


def _utcnow() -> datetime:
    return datetime.now(timezone.utc)


class Application(Base):
    __tablename__ = "applications"

    id = Column(Integer, primary_key=True, autoincrement=True)
    user_email = Column("userEmail", String(255))
    type = Column(Text)
    data = Column(JSON().with_variant(JSONB(), "postgresql"))
    # Workflow status. The column name predates the settlement status below.
    status = Column("paymentStatus", Text, default=WorkflowStatus.PENDING.value)
    submission_time = Column(
        "submissionTime",
        TIMESTAMP(timezone=True),
        default=_utcnow,
        server_default=func.now(),
    )
    bill_amount = Column("billAmount", Text)
    bill_number = Column("billNumber", Text)
    bill_on = Column("billOn", Text)
    bill_attachment = Column("billAttachment", Text)
    payment_status = Column(
        "payment_status",
        Text,
        default=PaymentStatus.UNPAID.value,
        server_default=PaymentStatus.UNPAID.value,
    )

    __table_args__ = (
        Index("idx_user_email", "userEmail"),
        Index("idx_submission_time", "submissionTime"),
    )
