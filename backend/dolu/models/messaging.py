"""
Contact Inbox, Message Template and Message Log Database Models
"""
from sqlalchemy import (
    Column, String, DateTime, Boolean, Text, Numeric, JSON, ForeignKey,
    Enum as SQLEnum, Index,
)
from datetime import datetime
import enum

from dolu.db.database import Base, new_uuid
from dolu.models.booking import enum_values


class ContactMessageStatus(str, enum.Enum):
    NEW = "new"
    IN_PROGRESS = "in_progress"
    RESOLVED = "resolved"
    SPAM = "spam"


class MessageChannel(str, enum.Enum):
    SMS = "sms"
    WHATSAPP = "whatsapp"
    EMAIL = "email"


class MessageLogStatus(str, enum.Enum):
    PENDING = "pending"
    SENT = "sent"
    FAILED = "failed"


class MessageTrigger(str, enum.Enum):
    ADMIN = "admin"
    SYSTEM = "system"
    AUTO = "auto"


class ContactMessage(Base):
    """Inquiry submitted from the public contact form."""

    __tablename__ = "contact_messages"

    id = Column(String(36), primary_key=True, default=new_uuid)
    name = Column(String(200), nullable=False)
    email = Column(String(200), nullable=True, index=True)
    phone = Column(String(30), nullable=True)
    whatsapp = Column(String(30), nullable=True)
    subject = Column(String(200), nullable=True)
    message = Column(Text, nullable=False)
    status = Column(
        SQLEnum(ContactMessageStatus, name="contact_status", native_enum=False, length=20,
                values_callable=enum_values, create_constraint=True),
        nullable=False,
        default=ContactMessageStatus.NEW,
    )
    admin_notes = Column(Text, nullable=True)

    created_at = Column(DateTime, default=datetime.utcnow, index=True)
    updated_at = Column(DateTime, default=datetime.utcnow, onupdate=datetime.utcnow)

    __table_args__ = (
        Index("ix_contact_messages_status_created_at", "status", "created_at"),
    )


class MessageTemplate(Base):
    """SMS / WhatsApp / email body with {placeholder} tokens."""

    __tablename__ = "message_templates"

    id = Column(String(36), primary_key=True, default=new_uuid)
    name = Column(String(100), nullable=False, unique=True)
    type = Column(
        SQLEnum(MessageChannel, name="template_type", native_enum=False, length=10,
                values_callable=enum_values, create_constraint=True),
        nullable=False,
        index=True,
    )
    code = Column(String(50), nullable=False, unique=True, index=True)
    subject = Column(String(200), nullable=True)  # email only
    body = Column(Text, nullable=False)
    placeholders = Column(JSON, default=list)
    active = Column(Boolean, default=True, nullable=False)

    created_at = Column(DateTime, default=datetime.utcnow)
    updated_at = Column(DateTime, default=datetime.utcnow, onupdate=datetime.utcnow)


class MessageLog(Base):
    """Append-only audit of outbound messages. Rows are never updated or deleted."""

    __tablename__ = "message_logs"

    id = Column(String(36), primary_key=True, default=new_uuid)
    message_type = Column(
        SQLEnum(MessageChannel, name="log_message_type", native_enum=False, length=10,
                values_callable=enum_values, create_constraint=True),
        nullable=False,
        index=True,
    )
    recipient = Column(String(200), nullable=False, index=True)
    booking_id = Column(String(36), ForeignKey("bookings.id", ondelete="SET NULL"), nullable=True, index=True)
    contact_message_id = Column(String(36), ForeignKey("contact_messages.id", ondelete="SET NULL"), nullable=True)
    template_code = Column(String(50), nullable=True)
    subject = Column(String(200), nullable=True)
    body = Column(Text, nullable=False)
    status = Column(
        SQLEnum(MessageLogStatus, name="log_status", native_enum=False, length=10,
                values_callable=enum_values, create_constraint=True),
        nullable=False,
        default=MessageLogStatus.PENDING,
        index=True,
    )
    error_message = Column(Text, nullable=True)
    provider_response = Column(JSON, nullable=True)
    cost = Column(Numeric(10, 4), default=0)
    triggered_by = Column(
        SQLEnum(MessageTrigger, name="log_trigger", native_enum=False, length=10,
                values_callable=enum_values, create_constraint=True),
        nullable=False,
        default=MessageTrigger.SYSTEM,
    )

    created_at = Column(DateTime, default=datetime.utcnow, index=True)


class AppSetting(Base):
    """Business settings row; values are validated by the typed settings schema on load."""

    __tablename__ = "settings_app"

    key = Column(String(50), primary_key=True)
    value = Column(JSON, nullable=False)
    description = Column(Text, nullable=True)
    updated_at = Column(DateTime, default=datetime.utcnow, onupdate=datetime.utcnow)
