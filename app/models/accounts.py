"""Account model definition using SQLAlchemy Core."""

from uuid import uuid4

from sqlalchemy import (
    Boolean,
    Column,
    DateTime,
    MetaData,
    Table,
    Text,
    Uuid,
    func,
    text,
)

metadata = MetaData()

accounts = Table(
    "accounts",
    metadata,
    Column("id", Uuid(as_uuid=True), primary_key=True, default=uuid4),
    # Login identifiers; both unique across every account
    Column("email", Text, nullable=False, unique=True, index=True),
    Column("medical_id", Text, unique=True, index=True),
    # Profile
    Column("name", Text, nullable=False),
    Column("city", Text),
    Column("specialty", Text),
    Column("terms_accepted", Boolean, nullable=False, server_default=text("false")),
    # Role; only admins carry a password hash
    Column("is_admin", Boolean, nullable=False, server_default=text("false"), index=True),
    Column("password_hash", Text),
    # Audit
    Column("created_at", DateTime(timezone=True), nullable=False, server_default=func.now()),
    Column("updated_at", DateTime(timezone=True), nullable=False, server_default=func.now()),
    Column("last_login_at", DateTime(timezone=True)),
)
