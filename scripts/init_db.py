"""Script to initialize the database and seed the first administrator.

Usage:
    ADMIN_EMAIL=admin@example.com ADMIN_PASSWORD=... python -m scripts.init_db
"""

import asyncio
import os

from dotenv import load_dotenv

from app.core.exceptions import ConflictException
from app.database import AsyncSessionLocal, engine
from app.models.accounts import metadata
from app.schemas.accounts import AccountCreate
from app.services.account_service import AccountService


async def init_db() -> None:
    """Create all tables and, when configured, the first admin account."""
    async with engine.begin() as conn:
        await conn.run_sync(metadata.create_all)

    print("✓ Database initialized successfully!")

    admin_email = os.getenv("ADMIN_EMAIL")
    admin_password = os.getenv("ADMIN_PASSWORD")
    if not admin_email or not admin_password:
        print("ADMIN_EMAIL / ADMIN_PASSWORD not set; skipping admin seed")
        return

    admin = AccountCreate(
        email=admin_email,
        name=os.getenv("ADMIN_NAME", "Administrator"),
        is_admin=True,
        password=admin_password,
        terms_accepted=True,
    )
    async with AsyncSessionLocal() as session:
        try:
            account = await AccountService().create_account(session, admin)
        except ConflictException:
            print(f"Admin {admin.email} already exists")
            return

    print(f"✓ Admin {account['email']} created")


if __name__ == "__main__":
    load_dotenv()
    asyncio.run(init_db())
