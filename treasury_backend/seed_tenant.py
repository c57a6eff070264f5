"""
Database seeding script for a demo tenant.

Creates a tenant with default alert settings and its cash box intervenant.
Run this script after the database is set up, then send its id in the
X-Tenant-ID header.
"""

import asyncio
import sys
from pathlib import Path

# Add project root to path
sys.path.insert(0, str(Path(__file__).parent.parent))

from treasury_backend.app.db.session import AsyncSessionLocal
from treasury_backend.app.models.tenant import Tenant
from treasury_backend.app.services.movement_service import MovementService
from treasury_backend.app.services.settings_service import SettingsService
from sqlalchemy import select

DEMO_SLUG = "demo"


async def seed_tenant():
    """
    Seed the demo tenant.

    Creates:
    - 1 tenant (slug: demo)
    - its settings row with default thresholds
    - its default cash intervenant
    """
    async with AsyncSessionLocal() as db:
        print("🌱 Starting tenant seeding...")

        result = await db.execute(select(Tenant).where(Tenant.slug == DEMO_SLUG))
        tenant = result.scalar_one_or_none()

        if tenant is None:
            tenant = Tenant(name="Demo Company", slug=DEMO_SLUG, is_active=True)
            db.add(tenant)
            await db.flush()
            print(f"✅ Created tenant '{DEMO_SLUG}' (id: {tenant.id})")
        else:
            print(f"ℹ️  Tenant '{DEMO_SLUG}' already exists (id: {tenant.id})")

        settings_row = await SettingsService.get_or_create(db, tenant.id)
        cash_box = await MovementService.default_cash_intervenant(db, tenant.id)

        await db.commit()

        print("\n🎉 Tenant seeding completed successfully!")
        print(f"  - X-Tenant-ID:  {tenant.id}")
        print(f"  - Currency:     {settings_row.currency}")
        print(f"  - Cash box:     {cash_box.name} (id: {cash_box.id})")


if __name__ == "__main__":
    asyncio.run(seed_tenant())
