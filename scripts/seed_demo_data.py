import asyncio
import os
import sys
import uuid
from datetime import date

# Add the project root to the Python path
sys.path.insert(0, os.path.abspath(os.path.join(os.path.dirname(__file__), '..')))

from app.core.config import settings
from app.core.db import SessionLocal, init_models
from app.modules.orders.models import Order
from app.modules.users.repository import UserRepository

DEMO_USERS = [
    # identity, first name, last name, birthdate
    ("12345678", "Ana", "Gomez", date(1980, 5, 17)),
    ("23456789", "Luis", "Gomez", date(1978, 11, 2)),
    ("34567890", "Sofia", "Gomez", date(2012, 3, 9)),
]

async def main():
    """
    Creates demo profiles and users so the representatives endpoints can be
    exercised locally with the X-Patient-Profile-Id header.
    """
    print("Starting demo seed...")
    await init_models()
    org_id = uuid.UUID(settings.DEFAULT_ORG_ID)

    async with SessionLocal() as db:
        users = UserRepository(db)
        profiles = {}
        for identity, first_name, last_name, birthdate in DEMO_USERS:
            existing = await users.get_by_identity(identity)
            if existing:
                print(f"  - User {identity} already exists, skipping.")
                profiles[identity] = existing.patient_profile_id
                continue
            profile = await users.create_profile(org_id, first_name=first_name, last_name=last_name)
            await users.create(org_id, identity=identity, birthdate=birthdate, patient_profile_id=profile.id)
            profiles[identity] = profile.id
            print(f"  - Created {first_name} {last_name} ({identity}) profile={profile.id}")

        db.add(Order(
            org_id=org_id,
            patient_profile_id=profiles["34567890"],
            representative_profile_id=profiles["12345678"],
            description="Pediatric check-up",
        ))
        await db.commit()

    print("Demo seed finished.")

if __name__ == "__main__":
    asyncio.run(main())
