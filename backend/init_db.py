"""
Database initialization script
Run this to create tables and seed a demo agency with sample data
"""
import random
from datetime import date, datetime, timedelta, timezone
from decimal import Decimal

from agency_crm.core.database import engine, Base, SessionLocal
from agency_crm.core.security import get_password_hash
from agency_crm.models import Agency, User, UserRole, Client, Policy, Activity, ClientNote

DEMO_AGENCY = "Demo Insurance Agency"

CLIENTS = [
    ("John", "Martinez", "john.martinez@email.com", "(555) 234-5678", "123 Oak Street, Austin, TX 78701", "Prefers email communication. Has been a client since 2019."),
    ("Sarah", "Johnson", "sarah.j@email.com", "(555) 345-6789", "456 Maple Ave, Austin, TX 78702", "VIP client. Referred by her brother Mike Johnson."),
    ("Michael", "Chen", "mchen@techcorp.com", "(555) 456-7890", "789 Pine Road, Round Rock, TX 78664", "Business owner. Interested in umbrella policy."),
    ("Emily", "Davis", "emily.davis@gmail.com", "(555) 567-8901", "321 Elm Street, Cedar Park, TX 78613", "New homeowner."),
    ("Robert", "Wilson", "rwilson@lawfirm.com", "(555) 678-9012", "654 Birch Lane, Georgetown, TX 78628", "Attorney. Needs comprehensive coverage."),
    ("Lisa", "Anderson", "lisa.anderson@email.com", "(555) 789-0123", "987 Cedar Drive, Pflugerville, TX 78660", "Recently married. Updating beneficiaries."),
    ("David", "Thompson", "dthompson@email.com", "(555) 890-1234", "147 Walnut Way, Leander, TX 78641", "Has teenage drivers. Concerned about auto rates."),
    ("Jennifer", "Garcia", "jgarcia@startup.io", "(555) 901-2345", "258 Spruce Court, Austin, TX 78703", "Startup founder. Needs business insurance."),
]

CARRIERS = ["State Farm", "Allstate", "Progressive", "GEICO", "Liberty Mutual", "Nationwide", "Travelers", "Farmers"]
POLICY_TYPES = ["auto", "home", "life", "health", "business", "umbrella"]
ACTIVITY_TYPES = ["call", "email", "task", "meeting", "note"]

# Spread expirations so every renewal bucket (urgent / soon / upcoming / later) has rows
EXPIRATION_OFFSETS = [3, 6, 10, 13, 21, 28, 45, 90, 180, 300]


def init_db():
    """Initialize database with tables"""
    print("Creating database tables...")
    Base.metadata.create_all(bind=engine)
    print("✓ Tables created successfully")


def seed_data():
    """Seed a demo agency"""
    db = SessionLocal()
    rng = random.Random(42)

    try:
        print("\nSeeding demo data...")

        agency = db.query(Agency).filter(Agency.name == DEMO_AGENCY).first()
        if agency:
            print("✓ Demo agency already exists, skipping")
            return

        agency = Agency(name=DEMO_AGENCY, timezone="America/Chicago")
        db.add(agency)
        db.flush()

        db.add(User(
            agency_id=agency.id,
            email="admin@demo-agency.com",
            full_name="System Administrator",
            hashed_password=get_password_hash("admin12345"),
            role=UserRole.ADMIN.value,
        ))
        db.add(User(
            agency_id=agency.id,
            email="agent@demo-agency.com",
            full_name="Jamie Agent",
            hashed_password=get_password_hash("agent12345"),
            role=UserRole.AGENT.value,
        ))
        print("✓ Users created (admin@demo-agency.com / admin12345, agent@demo-agency.com / agent12345)")

        today = date.today()
        now = datetime.now(timezone.utc)
        policy_index = 0
        for first, last, email, phone, address, notes in CLIENTS:
            client = Client(
                agency_id=agency.id, first_name=first, last_name=last,
                email=email, phone=phone, address=address, notes=notes,
            )
            db.add(client)
            db.flush()

            for policy_type in rng.sample(POLICY_TYPES, rng.randint(1, 3)):
                offset = EXPIRATION_OFFSETS[policy_index % len(EXPIRATION_OFFSETS)]
                policy_index += 1
                expiration = today + timedelta(days=offset)
                policy = Policy(
                    agency_id=agency.id,
                    client_id=client.id,
                    carrier=rng.choice(CARRIERS),
                    policy_number=f"{policy_type[:3].upper()}-{rng.randint(100000, 999999)}",
                    type=policy_type,
                    effective_date=expiration - timedelta(days=365),
                    expiration_date=expiration,
                    premium=Decimal(rng.randint(400, 6000)),
                    status="active",
                )
                db.add(policy)
                db.flush()

                db.add(Activity(
                    agency_id=agency.id,
                    client_id=client.id,
                    policy_id=policy.id,
                    type=rng.choice(ACTIVITY_TYPES),
                    description=f"Review {policy_type} renewal with {first}",
                    due_date=now + timedelta(days=rng.randint(-2, 14)),
                ))

            db.add(ClientNote(
                agency_id=agency.id,
                client_id=client.id,
                content=f"Initial consultation with {first} {last}.",
            ))

        db.commit()
        print(f"✓ {len(CLIENTS)} clients and {policy_index} policies created")
        print("\n✓ Database seeded successfully!")

    except Exception as e:
        print(f"✗ Error seeding data: {e}")
        db.rollback()
        raise
    finally:
        db.close()


if __name__ == "__main__":
    init_db()
    seed_data()
