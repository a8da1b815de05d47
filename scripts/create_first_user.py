import sys
import os
from sqlmodel import Session, select

# Add current directory to path
sys.path.append(os.getcwd())

from taskboard.db.session import engine, init_db
from taskboard.models.user import User, UserRole
from taskboard.core.security import get_password_hash

def create_initial_admin(email: str, password: str, full_name: str = "Administrator"):
    print("--- Initial Admin Creation ---")
    init_db()

    with Session(engine) as session:
        # Check if user already exists
        statement = select(User).where(User.email == email)
        user = session.exec(statement).first()

        if user:
            print(f"User with email {email} already exists (role: {user.role}).")
            return

        print(f"Creating admin {email}...")
        db_user = User(
            email=email,
            password=get_password_hash(password),
            full_name=full_name,
            role=UserRole.ADMIN,
            is_active=True,
        )
        session.add(db_user)
        session.commit()
        print("Initial admin created successfully!")
        print(f"Email: {email}")

if __name__ == "__main__":
    if len(sys.argv) < 3:
        print("Usage: python scripts/create_first_user.py <email> <password> [full name]")
        sys.exit(1)
    create_initial_admin(sys.argv[1], sys.argv[2], *sys.argv[3:4])
