"""Create (or promote) a lab user with admin access.

Usage: python create_admin.py <email> [name]
The password is read from the terminal.
"""
import getpass
import sys

from app.database import SessionLocal
from app.models.user import User, UserRole
from app.auth.security import hash_password


def main(argv: list[str]) -> int:
    if len(argv) < 2:
        print(__doc__)
        return 1

    email = argv[1].strip().lower()
    name = argv[2] if len(argv) > 2 else None
    password = getpass.getpass("Password: ")
    if len(password) < 8:
        print("Password must be at least 8 characters")
        return 1

    db = SessionLocal()
    try:
        user = db.query(User).filter(User.email == email).first()
        if user:
            user.role = UserRole.ADMIN
            user.password_hash = hash_password(password)
            user.is_active = True
        else:
            user = User(email=email, name=name, password_hash=hash_password(password), role=UserRole.ADMIN)
            db.add(user)
        db.commit()
        print(f"Admin ready: id={user.id} email={user.email}")
    finally:
        db.close()
    return 0


if __name__ == "__main__":
    sys.exit(main(sys.argv))
