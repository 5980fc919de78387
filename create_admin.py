"""
Create an admin user

Usage:
    python create_admin.py admin@church.mg "S3cret-pass" "Pasteur Rakoto"
"""
import sys

from church_admin.application.errors import ConflictError
from church_admin.application.users import CreateUserUseCase
from church_admin.auth import get_user_by_email
from church_admin.infrastructure.db.session import get_db

if len(sys.argv) < 3:
    print(__doc__)
    sys.exit(1)

email, password = sys.argv[1], sys.argv[2]
name = sys.argv[3] if len(sys.argv) > 3 else None

db = next(get_db())

try:
    user = CreateUserUseCase(db).execute(email=email, password=password, name=name, role="admin")
    print("Created admin:")
    print(f"  Email: {user.email}")
    print(f"  ID: {user.id}")
except ConflictError:
    existing = get_user_by_email(db, email)
    print(f"User already exists: {existing.email} (ID: {existing.id}, role: {existing.role})")
finally:
    db.close()
