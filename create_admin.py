"""
Create (or reset) an admin login

Usage:
    python create_admin.py <username> <password>
"""
import sys

from app.auth import create_admin_user
from app.infrastructure.db.session import session_scope


if len(sys.argv) != 3:
    print(__doc__)
    sys.exit(1)

with session_scope() as db:
    admin = create_admin_user(db, sys.argv[1], sys.argv[2])
    print(f"Admin ready: {admin.username} (ID: {admin.id})")
