from passlib.context import CryptContext
from sqlalchemy.orm import Session

from app.infrastructure.db.models import AdminUserModel

# pbkdf2_sha256 - no native deps; bcrypt kept readable for imported admin rows
pwd_context = CryptContext(schemes=["pbkdf2_sha256", "bcrypt"], deprecated=["bcrypt"])


def hash_password(password: str) -> str:
    return pwd_context.hash(password.strip())


def verify_password(password: str, password_hash: str | None) -> bool:
    if not password_hash:
        return False
    try:
        return pwd_context.verify(password.strip(), password_hash)
    except ValueError:
        # not a recognised hash (legacy plain-text value)
        return False


def get_admin_by_username(db: Session, username: str) -> AdminUserModel | None:
    return db.query(AdminUserModel).filter(AdminUserModel.username == username).first()


def verify_admin_login(db: Session, username: str, password: str) -> AdminUserModel | None:
    admin = get_admin_by_username(db, username.strip())
    if admin is None or not verify_password(password, admin.password_hash):
        return None
    return admin


def create_admin_user(db: Session, username: str, password: str) -> AdminUserModel:
    """Insert an admin, or reset the password of an existing one."""
    username = username.strip()
    if not username or not password.strip():
        raise ValueError("username and password are required")
    admin = get_admin_by_username(db, username)
    if admin is None:
        admin = AdminUserModel(username=username)
        db.add(admin)
    admin.password_hash = hash_password(password)
    db.commit()
    return admin
