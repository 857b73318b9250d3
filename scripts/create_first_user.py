import sys
import os

# Add current directory to path
sys.path.append(os.getcwd())

from app.core.config import settings
from app.core.security import get_password_hash
from app.db.session import USERS, get_client
from app.models.user import UserRole
from app.utils.mongo import utcnow

def create_initial_user():
    print("--- Initial Admin Creation ---")

    email = os.getenv("ADMIN_EMAIL", "admin@example.com")
    password = os.getenv("ADMIN_PASSWORD", "adminpassword")
    name = "Super Admin"

    users = get_client()[settings.MONGODB_DB][USERS]

    # Check if user already exists
    if users.find_one({"email": email}):
        print(f"User with email {email} already exists.")
        return

    print(f"Creating admin {email}...")
    now = utcnow()
    users.insert_one({
        "email": email,
        "password": get_password_hash(password),
        "name": name,
        "role": UserRole.ADMIN.value,
        "isActive": True,
        "projectsCount": 0,
        "createdAt": now,
        "updatedAt": now,
    })
    print("Initial admin created successfully!")
    print(f"Email: {email}")
    print(f"Password: {password}")

if __name__ == "__main__":
    create_initial_user()
