import sys

from app import create_app
from services import store

if len(sys.argv) != 3:
    print("usage: python reset_user_password.py <email> <new password>")
    sys.exit(1)

EMAIL, NEW_PASSWORD = sys.argv[1], sys.argv[2]

app = create_app({"SEED_DEMO_USERS": False})
with app.app_context():
    user = store.get_user_by_email(EMAIL)
    if not user:
        print("❌ User not found:", EMAIL)
        sys.exit(1)
    store.set_password(user, NEW_PASSWORD)
    print("✅ Password reset successful for:", user.email)
