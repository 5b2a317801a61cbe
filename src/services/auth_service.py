"""Demo login: the client is trusted to say who it is."""

from src.models.portfolio import User, utcnow
from src.storage.store import Store
from src.utils.errors import InvalidInputError
from src.utils.logger import setup_logger

logger = setup_logger(__name__)


class AuthService:
    def __init__(self, store: Store):
        self.users = store.collection("users")

    def login(self, email: str, name: str = "") -> User:
        """Return the user with this email, creating one on first login."""
        email = (email or "").strip().lower()
        if not email or "@" not in email:
            raise InvalidInputError(f"Invalid email: {email!r}", ["email"])

        existing = self.users.find_one({"email": email})
        if existing:
            return User(**existing)

        now = utcnow().isoformat()
        record = {
            "email": email,
            "name": name.strip() or email.split("@")[0],
            "avatar_url": None,
            "created_at": now,
            "updated_at": now,
        }
        user_id = self.users.insert(record)
        logger.info("Created user %s", user_id)
        return User(id=user_id, **record)

    def get_user(self, user_id: str) -> User | None:
        record = self.users.get_by_id(user_id)
        return User(**record) if record else None
