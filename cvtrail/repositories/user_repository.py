"""User repository for database operations."""

from ..models import User, UserDocument


class UserRepository:
    """Owners and their document lists."""

    def __init__(self, db):
        self.db = db

    def get_or_create(self, user_id: str) -> User:
        """Return the user row, staging a new one if it does not exist yet."""
        user = self.db.get(User, user_id)
        if user is None:
            user = User(user_id=user_id)
            self.db.add(user)
            self.db.flush()
        return user

    def add_document(self, user_id: str, document_id: str) -> None:
        """Append *document_id* to the user's list unless already present."""
        self.get_or_create(user_id)
        existing = self.db.get(UserDocument, (user_id, document_id))
        if existing is None:
            self.db.add(UserDocument(user_id=user_id, document_id=document_id))
            self.db.flush()

    def list_document_ids(self, user_id: str) -> list[str]:
        rows = self.db.query(UserDocument.document_id).filter(
            UserDocument.user_id == user_id
        ).order_by(UserDocument.added_at.asc()).all()
        return [row[0] for row in rows]
