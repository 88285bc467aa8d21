"""
SQLAlchemy model for the users table of the auth store.
"""

from sqlalchemy import JSON, Column, String

from app.db.session import AuthBase
from app.db.base_model import BaseModel


class User(AuthBase, BaseModel):
    """
    Registered user. The login history is kept as a JSON document:
    a list of {"date_time": ..., "user_agent": ...} entries, oldest first.
    """
    __tablename__ = "users"

    username = Column(String, unique=True, nullable=False, index=True)
    password = Column(String, nullable=False)  # bcrypt hash, never plaintext
    email = Column(String, nullable=True)
    login_history = Column(JSON, nullable=False, default=list)

    def __repr__(self):
        return f"<User {self.username}>"
