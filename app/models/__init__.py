"""
Import all models from their respective modules.
"""

# Registry store models
from app.models.registry import Car, Person, Store

# Auth store models
from app.models.user import User

# Export all models
__all__ = [
    "Car",
    "Person",
    "Store",
    "User",
]
