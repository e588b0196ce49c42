"""
Users Module - Accounts.

Features:
- Registration with e-mail and username validation
- Profile lookup
"""

from app.modules.users.service import UserService

__all__ = ["UserService"]
