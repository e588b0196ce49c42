"""
Forum Module - Community discussions.

Features:
- Subs and memberships
- Subscription-filtered post feed with cursor pagination
- Votes and comments
"""

from app.modules.forum.service import ForumService, SubService, VoteSummary

__all__ = ["ForumService", "SubService", "VoteSummary"]
