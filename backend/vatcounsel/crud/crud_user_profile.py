"""CRUD operations for the UserProfile model."""

from vatcounsel.crud._base import CRUDBase
from vatcounsel.models.user_profile import UserProfile


class CRUDUserProfile(CRUDBase[UserProfile]):
    """CRUD operations for UserProfile."""


user_profile = CRUDUserProfile(UserProfile)
