from app.models.user_profile import UserProfile
from app.models.investimento import Investimento

__all__ = ["UserProfile", "Investimento"]
