from onboarding_api.models.user import User
from onboarding_api.models.business import Business

__all__ = ["User", "Business"]
