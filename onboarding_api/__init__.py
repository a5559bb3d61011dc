"""Business onboarding persistence API."""
