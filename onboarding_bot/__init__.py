"""Telegram front-end for the business onboarding wizard."""
