"""Shared fixtures. The API settings are read at import time, so point them at SQLite first."""

import os

os.environ.setdefault("DATABASE_URL", "sqlite+aiosqlite:///:memory:")
os.environ.setdefault("CREATE_TABLES", "false")

import pytest

from onboarding_bot.wizard import StepDescriptor


@pytest.fixture
def abc_steps():
    return [
        StepDescriptor("A", "Step A", "First"),
        StepDescriptor("B", "Step B", "Second"),
        StepDescriptor("C", "Step C", "Third"),
    ]
