"""Test configuration and fixtures."""

import os

import logfire

# Settings are read from the environment when containers are built
os.environ.setdefault("ENVIRONMENT", "test")
os.environ.setdefault("AUTH__JWT_SECRET", "test-secret-key-with-at-least-32-characters")
os.environ.setdefault("AUTH__BCRYPT_ROUNDS", "4")

logfire.configure(send_to_logfire=False, console=False)
