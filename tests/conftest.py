"""
pytest configuration and fixtures.

Loads environment variables from .env when present and provides sample
shipment emails shared across test modules.
"""

from pathlib import Path

import pytest
from dotenv import load_dotenv

from shipmail.models import EmailContent


def pytest_configure(config):
    """Load .env file before running tests"""
    project_root = Path(__file__).parent.parent
    env_file = project_root / ".env"

    if env_file.exists():
        load_dotenv(env_file)


@pytest.fixture
def ups_email() -> EmailContent:
    return EmailContent(
        sender="noreply@ups.com",
        subject="UPS Update: Package Scheduled for Delivery",
        plain_text=(
            "Your package with tracking number 1Z999AA1234567890 has been shipped."
        ),
    )


@pytest.fixture
def amazon_code_email() -> EmailContent:
    return EmailContent(
        sender="shipment-tracking@amazon.com",
        subject="Your Amazon package is on the way",
        plain_text="Use Amazon code BqPz3RXRS to track your package.",
    )


@pytest.fixture
def no_tracking_email() -> EmailContent:
    return EmailContent(
        sender="newsletter@example.org",
        subject="Weekly newsletter",
        plain_text="Thanks for reading our weekly newsletter. See you next week!",
    )
