"""Pytest configuration and shared fixtures."""

import pytest
import structlog

API_URL = "https://mandrillapp.test/api/1.0"


@pytest.fixture(autouse=True)
def reset_structlog():
    """Undo logging configuration done by a test so capture_logs keeps working."""
    yield
    structlog.reset_defaults()


@pytest.fixture
def views_dir(tmp_path):
    """Directory with local fallback views."""
    views = tmp_path / "views"
    views.mkdir()
    (views / "welcome.html").write_text("<p>Welcome {{ name }}</p>")
    (views / "welcome.txt").write_text("Welcome {{ name }}")
    (views / "receipt.txt").write_text("Total: {{ total }}")
    return views


@pytest.fixture
def mock_settings(views_dir):
    """Mock settings for testing."""
    from mandrill_mailer.config import Settings

    return Settings(
        mandrill_api_key=None,
        mandrill_api_url=API_URL,
        api_timeout=5.0,
        default_from_email="noreply@example.com",
        default_from_name="Example",
        views_path=views_dir,
        log_level="DEBUG",
    )


@pytest.fixture
def mailer(mock_settings):
    """Mailer with a credential set but not yet initialized."""
    from mandrill_mailer.mailer.mailer import Mailer

    mailer = Mailer(api_key="test-api-key", settings=mock_settings)
    yield mailer
    mailer.close()


@pytest.fixture
def sample_message():
    """Sample email message for testing."""
    from mandrill_mailer.email.message import Message

    return Message(
        to=["a@x.com", "b@x.com"],
        subject="Test Email",
        text="This is a test email.",
        html="<p>This is a test email.</p>",
    )
