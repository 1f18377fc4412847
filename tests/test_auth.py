"""
Unit tests for the authentication module.
"""

import pytest

from runcommand.modules.auth import SecretAuthModule


@pytest.fixture
def auth_module():
    """Create a SecretAuthModule with a known secret."""
    return SecretAuthModule("test-secret")


def test_verify_secret_valid(auth_module):
    """Test the configured secret is accepted."""
    assert auth_module.verify_secret("test-secret") is True


@pytest.mark.parametrize("secret", ["wrong", "test-secret ", "TEST-SECRET", "test"])
def test_verify_secret_invalid(auth_module, secret):
    """Test anything but the exact secret is rejected."""
    assert auth_module.verify_secret(secret) is False


@pytest.mark.parametrize("secret", [None, ""])
def test_verify_secret_missing(auth_module, secret):
    """Test a missing header is rejected."""
    assert auth_module.verify_secret(secret) is False


def test_verify_secret_non_ascii(auth_module):
    """Test non-ASCII input is compared rather than raising."""
    assert auth_module.verify_secret("tëst-sécret") is False


def test_empty_configured_secret_rejected():
    """Test the module refuses to run without a secret."""
    with pytest.raises(ValueError):
        SecretAuthModule("")
