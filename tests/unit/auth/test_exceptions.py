"""Tests for credential resolution exceptions."""

import pytest

from polar_client.auth.exceptions import (
    CredentialError,
    CredentialFileError,
    CredentialNotFoundError,
)
from polar_client.errors import ConfigurationError


class TestCredentialError:
    def test_is_configuration_error(self):
        """Credential problems are configuration problems, raised before any request."""
        with pytest.raises(ConfigurationError):
            raise CredentialError("Test error")

    def test_is_value_error(self):
        assert issubclass(CredentialError, ValueError)

    def test_exception_message(self):
        assert str(CredentialError("Custom error message")) == "Custom error message"


class TestCredentialNotFoundError:
    def test_is_credential_error(self):
        with pytest.raises(CredentialError):
            raise CredentialNotFoundError("Test error")

    def test_env_var_name(self):
        error = CredentialNotFoundError("Token not found", env_var_name="POLAR_ACCESS_TOKEN")

        assert error.env_var_name == "POLAR_ACCESS_TOKEN"
        assert str(error) == "Token not found"

    def test_env_var_name_optional(self):
        assert CredentialNotFoundError("Token not found").env_var_name is None


class TestCredentialFileError:
    def test_is_credential_error(self):
        with pytest.raises(CredentialError):
            raise CredentialFileError("Cannot read file")
