"""Credential errors.

They subclass :class:`ConfigurationError`: a client that cannot find its
token fails while it is being built, before any request.
"""

from polar_client.errors.exceptions import ConfigurationError


class CredentialError(ConfigurationError):
    """A credential could not be resolved or read."""


class CredentialNotFoundError(CredentialError):
    """No source provided a required credential.

    Attributes:
        env_var_name: Environment variable that was consulted, if any.
    """

    def __init__(self, message: str, env_var_name: str | None = None):
        super().__init__(message)
        self.env_var_name = env_var_name


class CredentialFileError(CredentialError):
    """A credential file was not given, does not exist or could not be read."""
