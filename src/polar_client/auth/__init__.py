"""Authentication for the Polar client.

- Bearer token injection (:class:`BearerTokenAuth`)
- Access token resolution (value -> env -> .env -> token file)

Example:
    ```python
    from polar_client.auth import CredentialResolver

    token = CredentialResolver().resolve_access_token(required=True)
    ```
"""

from polar_client.auth.bearer import BearerTokenAuth
from polar_client.auth.credentials import ACCESS_TOKEN_ENV_VAR, ACCESS_TOKEN_FILE_ENV_VAR, CredentialResolver
from polar_client.auth.exceptions import (
    CredentialError,
    CredentialFileError,
    CredentialNotFoundError,
)

__all__ = [
    "ACCESS_TOKEN_ENV_VAR",
    "ACCESS_TOKEN_FILE_ENV_VAR",
    "BearerTokenAuth",
    "CredentialError",
    "CredentialFileError",
    "CredentialNotFoundError",
    "CredentialResolver",
]
