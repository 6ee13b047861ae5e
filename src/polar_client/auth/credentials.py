"""Where the Polar access token (and other client settings) come from.

A setting is taken from the first source that has it:

1. the value passed in code,
2. the process environment, which python-dotenv fills from a ``.env`` file
   without overriding variables that are already set,
3. a default.

The access token may also live in a file named by ``POLAR_ACCESS_TOKEN_FILE``,
which suits secrets mounted by Docker or Kubernetes.

Example:
    ```python
    from polar_client.auth import CredentialResolver

    resolver = CredentialResolver(dotenv_path=".env.sandbox")
    token = resolver.resolve_access_token(required=True)
    environment = resolver.resolve(env_var_name="POLAR_ENVIRONMENT", default="production", secret=False)
    ```

Secret values never reach the logs; only where they were found is logged.
"""

import logging
import os
from pathlib import Path
from threading import Lock

from dotenv import find_dotenv, load_dotenv

from polar_client.auth.exceptions import CredentialFileError, CredentialNotFoundError

logger = logging.getLogger(__name__)

ACCESS_TOKEN_ENV_VAR = "POLAR_ACCESS_TOKEN"
ACCESS_TOKEN_FILE_ENV_VAR = "POLAR_ACCESS_TOKEN_FILE"

_MASK = "***"


def _expand_path(raw: str | Path) -> Path:
    return Path(os.path.expanduser(os.path.expandvars(str(raw))))


def _read_secret_file(path: Path) -> str:
    """Return the stripped file contents, raising CredentialFileError on any read failure."""
    try:
        return path.read_text().strip()
    except FileNotFoundError:
        raise CredentialFileError(f"Credential file not found: {path}") from None
    except PermissionError:
        raise CredentialFileError(f"Permission denied reading credential file: {path}") from None
    except OSError as e:
        raise CredentialFileError(f"Cannot read credential file {path}: {e}") from e


class CredentialResolver:
    """Looks up settings in code, the environment, ``.env`` files and secret files.

    Args:
        dotenv_path: ``.env`` file to load. When None, the nearest ``.env``
            in the working directory or one of its parents is used.
        load_dotenv: Load the ``.env`` file on construction. When False it is
            only loaded by an explicit :meth:`_ensure_dotenv_loaded` call.
    """

    def __init__(self, dotenv_path: str | None = None, load_dotenv: bool = True):
        self._dotenv_path = dotenv_path
        self._dotenv_lock = Lock()
        self._dotenv_loaded = False

        if load_dotenv:
            self._ensure_dotenv_loaded()

    def _ensure_dotenv_loaded(self) -> None:
        with self._dotenv_lock:
            if self._dotenv_loaded:
                return
            self._dotenv_loaded = True
            try:
                found = load_dotenv(dotenv_path=self._dotenv_path or find_dotenv(usecwd=True))
            except (OSError, ValueError) as e:
                logger.warning(f"Ignoring unreadable .env file: {e}")
                return
            logger.debug(f"python-dotenv {'loaded' if found else 'found no'} .env file")

    def resolve(
        self,
        *,
        value: str | None = None,
        env_var_name: str | None = None,
        default: str | None = None,
        required: bool = False,
        secret: bool = True,
    ) -> str | None:
        """Return the first available value for a setting.

        Args:
            value: Value given in code.
            env_var_name: Environment variable consulted when ``value`` is None.
            default: Used when neither of the above is set.
            required: Raise :class:`CredentialNotFoundError` instead of returning None.
            secret: Mask the value in log messages.
        """
        if value is not None:
            found, origin = value, "argument"
        elif env_var_name and env_var_name in os.environ:
            found, origin = os.environ[env_var_name], f"${env_var_name}"
        elif default is not None:
            found, origin = default, "default"
        else:
            if required:
                checked = f" (checked env var: {env_var_name})" if env_var_name else ""
                raise CredentialNotFoundError(f"Required setting not found{checked}", env_var_name=env_var_name)
            return None

        logger.debug(f"Using {env_var_name or 'setting'} from {origin}: {_MASK if secret else found}")
        return found

    def resolve_access_token(self, value: str | None = None, *, required: bool = False) -> str | None:
        """Find the Polar access token.

        Tries ``value``, then ``POLAR_ACCESS_TOKEN``, then the file named by
        ``POLAR_ACCESS_TOKEN_FILE``.
        """
        token = self.resolve(value=value, env_var_name=ACCESS_TOKEN_ENV_VAR)
        if token is None:
            token = self.resolve_from_file(env_var_name=ACCESS_TOKEN_FILE_ENV_VAR)
        if token is None and required:
            raise CredentialNotFoundError(
                f"Polar access token not found; set {ACCESS_TOKEN_ENV_VAR} or {ACCESS_TOKEN_FILE_ENV_VAR}",
                env_var_name=ACCESS_TOKEN_ENV_VAR,
            )
        return token

    def resolve_from_file(
        self,
        *,
        file_path: str | Path | None = None,
        env_var_name: str | None = None,
        required: bool = False,
    ) -> str | None:
        """Read a secret from ``file_path`` or from the file named by ``env_var_name``.

        ``~`` and ``$VAR`` in the path are expanded and surrounding whitespace
        is stripped from the contents. Unless ``required``, a missing or
        unreadable file yields None.

        Raises:
            CredentialFileError: If ``required`` and there is no path or the
                file cannot be read.
        """
        raw_path = file_path
        if raw_path is None and env_var_name:
            raw_path = self.resolve(env_var_name=env_var_name, secret=False) or None

        if raw_path is None:
            if required:
                hint = f" (env var '{env_var_name}' not set)" if env_var_name else ""
                raise CredentialFileError(f"No file path provided for credential{hint}")
            return None

        path = _expand_path(raw_path)
        try:
            content = _read_secret_file(path)
        except CredentialFileError as e:
            if required:
                raise
            logger.warning(str(e))
            return None

        logger.debug(f"Using credential from file {path}: {_MASK}")
        return content
