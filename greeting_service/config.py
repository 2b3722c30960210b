import os
from dataclasses import dataclass
from typing import Mapping, Optional

DEFAULT_PORT = 3000
DB_URL_FALLBACK = 'not-set'
REDACTED = '[REDACTED]'
VERSION = '1.0.0'


class ListenerBindError(RuntimeError):
    """The server could not start listening (bad PORT, port in use, no privilege)."""


def redact_db_url(value: str) -> str:
    # case-sensitive substring match
    return REDACTED if 'password' in value else value


@dataclass(frozen=True)
class Settings:
    port: int = DEFAULT_PORT
    db_url: str = DB_URL_FALLBACK
    db_url_env_present: bool = False
    host: str = '0.0.0.0'

    @classmethod
    def from_env(cls, environ: Optional[Mapping[str, str]] = None) -> 'Settings':
        """Resolve settings from the process environment.

        Empty values count as unset:
          PORT   -> 3000
          DB_URL -> 'not-set'
        """
        env = os.environ if environ is None else environ
        raw_port = env.get('PORT') or ''
        raw_db = env.get('DB_URL') or ''
        if raw_port:
            try:
                port = int(raw_port)
            except ValueError:
                raise ListenerBindError(f"invalid PORT value {raw_port!r}") from None
        else:
            port = DEFAULT_PORT
        return cls(port=port, db_url=raw_db or DB_URL_FALLBACK, db_url_env_present=bool(raw_db))

    @property
    def public_db_url(self) -> str:
        return redact_db_url(self.db_url)
