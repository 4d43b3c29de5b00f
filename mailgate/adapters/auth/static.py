"""Single-account credential verifier backed by configuration."""

import hmac

from mailgate.adapters.auth.base import AbstractCredentialVerifier


class StaticCredentialVerifier(AbstractCredentialVerifier):
    """Accept exactly one configured username/password pair.

    Both fields are compared in constant time, and both comparisons always
    run, so timing does not reveal which field was wrong.
    """

    def __init__(self, username: str, password: str) -> None:
        if not username:
            raise ValueError("username must be a non-empty string")
        self._username = username.encode()
        self._password = password.encode()

    def verify(self, username: str, password: str) -> bool:
        user_ok = hmac.compare_digest(username.encode(), self._username)
        password_ok = hmac.compare_digest(password.encode(), self._password)
        return user_ok and password_ok
