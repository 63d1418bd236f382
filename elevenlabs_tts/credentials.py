"""Secure API key storage for the ElevenLabs CLI.

Responsibilities:
- Keep the ElevenLabs API key in the OS keychain via `keyring`.
- Treat an unusable keyring backend as "no stored key" instead of a crash.
- Never echo or log the stored secret.

Key types:
- `CredentialStore`: interface used by the CLI.
- `KeyringCredentialStore`: keyring-backed implementation.
"""

from __future__ import annotations

from dataclasses import dataclass
from typing import Any, Callable, TypeVar

import keyring
from keyring.errors import KeyringError

from .parsing import normalize_optional_string

KEYRING_SERVICE = "elevenlabs-tts"
KEYRING_ACCOUNT = "elevenlabs_api_key"

_T = TypeVar("_T")


class CredentialStore:
    """Interface for storing the provider API key outside config files."""

    def is_available(self) -> bool:
        raise NotImplementedError

    def get_api_key(self) -> str | None:
        raise NotImplementedError

    def set_api_key(self, api_key: str) -> None:
        raise NotImplementedError

    def clear_api_key(self) -> bool:
        """Delete the stored key and return whether one existed."""

        raise NotImplementedError


@dataclass(frozen=True, slots=True)
class KeyringCredentialStore(CredentialStore):
    """Credential store backed by the `keyring` package.

    Attributes:
        service_name: Keyring service the key is filed under.
        account_name: Keyring account name for the key.
        backend: Module exposing the `keyring` API; tests pass an in-memory double.
    """

    service_name: str = KEYRING_SERVICE
    account_name: str = KEYRING_ACCOUNT
    backend: Any = keyring

    def _guarded(self, operation: Callable[[], _T], fallback: _T) -> _T:
        """Run one keyring operation, returning `fallback` on backend errors."""

        if self.backend is None:
            return fallback
        try:
            return operation()
        except KeyringError:
            return fallback

    def is_available(self) -> bool:
        """Return whether the active keyring backend is usable (priority above zero)."""

        active = self._guarded(lambda: self.backend.get_keyring(), None)
        if active is None:
            return False
        priority = getattr(active, "priority", 1)
        return priority is None or priority > 0

    def get_api_key(self) -> str | None:
        stored = self._guarded(
            lambda: self.backend.get_password(self.service_name, self.account_name),
            None,
        )
        return normalize_optional_string(stored)

    def set_api_key(self, api_key: str) -> None:
        """Store a stripped API key.

        Raises:
            ValueError: If the key is blank.
            RuntimeError: If no backend is configured or the backend refuses the write.
        """

        normalized = normalize_optional_string(api_key)
        if normalized is None:
            raise ValueError("API key must be a non-empty string.")
        if self.backend is None:
            raise RuntimeError(
                "Secure credential storage is unavailable. Configure a `keyring` "
                "backend to persist API keys securely."
            )
        try:
            self.backend.set_password(self.service_name, self.account_name, normalized)
        except KeyringError as exc:
            raise RuntimeError(f"Secure credential storage rejected the API key: {exc}") from exc

    def clear_api_key(self) -> bool:
        if self.get_api_key() is None:
            return False

        def _delete() -> bool:
            self.backend.delete_password(self.service_name, self.account_name)
            return True

        return self._guarded(_delete, False)


def create_credential_store() -> CredentialStore:
    """Return the default keyring-backed store."""

    return KeyringCredentialStore()
