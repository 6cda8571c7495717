from __future__ import annotations

import json
import logging
import threading
from pathlib import Path
from typing import Protocol

from pydantic import BaseModel, ValidationError

logger = logging.getLogger("cero.credentials")


class Credential(BaseModel):
    access_token: str
    refresh_token: str | None = None
    token_type: str | None = None
    expiry_iso: str | None = None
    scope: str | None = None

    @classmethod
    def from_authorized_user_info(cls, info: dict) -> "Credential":
        # Google's authorized-user files use "token" for the access token.
        return cls(
            access_token=info.get("access_token") or info.get("token") or "",
            refresh_token=info.get("refresh_token"),
            token_type=info.get("token_type"),
            expiry_iso=info.get("expiry") or info.get("expiry_iso"),
            scope=" ".join(info["scopes"]) if isinstance(info.get("scopes"), list) else info.get("scope"),
        )


class CredentialStore(Protocol):
    def get(self, identity_key: str) -> Credential | None: ...

    def list_known_identities(self) -> list[str]: ...

    def set(self, identity_key: str, credential: Credential) -> None: ...


class InMemoryCredentialStore:
    def __init__(self) -> None:
        self._credentials: dict[str, Credential] = {}
        self._lock = threading.Lock()

    def get(self, identity_key: str) -> Credential | None:
        with self._lock:
            return self._credentials.get(identity_key)

    def list_known_identities(self) -> list[str]:
        with self._lock:
            return list(self._credentials.keys())

    def set(self, identity_key: str, credential: Credential) -> None:
        with self._lock:
            self._credentials[identity_key] = credential


class FileCredentialStore(InMemoryCredentialStore):
    def __init__(self, state_dir: Path) -> None:
        super().__init__()
        self.state_dir = state_dir
        self.state_dir.mkdir(parents=True, exist_ok=True)
        self.file_path = self.state_dir / "credentials.json"
        self._load()

    def _load(self) -> None:
        if not self.file_path.exists() or self.file_path.stat().st_size == 0:
            return
        try:
            raw = json.loads(self.file_path.read_text(encoding="utf-8"))
        except json.JSONDecodeError:
            logger.warning("credential_file_unreadable", extra={"extra_fields": {"path": str(self.file_path)}})
            return
        if not isinstance(raw, dict):
            return
        for identity_key, payload in raw.items():
            try:
                self._credentials[identity_key] = Credential.model_validate(payload)
            except ValidationError:
                continue

    def set(self, identity_key: str, credential: Credential) -> None:
        with self._lock:
            self._credentials[identity_key] = credential
            snapshot = {key: value.model_dump(mode="json") for key, value in self._credentials.items()}
            self.file_path.write_text(json.dumps(snapshot, ensure_ascii=False, indent=2), encoding="utf-8")


def resolve_credential(store: CredentialStore, identity_key: str) -> Credential | None:
    """Exact lookup, then the first known identity.

    The fallback is a single-tenant convenience, not an access control decision.
    """
    credential = store.get(identity_key)
    if credential is not None:
        return credential
    for known in store.list_known_identities():
        fallback = store.get(known)
        if fallback is not None:
            logger.info("credential_fallback", extra={"extra_fields": {"requested": identity_key, "used": known}})
            return fallback
    return None


def seed_from_token_file(store: CredentialStore, identity_key: str, token_path: Path) -> bool:
    token_file = token_path.expanduser()
    if not token_file.exists():
        return False
    try:
        info = json.loads(token_file.read_text(encoding="utf-8"))
        credential = Credential.from_authorized_user_info(info)
    except (json.JSONDecodeError, ValidationError, AttributeError):
        logger.warning("token_file_invalid", extra={"extra_fields": {"path": str(token_file)}})
        return False
    if not credential.access_token and not credential.refresh_token:
        return False
    store.set(identity_key, credential)
    return True
