from __future__ import annotations

from cero.core.credentials.store import Credential
from cero.core.settings import GoogleSettings


class GoogleDependencyError(RuntimeError):
    pass


def build_google_service(service_name: str, version: str, credential: Credential, settings: GoogleSettings):
    try:
        from google.oauth2.credentials import Credentials
        from googleapiclient.discovery import build
    except ImportError as exc:  # pragma: no cover - exercised only without the google extra
        raise GoogleDependencyError(
            "Google integration dependencies are missing; install with pip install -e .[google]."
        ) from exc

    creds = Credentials(
        token=credential.access_token or None,
        refresh_token=credential.refresh_token,
        token_uri=settings.token_uri,
        client_id=settings.client_id,
        client_secret=settings.client_secret,
    )
    return build(service_name, version, credentials=creds, cache_discovery=False)
