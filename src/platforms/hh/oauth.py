"""Account linking: turn an OAuth authorization code into a stored Credential."""

import logging
import time

from src.core.errors import AuthError, DecodeError, TransportError
from src.core.schemas import Credential
from src.pipeline.token_refresher import Clock
from src.platforms.hh.client import HHClient
from src.storage.base import CredentialStore

logger = logging.getLogger(__name__)


class AccountLinker:
    def __init__(
        self,
        client: HHClient,
        store: CredentialStore,
        clock: Clock = time.time,
    ) -> None:
        self._client = client
        self._store = store
        self._clock = clock

    async def link(self, code: str) -> Credential:
        """Exchange ``code``, resolve the user's résumé, and store the credential.

        Raises:
            AuthError: If the code is empty, rejected, or the account has no résumé.
            PersistenceError: If the credential cannot be stored.
        """
        code = code.strip()
        if not code:
            msg = "Authorization code is empty"
            raise AuthError(msg)

        try:
            tokens = await self._client.exchange_code(code)
            resumes = await self._client.my_resumes(tokens.access_token)
        except (TransportError, DecodeError) as e:
            msg = f"Authorization failed: {e}"
            raise AuthError(msg) from e

        if not resumes.items:
            msg = "Account has no resumes to follow"
            raise AuthError(msg)

        credential = Credential(
            subject_id=resumes.items[0].id,
            access_token=tokens.access_token,
            refresh_token=tokens.refresh_token,
            auth_code=code,
            issued_at=int(self._clock()),
            expires_in=tokens.expires_in,
        )
        self._store.create(credential)
        return credential
