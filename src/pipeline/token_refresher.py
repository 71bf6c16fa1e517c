"""Token refresher: rotates expired access tokens for every linked account.

Per credential (re-read from the store on every run):
  VALID   -> skipped
  EXPIRED -> refresh grant -> VALID (issued_at reset to now)
  EXPIRED -> refresh failure -> stays EXPIRED, retried on the next tick
"""

import logging
import time
from collections.abc import Callable

from src.core.errors import DecodeError, PersistenceError, TransportError
from src.core.schemas import RunSummary
from src.platforms.hh.client import HHClient
from src.storage.base import CredentialStore

logger = logging.getLogger(__name__)

Clock = Callable[[], float]


class TokenRefresher:
    """Refreshes every expired credential; one failure never aborts the batch."""

    def __init__(
        self,
        store: CredentialStore,
        client: HHClient,
        clock: Clock = time.time,
    ) -> None:
        self._store = store
        self._client = client
        self._clock = clock

    async def refresh_all(self) -> RunSummary:
        logger.debug("Updating tokens...")
        summary = RunSummary()

        try:
            credentials = self._store.find_all()
        except PersistenceError as e:
            logger.error("Cannot load credentials: %s", e)
            return summary

        for cred in credentials:
            if cred.is_valid(self._clock()):
                logger.debug("Skip token update for resume %s", cred.subject_id)
                summary.skipped += 1
                continue

            try:
                tokens = await self._client.refresh_token(cred.refresh_token)
            except (TransportError, DecodeError) as e:
                logger.error("Token refresh failed for resume %s: %s", cred.subject_id, e)
                summary.failed += 1
                continue

            updated = cred.model_copy(
                update={
                    "access_token": tokens.access_token,
                    "refresh_token": tokens.refresh_token,
                    "expires_in": tokens.expires_in,
                    "issued_at": int(self._clock()),
                },
            )
            try:
                self._store.update(updated)
            except PersistenceError as e:
                logger.error("Cannot save refreshed token for resume %s: %s", cred.subject_id, e)
                summary.failed += 1
                continue

            logger.info(
                "Refreshed token for resume %s (expires in %ds)",
                cred.subject_id, tokens.expires_in,
            )
            summary.refreshed += 1

        return summary
