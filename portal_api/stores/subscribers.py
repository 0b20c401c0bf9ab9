from __future__ import annotations

from datetime import datetime, timezone
from typing import Optional

from ..documents import DocumentStore, InsertOneResult
from ..errors import DuplicateKey, DuplicateSubscriber, MissingField
from ..logging_config import get_logger

logger = get_logger(__name__)

SUBSCRIBERS_COLLECTION = "subscribers"


class SubscriberStore:
    def __init__(self, store: DocumentStore):
        self._subscribers = store.collection(SUBSCRIBERS_COLLECTION)

    def subscribe(self, email: Optional[str]) -> InsertOneResult:
        """Record a newsletter subscriber, one record per exact email.

        The read check gives the common duplicate a cheap answer; the unique
        key on insert rejects a concurrent duplicate that passed the check.
        """
        if not email:
            raise MissingField("Email is required")
        if self._subscribers.find_one({"email": email}) is not None:
            logger.warning("duplicate subscription email=%s", email)
            raise DuplicateSubscriber()
        try:
            result = self._subscribers.insert_one(
                {"email": email, "subscribedAt": datetime.now(timezone.utc)},
                unique_key=email,
            )
        except DuplicateKey as exc:
            logger.warning("duplicate subscription rejected on insert email=%s", email)
            raise DuplicateSubscriber() from exc
        logger.info("subscribed email=%s", email)
        return result
