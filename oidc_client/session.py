"""Persistence of the sign-in session across the authorization redirect"""

import json
import logging
from typing import Optional

from pydantic import ValidationError

from utils.storage import Storage
from .errors import InvalidSignInSession
from .models import SignInSessionItem
from .utils import get_storage_key


logger = logging.getLogger(__name__)


class SignInSessionStore:
    """Single slot holding the PKCE verifier, state and redirect URI

    The slot lives in ephemeral storage under the client's storage key. A new
    sign-in overwrites any unconsumed item.
    """

    def __init__(self, storage: Storage, client_id: str):
        self.storage = storage
        self.key = get_storage_key(client_id)

    def has_item(self) -> bool:
        return bool(self.storage.get_item(self.key))

    def read(self) -> Optional[SignInSessionItem]:
        """Read the stored sign-in session

        Returns:
            SignInSessionItem, or None if no sign-in is pending

        Raises:
            InvalidSignInSession: If the stored value is corrupt or tampered with
        """
        raw = self.storage.get_item(self.key)
        if not raw:
            return None

        try:
            return SignInSessionItem.model_validate(json.loads(raw))
        except (json.JSONDecodeError, ValidationError) as e:
            logger.error("Stored sign-in session is invalid")
            raise InvalidSignInSession("Stored sign-in session is invalid") from e

    def write(self, item: Optional[SignInSessionItem]) -> None:
        """Store a sign-in session, or clear the slot when ``item`` is None"""
        if item is None:
            self.storage.remove_item(self.key)
            return

        self.storage.set_item(self.key, item.to_json())
