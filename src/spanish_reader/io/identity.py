"""Session identity used to route persistence calls."""

import logging
from typing import Optional

logger = logging.getLogger(__name__)


class IdentityContext:
    """Holds the signed-in learner, if any.

    Authentication itself happens elsewhere; whoever completes a sign-in
    reports the user id here. Readers query it on every call, so changes
    take effect immediately.
    """

    def __init__(self, user_id: Optional[str] = None) -> None:
        self._user_id = user_id

    @property
    def user_id(self) -> Optional[str]:
        return self._user_id

    @property
    def is_signed_in(self) -> bool:
        return self._user_id is not None

    def sign_in(self, user_id: str) -> None:
        if not user_id:
            raise ValueError("user_id must not be empty")
        logger.info("Signed in as %s", user_id)
        self._user_id = user_id

    def sign_out(self) -> None:
        logger.info("Signed out")
        self._user_id = None
