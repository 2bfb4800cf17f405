from __future__ import annotations

from typing import Protocol

from rest_framework_simplejwt.exceptions import TokenError
from rest_framework_simplejwt.settings import api_settings
from rest_framework_simplejwt.tokens import AccessToken

from .exceptions import TokenVerificationError


class TokenVerifier(Protocol):
    def verify(self, token: str, user_id: str) -> None:
        """Raise :class:`TokenVerificationError` unless ``token`` belongs to ``user_id``."""


class JWTTokenVerifier:
    """Checks a simplejwt access token and the user id claim it carries.

    Only the signature, expiry and token type are checked; the user row is
    not loaded.
    """

    def verify(self, token: str, user_id: str) -> None:
        try:
            validated = AccessToken(token)
        except TokenError as exc:
            raise TokenVerificationError(self._rejection_reason(token)) from exc

        claimed = validated.get(api_settings.USER_ID_CLAIM)
        if claimed is None or str(claimed) != user_id:
            msg = "token_user_mismatch"
            raise TokenVerificationError(msg)

    @staticmethod
    def _rejection_reason(token: str) -> str:
        # The frontend refreshes its token on this exact string.
        try:
            unverified = AccessToken(token, verify=False)
        except TokenError:
            return "unauthorized"
        try:
            unverified.check_exp()
        except TokenError:
            return "jwt_expired"
        return "unauthorized"
