# tokenauth/services/auth/service.py
from __future__ import annotations

from typing import NoReturn

from tokenauth.core.security import MalformedTokenError, decode_refresh_token, parse_user_id
from tokenauth.services._shared.base import BaseService, ServiceContext
from tokenauth.services._shared.errors import (
    InputValidationError,
    NotFoundError,
    ServiceError,
    UnauthorizedError,
)
from tokenauth.services._shared.ports import AuthRecord, CredentialGenerator, CredentialStore
from tokenauth.services.auth.dto import IssueIn, RotateIn, RotationConfig, TokenPairOut


class TokenRotationService(BaseService):
    """
    Token lifecycle service (initial issuance / refresh rotation).

    Ordering
    --------
    New credentials are always minted *before* the store is touched, and the
    store write is the last step. A failure anywhere leaves the previously
    issued refresh token valid, so a client may retry with it.

    Concurrency
    -----------
    Rotations for the same user are not serialized. Two requests presenting
    the same valid token can both pass verification; the last ``save`` wins
    and the other caller's new refresh token is stale immediately.
    """

    def __init__(
        self,
        *,
        generator: CredentialGenerator,
        store: CredentialStore,
        cfg: RotationConfig | None = None,
        ctx: ServiceContext | None = None,
    ) -> None:
        """
        Initialize the service with its dependencies.

        :param generator: Mints access tokens and hashed refresh tokens.
        :param store: Holds one refresh-token hash per user.
        :param cfg: Store timeout configuration.
        :param ctx: Request-scoped context.
        """
        super().__init__(ctx=ctx)
        self.generator = generator
        self.store = store
        self.cfg = cfg or RotationConfig()

    @property
    def _timeout(self) -> float:
        return self.cfg.store_timeout.total_seconds()

    # ------------------------------------------------------------------ #
    # Initial issuance
    # ------------------------------------------------------------------ #

    def issue_for_user(self, dto: IssueIn) -> TokenPairOut:
        """
        Mint a first (or replacement) token pair for ``dto.user_id``.

        :raises InputValidationError: Empty or non-UUID GUID.
        :raises SigningError | EntropyError: Generator failure, nothing stored.
        :raises PersistenceError: Store failure, tokens discarded.
        """
        op = "auth.issue_for_user"
        try:
            user_id = str(parse_user_id(dto.user_id))
        except ValueError as exc:
            self._fail(op, InputValidationError("Invalid user id", op=op), exc)

        return self._mint_and_save(op, user_id)

    # ------------------------------------------------------------------ #
    # Rotation
    # ------------------------------------------------------------------ #

    def rotate(self, dto: RotateIn) -> TokenPairOut:
        """
        Exchange a valid refresh token for a new pair.

        Steps: validate shape (no store access) → verify against the claimed
        user's record → mint new pair → overwrite the stored hash.

        :raises InputValidationError: Empty or malformed token.
        :raises UnauthorizedError: Unknown, stale or forged token.
        :raises SigningError | EntropyError | PersistenceError: Internal failure;
            the presented token stays valid.
        """
        op = "auth.rotate"
        try:
            selector, _ = decode_refresh_token((dto.refresh_token or "").strip())
        except MalformedTokenError as exc:
            self._fail(op, InputValidationError("Malformed refresh token", op=op), exc)

        user_id = str(selector)
        try:
            self.store.verify_and_fetch(user_id, dto.refresh_token.strip(), timeout=self._timeout)
        except NotFoundError as exc:
            self._fail(op, UnauthorizedError(op=op), exc, user_id=user_id)
        except ServiceError as exc:
            self._fail(op, exc, exc, user_id=user_id)

        return self._mint_and_save(op, user_id)

    # ------------------------------------------------------------------ #
    # Helpers
    # ------------------------------------------------------------------ #

    def _mint_and_save(self, op: str, user_id: str) -> TokenPairOut:
        # 1) Generate everything first: no mutation has happened yet
        try:
            access = self.generator.issue_access_token(user_id)
            refresh = self.generator.issue_refresh_token(user_id)
        except ServiceError as exc:
            self._fail(op, exc, exc, user_id=user_id)

        # 2) Single write, last step
        record = AuthRecord(
            user_id=user_id,
            refresh_token_hash=refresh.token_hash,
            updated_at=self.now_utc(),
        )
        try:
            self.store.save(record, timeout=self._timeout)
        except ServiceError as exc:
            self._fail(op, exc, exc, user_id=user_id)

        self.log.info("tokens.issued", extra={"op": op, "user_id": user_id})
        return TokenPairOut(access_token=access, refresh_token=refresh.token)

    def _fail(
        self,
        op: str,
        error: ServiceError,
        cause: BaseException,
        *,
        user_id: str | None = None,
    ) -> NoReturn:
        """Log ``cause`` in full and raise ``error`` to the caller."""
        extra = {"op": error.op or op, "user_id": user_id, "error": repr(cause)}
        if isinstance(error, InputValidationError | UnauthorizedError):
            self.log.warning("tokens.rejected", extra=extra)
        else:
            self.log.error("tokens.failed", extra=extra, exc_info=cause)
        if error is cause:
            raise error
        raise error from cause
