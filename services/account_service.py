"""Account lifecycle: registration, login, verification, resets and removal."""

from __future__ import annotations

import hmac
import logging
from typing import Any, Mapping, Optional

from models.account import Account
from notifications import AbstractMailer, Action, Notification, build_message
from repositories import (
    AbstractAccountRepository,
    DuplicateAccountError,
    RepositoryError,
)
from repositories.abstract_repository import FILTERABLE_FIELDS

from .access_policy import AccessPolicy
from .password_hasher import PasswordHasher
from .results import (
    AlreadyExists,
    DeletionFailed,
    InvalidCredential,
    InvalidToken,
    MissingField,
    MissingToken,
    NotAuthorized,
    NotFound,
    ServiceResult,
    service_operation,
)
from .token_issuer import InvalidTokenError, TokenIssuer, TokenKind

logger = logging.getLogger(__name__)


def normalize_email(raw_email: Optional[str]) -> str:
    """Normalize an email string by stripping whitespace and lowering case."""
    return (raw_email or "").strip().lower()


def _clean(value: Optional[str]) -> str:
    return (value or "").strip()


class AccountService:
    """Orchestrates the repository, hasher, token issuer and mailer."""

    def __init__(
        self,
        repository: AbstractAccountRepository,
        mailer: AbstractMailer,
        hasher: PasswordHasher,
        tokens: TokenIssuer,
        policy: Optional[AccessPolicy] = None,
        *,
        app_url: str,
        sender: str,
        product_name: str = "E-Commerce",
    ):
        self.repository = repository
        self.mailer = mailer
        self.hasher = hasher
        self.tokens = tokens
        self.policy = policy or AccessPolicy()
        self.app_url = app_url.rstrip("/")
        self.sender = sender
        self.product_name = product_name

    # Registration and login

    @service_operation
    def register(
        self,
        email: Optional[str],
        password: Optional[str],
        firstname: Optional[str],
        lastname: Optional[str],
    ) -> ServiceResult:
        fields = {
            "email": normalize_email(email),
            "password": password or "",
            "firstname": _clean(firstname),
            "lastname": _clean(lastname),
        }
        for name, value in fields.items():
            if not value:
                raise MissingField(name)

        if self.repository.find_by_email(fields["email"]) is not None:
            raise AlreadyExists()

        try:
            account = self.repository.create(
                {
                    "email": fields["email"],
                    "password_hash": self.hasher.hash(fields["password"]),
                    "firstname": fields["firstname"],
                    "lastname": fields["lastname"],
                    "verified": False,
                }
            )
        except DuplicateAccountError as exc:
            raise AlreadyExists() from exc

        token = self.tokens.issue(
            TokenKind.EMAIL_VERIFICATION, account.id, {"email": account.email}
        )
        self._notify(
            account,
            subject="Verify Your Email",
            intro="Email Verification Link",
            action=Action(
                instructions=(
                    "If you did not request for this mail, Please Ignore it. "
                    "To Verify your Email, click on the link below:"
                ),
                button_text="Verify Email",
                link=f"{self.app_url}/users/verify/{token}",
            ),
            outro="Do not share this link with anyone.",
        )
        logger.info("Registered account %s", account.id)
        return ServiceResult.ok(f"Sent a verification email to {account.email}")

    @service_operation
    def login(self, email: Optional[str], password: Optional[str]) -> ServiceResult:
        email = normalize_email(email)
        if not email:
            raise MissingField("email")
        if not password:
            raise MissingField("password")

        account = self.repository.find_by_email(email)
        if account is None:
            raise NotFound("user does not exist, create a user before attempting to login")
        if not self.hasher.verify(password, account.password_hash):
            raise InvalidCredential()

        token = self.tokens.issue(
            TokenKind.SESSION,
            account.id,
            {
                "firstname": account.firstname,
                "lastname": account.lastname,
                "email": account.email,
                "role": account.role,
            },
        )
        return ServiceResult.ok(
            "user logged in successfully",
            data={"token": token, "account": account.public_view()},
        )

    # Email verification

    @service_operation
    def verify_email(self, token: Optional[str]) -> ServiceResult:
        if not token:
            raise MissingToken()

        claims = self._decode(TokenKind.EMAIL_VERIFICATION, token)
        account = self.repository.find_by_id(self._subject_id(claims))
        if account is None:
            raise NotFound("User does not exist")

        if not account.verified:
            self.repository.update_fields(account.id, {"verified": True})
            logger.info("Verified email for account %s", account.id)
        return ServiceResult.ok("Account Verified")

    # Listing

    @service_operation
    def list_accounts(self, filters: Optional[Mapping[str, Any]] = None) -> ServiceResult:
        normalized = {}
        for field in FILTERABLE_FIELDS:
            value = (filters or {}).get(field)
            if isinstance(value, str) and value.strip():
                normalized[field] = value.strip().lower()

        accounts = self.repository.find(normalized)
        if normalized and not accounts:
            raise NotFound("No users matched the given filters")
        return ServiceResult.ok(data=[account.public_view() for account in accounts])

    # Password reset

    @service_operation
    def request_password_reset(self, email: Optional[str]) -> ServiceResult:
        email = normalize_email(email)
        if not email:
            raise MissingField("email")

        account = self.repository.find_by_email(email)
        if account is None:
            raise NotFound()

        token = self.tokens.issue(
            TokenKind.PASSWORD_RESET,
            account.id,
            {
                "email": account.email,
                "pwd": self.tokens.fingerprint(TokenKind.PASSWORD_RESET, account.password_hash),
            },
        )
        minutes = int(self.tokens.lifetime(TokenKind.PASSWORD_RESET).total_seconds() // 60)
        self._notify(
            account,
            subject="Reset your password",
            intro="You asked to reset the password of your account.",
            action=Action(
                instructions=(
                    f"This link can be used once and expires in {minutes} minutes. "
                    "To choose a new password, click on the link below:"
                ),
                button_text="Reset Password",
                link=f"{self.app_url}/users/reset-password/{token}",
            ),
            outro="If you did not request a password reset, no further action is required.",
        )
        return ServiceResult.ok(f"Password reset link sent to {account.email}")

    @service_operation
    def check_password_reset(self, token: Optional[str]) -> ServiceResult:
        """Confirm a reset token is still usable without consuming it."""

        if not token:
            raise MissingToken()

        account = self._consume_reset_token(token)
        return ServiceResult.ok("Reset token is valid", data={"email": account.email})

    @service_operation
    def complete_password_reset(
        self, token: Optional[str], new_password: Optional[str]
    ) -> ServiceResult:
        if not token:
            raise MissingToken()
        if not new_password:
            raise MissingField("newPassword")

        account = self._consume_reset_token(token)
        return self._change_password(account, new_password)

    @service_operation
    def forgot_password(
        self,
        email: Optional[str],
        new_password: Optional[str],
        token: Optional[str],
    ) -> ServiceResult:
        """Replace the password of ``email`` given a reset token for that account."""

        email = normalize_email(email)
        if not email:
            raise MissingField("email")

        account = self.repository.find_by_email(email)
        if account is None:
            raise NotFound()
        if not token:
            raise MissingToken()
        if not new_password:
            raise MissingField("newPassword")

        if self._consume_reset_token(token).id != account.id:
            raise InvalidToken("Reset token does not belong to this account")
        return self._change_password(account, new_password)

    # Removal

    @service_operation
    def delete_account(
        self, account_id: Any, actor: Optional[Mapping[str, Any]] = None
    ) -> ServiceResult:
        if not self.policy.can_delete(actor, account_id):
            raise NotAuthorized("You are not allowed to delete this account")

        try:
            self.repository.delete(account_id)
        except RepositoryError as exc:
            raise DeletionFailed(detail=str(exc)) from exc

        logger.info("Deleted account %s", account_id)
        return ServiceResult.ok("User deleted successfully")

    # Helpers

    def _decode(self, kind: TokenKind, token: str) -> dict:
        try:
            return self.tokens.verify(kind, token)
        except InvalidTokenError as exc:
            raise InvalidToken(detail=str(exc)) from exc

    @staticmethod
    def _subject_id(claims: Mapping[str, Any]) -> int:
        try:
            return int(claims["sub"])
        except (KeyError, TypeError, ValueError) as exc:
            raise InvalidToken(detail="Token subject is not an account id") from exc

    def _consume_reset_token(self, token: str) -> Account:
        claims = self._decode(TokenKind.PASSWORD_RESET, token)
        account = self.repository.find_by_id(self._subject_id(claims))
        if account is None:
            raise NotFound()

        expected = self.tokens.fingerprint(TokenKind.PASSWORD_RESET, account.password_hash)
        if not hmac.compare_digest(str(claims.get("pwd") or ""), expected):
            raise InvalidToken("Reset token has already been used")
        return account

    def _change_password(self, account: Account, new_password: str) -> ServiceResult:
        self.repository.update_fields(
            account.id, {"password_hash": self.hasher.hash(new_password)}
        )
        self._notify(
            account,
            subject="Password reset success",
            intro="Password Reset Successfully.",
            outro="If you did not initiate this reset please contact our customer support.",
        )
        logger.info("Changed password for account %s", account.id)
        return ServiceResult.ok(
            f"Password changed successfully. Confirmation email sent to {account.email}"
        )

    def _notify(
        self,
        account: Account,
        *,
        subject: str,
        intro: str,
        outro: str = "",
        action: Optional[Action] = None,
    ) -> None:
        notification = Notification(
            name=account.lastname,
            intro=intro,
            outro=outro,
            action=action,
            product_name=self.product_name,
        )
        self.mailer.send(build_message(self.sender, account.email, subject, notification))
