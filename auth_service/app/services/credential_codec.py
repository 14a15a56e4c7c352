"""
Credential Codec

Issues and verifies the signed bearer credentials handed to clients.
Pure: output depends only on inputs, the configured keys and the clock.
"""

import hashlib
import logging
import secrets
from datetime import UTC, datetime, timedelta
from typing import Callable, List, Optional, Sequence
from uuid import UUID

from jose import ExpiredSignatureError, JWTError, jwt
from jose.exceptions import JWTClaimsError
from jose.utils import base64url_decode, base64url_encode
from pydantic import BaseModel, ValidationError

from auth_service.domain.base import utc_now
from auth_service.libs.result import Error, Result, Return

logger = logging.getLogger(__name__)

ACCESS_TOKEN_TYPE = "access"
REFRESH_TOKEN_TYPE = "refresh"


class CredentialClaims(BaseModel):
    """Verified claims carried by an access or refresh credential"""

    session_id: UUID
    token_type: str
    subject_id: Optional[UUID] = None
    email: Optional[str] = None
    roles: List[str] = []
    issued_at: datetime
    expires_at: datetime


def _from_timestamp(value) -> datetime:
    return datetime.fromtimestamp(int(value), UTC).replace(tzinfo=None)


def _is_canonical(credential: str) -> bool:
    """
    Each segment must re-encode to itself.

    The trailing bits of the last base64url character are dropped on decode,
    so without this check a flipped low bit would still verify.
    """
    segments = credential.split(".")
    if len(segments) != 3:
        return False
    try:
        return all(
            base64url_encode(base64url_decode(segment.encode("ascii"))).decode("ascii")
            == segment
            for segment in segments
        )
    except (ValueError, TypeError):
        return False


def key_id(secret: str) -> str:
    """Short public fingerprint of a signing secret, sent as the JWT kid header"""
    return hashlib.sha256(secret.encode("utf-8")).hexdigest()[:16]


class CredentialCodec:
    """
    JWT codec for access and refresh credentials.

    Key rotation:
    - New credentials are always signed with ``secret``
    - Credentials signed with any of ``previous_secrets`` still verify
    - Operators move the old secret into ``previous_secrets`` when rotating
      and drop it once a full refresh horizon has passed
    """

    def __init__(
        self,
        secret: str,
        access_ttl: timedelta,
        refresh_ttl: timedelta,
        previous_secrets: Sequence[str] = (),
        algorithm: str = "HS256",
        clock: Callable[[], datetime] = utc_now,
    ):
        if not secret:
            raise ValueError("Signing secret is required")
        self.secret = secret
        self.previous_secrets = tuple(s for s in previous_secrets if s)
        self.access_ttl = access_ttl
        self.refresh_ttl = refresh_ttl
        self.algorithm = algorithm
        self.clock = clock

    def issue_access_credential(
        self, subject_id: UUID, subject_claims: dict, session_id: UUID
    ) -> str:
        """
        Issue a short-lived access credential.

        Args:
            subject_id: User UUID
            subject_claims: Authorization claims (email, roles)
            session_id: Session the credential is bound to

        Returns:
            JWT string
        """
        claims = {
            "sub": str(subject_id),
            "email": subject_claims.get("email"),
            "roles": list(subject_claims.get("roles", [])),
        }
        return self._encode(ACCESS_TOKEN_TYPE, session_id, self.access_ttl, claims)

    def issue_refresh_credential(self, session_id: UUID) -> str:
        """Refresh credentials carry no authorization claims, only the session id"""
        return self._encode(REFRESH_TOKEN_TYPE, session_id, self.refresh_ttl, {})

    def verify(
        self, credential: str, expected_type: Optional[str] = None
    ) -> Result[CredentialClaims]:
        """
        Verify signature, then expiry, then claim shape.

        Returns:
            Result with CredentialClaims, or Error INVALID_CREDENTIAL /
            EXPIRED_CREDENTIAL
        """
        if not credential:
            return Return.err(Error("INVALID_CREDENTIAL", "Credential is required"))
        if not _is_canonical(credential):
            return Return.err(Error("INVALID_CREDENTIAL", "Invalid credential"))

        payload = None
        for key in self._verification_keys(credential):
            try:
                payload = jwt.decode(
                    credential,
                    key,
                    algorithms=[self.algorithm],
                    options={"verify_aud": False},
                )
                break
            except ExpiredSignatureError:
                # jose only checks exp after the signature matched this key
                return Return.err(Error("EXPIRED_CREDENTIAL", "Credential has expired"))
            except JWTClaimsError as e:
                logger.debug(f"Credential claims rejected: {e}")
                return Return.err(Error("INVALID_CREDENTIAL", "Invalid credential"))
            except JWTError:
                continue

        if payload is None:
            return Return.err(Error("INVALID_CREDENTIAL", "Invalid credential"))

        token_type = payload.get("type")
        if expected_type is not None and token_type != expected_type:
            return Return.err(Error("INVALID_CREDENTIAL", "Invalid credential type"))

        try:
            claims = CredentialClaims(
                session_id=payload.get("sid"),
                token_type=token_type,
                subject_id=payload.get("sub"),
                email=payload.get("email"),
                roles=payload.get("roles") or [],
                issued_at=_from_timestamp(payload["iat"]),
                expires_at=_from_timestamp(payload["exp"]),
            )
        except (KeyError, TypeError, ValueError, ValidationError):
            return Return.err(Error("INVALID_CREDENTIAL", "Malformed credential claims"))

        if claims.token_type == ACCESS_TOKEN_TYPE and claims.subject_id is None:
            return Return.err(Error("INVALID_CREDENTIAL", "Credential subject is missing"))

        return Return.ok(claims)

    def extract_session_id(self, credential: str) -> Result[UUID]:
        """
        Read the session id without verifying the signature.

        For lookup-then-verify flows only; nothing else from an unverified
        credential may be trusted.
        """
        try:
            payload = jwt.get_unverified_claims(credential)
            return Return.ok(UUID(str(payload["sid"])))
        except (JWTError, KeyError, ValueError, AttributeError):
            return Return.err(Error("INVALID_CREDENTIAL", "Malformed credential"))

    def _encode(
        self, token_type: str, session_id: UUID, ttl: timedelta, claims: dict
    ) -> str:
        now = self.clock()
        payload = {
            **claims,
            "sid": str(session_id),
            "type": token_type,
            "iat": now,
            "exp": now + ttl,
            "jti": secrets.token_urlsafe(16),
        }
        return jwt.encode(
            payload,
            self.secret,
            algorithm=self.algorithm,
            headers={"kid": key_id(self.secret)},
        )

    def _verification_keys(self, credential: str) -> List[str]:
        keys = [self.secret, *self.previous_secrets]
        try:
            kid = jwt.get_unverified_header(credential).get("kid")
        except JWTError:
            return keys
        # Try the key named by kid first, the rest still get a chance
        return sorted(keys, key=lambda k: key_id(k) != kid)
