"""Security related functions."""

import secrets

import bcrypt
import jwt
from jwt import InvalidTokenError

# bcrypt only looks at the first 72 bytes of a password
BCRYPT_MAX_BYTES = 72


def hash_password(password: str) -> str:
    """Hash a password with a fresh bcrypt salt."""
    return bcrypt.hashpw(password.encode("utf-8")[:BCRYPT_MAX_BYTES], bcrypt.gensalt()).decode(
        "utf-8"
    )


def verify_password(password: str, password_hash: str | None) -> bool:
    """Check a password against a stored bcrypt hash."""
    if not password_hash:
        return False
    try:
        return bcrypt.checkpw(
            password.encode("utf-8")[:BCRYPT_MAX_BYTES], password_hash.encode("utf-8")
        )
    except ValueError:
        return False


def generate_token(nbytes: int = 32) -> str:
    """Opaque random token for sessions and verification links."""
    return secrets.token_urlsafe(nbytes)


class SessionTokenSigner:
    """
    Wraps opaque session tokens in a signed envelope.

    Clients receive ``jwt(HS256, {"token": <session token>})`` in the session
    cookie or as a bearer token. The signature lets the server discard forged
    or tampered values before touching the database. The envelope carries no
    expiry: the session row decides validity, so sliding refreshes keep
    working without reissuing the client value.

    :ivar secret: HMAC secret used to sign and verify envelopes.
    :type secret: str
    :ivar algorithm: JWT algorithm.
    :type algorithm: str
    """

    algorithm = "HS256"

    def __init__(self, secret: str):
        self.secret = secret

    def sign(self, token: str) -> str:
        """Produce the client-facing value for a session token."""
        return jwt.encode({"token": token}, self.secret, algorithm=self.algorithm)

    def unsign(self, value: str | None) -> str | None:
        """Return the session token inside a signed value, or ``None`` if invalid."""
        if not value:
            return None
        try:
            payload = jwt.decode(value, self.secret, algorithms=[self.algorithm])
        except InvalidTokenError:
            return None
        token = payload.get("token")
        return token if isinstance(token, str) and token else None
