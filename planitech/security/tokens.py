import uuid
from dataclasses import dataclass
from datetime import datetime, timedelta, timezone
from typing import TypedDict

from jose import jwt, JWTError

from planitech.core.errors import AuthError

# ==========================================================
# 🔧 Configuration : paramètres de génération/validation JWT
# ==========================================================

@dataclass(frozen=True)
class JWTSettings:
    """
    Configuration des tokens JWT.

    - `secret` : clé secrète pour signer/valider les tokens
    - `issuer` : émetteur (utilisé dans le payload et vérifié au décodage)
    - `algorithm` : algo de signature (HS256 recommandé)
    - `ttl` : durée de vie du token de session (24h fixes)
    """
    secret: str
    issuer: str = "planitech-api"
    algorithm: str = "HS256"
    ttl: timedelta = timedelta(hours=24)


# ==========================================================
# 🧱 Types
# ==========================================================

class DecodedToken(TypedDict, total=False):
    iss: str
    sub: str            # identifiant utilisateur
    username: str
    email: str
    jti: str
    iat: int
    exp: int


@dataclass(frozen=True)
class TokenIdentity:
    """Identité portée par un token valide."""
    user_id: int
    username: str
    email: str


# ==========================================================
# 🧩 Fonctions utilitaires
# ==========================================================

def _now() -> datetime:
    """Renvoie l'heure UTC actuelle."""
    return datetime.now(timezone.utc)

def new_jti() -> str:
    """Crée un identifiant unique pour un token."""
    return str(uuid.uuid4())


# ==========================================================
# 🎟️ Génération
# ==========================================================

def create_access_token(
    *,
    user_id: int,
    username: str,
    email: str,
    settings: JWTSettings,
    now: datetime | None = None,
) -> str:
    """
    Crée un token de session signé, valable `settings.ttl` (24h).
    """
    now = now or _now()
    payload: DecodedToken = {
        "iss": settings.issuer,
        "sub": str(user_id),
        "username": username,
        "email": email,
        "jti": new_jti(),
        "iat": int(now.timestamp()),
        "exp": int((now + settings.ttl).timestamp()),
    }
    return jwt.encode(payload, settings.secret, algorithm=settings.algorithm)


# ==========================================================
# 🔍 Décodage / Validation
# ==========================================================

def decode_token(token: str, settings: JWTSettings) -> DecodedToken:
    """
    Décode et valide un token JWT (signature + expiration + émetteur).
    Lève AuthError si le token est invalide, expiré ou mal formé.
    """
    if not token:
        raise AuthError("Access token required")
    try:
        decoded = jwt.decode(
            token,
            settings.secret,
            algorithms=[settings.algorithm],
            issuer=settings.issuer,
            options={"verify_aud": False},
        )
    except JWTError as e:
        raise AuthError("Invalid or expired token") from e
    return decoded  # type: ignore[return-value]


def verify_token(token: str, settings: JWTSettings) -> TokenIdentity:
    decoded = decode_token(token, settings)
    try:
        user_id = int(decoded["sub"])
    except (KeyError, TypeError, ValueError) as e:
        raise AuthError("Invalid or expired token") from e
    return TokenIdentity(
        user_id=user_id,
        username=decoded.get("username", ""),
        email=decoded.get("email", ""),
    )
