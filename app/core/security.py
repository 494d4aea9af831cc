"""Security related functions."""

import jwt
from fastapi import HTTPException, status
from jwt import InvalidTokenError

from app.core.config import settings


class TokenAuthenticator:
    """
    Verifies access tokens issued by the identity provider.

    Tokens are HS256 JWTs signed with the provider's project secret and carry
    the user id in ``sub``. When no secret is configured (local development)
    the signature check is skipped so that tokens from any issuer decode.

    :ivar secret_key: The secret used to verify JWT signatures.
    :type secret_key: str | None
    :ivar algorithm: The expected signing algorithm.
    :type algorithm: str
    :ivar audience: The expected ``aud`` claim.
    :type audience: str
    """

    def __init__(
        self,
        secret_key: str | None = None,
        algorithm: str | None = None,
        audience: str | None = None,
    ):
        self.secret_key = secret_key if secret_key is not None else settings.auth_jwt_secret
        self.algorithm = algorithm or settings.auth_jwt_algorithm
        self.audience = audience or settings.auth_jwt_audience

    async def verify_token(self, token: str) -> dict:
        """
        Verifies a given JSON Web Token and returns its decoded payload.
        If the token is invalid it raises an HTTPException with status 401.

        :param token: The JWT token to be verified.
        :return: A dictionary containing the decoded payload of the token.
        """
        try:
            if self.secret_key:
                payload = jwt.decode(
                    token,
                    key=self.secret_key,
                    algorithms=[self.algorithm],
                    audience=self.audience,
                )
            else:
                payload = jwt.decode(
                    token,
                    key="",
                    options={"verify_signature": False, "verify_aud": False},
                )
        except InvalidTokenError as e:
            raise HTTPException(
                status_code=status.HTTP_401_UNAUTHORIZED,
                detail=f"Invalid authentication token: {str(e)}",
            ) from e

        if not payload.get("sub"):
            raise HTTPException(
                status_code=status.HTTP_401_UNAUTHORIZED,
                detail="Invalid token payload - missing user ID",
            )
        return payload
