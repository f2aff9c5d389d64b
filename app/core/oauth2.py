from fastapi import Request
from fastapi.security import OAuth2PasswordBearer

# Header tokens are optional; browsers send the httpOnly cookie instead
oauth2_scheme = OAuth2PasswordBearer(tokenUrl="/auth/login", auto_error=False)

TOKEN_COOKIE_NAME = "token"


def token_from_cookie(request: Request) -> str | None:
    return request.cookies.get(TOKEN_COOKIE_NAME)
