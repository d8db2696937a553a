from typing import Optional

from fastapi import APIRouter, Header, Request, status
from fastapi.responses import JSONResponse
from pydantic import BaseModel, ConfigDict, Field

from eventbook.auth import bearer_token, check_credentials, decode_token, issue_token, ADMIN_ROLE


router = APIRouter(prefix="/auth")


class LoginRequest(BaseModel):
    model_config = ConfigDict(str_strip_whitespace=True)

    username: str = Field(..., min_length=1)
    password: str = Field(..., min_length=1)


class LoginOut(BaseModel):
    token: str
    username: str
    role: str


@router.post("/login", response_model=LoginOut)
async def login(payload: LoginRequest, request: Request):
    settings = request.app.state.settings
    if not settings.login_enabled:
        return JSONResponse(status_code=status.HTTP_503_SERVICE_UNAVAILABLE,
                            content={"error": "auth_not_configured"})
    if not check_credentials(settings, payload.username, payload.password):
        return JSONResponse(status_code=status.HTTP_401_UNAUTHORIZED, content={"error": "invalid_credentials"})
    token = issue_token(settings, payload.username)
    return LoginOut(token=token, username=payload.username, role=ADMIN_ROLE)


@router.post("/verify")
async def verify(request: Request, authorization: Optional[str] = Header(None)):
    token = bearer_token(authorization)
    if token is None:
        return JSONResponse(status_code=status.HTTP_401_UNAUTHORIZED, content={"error": "no_token"})
    claims = decode_token(request.app.state.settings, token)
    if claims is None:
        return JSONResponse(status_code=status.HTTP_401_UNAUTHORIZED, content={"error": "invalid_token"})
    return {"valid": True, "user": claims}
