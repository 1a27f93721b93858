from fastapi import HTTPException, Security
from fastapi.security import HTTPBearer, HTTPAuthorizationCredentials
from jose import JWTError
from pydantic import BaseModel
from typing import Optional, List
from utils.jwt import decode_token

# Models
class CurrentUser(BaseModel):
    sub: str
    email: Optional[str] = None
    name: Optional[str] = None
    scopes: List[str] = []

# Security
# 로그인은 외부 IdP가 처리, 여기서는 발급된 토큰만 검증
security = HTTPBearer(auto_error=False)

async def get_current_user(credentials: Optional[HTTPAuthorizationCredentials] = Security(security)) -> CurrentUser:
    credentials_exception = HTTPException(
        status_code=401,
        detail="Could not validate credentials",
        headers={"WWW-Authenticate": "Bearer"},
    )
    if credentials is None:
        raise credentials_exception
    try:
        payload = decode_token(credentials.credentials)
    except JWTError:
        raise credentials_exception
    subject = payload.get("sub")
    if not subject:
        raise credentials_exception
    return CurrentUser(
        sub=subject,
        email=payload.get("email"),
        name=payload.get("name"),
        scopes=payload.get("scopes", []),
    )
