import os, time, jwt

SIGN_KEY = os.getenv("APP_JWT_SIGNING_KEY", "dev-app-jwt")
EXP_MIN  = int(os.getenv("APP_JWT_EXPIRE_MIN", "10080"))  # 7일
ISSUER   = "rose-bud-thorn"
ALGORITHM = "HS256"

def issue_app_jwt(sub: str, extra: dict | None = None) -> str:
    now = int(time.time())
    payload = {"iss": ISSUER, "sub": str(sub), "iat": now, "exp": now + EXP_MIN * 60}
    if extra:
        # None 값 클레임(picture 없음 등)은 싣지 않는다
        payload.update({k: v for k, v in extra.items() if v is not None})
    return jwt.encode(payload, SIGN_KEY, algorithm=ALGORITHM)

def verify_app_jwt(token: str) -> dict:
    return jwt.decode(
        token,
        SIGN_KEY,
        algorithms=[ALGORITHM],
        issuer=ISSUER,
        options={"require": ["sub", "exp"]},
    )
