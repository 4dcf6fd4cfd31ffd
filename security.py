"""
Bearer-token verification.

Tokens are issued by the external identity provider; this service only
verifies them and reads the caller's user id from the "id" claim.
"""
from fastapi import Depends, HTTPException, Request
from jose import JWTError, jwt

import config


def verify_token(request: Request) -> dict:
     auth = request.headers.get("Authorization")
     if not auth or not auth.startswith("Bearer "):
          raise HTTPException(status_code=401, detail="Missing token")
     token = auth.split(" ")[1]
     try:
          payload = jwt.decode(token, config.JWT_SECRET, algorithms=[config.JWT_ALGORITHM])
          return payload
     except JWTError:
          raise HTTPException(status_code=403, detail="Invalid token")


def get_actor_id(token: dict = Depends(verify_token)) -> int:
     """The acting user's id, passed explicitly into every lifecycle operation."""
     actor_id = token.get("id")
     if actor_id is None:
          raise HTTPException(status_code=403, detail="Token has no user id")
     return int(actor_id)
