from fastapi import APIRouter
from fastapi.responses import JSONResponse

from database import check_connection

router = APIRouter(tags=["health"])


@router.get("/health")
def health():
     if check_connection():
          return {"status": "ok", "database": "connected"}
     return JSONResponse(status_code=503, content={"status": "degraded", "database": "unreachable"})
