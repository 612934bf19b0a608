from fastapi import APIRouter, Request, Depends
from fastapi.responses import JSONResponse
from sqlalchemy.orm import Session
from starlette.concurrency import run_in_threadpool

from app.db.session import get_db
from app.services.revenuecat_webhook import handle_webhook

router = APIRouter(prefix="/revenuecat", tags=["revenuecat"])

@router.post("/webhook")
async def revenuecat_webhook(request: Request, db: Session = Depends(get_db)):
    # Raw body: parsing (and the 400 for bad JSON) belongs to the handler,
    # after the Authorization check
    body = await request.body()
    outcome = await run_in_threadpool(
        handle_webhook, db, request.headers.get("authorization"), body
    )
    return JSONResponse(status_code=outcome.status_code, content=outcome.body)
