from fastapi import APIRouter, Request, Response

router = APIRouter()


@router.get("/healthz")
async def healthz():
    return {"status": "ok"}


@router.get("/readyz")
async def readyz(request: Request):
    ready_event = getattr(request.app.state, "ready_event", None)
    if ready_event is not None and ready_event.is_set():
        return {"status": "ready", "accounts": request.app.state.credentials.counts()}
    return Response(status_code=503, content="not ready")
