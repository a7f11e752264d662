import json
from typing import Any, Optional

from fastapi import APIRouter, Depends, Request, Response, status
from fastapi.responses import JSONResponse
from starlette.concurrency import run_in_threadpool

from ..dispatcher import RequestDispatcher

router = APIRouter()

# Every verb is routed to the dispatcher so unsupported ones get a 405 envelope
# instead of the framework's default body.
TASK_METHODS = ["GET", "POST", "PUT", "DELETE", "PATCH", "HEAD", "OPTIONS"]


def get_dispatcher(request: Request) -> RequestDispatcher:
    """Dependency returning the dispatcher bound to this application."""
    return request.app.state.dispatcher


async def _read_body(request: Request) -> Any:
    raw = await request.body()
    if not raw:
        return None
    try:
        return json.loads(raw)
    except ValueError:
        return None


async def _handle(request: Request, task_id: Optional[str], dispatcher: RequestDispatcher) -> Response:
    if request.method == "OPTIONS":
        return Response(status_code=status.HTTP_200_OK)

    body = await _read_body(request)
    # Store I/O blocks, so keep it off the event loop.
    result = await run_in_threadpool(dispatcher.dispatch, request.method, task_id, body)
    return JSONResponse(status_code=result.status_code, content=result.envelope.to_dict())


@router.api_route("/tasks", methods=TASK_METHODS)
async def tasks_collection(
    request: Request,
    dispatcher: RequestDispatcher = Depends(get_dispatcher),
):
    """List (GET) or create (POST) tasks."""
    return await _handle(request, None, dispatcher)


@router.api_route("/tasks/{task_id}", methods=TASK_METHODS)
async def tasks_item(
    request: Request,
    task_id: str,
    dispatcher: RequestDispatcher = Depends(get_dispatcher),
):
    """Update (PUT) or delete (DELETE) a single task."""
    return await _handle(request, task_id, dispatcher)
