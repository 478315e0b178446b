from fastapi import APIRouter, HTTPException, Query
from fastapi.responses import FileResponse, PlainTextResponse, Response

from ordertracker.apps.api.dependencies import ServicesDep
from ordertracker.apps.api.errors import unwrap_or_raise
from ordertracker.apps.api.schemas import LogTaskOut
from ordertracker.services import LogTaskStatus

router = APIRouter(prefix="/api/logs", tags=["logs"])

DATE_QUERY = Query(..., description="Date in YYYY-MM-DD format", examples=["2025-03-14"])


@router.get("/view", response_class=PlainTextResponse)
async def view_logs(services: ServicesDep, date: str = DATE_QUERY):
    return PlainTextResponse(unwrap_or_raise(services.logs.view_logs(date)))


@router.get("/download")
async def download_logs(services: ServicesDep, date: str = DATE_QUERY) -> Response:
    content = unwrap_or_raise(services.logs.view_logs(date))
    return Response(
        content=content,
        media_type="application/octet-stream",
        headers={"Content-Disposition": f"attachment; filename=logs-{date}.log"},
    )


@router.post("", response_model=LogTaskOut, status_code=202)
async def create_log_task(services: ServicesDep, date: str = DATE_QUERY):
    return unwrap_or_raise(services.logs.create_task(date))


@router.get("/{task_id}/status", response_model=LogTaskOut)
async def log_task_status(task_id: str, services: ServicesDep):
    task = services.logs.get_task(task_id)
    if task is None:
        raise HTTPException(status_code=404, detail=f"Log task not found with id: {task_id}")
    return task


@router.get("/{task_id}/file")
async def log_task_file(task_id: str, services: ServicesDep) -> FileResponse:
    task = services.logs.get_task(task_id)
    if task is None or task.status != LogTaskStatus.READY or task.file_path is None:
        raise HTTPException(status_code=404, detail="Log file is not ready")
    return FileResponse(task.file_path, filename=task.file_path.name)
