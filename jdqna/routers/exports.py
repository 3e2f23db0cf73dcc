import time

from fastapi import APIRouter, Body, Depends, HTTPException
from fastapi.responses import Response

from jdqna.deps import get_loggers
from jdqna.services import export_service
from jdqna.services.logger import LoggerRegistry

router = APIRouter(prefix="/api", tags=["export"])


# POST /api/export-questions
# body: {questions: [...], format: csv|excel|pdf|flocareer-csv|flocareer-excel, filename?, maxLength?, title?}
@router.post("/export-questions")
def export_questions(
    payload: dict = Body(...),
    loggers: LoggerRegistry = Depends(get_loggers),
):
    questions = payload.get("questions")
    if not isinstance(questions, list):
        raise HTTPException(status_code=400, detail="Questions array is required")

    fmt = payload.get("format")
    max_length = payload.get("maxLength")
    if max_length is not None and (isinstance(max_length, bool) or not isinstance(max_length, int) or max_length < 0):
        raise HTTPException(status_code=400, detail="maxLength must be a non-negative integer")

    try:
        body, ext, mime = export_service.render_export(fmt, questions, max_length, payload.get("title"))
    except ValueError as e:
        raise HTTPException(status_code=400, detail=str(e))

    filename = payload.get("filename") or f"interview-questions-{int(time.time() * 1000)}.{ext}"
    loggers.get("export").info("exported %d questions as %s", len(questions), fmt)
    return Response(
        content=body,
        media_type=mime,
        headers={"Content-Disposition": f'attachment; filename="{filename}"'},
    )
