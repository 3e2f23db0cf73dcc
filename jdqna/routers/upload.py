from typing import Optional

from fastapi import APIRouter, Depends, File, HTTPException, UploadFile

from jdqna.deps import get_storage
from jdqna.services.storage_service import StorageService

router = APIRouter(prefix="/api", tags=["upload"])


# POST /api/upload  (multipart: file)
@router.post("/upload")
def upload_file(
    file: Optional[UploadFile] = File(None),
    storage: StorageService = Depends(get_storage),
):
    if file is None or not file.filename:
        raise HTTPException(status_code=400, detail="No file uploaded")

    data = file.file.read()
    url = storage.upload_bytes(data, file.filename, file.content_type)
    return {"success": True, "file": {"url": url}}
