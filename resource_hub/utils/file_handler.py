import os
from fastapi import UploadFile, HTTPException
from ..config import settings

PDF_CONTENT_TYPES = {"application/pdf", "application/x-pdf"}


def file_extension(filename: str) -> str:
    return os.path.splitext(filename or "")[1].lower()


def is_pdf(filename: str, content_type: str = None) -> bool:
    """Only PDFs go through text extraction and classification"""
    if content_type in PDF_CONTENT_TYPES:
        return True
    return file_extension(filename) == ".pdf"


def read_upload_file(upload_file: UploadFile) -> bytes:
    """Read an uploaded file into memory, enforcing type and size limits"""
    if file_extension(upload_file.filename) not in settings.allowed_extensions:
        raise HTTPException(
            status_code=415,
            detail=(
                "Unsupported file type. Allowed: "
                + ", ".join(settings.allowed_extensions)
            ),
        )

    file_size = 0
    chunk_size = 1024 * 1024  # 1MB
    chunks = []

    while chunk := upload_file.file.read(chunk_size):
        file_size += len(chunk)
        if file_size > settings.max_file_size:
            raise HTTPException(status_code=413, detail="File too large")
        chunks.append(chunk)

    if file_size == 0:
        raise HTTPException(status_code=400, detail="Uploaded file is empty")

    return b"".join(chunks)


def format_file_size(num_bytes: int) -> str:
    size = float(num_bytes)
    for unit in ("B", "KB", "MB"):
        if size < 1024 or unit == "MB":
            return f"{size:.0f} {unit}" if unit == "B" else f"{size:.1f} {unit}"
        size /= 1024
