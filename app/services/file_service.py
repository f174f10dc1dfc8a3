"""File service for statement uploads and storage"""

import os
import uuid
from typing import Optional, Tuple
from fastapi import UploadFile
import cloudinary
import cloudinary.uploader
import cloudinary.utils
import httpx
from app.core.config import settings
from app.core.logging import LoggerMixin
from app.core.exceptions import ExternalServiceError, FileProcessingError, ValidationError


class FileService(LoggerMixin):
    """Validation and Cloudinary storage of uploaded statement files"""

    def __init__(self):
        cloudinary.config(
            cloud_name=settings.CLOUDINARY_CLOUD_NAME,
            api_key=settings.CLOUDINARY_API_KEY,
            api_secret=settings.CLOUDINARY_API_SECRET,
            secure=True,
        )

    def validate_batch(self, files) -> None:
        if not files:
            raise ValidationError("No files uploaded")
        if len(files) > settings.MAX_FILES_PER_UPLOAD:
            raise ValidationError(
                f"Too many files: at most {settings.MAX_FILES_PER_UPLOAD} per upload",
                details={"count": len(files)},
            )

    def validate_file(self, filename: str, content_type: str, size: int) -> None:
        """Reject anything that is not a PDF or a supported image"""
        if content_type not in settings.ALLOWED_FILE_TYPES:
            raise ValidationError(
                "Invalid file type. Only PDF and images are allowed.",
                details={"filename": filename, "content_type": content_type},
            )

        if size > settings.MAX_FILE_SIZE:
            raise ValidationError(
                f"File size {size} exceeds maximum allowed size {settings.MAX_FILE_SIZE}",
                details={"filename": filename},
            )

        if size == 0:
            raise ValidationError("File is empty", details={"filename": filename})

    async def read_upload(self, file: UploadFile) -> bytes:
        """Read and validate an uploaded file, returning its bytes"""
        content = await file.read()
        self.validate_file(file.filename, file.content_type, len(content))
        return content

    def generate_public_id(self, original_filename: str, user_id: str) -> str:
        _, ext = os.path.splitext(original_filename)
        return f"{user_id}/{uuid.uuid4().hex}{ext.lower()}"

    def upload(self, content: bytes, filename: str, user_id: str) -> Tuple[str, str]:
        """Upload file bytes to Cloudinary and return (public_id, secure_url)"""
        try:
            upload_result = cloudinary.uploader.upload(
                content,
                public_id=self.generate_public_id(filename, user_id),
                resource_type="raw",
                folder=settings.CLOUDINARY_FOLDER,
                use_filename=False,
                unique_filename=False,
            )

            public_id = upload_result["public_id"]
            secure_url = upload_result["secure_url"]

            self.log_operation(
                "upload_to_cloudinary",
                filename=filename,
                public_id=public_id,
                user_id=user_id
            )
            return public_id, secure_url

        except Exception as e:
            self.log_error(e, "upload_to_cloudinary", filename=filename)
            raise FileProcessingError("Failed to upload file to cloud storage")

    def delete(self, public_id: str) -> bool:
        """Delete file from Cloudinary; a failure only leaves an orphaned blob"""
        try:
            result = cloudinary.uploader.destroy(public_id, resource_type="raw")
            success = result.get("result") == "ok"
            self.log_operation("delete_from_cloudinary", public_id=public_id, success=success)
            return success
        except Exception as e:
            self.log_error(e, "delete_from_cloudinary", public_id=public_id)
            return False

    async def download(self, public_id: str, url: Optional[str] = None) -> bytes:
        """Download file content from Cloudinary.

        Uses the stored secure url when given; otherwise the delivery url is
        rebuilt from the public id.
        """
        url = url or cloudinary.utils.cloudinary_url(public_id, resource_type="raw", secure=True)[0]
        try:
            async with httpx.AsyncClient() as client:
                response = await client.get(url)
                response.raise_for_status()
        except httpx.HTTPError as e:
            self.log_error(e, "download_from_cloudinary", public_id=public_id)
            raise ExternalServiceError(
                "Failed to download file from cloud storage",
                details={"public_id": public_id},
            )

        self.log_operation(
            "download_from_cloudinary",
            public_id=public_id,
            size=len(response.content)
        )
        return response.content


file_service = FileService()
