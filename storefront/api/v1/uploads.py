# ==============================================================================
# UPLOADS ENDPOINTS - Image Upload Routes
# ==============================================================================
# Admin image uploads to the local image store
# ==============================================================================

from __future__ import annotations

from typing import List

from fastapi import APIRouter, File, UploadFile, status

from storefront.api.dependencies import AdminUser, UploadServiceDep
from storefront.core.constants import SuccessMessages
from storefront.core.settings import settings
from storefront.schemas.base import APIResponse
from storefront.schemas.upload import Base64Upload, UploadResult

router = APIRouter(prefix="/uploads", tags=["Uploads"])


async def _read_limited(upload: UploadFile) -> bytes:
    # One byte past the limit is enough for the size check to reject it
    return await upload.read(settings.UPLOAD_MAX_SIZE + 1)


@router.post(
    "/image",
    response_model=APIResponse[UploadResult],
    status_code=status.HTTP_201_CREATED,
    summary="Upload image",
    description="Multipart upload of one image in the `image` field.",
)
async def upload_image(
    admin: AdminUser,
    service: UploadServiceDep,
    image: UploadFile = File(...),
) -> APIResponse[UploadResult]:
    content = await _read_limited(image)
    result = await service.upload_image(content, image.content_type, image.filename)
    return APIResponse.ok(data=result, message="Image uploaded")


@router.post(
    "/images",
    response_model=APIResponse[List[UploadResult]],
    status_code=status.HTTP_201_CREATED,
    summary="Upload images",
    description="Multipart upload of several images in the `images` field.",
)
async def upload_images(
    admin: AdminUser,
    service: UploadServiceDep,
    images: List[UploadFile] = File(...),
) -> APIResponse[List[UploadResult]]:
    files = [(await _read_limited(f), f.content_type, f.filename) for f in images]
    results = await service.upload_images(files)
    return APIResponse.ok(data=results, message=f"{len(results)} images uploaded")


@router.post(
    "/base64",
    response_model=APIResponse[UploadResult],
    status_code=status.HTTP_201_CREATED,
    summary="Upload base64 image",
    description="Store an image sent as a `data:image/...;base64,` URI.",
)
async def upload_base64(
    schema: Base64Upload,
    admin: AdminUser,
    service: UploadServiceDep,
) -> APIResponse[UploadResult]:
    result = await service.upload_base64(schema.data)
    return APIResponse.ok(data=result, message="Image uploaded")


@router.delete(
    "/{public_id}",
    response_model=APIResponse[dict],
    summary="Delete image",
)
async def delete_image(
    public_id: str,
    admin: AdminUser,
    service: UploadServiceDep,
) -> APIResponse[dict]:
    await service.delete_image(public_id)
    return APIResponse.ok(message=SuccessMessages.DELETED)
