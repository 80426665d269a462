from fastapi import APIRouter, File, Request, UploadFile
from starlette.responses import FileResponse
from starlette.staticfiles import NotModifiedResponse, StaticFiles
from tvboard.schemas.image import ImageOut, ImagePageOut, ImageUploadIn, ImageUploadOut
from tvboard.services import images

router = APIRouter(prefix="/api/images", tags=["images"])

# Stored names are never reused, so a served name is immutable.
IMMUTABLE_CACHE_CONTROL = "public, max-age=31536000, immutable"

# Only used for its If-None-Match / If-Modified-Since evaluation.
_conditional = StaticFiles(check_dir=False)


@router.get("", response_model=list[ImageOut])
def list_images():
    return images.list_images()


@router.get("/page", response_model=ImagePageOut)
def list_images_page(page: int = 1, limit: int = 20):
    return images.list_images_page(page, limit)


@router.post("/upload", response_model=ImageUploadOut)
def upload_image(payload: ImageUploadIn):
    return images.save_upload(payload.filename, payload.data, payload.mime_type)


@router.post("/upload-file", response_model=ImageUploadOut)
def upload_image_file(file: UploadFile = File(...)):
    return images.save_upload_file(file)


@router.get("/{filename}/info", response_model=ImageOut)
def get_image_info(filename: str):
    return images.get_image(filename)


@router.api_route("/{filename}", methods=["GET", "HEAD"])
def serve_image(filename: str, request: Request):
    found = images.locate_image(filename)
    response = FileResponse(
        found.path,
        media_type=found.media_type,
        headers={"Cache-Control": IMMUTABLE_CACHE_CONTROL},
        stat_result=found.stat_result,
    )
    if _conditional.is_not_modified(response.headers, request.headers):
        return NotModifiedResponse(response.headers)
    return response


@router.delete("/{filename}")
def delete_image(filename: str):
    images.delete_image(filename)
    return {"success": True, "message": "Image deleted successfully"}
