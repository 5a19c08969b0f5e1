"""
Media store backed by Cloudinary.
"""
import asyncio
import io

import cloudinary
import cloudinary.uploader
from starlette.concurrency import run_in_threadpool

from app.core.config import settings
from app.core.logging import get_logger
from app.utils.exceptions import MediaStoreError
from app.utils.image_utils import get_public_id_from_url

logger = get_logger(__name__)


def configure_cloudinary() -> None:
    cloudinary.config(
        cloud_name=settings.CLOUDINARY_CLOUD_NAME,
        api_key=settings.CLOUDINARY_API_KEY,
        api_secret=settings.CLOUDINARY_API_SECRET,
        secure=True,
    )


class CloudinaryMediaStore:
    """Uploads images and deletes them by URL.

    The Cloudinary SDK is blocking, so every call runs in the threadpool and
    is bounded by ``timeout`` seconds.
    """

    def __init__(self, folder: str = settings.MEDIA_FOLDER, timeout: float = settings.MEDIA_TIMEOUT_SECONDS):
        self.folder = folder
        self.timeout = timeout

    async def _call(self, func, *args, **kwargs) -> dict:
        return await asyncio.wait_for(run_in_threadpool(func, *args, **kwargs), timeout=self.timeout)

    async def upload(self, data: bytes) -> str:
        """Upload image bytes and return the durable https URL."""
        try:
            result = await self._call(
                cloudinary.uploader.upload,
                io.BytesIO(data),
                folder=self.folder,
                resource_type="image",
            )
        except asyncio.TimeoutError:
            raise MediaStoreError(f"Upload timed out after {self.timeout}s")
        except Exception as e:
            raise MediaStoreError(f"Could not upload file: {e}") from e

        url = result.get("secure_url")
        if not url:
            raise MediaStoreError("Media host returned no URL")
        logger.info("Uploaded image", url=url)
        return url

    async def delete(self, url: str) -> None:
        """Delete the asset behind ``url``. Raises MediaStoreError on failure."""
        public_id = get_public_id_from_url(url)
        if not public_id:
            raise MediaStoreError("Cannot derive a public id from URL", url=url)

        try:
            result = await self._call(cloudinary.uploader.destroy, public_id)
        except asyncio.TimeoutError:
            raise MediaStoreError(f"Delete timed out after {self.timeout}s", url=url)
        except Exception as e:
            raise MediaStoreError(f"Could not delete file: {e}", url=url) from e

        # "not found" means the asset is already gone
        if result.get("result") not in ("ok", "not found"):
            raise MediaStoreError(f"Media host refused delete: {result.get('result')}", url=url)
        logger.info("Deleted image", public_id=public_id)


media_store = CloudinaryMediaStore()
