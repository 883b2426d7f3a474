"""
Adapter: Cloudinary image storage.

Implements ImageStoragePort with a signed upload to the Cloudinary
REST API. Accepts base64 data URIs as produced by browser file inputs.
"""

import hashlib
import logging
import time
from typing import Optional

import httpx

from tradevault.domain.accounts.entities import StoredImage
from tradevault.domain.accounts.ports import ImageStoragePort
from tradevault.domain.errors import ExternalServiceError, ValidationError

logger = logging.getLogger(__name__)

SERVICE_NAME = "Cloudinary"


def sign_params(params: dict, api_secret: str) -> str:
    """Return the SHA-1 signature Cloudinary expects for upload params."""
    to_sign = "&".join(f"{key}={params[key]}" for key in sorted(params))
    return hashlib.sha1(f"{to_sign}{api_secret}".encode("utf-8")).hexdigest()


class CloudinaryImageStorage(ImageStoragePort):
    """Uploads images to a Cloudinary account.

    Args:
        cloud_name: Cloudinary cloud name.
        api_key: Cloudinary API key.
        api_secret: Cloudinary API secret used for request signing.
        timeout: HTTP timeout in seconds.
    """

    def __init__(
        self,
        cloud_name: Optional[str],
        api_key: Optional[str],
        api_secret: Optional[str],
        timeout: float = 30.0,
    ) -> None:
        self._cloud_name = cloud_name
        self._api_key = api_key
        self._api_secret = api_secret
        self._timeout = timeout

    def upload(self, data: str, folder: str) -> StoredImage:
        if not data or not data.startswith("data:image/"):
            raise ValidationError("Image must be a base64 data URI", "image")
        if not (self._cloud_name and self._api_key and self._api_secret):
            raise ExternalServiceError(SERVICE_NAME, "storage not configured")

        params = {"folder": folder, "timestamp": int(time.time())}
        form = {
            **params,
            "file": data,
            "api_key": self._api_key,
            "signature": sign_params(params, self._api_secret),
        }
        url = f"https://api.cloudinary.com/v1_1/{self._cloud_name}/image/upload"

        try:
            with httpx.Client(timeout=self._timeout) as client:
                resp = client.post(url, data=form)
                resp.raise_for_status()
                body = resp.json()
        except (httpx.HTTPError, ValueError) as exc:
            logger.error("Image upload to folder %s failed: %s", folder, exc)
            raise ExternalServiceError(SERVICE_NAME, str(exc)) from exc

        logger.info("Uploaded image %s", body.get("public_id"))
        return StoredImage(url=body["secure_url"], public_id=body["public_id"])
