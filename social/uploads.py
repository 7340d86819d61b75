import logging

import cloudinary
import cloudinary.uploader
from django.conf import settings

logger = logging.getLogger(__name__)

# Square thumbnail used by post cards
CROP_TRANSFORMATION = "c_fill,g_auto,w_600,h_600"


def cropped_url(secure_url):
    return secure_url.replace("/upload/", f"/upload/{CROP_TRANSFORMATION}/", 1)


def _configure():
    cloudinary.config(
        cloud_name=settings.CLOUDINARY_CLOUD_NAME,
        api_key=settings.CLOUDINARY_API_KEY,
        api_secret=settings.CLOUDINARY_API_SECRET,
        secure=True,
    )


def upload_files(files):
    """
    Upload ``files`` to object storage.

    Returns a list of {"original": url, "cropped": url}. Raises
    cloudinary.exceptions.Error (or ValueError for a reply without a URL)
    when an upload fails.
    """
    _configure()
    results = []
    for f in files:
        result = cloudinary.uploader.upload(
            f,
            folder=settings.CLOUDINARY_UPLOAD_FOLDER,
            resource_type="auto",
        )
        secure_url = result.get("secure_url")
        if not secure_url:
            raise ValueError("Upload failed: missing secure_url")
        results.append({"original": secure_url, "cropped": cropped_url(secure_url)})
        logger.info(f"Uploaded {getattr(f, 'name', 'file')} to {secure_url}")
    return results
