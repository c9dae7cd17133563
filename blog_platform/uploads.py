"""
File uploads for django-blog-platform.

Uploaded files are written through Django's default storage under
UPLOAD_DIR, one directory per upload type:

    uploads/featured/   featured images of posts
    uploads/images/     images embedded in post content
    uploads/pdfs/       PDF attachments
"""
import logging
import os
import random
from dataclasses import dataclass

from django.core.files.storage import default_storage
from django.utils import timezone
from PIL import Image

from .conf import blog_settings
from .exceptions import ApiError, NotFound

logger = logging.getLogger(__name__)

IMAGE = "image"
PDF = "pdf"

IMAGE_ONLY = "Only image files are allowed (jpeg, jpg, png, gif, webp)"
PDF_ONLY = "Only PDF files are allowed"
IMAGE_OR_PDF = "Only image files (jpeg, jpg, png, gif, webp) and PDF files are allowed"


@dataclass(frozen=True)
class UploadRule:
    """What an upload endpoint accepts and where it stores it."""

    field: str
    kinds: tuple
    size_setting: str
    upload_type: str = ""
    rejection: str = IMAGE_OR_PDF

    @property
    def max_size(self):
        return getattr(blog_settings, self.size_setting) * 1024 * 1024

    def target_type(self, kind):
        """Upload type directory for a file of the given kind."""
        if self.upload_type:
            return self.upload_type
        return "images" if kind == IMAGE else "pdfs"


RULES = {
    "featured": UploadRule("featured_image", (IMAGE,), "IMAGE_MAX_SIZE_MB", "featured", IMAGE_ONLY),
    "image": UploadRule("image", (IMAGE,), "IMAGE_MAX_SIZE_MB", "images", IMAGE_ONLY),
    "pdf": UploadRule("pdf", (PDF,), "PDF_MAX_SIZE_MB", "pdfs", PDF_ONLY),
    "editor": UploadRule("file", (IMAGE, PDF), "EDITOR_MAX_SIZE_MB"),
}


def file_kind(uploaded_file):
    """Classify an upload as IMAGE, PDF or None from its name and content type."""
    content_type = getattr(uploaded_file, "content_type", "") or ""
    extension = os.path.splitext(uploaded_file.name)[1].lower()
    if extension in blog_settings.IMAGE_EXTENSIONS and content_type.startswith("image/"):
        return IMAGE
    if content_type == "application/pdf":
        return PDF
    return None


def image_dimensions(uploaded_file):
    """
    Return (width, height) of an uploaded image.

    Raises ApiError if Pillow cannot decode the file or its declared size
    exceeds Image.MAX_IMAGE_PIXELS by the decompression bomb margin.
    """
    try:
        with Image.open(uploaded_file) as img:
            size = img.size
            img.verify()
    except (OSError, SyntaxError, ValueError, Image.DecompressionBombError):
        raise ApiError("Uploaded file is not a valid image")
    finally:
        uploaded_file.seek(0)
    return size


def generate_filename(field, original_name):
    """Unique name like ``image-1718000000000-123456789.png``."""
    extension = os.path.splitext(original_name)[1].lower()
    millis = int(timezone.now().timestamp() * 1000)
    return f"{field}-{millis}-{random.randint(0, 10 ** 9)}{extension}"


def storage_name(upload_type, filename):
    return f"{blog_settings.UPLOAD_DIR}/{upload_type}/{filename}"


def check_upload_type(upload_type):
    if upload_type not in blog_settings.UPLOAD_TYPES:
        raise ApiError("Invalid file type")


def save_upload(uploaded_file, rule):
    """
    Validate and store an uploaded file according to rule.

    Returns a description of the stored file for the API response.
    """
    if uploaded_file is None:
        raise ApiError("No file uploaded")

    kind = file_kind(uploaded_file)
    if kind not in rule.kinds:
        raise ApiError(rule.rejection)
    if uploaded_file.size > rule.max_size:
        raise ApiError("File too large")

    info = {}
    if kind == IMAGE:
        width, height = image_dimensions(uploaded_file)
        info.update({"width": width, "height": height})

    upload_type = rule.target_type(kind)
    name = default_storage.save(
        storage_name(upload_type, generate_filename(rule.field, uploaded_file.name)),
        uploaded_file,
    )
    logger.info("Stored upload %s (%d bytes)", name, uploaded_file.size)

    info.update({
        "filename": os.path.basename(name),
        "originalName": uploaded_file.name,
        "size": uploaded_file.size,
        "type": kind,
        "url": default_storage.url(name),
    })
    return info


def list_uploads(upload_type):
    """Describe every stored file of an upload type."""
    check_upload_type(upload_type)
    directory = f"{blog_settings.UPLOAD_DIR}/{upload_type}"
    if not default_storage.exists(directory):
        return []

    _dirs, filenames = default_storage.listdir(directory)
    files = []
    for filename in sorted(filenames):
        name = storage_name(upload_type, filename)
        files.append({
            "filename": filename,
            "size": default_storage.size(name),
            "uploadedAt": default_storage.get_created_time(name).isoformat(),
            "url": default_storage.url(name),
        })
    return files


def delete_upload(upload_type, filename):
    """Delete a stored file; raises NotFound if it does not exist."""
    check_upload_type(upload_type)
    if not filename or os.path.basename(filename) != filename or filename.startswith("."):
        raise ApiError("Invalid file name")

    name = storage_name(upload_type, filename)
    if not default_storage.exists(name):
        raise NotFound("File not found")
    default_storage.delete(name)
    logger.info("Deleted upload %s", name)


def name_for_url(url):
    """
    Map a stored file URL back to its storage name.

    Returns None for URLs that do not point into an upload directory,
    such as externally hosted images.
    """
    if not url:
        return None
    prefix = default_storage.url(f"{blog_settings.UPLOAD_DIR}/")
    if not url.startswith(prefix):
        return None
    upload_type, _, filename = url[len(prefix):].partition("/")
    if upload_type not in blog_settings.UPLOAD_TYPES:
        return None
    if not filename or os.path.basename(filename) != filename:
        return None
    return storage_name(upload_type, filename)


def discard_stored_url(url):
    """
    Remove the file behind a previously returned upload URL.

    Used when a post's featured image is replaced or the post is deleted.
    Failures are logged; they never fail the request that triggered them.
    """
    name = name_for_url(url)
    if name is None:
        return False
    try:
        default_storage.delete(name)
    except OSError:
        logger.warning("Could not delete stored file %s", name, exc_info=True)
        return False
    return True
