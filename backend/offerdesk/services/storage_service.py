# Overview: Image upload storage for company logos, product images and external items.

from __future__ import annotations

import os
import secrets
import time

from flask import current_app
from werkzeug.datastructures import FileStorage
from werkzeug.utils import secure_filename

from ..validation import ValidationError


BUCKETS = ("company-logos", "product-images", "external-item-images")


class ImageStore:
    """
    Local-filesystem object store.

    Files land in <root>/<bucket>/<millis>_<token>_<name>; the public URL is
    <public_base_url>/<bucket>/<filename>, served by the system blueprint.
    """

    def __init__(self, root: str, public_base_url: str = "/uploads", max_bytes: int = 5 * 1024 * 1024):
        self.root = root
        self.public_base_url = public_base_url.rstrip("/")
        self.max_bytes = max_bytes

    def bucket_path(self, bucket: str) -> str:
        if bucket not in BUCKETS:
            raise ValueError(f"unknown bucket {bucket!r}")
        return os.path.join(self.root, bucket)

    def validate(self, upload: FileStorage) -> bytes:
        mimetype = upload.mimetype or ""
        if not mimetype.startswith("image/"):
            raise ValidationError("Only image files are allowed!")
        body = upload.read()
        if not body:
            raise ValidationError("Uploaded file is empty")
        if len(body) > self.max_bytes:
            raise ValidationError(f"Image exceeds {self.max_bytes // (1024 * 1024)}MB limit")
        return body

    def save(self, upload: FileStorage, bucket: str) -> str:
        body = self.validate(upload)
        directory = self.bucket_path(bucket)
        os.makedirs(directory, exist_ok=True)

        name = secure_filename(upload.filename or "") or "image"
        filename = f"{int(time.time() * 1000)}_{secrets.token_hex(4)}_{name}"
        with open(os.path.join(directory, filename), "wb") as fh:
            fh.write(body)
        return f"{self.public_base_url}/{bucket}/{filename}"

    def save_many(self, uploads: list[FileStorage], bucket: str) -> list[str]:
        # Validate everything first so a bad file does not leave half the batch on disk
        bodies = [(u, self.validate(u)) for u in uploads]
        for upload, _ in bodies:
            upload.stream.seek(0)
        return [self.save(upload, bucket) for upload, _ in bodies]


def get_image_store() -> ImageStore:
    return current_app.extensions["image_store"]
