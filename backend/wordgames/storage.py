"""Thumbnail files on local disk.

Paths handed back by ``upload`` are relative to ``UPLOAD_FOLDER`` and are
what gets stored in ``game.thumbnail_image``.
"""

import os
import shutil
import uuid

from flask import current_app
from werkzeug.utils import secure_filename

from wordgames.errors import ValidationError

ALLOWED_IMAGE_EXTENSIONS = {'png', 'jpg', 'jpeg', 'gif', 'webp'}


def upload_root() -> str:
    return os.path.abspath(current_app.config['UPLOAD_FOLDER'])


def _resolve(token: str) -> str:
    root = upload_root()
    path = os.path.abspath(os.path.join(root, token))
    if os.path.commonpath([root, path]) != root:
        raise ValidationError('Invalid file path')
    return path


def check_image(file) -> str:
    filename = secure_filename(getattr(file, 'filename', None) or '')
    ext = filename.rsplit('.', 1)[-1].lower() if '.' in filename else ''
    if ext not in ALLOWED_IMAGE_EXTENSIONS:
        raise ValidationError('Thumbnail must be a png, jpg, gif or webp image')
    return ext


def upload(folder: str, file) -> str:
    ext = check_image(file)
    token = f'{folder}/{uuid.uuid4().hex}.{ext}'
    path = _resolve(token)
    os.makedirs(os.path.dirname(path), exist_ok=True)
    file.save(path)
    current_app.logger.info(f"[upload] saved {token}")
    return token


def remove(token) -> None:
    if not token:
        return
    path = _resolve(token)
    if os.path.isfile(path):
        os.remove(path)


def remove_folder(folder: str) -> None:
    path = _resolve(folder)
    if os.path.isdir(path):
        shutil.rmtree(path)
