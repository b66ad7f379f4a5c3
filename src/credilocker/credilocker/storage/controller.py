from __future__ import annotations

import logging

from flask import Flask, abort, request, send_file

from ..container import Container
from ..core.exceptions import StorageError
from .paths import SIGN_PREFIX

logger = logging.getLogger(__name__)


def register(app: Flask, container: Container) -> None:
    storage = container.storage

    @app.route(f"{SIGN_PREFIX}<bucket>/<path:object_path>", endpoint="storage_signed")
    def storage_signed(bucket: str, object_path: str):
        if bucket != storage.bucket:
            abort(404)

        try:
            storage.verify_signature(object_path, request.args.get("token", ""))
            target = storage.local_path(object_path)
        except StorageError as e:
            logger.info("Refused signed download of %s: %s", object_path, e)
            abort(403)

        if not target.is_file():
            abort(404)
        return send_file(target, conditional=True)
