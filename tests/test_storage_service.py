import os
import re

import pytest

from app.errors import RemoteServiceError, ValidationError
from app.services import StorageService


def test_build_object_path_sanitizes(ctx):
    path = StorageService.build_object_path("units", 7, 3, "Sea View #2", "my photo (1).JPG")

    assert re.fullmatch(r"units/7/3/Sea_View__2_\d+_[0-9a-f]{8}_my_photo__1_\.JPG", path)


def test_public_url_round_trip(ctx):
    url = StorageService.get_public_url("units", "units/1/2/a.png")

    assert url == "/static/uploads/units/units/1/2/a.png"
    assert StorageService.path_from_public_url("units", url) == "units/1/2/a.png"
    assert StorageService.path_from_public_url("units", "https://cdn.example.com/x.png") is None


def test_upload_refuses_overwrite(ctx, make_image):
    StorageService.upload("units", "a/b.png", make_image("b.png"))

    with pytest.raises(RemoteServiceError):
        StorageService.upload("units", "a/b.png", make_image("b.png"))
    StorageService.upload("units", "a/b.png", make_image("b.png"), upsert=True)


def test_remove_deletes_objects(ctx, make_image):
    StorageService.upload("units", "a/c.png", make_image("c.png"))
    target = os.path.join(ctx.config["UPLOAD_DIR"], "units", "a", "c.png")
    assert os.path.exists(target)

    assert StorageService.remove("units", ["a/c.png", "a/missing.png"]) == ["a/c.png"]
    assert not os.path.exists(target)


def test_paths_cannot_escape_bucket(ctx, make_image):
    with pytest.raises(ValidationError):
        StorageService.upload("units", "../outside.png", make_image("x.png"))


def test_verify_image_rejects_spoofed_bytes(ctx):
    from io import BytesIO

    from werkzeug.datastructures import FileStorage

    fake = FileStorage(stream=BytesIO(b"not an image"), filename="fake.png", content_type="image/png")
    with pytest.raises(ValidationError):
        StorageService.verify_image(fake)
