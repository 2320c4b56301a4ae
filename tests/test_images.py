import time
from io import BytesIO

import pytest
from PIL import Image as PILImage

from poolsite.core.config import settings
from poolsite.core.images import (
    ImageValidationError,
    build_variants,
    image_etag,
    read_upload,
    store_image,
    validate_upload,
)
from poolsite.models.images import Image
from poolsite.routers import images as images_router


def _size(data: bytes):
    with PILImage.open(BytesIO(data)) as image:
        return image.size


def _fail_if_loaded(*args, **kwargs):
    raise AssertionError("image storage should not be queried")


# =========================================================
# VARIANTS
# =========================================================
def test_build_variants_sizes(image_bytes):
    variants = build_variants(image_bytes(2000, 1000), "image/png")

    assert _size(variants.original) == (2000, 1000)
    assert _size(variants.thumbnail) == (150, 150)
    assert _size(variants.medium) == (800, 400)
    assert _size(variants.large) == (1600, 800)


def test_build_variants_never_enlarges(image_bytes):
    variants = build_variants(image_bytes(300, 200), "image/png")

    assert _size(variants.medium) == (300, 200)
    assert _size(variants.large) == (300, 200)
    assert _size(variants.thumbnail) == (150, 150)


def test_build_variants_keeps_jpeg_format(image_bytes):
    variants = build_variants(image_bytes(1000, 1000, "JPEG"), "image/jpeg")

    with PILImage.open(BytesIO(variants.medium)) as medium:
        assert medium.format == "JPEG"


def test_unreadable_image_is_rejected():
    with pytest.raises(ImageValidationError):
        build_variants(b"definitely not an image", "image/png")


@pytest.mark.parametrize(
    "filename, content_type, size",
    [
        ("notes.txt", "text/plain", 10),
        ("photo.png", "application/pdf", 10),
        ("photo.bmp", "image/png", 10),
        ("photo.png", "image/png", 0),
    ],
)
def test_validate_upload_rejects(filename, content_type, size):
    with pytest.raises(ImageValidationError):
        validate_upload(filename, content_type, size)


def test_validate_upload_rejects_oversized_file():
    with pytest.raises(ImageValidationError):
        validate_upload("photo.jpg", "image/jpeg", settings.MAX_UPLOAD_BYTES + 1)


def test_store_image_persists_all_variants(db, image_bytes):
    image = store_image(
        db,
        filename="pool.png",
        content_type="image/png",
        data=image_bytes(),
        alt_text="Backyard pool",
        category="portfolio",
    )

    assert image.id is not None
    assert image.title == "pool.png"
    assert image.category == "portfolio"
    assert image.thumbnail_path == f"/api/images/{image.id}/thumbnail"
    assert _size(image.thumbnail_data) == (150, 150)


# =========================================================
# SERVING
# =========================================================
def test_serve_unknown_size_is_404_without_storage_access(client, monkeypatch):
    monkeypatch.setattr(images_router, "_load_variant", _fail_if_loaded)

    response = client.get("/api/images/1/huge")

    assert response.status_code == 404


def test_serve_matching_etag_is_304_without_storage_access(client, monkeypatch):
    monkeypatch.setattr(images_router, "_load_variant", _fail_if_loaded)

    response = client.get(
        "/api/images/7/medium",
        headers={"If-None-Match": image_etag(7, "medium")},
    )

    assert response.status_code == 304
    assert response.headers["etag"] == '"7-medium"'


def test_serve_image_variant(client, db, image_bytes):
    image = store_image(db, filename="pool.png", content_type="image/png", data=image_bytes())

    response = client.get(f"/api/images/{image.id}/thumbnail")

    assert response.status_code == 200
    assert response.headers["content-type"] == "image/png"
    assert response.headers["cache-control"] == "public, max-age=31536000, immutable"
    assert response.headers["etag"] == f'"{image.id}-thumbnail"'
    assert "last-modified" in response.headers
    assert int(response.headers["content-length"]) == len(response.content)
    assert _size(response.content) == (150, 150)


def test_serve_missing_image_is_404(client):
    response = client.get("/api/images/999/original")

    assert response.status_code == 404


def test_serve_times_out_with_503(client, monkeypatch):
    def slow_load(image_id, size):
        time.sleep(0.5)

    monkeypatch.setattr(images_router, "_load_variant", slow_load)
    monkeypatch.setattr(settings, "IMAGE_QUERY_TIMEOUT_SECONDS", 0.05)

    response = client.get("/api/images/1/large")

    assert response.status_code == 503


# =========================================================
# MEDIA LIBRARY
# =========================================================
def test_single_upload_redirects_with_message(admin_client, db, image_bytes):
    response = admin_client.post(
        "/admin/media/upload",
        files={"image": ("pool.png", image_bytes(), "image/png")},
        data={"title": "Finished pool", "category": "project"},
        follow_redirects=True,
    )

    body = response.json()
    assert body["messages"] == [{"category": "success", "message": "Image uploaded successfully"}]
    assert len(body["images"]) == 1
    assert body["images"][0]["title"] == "Finished pool"
    assert db.query(Image).count() == 1


def test_single_upload_rejects_non_image(admin_client, db):
    response = admin_client.post(
        "/admin/media/upload",
        files={"image": ("notes.txt", b"hello", "text/plain")},
        follow_redirects=True,
    )

    assert response.json()["messages"][0]["category"] == "error"
    assert db.query(Image).count() == 0


def test_read_upload_stops_past_the_limit(monkeypatch):
    class Upload:
        file = BytesIO(b"x" * 5000)

    monkeypatch.setattr(settings, "MAX_UPLOAD_BYTES", 1000)

    assert len(read_upload(Upload())) == 1001


def test_single_upload_rejects_oversized_file(admin_client, db, monkeypatch):
    monkeypatch.setattr(settings, "MAX_UPLOAD_BYTES", 1024 * 1024)

    response = admin_client.post(
        "/admin/media/upload",
        files={"image": ("pool.png", b"x" * (3 * 1024 * 1024), "image/png")},
        follow_redirects=True,
    )

    assert response.json()["messages"] == [
        {"category": "error", "message": "Image exceeds the 1MB upload limit"}
    ]
    assert db.query(Image).count() == 0


def test_multi_upload_skips_failing_files(admin_client, db, image_bytes):
    response = admin_client.post(
        "/admin/media/upload-multiple",
        files=[
            ("images", ("one.png", image_bytes(400, 300), "image/png")),
            ("images", ("notes.txt", b"hello", "text/plain")),
            ("images", ("two.jpg", image_bytes(400, 300, "JPEG"), "image/jpeg")),
        ],
    )

    body = response.json()
    assert response.status_code == 200
    assert body["success"] is True
    assert body["count"] == 2
    assert {img["id"] for img in body["images"]} == {i.id for i in db.query(Image).all()}


def test_multi_upload_with_no_valid_files_is_400(admin_client):
    response = admin_client.post(
        "/admin/media/upload-multiple",
        files=[("images", ("notes.txt", b"hello", "text/plain"))],
    )

    assert response.status_code == 400
    assert response.json()["success"] is False


def test_delete_image_json(admin_client, db, image_bytes):
    image = store_image(db, filename="pool.png", content_type="image/png", data=image_bytes())

    response = admin_client.post(
        f"/admin/media/{image.id}/delete",
        headers={"Accept": "application/json"},
    )

    assert response.json() == {
        "success": True,
        "message": "Image deleted successfully",
        "id": image.id,
    }
    assert admin_client.post(
        f"/admin/media/{image.id}/delete",
        headers={"Accept": "application/json"},
    ).status_code == 404


def test_media_api_search(admin_client, db, image_bytes):
    store_image(db, filename="pool.png", content_type="image/png", data=image_bytes(), title="Lagoon")
    store_image(db, filename="deck.png", content_type="image/png", data=image_bytes(), title="Deck")

    response = admin_client.get("/admin/api/media", params={"query": "lag"})

    assert [img["title"] for img in response.json()] == ["Lagoon"]
