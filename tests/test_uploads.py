# ==============================================================================
# UPLOAD ENDPOINT TESTS
# ==============================================================================

import base64
import threading

import pytest

from storefront.core.exceptions import ValidationError
from storefront.core.settings import settings
from storefront.services.upload_service import UploadService
from tests.conftest import API

PNG_BYTES = b"\x89PNG\r\n\x1a\n" + b"\x00" * 32


def _image(name: str = "photo.png", content: bytes = PNG_BYTES, content_type: str = "image/png"):
    return (name, content, content_type)


class TestUploadService:
    """Unit tests against a temporary directory."""

    @pytest.mark.asyncio
    async def test_round_trip(self, tmp_path):
        service = UploadService(upload_dir=str(tmp_path), url_prefix="/media/")

        stored = await service.upload_image(PNG_BYTES, "image/png", "a.png")

        assert stored.url == f"/media/{stored.public_id}.png"
        assert (tmp_path / f"{stored.public_id}.png").read_bytes() == PNG_BYTES

        await service.delete_image(stored.public_id)
        assert not any(tmp_path.iterdir())

    @pytest.mark.asyncio
    async def test_batch_is_validated_before_writing(self, tmp_path):
        service = UploadService(upload_dir=str(tmp_path))

        with pytest.raises(ValidationError):
            await service.upload_images([
                (PNG_BYTES, "image/png", "ok.png"),
                (b"%PDF-1.7", "application/pdf", "doc.pdf"),
            ])
        assert not tmp_path.exists() or not any(tmp_path.iterdir())

    @pytest.mark.asyncio
    async def test_disk_writes_run_off_the_event_loop_thread(self, tmp_path, monkeypatch):
        service = UploadService(upload_dir=str(tmp_path))
        threads = []
        original = UploadService._write

        def recording_write(self, content, content_type):
            threads.append(threading.get_ident())
            return original(self, content, content_type)

        monkeypatch.setattr(UploadService, "_write", recording_write)

        await service.upload_image(PNG_BYTES, "image/png")
        await service.upload_images([(PNG_BYTES, "image/png", "a.png")])

        assert len(threads) == 2
        assert threading.get_ident() not in threads


class TestUploads:
    """Tests for /uploads endpoints."""

    @pytest.mark.asyncio
    async def test_requires_admin(self, auth_client):
        user_client, _ = auth_client

        response = await user_client.post(f"{API}/uploads/image", files={"image": _image()})
        assert response.status_code == 403

    @pytest.mark.asyncio
    async def test_upload_single(self, admin_client):
        admin, _ = admin_client

        response = await admin.post(f"{API}/uploads/image", files={"image": _image()})

        assert response.status_code == 201
        data = response.json()["data"]
        assert data["format"] == "png"
        assert data["size"] == len(PNG_BYTES)
        assert data["content_type"] == "image/png"
        assert data["url"] == f"/uploads/{data['public_id']}.png"

        served = await admin.get(data["url"])
        assert served.status_code == 200
        assert served.content == PNG_BYTES

    @pytest.mark.asyncio
    async def test_rejects_non_image(self, admin_client):
        admin, _ = admin_client

        response = await admin.post(
            f"{API}/uploads/image",
            files={"image": _image("notes.txt", b"hello", "text/plain")},
        )

        assert response.status_code == 400
        assert response.json()["error"]["code"] == "VALIDATION_ERROR"

    @pytest.mark.asyncio
    async def test_rejects_empty_file(self, admin_client):
        admin, _ = admin_client

        response = await admin.post(f"{API}/uploads/image", files={"image": _image(content=b"")})
        assert response.status_code == 400

    @pytest.mark.asyncio
    async def test_rejects_oversized_file(self, admin_client, monkeypatch):
        admin, _ = admin_client
        monkeypatch.setattr(settings, "UPLOAD_MAX_SIZE", len(PNG_BYTES) - 1)

        single = await admin.post(f"{API}/uploads/image", files={"image": _image()})
        assert single.status_code == 400
        assert "too large" in single.json()["error"]["message"]

        batch = await admin.post(f"{API}/uploads/images", files=[("images", _image())])
        assert batch.status_code == 400

    @pytest.mark.asyncio
    async def test_upload_multiple(self, admin_client):
        admin, _ = admin_client

        response = await admin.post(
            f"{API}/uploads/images",
            files=[
                ("images", _image("a.png")),
                ("images", _image("b.gif", b"GIF89a" + b"\x00" * 10, "image/gif")),
            ],
        )

        assert response.status_code == 201
        assert [r["format"] for r in response.json()["data"]] == ["png", "gif"]

    @pytest.mark.asyncio
    async def test_upload_base64(self, admin_client):
        admin, _ = admin_client
        data_uri = "data:image/png;base64," + base64.b64encode(PNG_BYTES).decode()

        response = await admin.post(f"{API}/uploads/base64", json={"data": data_uri})

        assert response.status_code == 201
        assert response.json()["data"]["size"] == len(PNG_BYTES)

    @pytest.mark.asyncio
    async def test_upload_base64_malformed(self, admin_client):
        admin, _ = admin_client

        not_a_uri = await admin.post(f"{API}/uploads/base64", json={"data": "hello"})
        assert not_a_uri.status_code == 400

        bad_payload = await admin.post(f"{API}/uploads/base64", json={"data": "data:image/png;base64,@@@"})
        assert bad_payload.status_code == 400

    @pytest.mark.asyncio
    async def test_delete(self, admin_client):
        admin, _ = admin_client
        uploaded = await admin.post(f"{API}/uploads/image", files={"image": _image()})
        public_id = uploaded.json()["data"]["public_id"]

        response = await admin.delete(f"{API}/uploads/{public_id}")
        assert response.status_code == 200

        again = await admin.delete(f"{API}/uploads/{public_id}")
        assert again.status_code == 404

    @pytest.mark.asyncio
    async def test_delete_rejects_path_like_ids(self, admin_client):
        admin, _ = admin_client

        response = await admin.delete(f"{API}/uploads/not-a-public-id")
        assert response.status_code == 404
