"""Tests for the HTTP surface in main.py and api/*.py."""

import base64
import os
import tempfile
import unittest
from unittest.mock import patch

from fastapi.testclient import TestClient

from tvboard.db import Base, engine
from tvboard.main import app
from tvboard.services import images
from tvboard.services.signals import ViewerSignals, get_signals

PNG_BYTES = base64.b64decode(
    "iVBORw0KGgoAAAANSUhEUgAAAAEAAAABCAQAAAC1HAwCAAAAC0lEQVR4nGNgYAAAAAMAASsJTYQAAAAASUVORK5CYII="
)


class ApiTestCase(unittest.TestCase):

    def setUp(self):
        Base.metadata.drop_all(bind=engine)
        Base.metadata.create_all(bind=engine)
        self._tmp = tempfile.TemporaryDirectory()
        self._patch = patch.object(images, "IMAGE_DIR", os.path.join(self._tmp.name, "images"))
        self._patch.start()
        self.signals = ViewerSignals(pulse_sec=60)
        app.dependency_overrides[get_signals] = lambda: self.signals
        self.client = TestClient(app)

    def tearDown(self):
        app.dependency_overrides.clear()
        self.signals.shutdown()
        self._patch.stop()
        self._tmp.cleanup()


class TestServiceEndpoints(ApiTestCase):

    def test_root_and_health(self):
        self.assertTrue(self.client.get("/").json()["ok"])
        self.assertEqual(self.client.get("/healthz").status_code, 200)


class TestScreenEndpoints(ApiTestCase):

    def test_list_seeds_screens(self):
        resp = self.client.get("/api/screens")
        self.assertEqual(resp.status_code, 200)
        data = resp.json()
        self.assertEqual([(s["id"], s["position"], s["image_url"]) for s in data],
                         [("1", 1, "/image1.png"), ("2", 2, "/image2.png"), ("3", 3, "/image3.png")])
        self.assertTrue(all(s["created_at"] for s in data))

    def test_reorder(self):
        self.client.get("/api/screens")
        resp = self.client.put("/api/screens/order", json=[
            {"id": "1", "position": 3}, {"id": "2", "position": 1}, {"id": "3", "position": 2},
        ])
        self.assertEqual(resp.status_code, 200)
        self.assertEqual([s["id"] for s in resp.json()], ["2", "3", "1"])

    def test_reorder_unknown_id_is_404(self):
        self.client.get("/api/screens")
        resp = self.client.put("/api/screens/order", json=[{"id": "9", "position": 1}])
        self.assertEqual(resp.status_code, 404)
        self.assertEqual(resp.json()["kind"], "not_found")

    def test_update_image_validation(self):
        resp = self.client.put("/api/screens/1/image", json={"image_url": "not a url"})
        self.assertEqual(resp.status_code, 400)
        self.assertEqual(resp.json()["kind"], "validation_error")
        resp = self.client.put("/api/screens/1/image", json={"image_url": None})
        self.assertEqual(resp.status_code, 200)
        self.assertIsNone(resp.json()["image_url"])

    def test_update_image_requires_image_url_field(self):
        resp = self.client.put("/api/screens/1/image", json={})
        self.assertEqual(resp.status_code, 422)
        self.assertEqual(self.client.get("/api/screens").json()[0]["image_url"], "/image1.png")

    def test_reset_endpoints(self):
        self.client.put("/api/screens/2/image", json={"image_url": "/x.png"})
        self.assertEqual(self.client.post("/api/screens/2/reset").json()["image_url"], "/image2.png")
        self.client.put("/api/screens/3/image", json={"image_url": "/y.png"})
        data = self.client.post("/api/screens/reset").json()
        self.assertEqual([s["image_url"] for s in data], ["/image1.png", "/image2.png", "/image3.png"])
        self.assertEqual(self.client.post("/api/screens/7/reset").status_code, 404)

    def test_updates_feed(self):
        self.client.get("/api/screens")
        self.assertEqual(len(self.client.get("/api/screens/updates").json()), 3)
        resp = self.client.get("/api/screens/updates", params={"since": "2999-01-01T00:00:00Z"})
        self.assertEqual(resp.json(), [])

    def test_show_numbers(self):
        self.assertEqual(self.client.get("/api/screens/show-numbers").json(), {"show_tv_numbers": False})
        resp = self.client.put("/api/screens/show-numbers", json={"show": True})
        self.assertEqual(resp.json(), {"show_tv_numbers": True})
        self.assertTrue(self.client.get("/api/screens/show-numbers").json()["show_tv_numbers"])

    def test_trigger_reload(self):
        resp = self.client.put("/api/screens/trigger-reload", json={"trigger": True})
        self.assertEqual(resp.json(), {"trigger_reload": True})
        self.assertTrue(self.client.get("/api/screens/trigger-reload").json()["trigger_reload"])
        self.client.put("/api/screens/trigger-reload", json={"trigger": False})
        self.assertFalse(self.client.get("/api/screens/trigger-reload").json()["trigger_reload"])


class TestLayoutEndpoints(ApiTestCase):

    def test_save_restore_rename_delete(self):
        resp = self.client.post("/api/layouts", json={"name": "Evening", "tv1_url": "/a.png", "tv2_url": "/b.png"})
        self.assertEqual(resp.status_code, 200)
        layout_id = resp.json()["id"]

        restored = self.client.post(f"/api/layouts/{layout_id}/restore").json()
        self.assertEqual({s["id"]: s["image_url"] for s in restored}, {"1": "/a.png", "2": "/b.png", "3": None})

        renamed = self.client.put(f"/api/layouts/{layout_id}", json={"name": "Night"})
        self.assertEqual(renamed.json()["name"], "Night")
        self.assertEqual([item["name"] for item in self.client.get("/api/layouts").json()], ["Night"])

        self.assertEqual(self.client.delete(f"/api/layouts/{layout_id}").json(), {"ok": True})
        self.assertEqual(self.client.get(f"/api/layouts/{layout_id}").status_code, 404)
        self.assertEqual(self.client.post(f"/api/layouts/{layout_id}/restore").status_code, 404)

    def test_empty_name_is_400(self):
        resp = self.client.post("/api/layouts", json={"name": " "})
        self.assertEqual(resp.status_code, 400)


class TestImageEndpoints(ApiTestCase):

    def _upload(self, filename="logo.png"):
        resp = self.client.post("/api/images/upload", json={
            "filename": filename,
            "data": "data:image/png;base64," + base64.b64encode(PNG_BYTES).decode(),
            "mime_type": "image/png",
        })
        self.assertEqual(resp.status_code, 200)
        return resp.json()

    def test_upload_list_serve_delete(self):
        first = self._upload()
        second = self._upload()
        self.assertNotEqual(first["name"], second["name"])
        self.assertEqual(first["original_name"], "logo.png")

        listed = self.client.get("/api/images").json()
        self.assertEqual({item["name"] for item in listed}, {first["name"], second["name"]})

        resp = self.client.get(first["url"])
        self.assertEqual(resp.status_code, 200)
        self.assertEqual(resp.content, PNG_BYTES)
        self.assertEqual(resp.headers["content-type"], "image/png")
        self.assertEqual(resp.headers["content-length"], str(len(PNG_BYTES)))
        self.assertIn("immutable", resp.headers["cache-control"])
        self.assertIn("last-modified", resp.headers)

        cached = self.client.get(first["url"], headers={"If-None-Match": resp.headers["etag"]})
        self.assertEqual(cached.status_code, 304)

        info = self.client.get(f"/api/images/{first['name']}/info").json()
        self.assertEqual(info["size"], len(PNG_BYTES))

        self.assertEqual(self.client.delete(f"/api/images/{first['name']}").status_code, 200)
        self.assertEqual(self.client.get(first["url"]).status_code, 404)
        self.assertEqual(self.client.get(second["url"]).status_code, 200)

    def test_conditional_get_variants(self):
        url = self._upload()["url"]
        etag = self.client.get(url).headers["etag"]
        for value in (etag, f"\"other\", {etag}", f"W/{etag}"):
            resp = self.client.get(url, headers={"If-None-Match": value})
            self.assertEqual(resp.status_code, 304, value)
            self.assertEqual(resp.headers["etag"], etag)
            self.assertIn("immutable", resp.headers["cache-control"])
            self.assertEqual(resp.content, b"")
        resp = self.client.get(url, headers={"If-None-Match": "\"other\""})
        self.assertEqual(resp.status_code, 200)
        self.assertEqual(resp.content, PNG_BYTES)

    def test_head_image(self):
        url = self._upload()["url"]
        resp = self.client.head(url)
        self.assertEqual(resp.status_code, 200)
        self.assertEqual(resp.headers["content-type"], "image/png")
        self.assertEqual(resp.headers["content-length"], str(len(PNG_BYTES)))
        self.assertIn("etag", resp.headers)
        self.assertEqual(resp.content, b"")
        self.assertEqual(self.client.head("/api/images/missing.png").status_code, 404)

    def test_page(self):
        for _ in range(3):
            self._upload()
        data = self.client.get("/api/images/page", params={"page": 1, "limit": 2}).json()
        self.assertEqual((len(data["images"]), data["total"], data["total_pages"]), (2, 3, 2))

    def test_invalid_type(self):
        resp = self.client.post("/api/images/upload", json={"filename": "a.pdf", "data": "", "mime_type": "application/pdf"})
        self.assertEqual(resp.status_code, 400)

    def test_multipart_upload(self):
        resp = self.client.post(
            "/api/images/upload-file",
            files={"file": ("photo.png", PNG_BYTES, "image/png")},
        )
        self.assertEqual(resp.status_code, 200)
        self.assertTrue(resp.json()["name"].endswith(".png"))

    def test_serve_rejects_bad_names(self):
        self.assertEqual(self.client.get("/api/images/notes.txt").status_code, 400)
        self.assertEqual(self.client.get("/api/images/..%5Csecret.png").status_code, 400)


class TestApiKeyMiddleware(ApiTestCase):

    def test_key_required_for_admin_calls(self):
        with patch("tvboard.main.API_KEY", "secret123"):
            self.assertEqual(self.client.get("/api/screens").status_code, 401)
            self.assertEqual(self.client.get("/api/screens", headers={"X-API-Key": "wrong"}).status_code, 401)
            self.assertEqual(self.client.get("/api/screens", headers={"X-API-Key": "secret123"}).status_code, 200)
            self.assertEqual(self.client.get("/healthz").status_code, 200)

    def test_image_bytes_bypass_key(self):
        with patch("tvboard.main.API_KEY", "secret123"):
            self.assertEqual(self.client.get("/api/images/missing.png").status_code, 404)
            self.assertEqual(self.client.delete("/api/images/missing.png").status_code, 401)
