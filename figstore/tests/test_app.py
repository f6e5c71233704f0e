import unittest

from fastapi.testclient import TestClient

from figstore.app import create_app
from figstore.cache import InMemoryCacheClient
from figstore.db import InMemoryDurableClient
from figstore.dependencies import get_figure_store
from figstore.errors import DurableUnavailable, RenderError
from figstore.routes import CACHE_HIT_HEADER, get_renderer
from figstore.store import FigureStore


def fake_render(text: str) -> str:
    return f"< {text} >"


def failing_render(text: str) -> str:
    raise RenderError("unrenderable")


class BrokenDurable:
    def upsert(self, name, message):
        raise DurableUnavailable("database is down")

    def get(self, name):
        raise DurableUnavailable("database is down")


class FigureApiTests(unittest.TestCase):
    def setUp(self):
        self.cache = InMemoryCacheClient()
        self.durable = InMemoryDurableClient()
        self.app = create_app()
        self.app.dependency_overrides[get_renderer] = lambda: fake_render
        self.use_store(FigureStore(cache=self.cache, durable=self.durable))
        self.client = TestClient(self.app)

    def use_store(self, store: FigureStore) -> None:
        self.app.dependency_overrides[get_figure_store] = lambda: store

    def test_post_then_get(self):
        response = self.client.post("/items/alice", content="hello")
        self.assertEqual(response.status_code, 201)
        self.assertEqual(self.durable.get("alice"), "< hello >")

        response = self.client.get("/items/alice")
        self.assertEqual(response.status_code, 200)
        self.assertEqual(response.text, "< hello >")
        self.assertEqual(response.headers.get(CACHE_HIT_HEADER), "true")

    def test_read_through_sets_header_only_on_hit(self):
        self.durable.upsert("alice", "stored")
        first = self.client.get("/items/alice")
        self.assertEqual(first.status_code, 200)
        self.assertEqual(first.text, "stored")
        self.assertIsNone(first.headers.get(CACHE_HIT_HEADER))

        second = self.client.get("/items/alice")
        self.assertEqual(second.headers.get(CACHE_HIT_HEADER), "true")

    def test_missing_figure_is_404(self):
        response = self.client.get("/items/bob")
        self.assertEqual(response.status_code, 404)

    def test_durable_read_failure_is_500(self):
        self.use_store(FigureStore(cache=self.cache, durable=BrokenDurable()))
        response = self.client.get("/items/alice")
        self.assertEqual(response.status_code, 500)

    def test_durable_write_failure_is_500(self):
        self.use_store(FigureStore(cache=self.cache, durable=BrokenDurable()))
        response = self.client.post("/items/alice", content="hello")
        self.assertEqual(response.status_code, 500)
        self.assertEqual(self.cache.entries, {})

    def test_render_failure_is_500(self):
        self.app.dependency_overrides[get_renderer] = lambda: failing_render
        response = self.client.post("/items/alice", content="hello")
        self.assertEqual(response.status_code, 500)
        self.assertEqual(self.durable.records, {})

    def test_cache_only_mode(self):
        self.use_store(FigureStore(cache=self.cache))
        self.assertEqual(self.client.post("/items/alice", content="hi").status_code, 201)
        response = self.client.get("/items/alice")
        self.assertEqual(response.text, "< hi >")
        self.assertEqual(response.headers.get(CACHE_HIT_HEADER), "true")

    def test_ephemeral_mode(self):
        self.use_store(FigureStore())
        response = self.client.post("/items/alice", content="hello")
        self.assertEqual(response.status_code, 500)

        response = self.client.get("/items/alice")
        self.assertEqual(response.status_code, 200)
        self.assertIn("alice", response.text)
        self.assertTrue(response.text.startswith("< "))
        self.assertIsNone(response.headers.get(CACHE_HIT_HEADER))

    def test_ephemeral_placeholder_render_failure_is_500(self):
        self.use_store(FigureStore())
        self.app.dependency_overrides[get_renderer] = lambda: failing_render
        self.assertEqual(self.client.get("/items/alice").status_code, 500)

    def test_real_renderer_stores_figure(self):
        del self.app.dependency_overrides[get_renderer]
        response = self.client.post("/items/alice", content="moo there")
        self.assertEqual(response.status_code, 201)
        stored = self.durable.get("alice")
        self.assertIn("moo there", stored)

        response = self.client.get("/items/alice")
        self.assertEqual(response.status_code, 200)
        self.assertEqual(response.text, stored)

    def test_blank_body_is_stored(self):
        del self.app.dependency_overrides[get_renderer]
        for name, body in (("empty", ""), ("spaces", "   ")):
            response = self.client.post(f"/items/{name}", content=body)
            self.assertEqual(response.status_code, 201)
            self.assertEqual(self.client.get(f"/items/{name}").status_code, 200)

    def test_admin_placeholder(self):
        self.assertEqual(self.client.get("/admin").status_code, 406)


if __name__ == "__main__":
    unittest.main()
