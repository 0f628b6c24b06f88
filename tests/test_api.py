# tests/test_api.py
import io

from PIL import Image

import fastapi_app.routes as routes
from spritegen.raster.output import EncodeError


def test_healthz_needs_no_auth(client):
    r = client.get("/healthz")
    assert r.status_code == 200
    assert r.json()["status"] == "healthy"


def test_capabilities_require_bearer_token(client):
    r = client.get("/api")
    assert r.status_code == 401
    assert r.json() == {
        "error": "Unauthorized",
        "message": "Valid API key required. Use Authorization: Bearer <key>",
    }
    assert r.headers["www-authenticate"] == "Bearer"

    r = client.get("/api", headers={"Authorization": "Bearer wrong-key"})
    assert r.status_code == 401


def test_capabilities_list_every_method(client, auth_headers):
    r = client.get("/api", headers=auth_headers)
    assert r.status_code == 200
    body = r.json()
    assert body["status"] == "operational"
    assert body["last_check_at"]
    assert set(body["methods"]) == {
        "chibiPixel", "spriteGen", "personaGen", "emotionGen", "wallpaper", "tileSheet",
    }
    card = body["methods"]["tileSheet"]
    assert card["intent"] == "image_generate"
    assert "grid" in card["fields"]


def test_post_requires_auth(client):
    r = client.post("/api", json={"method": "spriteGen", "args": {"seed": 1}})
    assert r.status_code == 401


def test_missing_api_key_env_rejects_everything(client, monkeypatch):
    monkeypatch.delenv("SPRITEGEN_API_KEY")
    r = client.get("/api", headers={"Authorization": "Bearer anything"})
    assert r.status_code == 401


def test_invalid_json_body(client, auth_headers):
    r = client.post(
        "/api",
        content=b"{not json",
        headers=dict(auth_headers, **{"Content-Type": "application/json"}),
    )
    assert r.status_code == 400
    assert r.json()["error"] == "Invalid JSON in request body"


def test_missing_method(client, auth_headers):
    r = client.post("/api", json={"args": {}}, headers=auth_headers)
    assert r.status_code == 400
    body = r.json()
    assert "method" in body["error"]
    assert "spriteGen" in body["available_methods"]


def test_unknown_method(client, auth_headers):
    r = client.post("/api", json={"method": "paintGen"}, headers=auth_headers)
    assert r.status_code == 400
    assert "paintGen" in r.json()["error"]


def test_args_must_be_an_object(client, auth_headers):
    r = client.post("/api", json={"method": "spriteGen", "args": [1, 2]}, headers=auth_headers)
    assert r.status_code == 400


def test_missing_required_fields(client, auth_headers, monkeypatch):
    monkeypatch.setattr(routes, "missing_fields", lambda method, args: ["prompt"])
    r = client.post("/api", json={"method": "spriteGen"}, headers=auth_headers)
    assert r.status_code == 400
    assert r.json()["missing_fields"] == ["prompt"]


def test_bad_grid_is_a_client_error(client, auth_headers):
    r = client.post("/api", json={"method": "tileSheet", "args": {"grid": 10}},
                    headers=auth_headers)
    assert r.status_code == 400
    assert "valid values" in r.json()["message"]


def test_generator_failure_is_500(client, auth_headers, monkeypatch):
    def explode(method, args, encode=True):
        raise RuntimeError("boom")

    monkeypatch.setattr(routes, "generate", explode)
    r = client.post("/api", json={"method": "spriteGen"}, headers=auth_headers)
    assert r.status_code == 500
    assert r.json() == {"error": "Failed to generate image", "message": "boom"}


def test_sprite_png_and_headers(client, auth_headers):
    r = client.post("/api", json={"method": "spriteGen", "args": {"seed": 5}},
                    headers=auth_headers)
    assert r.status_code == 200
    assert r.headers["content-type"] == "image/png"
    assert r.headers["cache-control"] == "no-cache"
    assert r.headers["x-image-width"] == "192"
    assert r.headers["x-image-height"] == "288"
    assert r.headers["x-seed"] == "5"
    assert int(r.headers["content-length"]) == len(r.content)
    assert Image.open(io.BytesIO(r.content)).size == (192, 288)


def test_emotion_headers(client, auth_headers):
    r = client.post("/api", json={"method": "emotionGen",
                                  "args": {"seed": 12, "emotion": "rage"}},
                    headers=auth_headers)
    assert r.status_code == 200
    assert r.headers["x-emotion"] == "rage"
    assert "x-accessory" in r.headers


def test_persona_headers_and_determinism(client, auth_headers):
    payload = {"method": "personaGen", "args": {"seed": "npc-7", "theme": "mint"}}
    a = client.post("/api", json=payload, headers=auth_headers)
    b = client.post("/api", json=payload, headers=auth_headers)
    assert a.status_code == 200
    assert a.headers["x-theme"] == "mint"
    assert a.headers["x-character"]
    assert a.content == b.content
    assert a.headers["x-seed"] == b.headers["x-seed"]


def test_null_args_are_accepted(client, auth_headers):
    r = client.post("/api", json={"method": "spriteGen", "args": None}, headers=auth_headers)
    assert r.status_code == 200
    assert r.headers["x-seed"]


def test_unknown_route_keeps_default_error_body(client):
    r = client.get("/nowhere")
    assert r.status_code == 404
    assert r.json() == {"detail": "Not Found"}


def test_internal_value_error_is_500(client, auth_headers, monkeypatch):
    def broken(method, args, encode=True):
        raise ValueError("Unknown mouth style: 'grin'")

    monkeypatch.setattr(routes, "generate", broken)
    r = client.post("/api", json={"method": "spriteGen"}, headers=auth_headers)
    assert r.status_code == 500
    assert r.json()["error"] == "Failed to generate image"


def test_png_is_encoded_off_the_generator_thread(client, auth_headers, monkeypatch):
    calls = []
    real_encode = routes.encode_png_async

    async def recording_encode(pixels, compress_level=None):
        calls.append(pixels.shape)
        return await real_encode(pixels, compress_level)

    monkeypatch.setattr(routes, "encode_png_async", recording_encode)
    r = client.post("/api", json={"method": "spriteGen", "args": {"seed": 5, "scale": 2}},
                    headers=auth_headers)
    assert r.status_code == 200
    assert calls == [(48, 32, 4)]
    assert Image.open(io.BytesIO(r.content)).size == (32, 48)


def test_encode_failure_is_500(client, auth_headers, monkeypatch):
    async def failing_encode(pixels, compress_level=None):
        raise EncodeError("PNG encode failed: disk full")

    monkeypatch.setattr(routes, "encode_png_async", failing_encode)
    r = client.post("/api", json={"method": "spriteGen"}, headers=auth_headers)
    assert r.status_code == 500
    assert "disk full" in r.json()["message"]
