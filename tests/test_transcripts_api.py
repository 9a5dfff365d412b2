from __future__ import annotations

import pytest
from httpx import ASGITransport, AsyncClient

from core.identifiers import transcript_key
from core.storage.local import LocalStorage

HTML = b"<!doctype html><html><body><p>Line one</p><p>Line two</p></body></html>"


def _stored_files(storage: LocalStorage) -> list[str]:
    return sorted(p.name for p in storage.root.iterdir())


async def _upload(client: AsyncClient, headers: dict[str, str], body: bytes = HTML, content_type: str = "text/html"):
    return await client.post(
        "/transcripts",
        files={"file": ("transcript.html", body, content_type)},
        headers=headers,
    )


@pytest.mark.asyncio()
async def test_upload_returns_url_with_new_id(
    client: AsyncClient, auth_headers, storage: LocalStorage, settings
) -> None:
    response = await _upload(client, auth_headers)

    assert response.status_code == 201, response.text
    payload = response.json()
    transcript_id = payload["id"]
    assert transcript_id
    assert payload["url"] == f"{settings.public.base_uri}/{transcript_id}"
    assert (storage.root / transcript_key(transcript_id)).is_file()


@pytest.mark.asyncio()
async def test_upload_ids_are_distinct(client: AsyncClient, auth_headers) -> None:
    ids = set()
    for _ in range(5):
        response = await _upload(client, auth_headers)
        assert response.status_code == 201
        ids.add(response.json()["id"])

    assert len(ids) == 5


@pytest.mark.asyncio()
async def test_upload_accepts_charset_parameter(client: AsyncClient, auth_headers) -> None:
    response = await _upload(client, auth_headers, content_type="text/html; charset=utf-8")

    assert response.status_code == 201


@pytest.mark.asyncio()
async def test_upload_rejects_non_html(client: AsyncClient, auth_headers, storage: LocalStorage) -> None:
    response = await _upload(client, auth_headers, body=b"%PDF-1.7", content_type="application/pdf")

    assert response.status_code == 400
    assert response.json()["message"] == "File must be of type text/html"
    assert _stored_files(storage) == []


@pytest.mark.asyncio()
async def test_upload_without_file_field(client: AsyncClient, auth_headers, storage: LocalStorage) -> None:
    response = await client.post(
        "/transcripts",
        files={"document": ("transcript.html", HTML, "text/html")},
        headers=auth_headers,
    )

    assert response.status_code == 400
    assert response.json()["message"] == "Error Uploading File"
    assert _stored_files(storage) == []


@pytest.mark.asyncio()
async def test_upload_with_non_multipart_body(client: AsyncClient, auth_headers) -> None:
    response = await client.post("/transcripts", json={"file": "nope"}, headers=auth_headers)

    assert response.status_code == 400
    assert response.json()["error"] == "MalformedUploadError"


@pytest.mark.asyncio()
async def test_round_trip(client: AsyncClient, auth_headers) -> None:
    upload = await _upload(client, auth_headers)
    transcript_id = upload.json()["id"]

    response = await client.get(f"/transcripts/{transcript_id}")

    assert response.status_code == 200
    assert response.headers["content-type"].startswith("text/html")
    assert response.content == HTML


@pytest.mark.asyncio()
async def test_fetch_unknown_id(client: AsyncClient) -> None:
    response = await client.get("/transcripts/deadbeef")

    assert response.status_code == 404
    assert response.json()["error"] == "TranscriptNotFoundError"


@pytest.mark.asyncio()
@pytest.mark.parametrize("headers", [{}, {"Authorization": "wrong"}, {"Authorization": "Bearer test-token"}])
async def test_upload_requires_token(client: AsyncClient, storage: LocalStorage, headers) -> None:
    response = await _upload(client, headers)

    assert response.status_code == 401
    assert response.json()["error"] == "Unauthorized"
    assert response.json()["message"] == "Unauthorized"
    assert _stored_files(storage) == []


@pytest.mark.asyncio()
async def test_delete_requires_token(client: AsyncClient) -> None:
    response = await client.delete("/transcripts/deadbeef")

    assert response.status_code == 401
    assert response.json()["error"] == "Unauthorized"


@pytest.mark.asyncio()
async def test_delete_reports_success_and_keeps_content(client: AsyncClient, auth_headers) -> None:
    transcript_id = (await _upload(client, auth_headers)).json()["id"]

    response = await client.delete(f"/transcripts/{transcript_id}", headers=auth_headers)
    assert response.status_code == 200
    assert response.json() == {"message": "Success"}

    fetched = await client.get(f"/transcripts/{transcript_id}")
    assert fetched.status_code == 200
    assert fetched.content == HTML


@pytest.mark.asyncio()
async def test_delete_unknown_id_reports_success(client: AsyncClient, auth_headers) -> None:
    response = await client.delete("/transcripts/never-uploaded", headers=auth_headers)

    assert response.status_code == 200
    assert response.json() == {"message": "Success"}


@pytest.mark.asyncio()
@pytest.mark.parametrize(
    ("method", "path"),
    [("GET", "/nope"), ("GET", "/transcripts/a/b"), ("PUT", "/transcripts/abc"), ("GET", "/")],
)
async def test_unmatched_routes(client: AsyncClient, method: str, path: str) -> None:
    response = await client.request(method, path)

    assert response.status_code == 404
    assert response.json() == {"message": "Endpoint Not Found"}


@pytest.mark.asyncio()
async def test_health_endpoint(client: AsyncClient) -> None:
    response = await client.get("/healthz")

    assert response.status_code == 200
    assert response.json() == {"status": "ok"}


@pytest.mark.asyncio()
async def test_malformed_upload_hides_parser_details(client: AsyncClient, auth_headers) -> None:
    response = await client.post(
        "/transcripts",
        content=b"--broken\r\nnot a multipart body",
        headers={**auth_headers, "Content-Type": "multipart/form-data; boundary=other"},
    )

    assert response.status_code == 400
    assert response.json() == {"error": "MalformedUploadError", "message": "Error Uploading File", "details": {}}


@pytest.mark.asyncio()
async def test_hsts_only_over_https(app) -> None:
    async with AsyncClient(transport=ASGITransport(app=app), base_url="http://test") as plain:
        response = await plain.get("/healthz")
    assert "strict-transport-security" not in response.headers
    assert response.headers["x-content-type-options"] == "nosniff"

    async with AsyncClient(transport=ASGITransport(app=app), base_url="https://test") as secure:
        response = await secure.get("/healthz")
    assert response.headers["strict-transport-security"].startswith("max-age=")
