"""
Actions Client Tests
====================
Request shapes and error policy, using httpx.MockTransport in place of GitHub.
"""
import asyncio

import httpx
import pytest

from flake_rerunner.core.errors import ArtifactDownloadError
from flake_rerunner.services.actions_client import ActionsClient

API = "https://api.test"


def _make_client(handler):
    transport = httpx.MockTransport(handler)
    return ActionsClient(
        "ghp_test",
        client=httpx.AsyncClient(base_url=API, transport=transport),
        download_client=httpx.AsyncClient(transport=transport),
    )


def _run(coro_fn, handler):
    async def runner():
        async with _make_client(handler) as client:
            return await coro_fn(client)
    return asyncio.run(runner())


def test_default_headers_carry_token():
    async def build():
        client = ActionsClient("ghp_test", base_url=API)
        try:
            return client.headers
        finally:
            await client.aclose()

    headers = asyncio.run(build())
    assert headers["Authorization"] == "Bearer ghp_test"
    assert headers["Accept"] == "application/vnd.github+json"
    assert "X-GitHub-Api-Version" in headers


def test_get_run_parses_payload():
    seen = []

    def handler(request):
        seen.append((request.method, request.url.path))
        return httpx.Response(200, json={"id": 42, "run_attempt": 3, "status": "completed", "extra": 1})

    run = _run(lambda c: c.get_run("octo", "widgets", 42), handler)

    assert seen == [("GET", "/repos/octo/widgets/actions/runs/42")]
    assert run.id == 42
    assert run.run_attempt == 3


def _not_found(request):
    return httpx.Response(404, json={"message": "Not Found"})


def _connection_refused(request):
    raise httpx.ConnectError("connection refused", request=request)


def _html_page(request):
    return httpx.Response(200, text="<html>proxy login</html>")


def _payload_without_id(request):
    return httpx.Response(200, json={"run_attempt": 1})


@pytest.mark.parametrize("failure", [_not_found, _connection_refused, _html_page, _payload_without_id])
def test_get_run_swallows_errors(failure):
    assert _run(lambda c: c.get_run("octo", "widgets", 42), failure) is None


def test_get_attempt_raises_on_missing_attempt():
    def handler(request):
        return httpx.Response(404, json={"message": "Not Found"})

    with pytest.raises(httpx.HTTPStatusError):
        _run(lambda c: c.get_attempt("octo", "widgets", 42, 5), handler)


def test_get_attempt_path_and_model():
    def handler(request):
        assert request.url.path == "/repos/octo/widgets/actions/runs/42/attempts/2"
        return httpx.Response(200, json={"id": 42, "run_attempt": 2, "status": "in_progress", "conclusion": None})

    attempt = _run(lambda c: c.get_attempt("octo", "widgets", 42, 2), handler)
    assert attempt.run_attempt == 2
    assert attempt.is_completed is False


def test_rerun_posts_and_checks_status():
    calls = []

    def handler(request):
        calls.append((request.method, request.url.path))
        return httpx.Response(201)

    _run(lambda c: c.rerun("octo", "widgets", 42), handler)
    assert calls == [("POST", "/repos/octo/widgets/actions/runs/42/rerun")]

    with pytest.raises(httpx.HTTPStatusError):
        _run(lambda c: c.rerun("octo", "widgets", 42), lambda r: httpx.Response(403))


def test_list_artifacts_follows_pages():
    def handler(request):
        page = int(request.url.params["page"])
        batches = {
            1: [{"id": 1, "name": "logs"}, {"id": 2, "name": "screens"}],
            2: [{"id": 3, "name": "coverage"}],
        }
        return httpx.Response(200, json={"total_count": 3, "artifacts": batches.get(page, [])})

    artifacts = _run(lambda c: c.list_artifacts("octo", "widgets", 42), handler)
    assert [a.name for a in artifacts] == ["logs", "screens", "coverage"]


def test_list_artifacts_empty():
    def handler(request):
        return httpx.Response(200, json={"total_count": 0, "artifacts": []})

    assert _run(lambda c: c.list_artifacts("octo", "widgets", 42), handler) == []


def test_download_url_comes_from_redirect_location():
    def handler(request):
        assert request.url.path == "/repos/octo/widgets/actions/artifacts/7/zip"
        return httpx.Response(302, headers={"Location": "https://blob.test/signed/7.zip"})

    url = _run(lambda c: c.get_artifact_download_url("octo", "widgets", 7), handler)
    assert url == "https://blob.test/signed/7.zip"


def test_download_url_missing_returns_none():
    url = _run(lambda c: c.get_artifact_download_url("octo", "widgets", 7), lambda r: httpx.Response(200))
    assert url is None


def test_download_url_error_raises():
    with pytest.raises(httpx.HTTPStatusError):
        _run(lambda c: c.get_artifact_download_url("octo", "widgets", 7), lambda r: httpx.Response(410))


def test_download_file_streams_body(tmp_path):
    dest = tmp_path / "logs.zip"
    dest.write_bytes(b"old archive")

    def handler(request):
        assert "Authorization" not in request.headers
        return httpx.Response(200, content=b"PK\x03\x04zip-bytes")

    _run(lambda c: c.download_file("https://blob.test/signed/7.zip", dest), handler)
    assert dest.read_bytes() == b"PK\x03\x04zip-bytes"


def test_download_file_bad_status(tmp_path):
    with pytest.raises(ArtifactDownloadError):
        _run(lambda c: c.download_file("https://blob.test/x.zip", tmp_path / "x.zip"),
             lambda r: httpx.Response(403))
    assert not (tmp_path / "x.zip").exists()


def test_interrupted_download_keeps_previous_archive(tmp_path):
    dest = tmp_path / "logs.zip"
    dest.write_bytes(b"old archive")

    async def broken_body():
        yield b"PK\x03\x04"
        raise httpx.ReadError("connection reset")

    def handler(request):
        return httpx.Response(200, content=broken_body())

    with pytest.raises(httpx.ReadError):
        _run(lambda c: c.download_file("https://blob.test/signed/7.zip", dest), handler)

    assert dest.read_bytes() == b"old archive"
    assert sorted(p.name for p in tmp_path.iterdir()) == ["logs.zip"]


def test_completed_download_leaves_no_part_file(tmp_path):
    dest = tmp_path / "logs.zip"

    _run(lambda c: c.download_file("https://blob.test/signed/7.zip", dest),
         lambda r: httpx.Response(200, content=b"zip-bytes"))

    assert sorted(p.name for p in tmp_path.iterdir()) == ["logs.zip"]
