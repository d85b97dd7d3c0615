import json

import httpx
import pytest

from contentsite.domain.content.documents import deliver_document, find_document_url
from contentsite.domain.content.errors import RecordNotFoundError
from contentsite.domain.content.files import FileReader
from contentsite.domain.content.repository import ContentRepository

PDF_BYTES = b"%PDF-1.7\n" + b"x" * 2048


def _client(handler) -> httpx.AsyncClient:
    return httpx.AsyncClient(transport=httpx.MockTransport(handler))


async def _collect(delivery) -> bytes:
    return b"".join([chunk async for chunk in delivery.body])


@pytest.fixture
def repository(store, content_root):
    return ContentRepository(store, FileReader(content_root))


@pytest.mark.asyncio
async def test_find_url_from_store(repository, fake_redis):
    await fake_redis.set("tcc:research", json.dumps([{"slug": "paper", "pdf": "https://cdn.example/p.pdf"}]))

    assert await find_document_url(repository, "paper") == "https://cdn.example/p.pdf"


@pytest.mark.asyncio
async def test_find_url_falls_back_to_article_file(repository, fake_redis, write_doc):
    # stale store list without the article
    await fake_redis.set("tcc:research", json.dumps([{"slug": "other"}]))
    write_doc("research", "paper", "title: Paper\npdf: /files/paper.pdf")

    assert await find_document_url(repository, "paper") == "/files/paper.pdf"


@pytest.mark.asyncio
async def test_find_url_missing_article_or_pdf(repository, fake_redis):
    await fake_redis.set("tcc:research", json.dumps([{"slug": "no-pdf"}]))

    with pytest.raises(RecordNotFoundError):
        await find_document_url(repository, "missing")
    with pytest.raises(RecordNotFoundError):
        await find_document_url(repository, "no-pdf")


@pytest.mark.asyncio
async def test_local_path_redirects_without_fetching():
    def handler(request):
        raise AssertionError("should not fetch")

    async with _client(handler) as http:
        delivery = await deliver_document("/files/paper.pdf", "paper", http)

    assert delivery.redirect_to == "/files/paper.pdf"
    assert not delivery.streamed


@pytest.mark.asyncio
async def test_valid_pdf_is_streamed_inline():
    def handler(request):
        assert "application/pdf" in request.headers["accept"]
        return httpx.Response(200, content=PDF_BYTES, headers={"content-type": "application/pdf"})

    async with _client(handler) as http:
        delivery = await deliver_document("https://cdn.example/p.pdf", "paper", http)
        body = await _collect(delivery)

    assert delivery.streamed
    assert body == PDF_BYTES
    assert delivery.headers["Content-Disposition"] == 'inline; filename="paper.pdf"'
    assert delivery.headers["Cache-Control"] == "public, s-maxage=3600, stale-while-revalidate=59"


@pytest.mark.asyncio
async def test_inline_filename_is_header_safe():
    def handler(request):
        return httpx.Response(200, content=PDF_BYTES, headers={"content-type": "application/pdf"})

    async with _client(handler) as http:
        quoted = await deliver_document("https://cdn.example/p.pdf", 'bad"nameé', http)
        await _collect(quoted)
        dotted = await deliver_document("https://cdn.example/p.pdf", "..", http)
        await _collect(dotted)

    disposition = quoted.headers["Content-Disposition"]
    assert disposition == 'inline; filename="bad_name.pdf"'
    disposition.encode("latin-1")
    assert dotted.headers["Content-Disposition"] == 'inline; filename="document.pdf"'


@pytest.mark.asyncio
async def test_upstream_error_redirects():
    async with _client(lambda request: httpx.Response(404)) as http:
        delivery = await deliver_document("https://cdn.example/p.pdf", "paper", http)

    assert delivery.redirect_to == "https://cdn.example/p.pdf"


@pytest.mark.asyncio
async def test_transport_error_redirects():
    def handler(request):
        raise httpx.ConnectError("down", request=request)

    async with _client(handler) as http:
        delivery = await deliver_document("https://cdn.example/p.pdf", "paper", http)

    assert delivery.redirect_to == "https://cdn.example/p.pdf"


@pytest.mark.asyncio
async def test_html_content_type_redirects():
    def handler(request):
        return httpx.Response(200, content=b"<html></html>", headers={"content-type": "text/html"})

    async with _client(handler) as http:
        delivery = await deliver_document("https://cdn.example/p.pdf", "paper", http)

    assert delivery.redirect_to == "https://cdn.example/p.pdf"


@pytest.mark.asyncio
async def test_missing_signature_redirects_for_untrusted_host():
    def handler(request):
        return httpx.Response(200, content=b"not a pdf", headers={"content-type": "application/octet-stream"})

    async with _client(handler) as http:
        delivery = await deliver_document("https://cdn.example/p.pdf", "paper", http)

    assert delivery.redirect_to == "https://cdn.example/p.pdf"


@pytest.mark.asyncio
async def test_trusted_host_streams_despite_content_type():
    def handler(request):
        return httpx.Response(200, content=PDF_BYTES, headers={"content-type": "text/plain"})

    async with _client(handler) as http:
        delivery = await deliver_document(
            "https://res.cloudinary.com/demo/raw/upload/p",
            "paper",
            http,
            trusted_hosts=("res.cloudinary.com",),
        )
        body = await _collect(delivery)

    assert delivery.streamed
    assert body.startswith(b"%PDF")
