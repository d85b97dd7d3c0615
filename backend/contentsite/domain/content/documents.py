"""Research document delivery: stream a verified PDF inline or redirect to it."""

from __future__ import annotations

import logging
import re
from dataclasses import dataclass, field
from typing import AsyncIterator, Dict, Iterable, Optional
from urllib.parse import urlparse

import httpx

from contentsite.domain.content.collections import RESEARCH
from contentsite.domain.content.errors import RecordNotFoundError
from contentsite.domain.content.repository import ContentRepository
from contentsite.obs import metrics

LOGGER = logging.getLogger(__name__)

PDF_SIGNATURE = b"%PDF"
_ACCEPT = "application/pdf, application/octet-stream"
# header values travel as latin-1; keep filenames to a quote-free ascii set
_FILENAME_UNSAFE = re.compile(r"[^A-Za-z0-9._-]+")


@dataclass
class DocumentDelivery:
    """Either a redirect target or an inline byte stream."""

    redirect_to: Optional[str] = None
    body: Optional[AsyncIterator[bytes]] = None
    headers: Dict[str, str] = field(default_factory=dict)

    @property
    def streamed(self) -> bool:
        return self.body is not None


async def find_document_url(repository: ContentRepository, slug: str) -> str:
    article = await repository.get_one(RESEARCH.name, slug)
    if article is None:
        # article may exist only as a file when the store holds a stale list
        try:
            fields = repository.reader.read_one(RESEARCH.directory, slug)
        except Exception:
            LOGGER.warning("research document fallback unreadable", extra={"slug": slug}, exc_info=True)
            fields = None
        if fields and fields.get("pdf"):
            article = {"slug": slug, "pdf": fields["pdf"]}
    if article is None:
        raise RecordNotFoundError("research article not found")
    pdf = article.get("pdf")
    if not pdf:
        raise RecordNotFoundError("no document for this article")
    return str(pdf)


async def deliver_document(
    url: str,
    slug: str,
    http: httpx.AsyncClient,
    *,
    trusted_hosts: Iterable[str] = (),
) -> DocumentDelivery:
    if url.startswith("/"):
        metrics.inc_document_delivery("local_redirect")
        return DocumentDelivery(redirect_to=url)

    trusted = _is_trusted(url, trusted_hosts)
    try:
        request = http.build_request("GET", url, headers={"Accept": _ACCEPT})
        response = await http.send(request, stream=True)
    except httpx.HTTPError:
        LOGGER.warning("document fetch failed", extra={"slug": slug}, exc_info=True)
        return _redirect(url)

    if not response.is_success:
        LOGGER.warning("document fetch rejected", extra={"slug": slug, "status": response.status_code})
        await response.aclose()
        return _redirect(url)

    content_type = response.headers.get("content-type", "").lower()
    looks_like_pdf = "pdf" in content_type or "octet-stream" in content_type or trusted
    if not looks_like_pdf:
        await response.aclose()
        return _redirect(url)

    chunks = response.aiter_bytes()
    try:
        head = await _read_head(chunks, len(PDF_SIGNATURE))
    except httpx.HTTPError:
        await response.aclose()
        return _redirect(url)
    if len(head) < len(PDF_SIGNATURE):
        await response.aclose()
        return _redirect(url)
    if not head.startswith(PDF_SIGNATURE):
        if not trusted:
            LOGGER.warning("document lacks PDF signature", extra={"slug": slug})
            await response.aclose()
            return _redirect(url)
        LOGGER.warning("trusted host served a document without PDF signature", extra={"slug": slug})

    metrics.inc_document_delivery("stream")
    return DocumentDelivery(
        body=_relay(head, chunks, response, slug),
        headers={
            "Content-Type": "application/pdf",
            "Cache-Control": "public, s-maxage=3600, stale-while-revalidate=59",
            "Content-Disposition": f'inline; filename="{_download_name(slug)}.pdf"',
        },
    )


def _download_name(slug: str) -> str:
    return _FILENAME_UNSAFE.sub("_", slug).strip("._") or "document"


async def _read_head(chunks: AsyncIterator[bytes], size: int) -> bytes:
    head = b""
    while len(head) < size:
        try:
            chunk = await chunks.__anext__()
        except StopAsyncIteration:
            break
        head += chunk
    return head


async def _relay(
    head: bytes,
    chunks: AsyncIterator[bytes],
    response: httpx.Response,
    slug: str,
) -> AsyncIterator[bytes]:
    try:
        yield head
        async for chunk in chunks:
            if chunk:
                yield chunk
    except httpx.HTTPError:
        LOGGER.error("document stream interrupted", extra={"slug": slug}, exc_info=True)
    finally:
        await response.aclose()


def _redirect(url: str) -> DocumentDelivery:
    metrics.inc_document_delivery("remote_redirect")
    return DocumentDelivery(redirect_to=url)


def _is_trusted(url: str, trusted_hosts: Iterable[str]) -> bool:
    host = (urlparse(url).hostname or "").lower()
    return any(host == h or host.endswith(f".{h}") for h in trusted_hosts)


__all__ = ["DocumentDelivery", "find_document_url", "deliver_document", "PDF_SIGNATURE"]
