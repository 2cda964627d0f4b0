"""
Typesetting engine client.

Sends markup to one configured engine and returns the rendered PDF, or None.
Every failure mode (timeout, bad status, wrong content type, undersized or
non-PDF body, transport error, local compiler failure) yields None; nothing
is retried here.

Usage:
    async with TypesettingClient(settings) as client:
        document = await client.attempt(source, "latexonline-pdflatex", deadline_s=30)
"""

import asyncio
import time
from dataclasses import dataclass, field
from typing import List, Optional, Union

import httpx

from resumepilot.contexts.compilation.exceptions import TransientServiceError
from resumepilot.contexts.compilation.local_compiler import compile_source, parse_latex_log
from resumepilot.contexts.compilation.logger import _log_debug, log_remote_body
from resumepilot.utils.pdf_processing import looks_like_pdf
from resumepilot.utils.settings import EngineSpec, PipelineSettings

REQUEST_HEADERS = {"Accept": "application/pdf"}


@dataclass
class EngineAttempt:
    """
    Diagnostic record of one engine attempt.

    Attributes:
        engine_id: Engine that was tried
        document: PDF bytes on success, None otherwise
        reason: Failure description (None on success)
        elapsed_s: Wall time spent on the attempt
        remote_errors: LaTeX errors recovered from a failed response
    """

    engine_id: str
    document: Optional[bytes] = None
    reason: Optional[str] = None
    elapsed_s: float = 0.0
    remote_errors: List[str] = field(default_factory=list)

    @property
    def succeeded(self) -> bool:
        return self.document is not None


class TypesettingClient:
    """
    Client for the engines listed in PipelineSettings.

    Owns one httpx.AsyncClient; use as an async context manager or call
    aclose() when done. Pass `transport` (e.g. httpx.MockTransport) to route
    requests somewhere other than the network.
    """

    def __init__(
        self,
        settings: PipelineSettings,
        transport: Optional[httpx.AsyncBaseTransport] = None,
    ):
        self.settings = settings
        self._http = httpx.AsyncClient(
            transport=transport,
            headers=REQUEST_HEADERS,
            follow_redirects=True,
            # Deadlines are enforced per attempt with asyncio.wait_for
            timeout=None,
        )

    async def __aenter__(self) -> "TypesettingClient":
        return self

    async def __aexit__(self, exc_type, exc, tb) -> None:
        await self.aclose()

    async def aclose(self) -> None:
        await self._http.aclose()

    def engine(self, engine_id: str) -> EngineSpec:
        """Look up a configured engine by id."""
        for engine in self.settings.engines:
            if engine.id == engine_id:
                return engine
        raise KeyError(f"Unknown engine: {engine_id}")

    async def attempt(
        self, source: str, engine: Union[str, EngineSpec], deadline_s: float
    ) -> Optional[bytes]:
        """
        Attempt one compilation.

        Args:
            source: Markup text
            engine: Engine id or spec
            deadline_s: Seconds before the attempt is cancelled

        Returns:
            PDF bytes, or None on any failure (including timeout)
        """
        result = await self.attempt_with_diagnostics(source, engine, deadline_s)
        return result.document

    async def attempt_with_diagnostics(
        self, source: str, engine: Union[str, EngineSpec], deadline_s: float
    ) -> EngineAttempt:
        """Attempt one compilation and report why it failed, if it did."""
        if isinstance(engine, str):
            engine = self.engine(engine)

        start_time = time.monotonic()
        if deadline_s <= 0:
            return EngineAttempt(engine_id=engine.id, reason="no time left in tier budget")

        try:
            document = await asyncio.wait_for(self._request(source, engine), timeout=deadline_s)
        except asyncio.TimeoutError:
            # The cancelled request's eventual result is discarded
            return EngineAttempt(
                engine_id=engine.id,
                reason=f"timed out after {deadline_s:.1f}s",
                elapsed_s=time.monotonic() - start_time,
            )
        except TransientServiceError as e:
            return EngineAttempt(
                engine_id=engine.id,
                reason=e.reason,
                elapsed_s=time.monotonic() - start_time,
                remote_errors=e.remote_errors,
            )

        return EngineAttempt(
            engine_id=engine.id, document=document, elapsed_s=time.monotonic() - start_time
        )

    async def _request(self, source: str, engine: EngineSpec) -> bytes:
        if engine.kind == "local":
            return await self._compile_locally(source, engine)
        return await self._request_http(source, engine)

    def _form_fields(self, source: str, engine: EngineSpec) -> dict:
        fields = {engine.text_field: source}
        if engine.command_field and engine.command:
            fields[engine.command_field] = engine.command
        return fields

    async def _request_http(self, source: str, engine: EngineSpec) -> bytes:
        """
        Send the markup to a remote engine.

        GET engines carry the markup in the query string; POST engines send
        it form-encoded.

        Raises:
            TransientServiceError: On any transport or response failure
        """
        fields = self._form_fields(source, engine)
        try:
            if engine.method == "get":
                request = self._http.build_request("GET", engine.url, params=fields)
                if len(str(request.url)) > self.settings.max_get_url_length:
                    raise TransientServiceError(
                        engine.id, f"source too long for GET ({len(str(request.url))} char URL)"
                    )
                response = await self._http.send(request)
            else:
                response = await self._http.post(engine.url, data=fields)
        except httpx.HTTPError as e:
            raise TransientServiceError(engine.id, f"transport error: {type(e).__name__}: {e}") from e

        return self._accept(engine, response)

    def _accept(self, engine: EngineSpec, response: httpx.Response) -> bytes:
        """
        Apply the acceptance rules to a remote response.

        Accepted only when the status is 2xx, the content type names a PDF,
        the body exceeds the plausibility floor and starts with the PDF header.
        """
        content_type = response.headers.get("content-type", "")
        body = response.content

        if not response.is_success or "pdf" not in content_type.lower():
            text = response.text if body else ""
            remote_errors, _ = parse_latex_log(text)
            if text:
                log_remote_body(engine.id, text)
            reason = (
                f"HTTP {response.status_code}"
                if not response.is_success
                else f"unexpected content type '{content_type or 'none'}'"
            )
            raise TransientServiceError(engine.id, reason, remote_errors)

        floor = self.settings.plausibility_floor_bytes
        if len(body) <= floor:
            raise TransientServiceError(
                engine.id, f"undersized response ({len(body)} bytes, floor {floor})"
            )
        if not looks_like_pdf(body):
            raise TransientServiceError(engine.id, "response body is not a PDF")

        _log_debug(f"{engine.id} accepted {len(body)} bytes ({content_type})")
        return body

    async def _compile_locally(self, source: str, engine: EngineSpec) -> bytes:
        """
        Compile with a local TeX binary.

        Raises:
            TransientServiceError: If the binary is missing or no PDF was produced
        """
        try:
            compilation = await compile_source(source, engine.command, self.settings.local_passes)
        except OSError as e:
            raise TransientServiceError(engine.id, f"cannot run {engine.command}: {e}") from e

        if compilation.document is None or not looks_like_pdf(compilation.document):
            raise TransientServiceError(engine.id, "local compilation failed", compilation.errors)
        return compilation.document
