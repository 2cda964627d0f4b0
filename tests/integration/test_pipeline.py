"""
Integration tests for the compilation pipeline.

Runs CompilationPipeline end to end (validation, both typesetting tiers,
parse and fallback render) against httpx.MockTransport engines.
"""

import asyncio
from urllib.parse import parse_qs

import httpx
import pytest

from resumepilot.contexts.compilation import CompilationState, compile_markup, open_pipeline
from resumepilot.contexts.compilation.orchestrator import FALLBACK_WARNING
from resumepilot.utils.pdf_processing import extract_pdf_text, looks_like_pdf

ALL_STATES = [f"state: {state.value}" for state in CompilationState]


def submitted_source(request: httpx.Request) -> str:
    return parse_qs(request.content.decode())["text"][0]


def failing_engine(requests: list):
    """Every attempt answers HTTP 500 with a LaTeX error page."""

    def handler(request):
        requests.append(request)
        return httpx.Response(
            500, headers={"content-type": "text/plain"}, text="! Undefined control sequence.\n"
        )

    return handler


async def run(settings, handler, source: str):
    async with open_pipeline(settings, transport=httpx.MockTransport(handler)) as pipeline:
        return await pipeline.compile(source)


def states(result) -> list:
    return [line for line in result.logs if line.startswith("state: ")]


def experience_document(count: int) -> str:
    entries = "\n".join(
        f"\\cventry{{20{10 + i}--20{11 + i}}}{{Engineer {i}}}{{Company {i}}}{{City}}{{}}{{Work {i}}}"
        for i in range(count)
    )
    return (
        "\\documentclass{article}\n\\begin{document}\n{\\LARGE Pat Lee}\n"
        f"\\section{{Experience}}\n{entries}\n\\end{{document}}\n"
    )


@pytest.mark.integration
class TestValidationGate:
    """Invalid markup never reaches an engine."""

    @pytest.mark.asyncio
    async def test_missing_end_document(self, settings, jake_source, pdf_reply):
        requests = []

        def handler(request):
            requests.append(request)
            return pdf_reply()

        source = jake_source.replace("\\end{document}", "")
        result = await run(settings, handler, source)

        assert requests == []
        assert not result.success
        assert result.tier == "notice"
        assert result.errors == ["Missing \\end{document}"]
        assert looks_like_pdf(result.document)
        assert "Compilation failed" in extract_pdf_text(result.document)

    @pytest.mark.asyncio
    async def test_notice_lists_every_error(self, settings, pdf_reply):
        result = await run(settings, lambda request: pdf_reply(), "Hello {")

        assert len(result.errors) == 4
        assert "Missing \\documentclass declaration" in extract_pdf_text(result.document)


@pytest.mark.integration
class TestTypesetTiers:
    """Tests for documents produced by remote engines."""

    @pytest.mark.asyncio
    async def test_original_tier(self, settings, jake_source, fake_pdf, pdf_reply):
        requests = []

        def handler(request):
            requests.append(request)
            return pdf_reply()

        result = await run(settings, handler, jake_source)

        assert result.success
        assert result.tier == "original"
        assert result.engine_id == "primary"
        assert result.document == fake_pdf
        assert result.errors == []
        assert submitted_source(requests[0]) == jake_source
        assert "state: attempting_simplified" not in result.logs

    @pytest.mark.asyncio
    async def test_next_engine_after_failure(self, settings, jake_source, pdf_reply):
        def handler(request):
            if request.url.host == "primary.test":
                return httpx.Response(503, text="overloaded")
            return pdf_reply()

        result = await run(settings, handler, jake_source)

        assert result.tier == "original"
        assert result.engine_id == "secondary"
        assert "original: primary failed: HTTP 503" in result.logs

    @pytest.mark.asyncio
    async def test_simplified_tier(self, settings, jake_source, pdf_reply):
        """Engines lacking fontawesome5 accept the simplified markup."""

        def handler(request):
            if "\\usepackage{fontawesome5}" in submitted_source(request):
                return httpx.Response(
                    400,
                    headers={"content-type": "text/plain"},
                    text="! LaTeX Error: File `fontawesome5.sty' not found.",
                )
            return pdf_reply()

        result = await run(settings, handler, jake_source)

        assert result.success
        assert result.tier == "simplified"
        assert result.engine_id == "primary"
        assert "state: attempting_simplified" in result.logs
        assert "state: parsing_fallback" not in result.logs


@pytest.mark.integration
class TestFallback:
    """Tests for the parsed preview when every engine fails."""

    @pytest.mark.asyncio
    async def test_all_engines_fail(self, settings, jake_source):
        requests = []
        result = await run(settings, failing_engine(requests), jake_source)

        assert result.success
        assert result.tier == "fallback"
        assert result.engine_id is None
        assert result.errors == []
        assert result.warnings[0] == FALLBACK_WARNING
        assert "primary: Undefined control sequence." in result.warnings
        assert len(requests) == 4
        assert states(result) == ALL_STATES

        text = extract_pdf_text(result.document)
        assert "Jake Ryan" in text
        assert "Gitlytics" in text

    @pytest.mark.asyncio
    async def test_simplified_tier_skipped_when_nothing_changes(self, settings, moderncv_source):
        requests = []
        result = await run(settings, failing_engine(requests), moderncv_source)

        assert result.tier == "fallback"
        assert len(requests) == 2
        assert "simplified: no changes, tier skipped" in result.logs
        assert "John Doe" in extract_pdf_text(result.document)

    @pytest.mark.asyncio
    async def test_undersized_responses_fall_back(self, settings, plain_source, pdf_reply):
        result = await run(settings, lambda request: pdf_reply(b"%PDF-1.4 error"), plain_source)

        assert result.success
        assert result.tier == "fallback"
        assert any("undersized response" in line for line in result.logs)

    @pytest.mark.asyncio
    async def test_timeouts_bound_total_latency(self, settings_factory, jake_source, pdf_reply):
        """A hanging service costs at most the sum of the tier budgets."""

        async def handler(request):
            await asyncio.sleep(30)
            return pdf_reply()

        settings = settings_factory(original_deadline_s=0.3, simplified_deadline_s=0.2)
        result = await run(settings, handler, jake_source)

        assert result.success
        assert result.tier == "fallback"
        assert result.elapsed_s < 0.3 + 0.2 + 3.0
        assert any("timed out after" in line for line in result.logs)

    @pytest.mark.asyncio
    async def test_experience_capped_with_warning(self, settings):
        result = await run(settings, failing_engine([]), experience_document(5))

        assert result.success
        assert result.errors == []
        assert len(result.document) > 0
        assert "Fallback preview truncated: showing 3 of 5 experience entries" in result.warnings

        text = extract_pdf_text(result.document)
        assert "Engineer 2" in text
        assert "Engineer 3" not in text

    @pytest.mark.asyncio
    async def test_no_engines_configured(self, settings_factory, plain_source, pdf_reply):
        result = await run(settings_factory(engines=[]), lambda request: pdf_reply(), plain_source)

        assert result.tier == "fallback"
        assert "Maria Garcia" in extract_pdf_text(result.document)


@pytest.mark.integration
class TestPipelineBehaviour:
    """Tests for concurrency, internal failures and the synchronous entry point."""

    @pytest.mark.asyncio
    async def test_concurrent_compilations_are_independent(
        self, settings, jake_source, moderncv_source, fake_pdf, pdf_reply
    ):
        def handler(request):
            if "moderncv" in submitted_source(request):
                return pdf_reply()
            return httpx.Response(500, text="down")

        async with open_pipeline(settings, transport=httpx.MockTransport(handler)) as pipeline:
            jake, moderncv = await asyncio.gather(
                pipeline.compile(jake_source), pipeline.compile(moderncv_source)
            )

        assert jake.tier == "fallback"
        assert moderncv.tier == "original"
        assert moderncv.document == fake_pdf
        assert states(moderncv)[-1] == "state: done"
        assert "state: rendering_fallback" not in moderncv.logs

    @pytest.mark.asyncio
    async def test_internal_error_becomes_notice(self, settings, jake_source, monkeypatch):
        def broken_parse(source):
            raise RuntimeError("parser exploded")

        monkeypatch.setattr("resumepilot.contexts.compilation.orchestrator.parse", broken_parse)
        result = await run(settings, failing_engine([]), jake_source)

        assert not result.success
        assert result.tier == "notice"
        assert result.errors == ["Internal error: RuntimeError: parser exploded"]
        assert looks_like_pdf(result.document)
        assert result.logs[-1] == "state: done"

    def test_compile_markup_sync(self, settings_factory, plain_source):
        result = compile_markup(plain_source, settings_factory(engines=[]))

        assert result.success
        assert result.tier == "fallback"
        assert result.page_count == 1
