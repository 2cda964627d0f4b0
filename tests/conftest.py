"""Shared fixtures: sample resumes in three dialects and fast pipeline settings."""

from pathlib import Path

import httpx
import pytest

from resumepilot.utils.settings import EngineSpec, FallbackLimits, PipelineSettings

FIXTURES_PATH = Path(__file__).parent / "fixtures"

# Large enough to clear the plausibility floor used below
FAKE_PDF = b"%PDF-1.4\n" + b"0" * 4096 + b"\n%%EOF\n"
TEST_FLOOR_BYTES = 1000


def load_fixture(name: str) -> str:
    return (FIXTURES_PATH / name).read_text(encoding="utf-8")


def pdf_response(body: bytes = FAKE_PDF) -> httpx.Response:
    return httpx.Response(200, headers={"content-type": "application/pdf"}, content=body)


def make_settings(**overrides) -> PipelineSettings:
    """Two POST engines and short deadlines; keyword arguments override fields."""
    engines = [
        EngineSpec(id="primary", url="https://primary.test/compile", command="pdflatex"),
        EngineSpec(id="secondary", url="https://secondary.test/compile", command="xelatex"),
    ]
    values = dict(
        original_deadline_s=2.0,
        simplified_deadline_s=1.5,
        plausibility_floor_bytes=TEST_FLOOR_BYTES,
        engines=engines,
        fallback=FallbackLimits(),
    )
    values.update(overrides)
    return PipelineSettings(**values)


@pytest.fixture
def jake_source() -> str:
    return load_fixture("jake_style.tex")


@pytest.fixture
def moderncv_source() -> str:
    return load_fixture("moderncv.tex")


@pytest.fixture
def plain_source() -> str:
    return load_fixture("plain_article.tex")


@pytest.fixture
def settings() -> PipelineSettings:
    return make_settings()


@pytest.fixture
def settings_factory():
    """Build settings with field overrides, e.g. settings_factory(original_deadline_s=0.2)."""
    return make_settings


@pytest.fixture
def fake_pdf() -> bytes:
    return FAKE_PDF


@pytest.fixture
def pdf_reply():
    """Factory for a 200 application/pdf response."""
    return pdf_response
