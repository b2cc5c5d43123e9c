"""
Pytest configuration and shared fixtures for the PDF translation pipeline tests.
"""
import asyncio
import inspect
import shutil
import sys
import tempfile
from pathlib import Path
from typing import Callable, Generator, List, Optional

import pytest

# Add project root to path
PROJECT_ROOT = Path(__file__).parent.parent
sys.path.insert(0, str(PROJECT_ROOT))

from ai_providers.base import AIProviderType, AIResponse, TokenUsage, TranslationRequest
from config.settings import Settings
from core.chunker import SmartChunker, SourceDocument
from core.glossary import GlossaryManager
from core.streaming import ProgressEmitter


# ============================================================================
# Fakes
# ============================================================================

class FakeClock:
    """Manually advanced monotonic clock (seconds)."""

    def __init__(self, start: float = 1000.0):
        self.now = start

    def __call__(self) -> float:
        return self.now

    def advance(self, seconds: float) -> None:
        self.now += seconds


class FakeSleep:
    """Async sleep that records delays and advances a FakeClock instead of waiting."""

    def __init__(self, clock: Optional[FakeClock] = None):
        self.clock = clock
        self.delays: List[float] = []

    async def __call__(self, seconds: float) -> None:
        self.delays.append(seconds)
        if self.clock is not None:
            self.clock.advance(seconds)


class FakeProvider:
    """
    In-memory translation capability.

    ``handler(request, call_number)`` returns the translated text or a full
    AIResponse, returns or raises an exception, or returns an awaitable.
    ``call_number`` counts calls for the same user text, starting at 1.
    """

    def __init__(self, handler: Optional[Callable] = None, delay: float = 0.0):
        self.handler = handler or (lambda request, n: f"[RU] {request.user_text}")
        self.delay = delay
        self.calls: List[TranslationRequest] = []
        self.in_flight = 0
        self.max_in_flight = 0
        self.closed = False

    async def translate(self, request: TranslationRequest) -> AIResponse:
        self.calls.append(request)
        call_number = sum(1 for c in self.calls if c.user_text == request.user_text)
        self.in_flight += 1
        self.max_in_flight = max(self.max_in_flight, self.in_flight)
        try:
            if self.delay:
                await asyncio.sleep(self.delay)
            result = self.handler(request, call_number)
            if inspect.isawaitable(result):
                result = await result
            if isinstance(result, BaseException):
                raise result
            if isinstance(result, AIResponse):
                return result
            return AIResponse(
                text=result,
                model=request.model,
                provider=AIProviderType.OPENAI,
                usage=TokenUsage(prompt_tokens=10, completion_tokens=12),
            )
        finally:
            self.in_flight -= 1

    async def close(self) -> None:
        self.closed = True


class FakeDocumentStore:
    """Records saved paragraphs instead of rendering a DOCX."""

    def __init__(self, error: Optional[Exception] = None):
        self.saved: List[List[str]] = []
        self.error = error

    def save(self, paragraphs) -> str:
        if self.error is not None:
            raise self.error
        self.saved.append(list(paragraphs))
        return f"doc-{len(self.saved)}.docx"


# ============================================================================
# Fixtures: Configuration & Settings
# ============================================================================

@pytest.fixture
def temp_dir() -> Generator[Path, None, None]:
    """Create a temporary directory for test files."""
    temp_path = Path(tempfile.mkdtemp())
    yield temp_path
    shutil.rmtree(temp_path, ignore_errors=True)


@pytest.fixture
def test_settings(temp_dir: Path) -> Settings:
    """Test settings with mock API keys and an isolated storage dir."""
    return Settings(
        openai_api_key="test_openai_key",
        anthropic_api_key="test_anthropic_key",
        provider="openai",
        model="gpt-4o-mini",
        storage_dir=temp_dir / "storage",
        glossary_dir=temp_dir / "glossary",
        cleanup_secret="test-secret",
        heartbeat_interval_seconds=0,
    )


# ============================================================================
# Fixtures: Fakes
# ============================================================================

@pytest.fixture
def fake_clock() -> FakeClock:
    return FakeClock()


@pytest.fixture
def fake_sleep(fake_clock: FakeClock) -> FakeSleep:
    return FakeSleep(fake_clock)


@pytest.fixture
def make_provider():
    """Factory for FakeProvider instances."""
    return FakeProvider


@pytest.fixture
def document_store() -> FakeDocumentStore:
    return FakeDocumentStore()


@pytest.fixture
def make_document_store():
    return FakeDocumentStore


@pytest.fixture
def emitter() -> ProgressEmitter:
    """Emitter without heartbeat, large enough to hold a whole test run."""
    return ProgressEmitter(buffer_size=1000, heartbeat_interval=0)


@pytest.fixture
def drain():
    """Collect every event of a closed (or closing) emitter."""
    async def _drain(emitter: ProgressEmitter):
        return [event async for event in emitter.events()]
    return _drain


# ============================================================================
# Fixtures: Sample Data
# ============================================================================

def build_pdf(page_texts) -> bytes:
    """Minimal PDF with one Helvetica text line per page (None for a blank page)."""
    page_ids = [4 + 2 * i for i in range(len(page_texts))]
    kids = " ".join(f"{pid} 0 R" for pid in page_ids)
    objects = [
        b"<< /Type /Catalog /Pages 2 0 R >>",
        f"<< /Type /Pages /Kids [{kids}] /Count {len(page_texts)} >>".encode(),
        b"<< /Type /Font /Subtype /Type1 /BaseFont /Helvetica >>",
    ]
    for pid, text in zip(page_ids, page_texts):
        stream = f"BT /F1 12 Tf 72 720 Td ({text}) Tj ET".encode() if text else b""
        objects.append(
            f"<< /Type /Page /Parent 2 0 R /MediaBox [0 0 612 792] "
            f"/Resources << /Font << /F1 3 0 R >> >> /Contents {pid + 1} 0 R >>".encode()
        )
        objects.append(b"<< /Length %d >>\nstream\n" % len(stream) + stream + b"\nendstream")

    out = bytearray(b"%PDF-1.4\n")
    offsets = []
    for num, body in enumerate(objects, 1):
        offsets.append(len(out))
        out += f"{num} 0 obj\n".encode() + body + b"\nendobj\n"
    xref = len(out)
    out += f"xref\n0 {len(objects) + 1}\n".encode()
    out += b"0000000000 65535 f \n"
    for offset in offsets:
        out += f"{offset:010d} 00000 n \n".encode()
    out += f"trailer\n<< /Size {len(objects) + 1} /Root 1 0 R >>\nstartxref\n{xref}\n%%EOF\n".encode()
    return bytes(out)


@pytest.fixture
def make_pdf():
    return build_pdf


@pytest.fixture
def sample_pages() -> List[str]:
    """Seven short pages of English text."""
    return [f"Page {i} text about transference and countertransference." for i in range(1, 8)]


@pytest.fixture
def sample_source(sample_pages) -> SourceDocument:
    return SourceDocument.from_pages(sample_pages, page_count=len(sample_pages))


@pytest.fixture
def real_chunker() -> SmartChunker:
    return SmartChunker(max_chars=3000)


@pytest.fixture
def real_glossary() -> GlossaryManager:
    return GlossaryManager()


# ============================================================================
# Session-level Setup
# ============================================================================

def pytest_configure(config):
    """Register markers applied below."""
    config.addinivalue_line("markers", "unit: fast isolated tests")
    config.addinivalue_line("markers", "integration: tests across the HTTP surface")


def pytest_collection_modifyitems(config, items):
    """Modify test collection to add markers."""
    for item in items:
        # Auto-add 'unit' marker to test files in tests/unit/
        if "unit" in str(item.fspath):
            item.add_marker(pytest.mark.unit)
        # Auto-add 'integration' marker to test files in tests/integration/
        elif "integration" in str(item.fspath):
            item.add_marker(pytest.mark.integration)
