"""
Unit tests for core/ingestion.py - PdfSourceLoader
"""
import pytest

from core.errors import InputError, SourceNotFound, SourceUnreadable
from core.ingestion import PdfSourceLoader, extract_pages
from core.storage import UploadStore


@pytest.fixture
def upload_store(temp_dir):
    return UploadStore(temp_dir)


class TestPdfSourceLoader:

    @pytest.mark.asyncio
    async def test_loads_pages(self, upload_store, make_pdf):
        upload_id = upload_store.save(make_pdf(["Hello first page", None, "Third page"]))

        source = await PdfSourceLoader(upload_store).load(upload_id)

        assert source.page_count == 3
        assert len(source.page_texts) == 3
        assert "Hello first page" in source.page_texts[0]
        assert source.page_texts[1].strip() == ""
        assert "Third page" in source.page_texts[2]
        assert not source.flat

    @pytest.mark.asyncio
    async def test_missing_upload(self, upload_store):
        with pytest.raises(SourceNotFound):
            await PdfSourceLoader(upload_store).load("0" * 32)

    @pytest.mark.asyncio
    async def test_malformed_id(self, upload_store):
        with pytest.raises(InputError):
            await PdfSourceLoader(upload_store).load("../secret")

    @pytest.mark.asyncio
    async def test_unreadable_pdf(self, upload_store):
        upload_id = upload_store.save(b"this is not a pdf at all")
        with pytest.raises(SourceUnreadable):
            await PdfSourceLoader(upload_store).load(upload_id)


def test_extract_pages(temp_dir, make_pdf):
    path = temp_dir / "doc.pdf"
    path.write_bytes(make_pdf(["One", "Two"]))
    pages = extract_pages(path)
    assert [p.strip() for p in pages] == ["One", "Two"]
