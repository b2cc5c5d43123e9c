#!/usr/bin/env python3
# -*- coding: utf-8 -*-

"""
Translate a PDF file locally, without the API server.
Usage: python3 translate_pdf.py <input.pdf> [options]

Options:
  --source-lang LANG     Source language (default: English)
  --target-lang LANG     Target language (default: Russian)
  --provider PROVIDER    AI provider: openai, anthropic (default: from .env)
  --model MODEL          AI model name (default: from .env)
  --output PATH          Copy the resulting DOCX to this path

Examples:
  python3 translate_pdf.py book.pdf
  python3 translate_pdf.py paper.pdf --target-lang vi --provider anthropic --model claude-sonnet-4-20250514
"""

import argparse
import asyncio
import shutil
import sys
from pathlib import Path

from dotenv import load_dotenv

load_dotenv(dotenv_path=Path(__file__).parent / ".env")

from ai_providers import create_provider
from config.logging_config import get_logger
from config.settings import settings
from core.batch import PipelineConfig, TranslationPipeline
from core.errors import PipelineError
from core.glossary import GlossaryManager
from core.ingestion import PdfSourceLoader
from core.storage import DocxDocumentStore, UploadStore
from core.streaming import ProgressEmitter, create_logging_subscriber

logger = get_logger(__name__)


async def translate_pdf(
    pdf_path: Path,
    source_lang: str,
    target_lang: str,
    provider_name: str,
    model: str,
    output: Path = None,
) -> int:
    """Run the pipeline on one file. Returns a process exit code."""
    upload_store = UploadStore(settings.storage_dir, max_size_mb=settings.max_upload_size_mb)
    document_store = DocxDocumentStore(settings.storage_dir)

    try:
        upload_id = upload_store.save(pdf_path.read_bytes())
        api_key = settings.model_copy(update={"provider": provider_name}).get_api_key()
    except (OSError, PipelineError, ValueError) as e:
        print(f"❌ {e}")
        return 1

    provider = create_provider(provider_name, api_key=api_key, model=model,
                               base_url=settings.openai_base_url if provider_name == "openai" else None)
    pipeline = TranslationPipeline(
        provider,
        document_store,
        config=PipelineConfig.from_settings(settings),
        source_loader=PdfSourceLoader(upload_store),
        glossary=GlossaryManager(glossary_dir=settings.glossary_dir, glossary_name=settings.glossary_name),
    )
    emitter = ProgressEmitter(
        buffer_size=settings.progress_buffer_size,
        heartbeat_interval=settings.heartbeat_interval_seconds,
    )

    try:
        result, _ = await asyncio.gather(
            pipeline.run(
                emitter,
                upload_id=upload_id,
                source_lang=source_lang,
                target_lang=target_lang,
                model=model,
            ),
            emitter.forward_to(create_logging_subscriber()),
        )
    finally:
        await provider.close()

    if result is None:
        print("❌ Translation failed, see log for details")
        return 1

    produced = document_store.path_for(result.download_ref)
    if output:
        shutil.copyfile(produced, output)
        produced = output

    print(f"✓ {result.pages_processed} pages, {result.successful_units}/{result.total_units} chunks")
    if result.partial:
        print(f"⚠️  Partial result, missing chunks: {result.failed_indices}")
    print(f"📄 {produced}")
    return 0


def main():
    parser = argparse.ArgumentParser(description="Translate a PDF into DOCX")
    parser.add_argument("pdf", type=Path, help="Input PDF file")
    parser.add_argument("--source-lang", default=settings.source_lang)
    parser.add_argument("--target-lang", default=settings.target_lang)
    parser.add_argument("--provider", default=settings.provider, choices=["openai", "anthropic"])
    parser.add_argument("--model", default=settings.model)
    parser.add_argument("--output", type=Path, default=None)
    args = parser.parse_args()

    if not args.pdf.exists():
        print(f"❌ File not found: {args.pdf}")
        sys.exit(1)

    sys.exit(asyncio.run(translate_pdf(
        args.pdf,
        source_lang=args.source_lang,
        target_lang=args.target_lang,
        provider_name=args.provider,
        model=args.model,
        output=args.output,
    )))


if __name__ == "__main__":
    main()
