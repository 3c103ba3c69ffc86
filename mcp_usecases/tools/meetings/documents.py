import io
import logging
import math
import re
from pathlib import Path
from typing import Optional
from urllib.parse import unquote, urlparse

import docx
import httpx
import pypdf

from ...config import Config
from ...errors import DocumentValidationError
from ...mcp.protocol import text_result
from ..common import error_message
from .models import (
    ContentValidation,
    DocumentContent,
    DocumentStats,
    SummarizeDocumentArgs,
    SummarizeFileArgs,
    SummaryOptions,
    ValidateDocumentArgs,
)

logger = logging.getLogger(__name__)

MAX_CONTENT_CHARS = 1_000_000
MIN_WORDS = 10
WORDS_PER_MINUTE = 200


def clean_text(content: str) -> str:
    content = content.replace("\r\n", "\n")
    content = re.sub(r"\n\s*\n", "\n\n", content)
    content = re.sub(r"\s+", " ", content)
    return content.strip()


def count_words(content: str) -> int:
    return len(content.split())


def title_from_name(file_name: str, default: str = "Uploaded Document") -> str:
    stem = re.sub(r"\.[^/.]+$", "", file_name)
    return stem or default


def title_from_url(url: str) -> str:
    name = urlparse(url).path.split("/")[-1]
    return unquote(title_from_name(name, "")) or "Document from URL"


class DocumentService:
    """Turns pasted text, local files and text URLs into DocumentContent."""

    def __init__(
        self,
        timeout: float = Config.HTTP_TIMEOUT_SECONDS,
        transport: Optional[httpx.AsyncBaseTransport] = None,
    ):
        self.timeout = timeout
        self._transport = transport

    def process_text_content(self, content: str, title: str = "Uploaded Document") -> DocumentContent:
        if not content or not content.strip():
            raise DocumentValidationError("Document content cannot be empty")
        cleaned = clean_text(content)
        return DocumentContent(title=title, content=cleaned, word_count=count_words(cleaned))

    @staticmethod
    def extract_text(data: bytes, file_name: str) -> str:
        suffix = Path(file_name).suffix.lower()
        if suffix == ".pdf":
            reader = pypdf.PdfReader(io.BytesIO(data))
            text = "\n".join((page.extract_text() or "") for page in reader.pages)
        elif suffix == ".docx":
            document = docx.Document(io.BytesIO(data))
            text = "\n".join(para.text for para in document.paragraphs)
        else:
            text = data.decode("utf-8", errors="ignore")
        logger.info(f"Extracted {len(text)} chars from {file_name}")
        return text

    def process_uploaded_file(self, data: bytes, file_name: str = "uploaded-document.txt") -> DocumentContent:
        text = self.extract_text(data, file_name)
        if not text.strip():
            raise DocumentValidationError("Uploaded file appears to be empty")
        return self.process_text_content(text, title_from_name(file_name))

    def process_local_file(self, file_path: str) -> DocumentContent:
        path = Path(file_path).expanduser()
        if not path.is_file():
            raise DocumentValidationError(f"File not found: {file_path}")
        return self.process_uploaded_file(path.read_bytes(), path.name)

    async def process_content_from_url(self, url: str) -> DocumentContent:
        try:
            async with httpx.AsyncClient(transport=self._transport, timeout=self.timeout) as client:
                response = await client.get(url)
                response.raise_for_status()
        except httpx.HTTPStatusError as e:
            raise DocumentValidationError(
                f"Failed to fetch content from URL: {e.response.status_code} {e.response.reason_phrase}"
            ) from e

        content_type = response.headers.get("content-type", "")
        if "text/" not in content_type:
            raise DocumentValidationError("URL must point to a text file or plain text content")
        return self.process_text_content(response.text, title_from_url(url))

    @staticmethod
    def validate_content(content: str) -> ContentValidation:
        if not content or not content.strip():
            return ContentValidation(is_valid=False, error="Content cannot be empty")
        if len(content) > MAX_CONTENT_CHARS:
            return ContentValidation(is_valid=False, error="Content is too large (max 1MB)")
        if count_words(content) < MIN_WORDS:
            return ContentValidation(
                is_valid=False,
                error=f"Content must contain at least {MIN_WORDS} words for meaningful summarization",
            )
        return ContentValidation(is_valid=True)

    def ensure_valid(self, content: str):
        validation = self.validate_content(content)
        if not validation.is_valid:
            raise DocumentValidationError(validation.error)

    @staticmethod
    def get_document_stats(content: str) -> DocumentStats:
        words = count_words(content)
        return DocumentStats(
            word_count=words,
            character_count=len(content),
            paragraph_count=len(re.split(r"\n\s*\n", content)),
            estimated_reading_time=math.ceil(words / WORDS_PER_MINUTE),
        )


def format_summary(document: DocumentContent, summary) -> str:
    text = f"# Document Summary: {document.title}\n\n**Summary:**\n{summary.summary or 'No summary available'}\n\n"
    if summary.key_topics:
        text += "**Key Topics:**\n" + "\n".join(f"• {topic}" for topic in summary.key_topics) + "\n\n"
    if summary.action_items:
        text += "**Action Items:**\n" + "\n".join(
            f"{i}. {item}" for i, item in enumerate(summary.action_items, start=1)
        ) + "\n\n"
    text += (
        "**Document Stats:**\n"
        f"• Original: {summary.original_length} characters\n"
        f"• Summary: {summary.word_count} words\n"
        f"• Word Count: {document.word_count} words"
    )
    return text


def format_validation(document: DocumentContent, stats: DocumentStats) -> str:
    return (
        "# Document Validation Results\n\n"
        "**Status:** ✅ Valid for processing\n\n"
        "**Document Info:**\n"
        f"• Title: {document.title}\n"
        f"• Word Count: {document.word_count} words\n"
        f"• Character Count: {len(document.content)} characters\n"
        f"• Estimated Reading Time: {stats.estimated_reading_time} minutes\n"
        f"• Paragraph Count: {stats.paragraph_count}\n\n"
        "**Ready for:** Summarization, Jira task creation, content analysis"
    )


class DocumentTools:
    """Tool handlers for validating and summarizing documents."""

    def __init__(self, documents: DocumentService, summarizer):
        self.documents = documents
        self.summarizer = summarizer

    def register(self, server):
        server.register_tool(
            self.summarize_document,
            description=(
                "Summarize text content from uploaded documents or direct text input "
                "with key topics and action items"
            ),
            args_model=SummarizeDocumentArgs,
        )
        server.register_tool(
            self.validate_document_content,
            description="Validate and analyze document content for processing readiness",
            args_model=ValidateDocumentArgs,
        )
        server.register_tool(
            self.summarize_file,
            description="Summarize a local .txt, .md, .pdf or .docx file, or a plain text document at a URL",
            args_model=SummarizeFileArgs,
        )

    async def _summarize(self, document: DocumentContent, max_length, format) -> str:
        options = SummaryOptions(max_length=max_length or 500, format=format or "structured")
        summary = await self.summarizer.summarize_document(document.content, options)
        return format_summary(document, summary)

    async def summarize_document(
        self,
        content: str,
        title: Optional[str] = None,
        max_length: Optional[int] = None,
        format: Optional[str] = None,
        include_action_items: Optional[bool] = None,
        include_key_topics: Optional[bool] = None,
    ):
        try:
            self.documents.ensure_valid(content)
            document = self.documents.process_text_content(content, title or "Document")
            options = SummaryOptions(
                max_length=max_length or 500,
                format=format or "structured",
                include_action_items=include_action_items is not False,
                include_key_topics=include_key_topics is not False,
            )
            summary = await self.summarizer.summarize_document(document.content, options)
        except Exception as e:
            logger.error(f"Document summary failed: {e}")
            return text_result(f"Error processing document: {e}", is_error=True)
        return format_summary(document, summary)

    async def validate_document_content(self, content: str, title: Optional[str] = None):
        validation = self.documents.validate_content(content)
        if not validation.is_valid:
            return text_result(f"Validation failed: {validation.error}", is_error=True)
        try:
            document = self.documents.process_text_content(content, title or "Document")
            stats = self.documents.get_document_stats(document.content)
        except Exception as e:
            logger.error(f"Document validation failed: {e}")
            return text_result(f"Error validating document: {e}", is_error=True)
        return format_validation(document, stats)

    async def summarize_file(
        self,
        file_path: Optional[str] = None,
        url: Optional[str] = None,
        max_length: Optional[int] = None,
        format: Optional[str] = None,
    ):
        try:
            if file_path:
                document = self.documents.process_local_file(file_path)
            else:
                document = await self.documents.process_content_from_url(url)
            self.documents.ensure_valid(document.content)
            return await self._summarize(document, max_length, format)
        except Exception as e:
            logger.error(f"File summary failed: {e}")
            return text_result(f"Error processing document: {error_message(e)}", is_error=True)
