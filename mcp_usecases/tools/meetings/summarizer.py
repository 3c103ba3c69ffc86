import logging
import re
from collections import Counter
from typing import List, Optional

from ...agent.llm import LLMProvider
from .models import DocumentSummary, SummaryOptions

logger = logging.getLogger(__name__)

SYSTEM_PROMPT = (
    "You are an expert document summarizer. Provide concise, structured summaries that capture "
    "key points, decisions, and action items. Focus on clarity and actionable insights."
)
SUMMARY_CONTEXT_CHARS = 3000
EXTRACT_CONTEXT_CHARS = 2000
MAX_KEY_TOPICS = 8
MAX_ACTION_ITEMS = 5
KEYWORD_COUNT = 8
MIN_SENTENCE_CHARS = 20


def limit_words(text: str, max_words: int) -> str:
    words = text.split()
    if len(words) <= max_words:
        return text.strip()
    return " ".join(words[:max_words])


def extract_keywords(content: str, limit: int = KEYWORD_COUNT) -> List[str]:
    words = re.sub(r"[^\w\s]", " ", content.lower()).split()
    frequency = Counter(word for word in words if len(word) > 4)
    return [word for word, _ in frequency.most_common(limit)]


def extractive_summary(content: str, max_words: int) -> str:
    """Pick the highest scoring sentences of ``content`` within ``max_words``.

    A sentence scores one point per top keyword it contains, plus half a
    point when it is among the first or last three. Sentences are taken in
    score order (ties keep document order) as long as they still fit, so the
    result is never longer than ``max_words``. Returns "" when nothing fits.
    """
    if max_words <= 0:
        return ""

    sentences = [s.strip() for s in re.split(r"[.!?]+", content)]
    sentences = [s for s in sentences if len(s) > MIN_SENTENCE_CHARS]
    keywords = extract_keywords(content)

    scored = []
    for index, sentence in enumerate(sentences):
        lowered = sentence.lower()
        score = sum(1 for keyword in keywords if keyword in lowered)
        if index < 3 or index > len(sentences) - 3:
            score += 0.5
        scored.append((score, sentence))

    scored.sort(key=lambda item: item[0], reverse=True)

    selected = []
    used = 0
    for _, sentence in scored:
        words = len(sentence.split())
        if used + words <= max_words:
            selected.append(sentence)
            used += words

    if not selected:
        return ""
    return ". ".join(selected) + "."


class DocumentSummarizer:
    """Summaries, key topics and action items from a hosted model.

    Without a model, or when a call fails, the summary is extractive and
    topics and action items are left empty.
    """

    def __init__(self, llm: Optional[LLMProvider] = None):
        self.llm = llm

    async def _call_llm(self, prompt: str) -> Optional[str]:
        if self.llm is None:
            return None
        try:
            text = await self.llm.generate_text(prompt, system_prompt=SYSTEM_PROMPT)
        except Exception as e:
            logger.error(f"Error calling text-generation model: {e}")
            return None
        text = (text or "").strip()
        if not text:
            logger.warning("Empty response from text-generation model")
            return None
        return text

    async def summarize_document(self, content: str, options: Optional[SummaryOptions] = None) -> DocumentSummary:
        options = options or SummaryOptions()
        summary = await self.generate_summary(content, options.max_length, options.format)
        key_topics = await self.extract_key_topics(content) if options.include_key_topics else []
        action_items = await self.extract_action_items(content) if options.include_action_items else []

        return DocumentSummary(
            summary=summary,
            key_topics=key_topics,
            action_items=action_items,
            word_count=len(summary.split()),
            original_length=len(content),
        )

    async def generate_summary(self, content: str, max_length: int, format: str) -> str:
        prompt = (
            f"Please summarize the following document in {max_length} words or less. Format: {format}.\n\n"
            "Focus on:\n"
            "- Main points and key decisions\n"
            "- Important discussions and outcomes\n"
            "- Critical information and insights\n\n"
            f"Document content:\n{content[:SUMMARY_CONTEXT_CHARS]}..."
        )
        result = await self._call_llm(prompt)
        if result is None:
            return extractive_summary(content, max_length)
        # Models do not always respect the requested length
        return limit_words(result, max_length)

    async def extract_key_topics(self, content: str) -> List[str]:
        prompt = (
            "Extract 5-8 key topics from this document. Return only the topics as a comma-separated list:\n\n"
            f"{content[:EXTRACT_CONTEXT_CHARS]}..."
        )
        result = await self._call_llm(prompt)
        if result is None:
            return []
        topics = [topic.strip() for topic in result.split(",")]
        return [topic for topic in topics if topic][:MAX_KEY_TOPICS]

    async def extract_action_items(self, content: str) -> List[str]:
        prompt = (
            "Extract action items, tasks, and next steps from this document. Return as a numbered list:\n\n"
            f"{content[:EXTRACT_CONTEXT_CHARS]}..."
        )
        result = await self._call_llm(prompt)
        if result is None:
            return []
        items = [
            re.sub(r"^\d+\.\s*", "", line).strip()
            for line in result.split("\n")
            if re.match(r"^\d+\.", line)
        ]
        return [item for item in items if item][:MAX_ACTION_ITEMS]

    @staticmethod
    def generate_jira_task_description(summary: DocumentSummary, original_doc: Optional[str] = None) -> str:
        description = f"*Summary:*\n{summary.summary}\n\n"
        if summary.key_topics:
            description += "*Key Topics:*\n" + "\n".join(f"• {topic}" for topic in summary.key_topics) + "\n\n"
        if summary.action_items:
            description += "*Action Items:*\n" + "\n".join(f"• {item}" for item in summary.action_items) + "\n\n"
        if original_doc:
            description += f"*Original Document:* {original_doc}\n"
        description += (
            f"\n_Generated from document summary ({summary.word_count} words "
            f"from {round(summary.original_length / 1000)}k characters)_"
        )
        return description
