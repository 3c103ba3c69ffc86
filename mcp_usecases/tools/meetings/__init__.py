"""Meeting summary tools: document summaries and Jira tasks."""

from ...agent.llm import provider_from_config
from .documents import DocumentService, DocumentTools
from .jira import JiraService, JiraTools
from .summarizer import DocumentSummarizer


def register_meeting_tools(server, llm=None):
    """Register document and Jira tools. ``llm`` defaults to the provider named in Config."""
    documents = DocumentService()
    summarizer = DocumentSummarizer(llm if llm is not None else provider_from_config())

    DocumentTools(documents, summarizer).register(server)
    JiraTools(documents, summarizer).register(server)
    return server


__all__ = [
    "DocumentService",
    "DocumentSummarizer",
    "JiraService",
    "register_meeting_tools",
]
