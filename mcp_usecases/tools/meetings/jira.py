import logging
from typing import Any, Callable, Dict, List, Optional

import httpx

from ...config import Config
from ...errors import ConfigurationError, ProviderError
from ...mcp.protocol import text_result
from ..common import error_message, format_timestamp, utc_now_iso
from .models import (
    CreateIssueRequest,
    CreateJiraTaskArgs,
    JiraIssue,
    JiraIssueType,
    JiraIssueTypesArgs,
    JiraProject,
    ListJiraProjectsArgs,
    SummaryOptions,
)

logger = logging.getLogger(__name__)


def adf_document(text: str) -> Dict[str, Any]:
    """Wrap plain text in a single-paragraph Atlassian Document Format doc."""
    return {
        "type": "doc",
        "version": 1,
        "content": [{"type": "paragraph", "content": [{"type": "text", "text": text}]}],
    }


def adf_to_text(node: Optional[Dict[str, Any]]) -> str:
    """Concatenate the text nodes of an ADF document, depth first."""
    if not node or not node.get("content"):
        return ""

    def walk(content: List[Dict[str, Any]]) -> str:
        result = ""
        for item in content:
            if item.get("type") == "text":
                result += item.get("text", "")
            elif item.get("content"):
                result += walk(item["content"])
        return result

    return walk(node["content"])


class JiraService:
    """Jira Cloud REST v3 client using basic auth with an API token."""

    def __init__(
        self,
        base_url: Optional[str],
        email: Optional[str],
        api_token: Optional[str],
        timeout: float = Config.HTTP_TIMEOUT_SECONDS,
        transport: Optional[httpx.AsyncBaseTransport] = None,
    ):
        if not base_url or not email or not api_token:
            raise ConfigurationError(
                "Jira configuration is incomplete. Please set JIRA_BASE_URL, JIRA_EMAIL, "
                "and JIRA_API_TOKEN environment variables."
            )
        self.base_url = base_url.rstrip("/")
        self.auth = httpx.BasicAuth(email, api_token)
        self.timeout = timeout
        self._transport = transport

    @classmethod
    def from_config(cls, **kwargs) -> "JiraService":
        return cls(Config.JIRA_BASE_URL, Config.JIRA_EMAIL, Config.JIRA_API_TOKEN, **kwargs)

    def browse_url(self, issue_key: str) -> str:
        return f"{self.base_url}/browse/{issue_key}"

    async def _request(self, method: str, path: str, action: str, **kwargs) -> Any:
        headers = {"Accept": "application/json", "Content-Type": "application/json"}
        try:
            async with httpx.AsyncClient(
                transport=self._transport, timeout=self.timeout, auth=self.auth, headers=headers
            ) as client:
                response = await client.request(method, f"{self.base_url}{path}", **kwargs)
                response.raise_for_status()
                return response.json()
        except httpx.HTTPStatusError as e:
            detail = e.response.text.strip()
            message = f"Failed to {action}: {error_message(e)}"
            if detail:
                message += f". {detail}"
            raise ProviderError("jira", message, e.response.status_code) from e
        except httpx.HTTPError as e:
            raise ProviderError("jira", f"Failed to {action}: {error_message(e)}") from e

    async def list_projects(self) -> List[JiraProject]:
        projects = await self._request("GET", "/rest/api/3/project", "list projects")
        return [JiraProject(id=str(p["id"]), key=p["key"], name=p["name"]) for p in projects]

    async def get_issue_types(self, project_key: str) -> List[JiraIssueType]:
        data = await self._request(
            "GET",
            "/rest/api/3/issue/createmeta",
            "get issue types",
            params={"projectKeys": project_key, "expand": "projects.issuetypes"},
        )
        projects = data.get("projects") or []
        if not projects:
            raise ProviderError("jira", f"Project {project_key} not found or no permission")
        return [
            JiraIssueType(id=str(t["id"]), name=t["name"], description=t.get("description"))
            for t in projects[0].get("issuetypes") or []
        ]

    async def create_issue(self, request: CreateIssueRequest) -> JiraIssue:
        fields: Dict[str, Any] = {
            "project": {"key": request.project_key},
            "summary": request.summary,
            "description": adf_document(request.description or ""),
            "issuetype": {"name": request.issue_type or "Task"},
        }
        if request.assignee:
            fields["assignee"] = {"accountId": request.assignee}
        if request.priority:
            fields["priority"] = {"name": request.priority}
        if request.labels:
            fields["labels"] = request.labels

        created = await self._request("POST", "/rest/api/3/issue", "create issue", json={"fields": fields})
        now = utc_now_iso()
        logger.info(f"Created Jira issue {created.get('key')}")
        return JiraIssue(
            id=str(created["id"]),
            key=created["key"],
            summary=request.summary,
            description=request.description,
            status="Open",
            created=now,
            updated=now,
        )

    async def get_issue(self, issue_key: str) -> JiraIssue:
        issue = await self._request("GET", f"/rest/api/3/issue/{issue_key}", "get issue")
        fields = issue.get("fields") or {}
        return JiraIssue(
            id=str(issue["id"]),
            key=issue["key"],
            summary=fields.get("summary") or "",
            description=adf_to_text(fields.get("description")),
            status=(fields.get("status") or {}).get("name", "Unknown"),
            assignee=(fields.get("assignee") or {}).get("displayName"),
            created=fields.get("created") or "",
            updated=fields.get("updated") or "",
        )


class JiraTools:
    """Tool handlers for Jira. The client is built per call so missing settings surface as tool errors."""

    def __init__(self, documents, summarizer, jira_factory: Callable[[], JiraService] = JiraService.from_config):
        self.documents = documents
        self.summarizer = summarizer
        self.jira_factory = jira_factory

    def register(self, server):
        server.register_tool(
            self.create_jira_task_from_doc,
            description="Create a Jira task with summary content from a document",
            args_model=CreateJiraTaskArgs,
        )
        server.register_tool(
            self.list_jira_projects,
            description="List all available Jira projects",
            args_model=ListJiraProjectsArgs,
        )
        server.register_tool(
            self.get_jira_issue_types,
            description="Get available issue types for a specific Jira project",
            args_model=JiraIssueTypesArgs,
        )

    async def create_jira_task_from_doc(
        self,
        content: str,
        task_title: str,
        project_key: str,
        document_title: Optional[str] = None,
        max_summary_length: Optional[int] = None,
        issue_type: Optional[str] = None,
        priority: Optional[str] = None,
        assignee: Optional[str] = None,
        labels: Optional[List[str]] = None,
    ):
        try:
            jira = self.jira_factory()
            self.documents.ensure_valid(content)
            document = self.documents.process_text_content(content, document_title or "Document")

            summary = await self.summarizer.summarize_document(
                document.content,
                SummaryOptions(max_length=max_summary_length or 300, format="structured"),
            )
            description = self.summarizer.generate_jira_task_description(summary, document.title)
            issue = await jira.create_issue(CreateIssueRequest(
                project_key=project_key,
                summary=task_title,
                description=description,
                issue_type=issue_type or "Task",
                priority=priority,
                assignee=assignee,
                labels=labels,
            ))
        except Exception as e:
            logger.error(f"Jira task creation failed: {e}")
            return text_result(f"Error: {e}", is_error=True)

        return (
            "# Jira Task Created Successfully\n\n"
            f"**Task:** {issue.key} - {issue.summary}\n"
            f"**Status:** {issue.status}\n"
            f"**Created:** {format_timestamp(issue.created)}\n\n"
            f"**Description:**\n{issue.description}\n\n"
            f"**Jira Link:** {jira.browse_url(issue.key)}"
        )

    async def list_jira_projects(self):
        try:
            projects = await self.jira_factory().list_projects()
        except Exception as e:
            logger.error(f"Listing Jira projects failed: {e}")
            return text_result(f"Error: {e}", is_error=True)
        lines = "\n".join(f"**{p.key}** - {p.name} (ID: {p.id})" for p in projects)
        return f"# Available Jira Projects\n\n{lines or 'No projects found'}"

    async def get_jira_issue_types(self, project_key: str):
        try:
            issue_types = await self.jira_factory().get_issue_types(project_key)
        except Exception as e:
            logger.error(f"Listing Jira issue types failed: {e}")
            return text_result(f"Error: {e}", is_error=True)
        lines = "\n".join(f"**{t.name}** - {t.description or 'No description'}" for t in issue_types)
        return f"# Issue Types for Project {project_key}\n\n{lines or 'No issue types found'}"
