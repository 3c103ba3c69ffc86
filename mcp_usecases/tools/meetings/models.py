from typing import List, Literal, Optional

from pydantic import BaseModel, Field, model_validator

SummaryFormat = Literal["bullet-points", "paragraph", "structured"]


class DocumentContent(BaseModel):
    title: str
    content: str
    word_count: int


class DocumentStats(BaseModel):
    word_count: int
    character_count: int
    paragraph_count: int
    estimated_reading_time: int


class ContentValidation(BaseModel):
    is_valid: bool
    error: Optional[str] = None


class SummaryOptions(BaseModel):
    max_length: int = Field(500, ge=1)
    format: SummaryFormat = "structured"
    include_action_items: bool = True
    include_key_topics: bool = True


class DocumentSummary(BaseModel):
    summary: str
    key_topics: List[str] = Field(default_factory=list)
    action_items: List[str] = Field(default_factory=list)
    word_count: int = 0
    original_length: int = 0


class JiraProject(BaseModel):
    id: str
    key: str
    name: str


class JiraIssueType(BaseModel):
    id: str
    name: str
    description: Optional[str] = None


class JiraIssue(BaseModel):
    id: str
    key: str
    summary: str
    description: Optional[str] = None
    status: str
    assignee: Optional[str] = None
    created: str
    updated: str


class CreateIssueRequest(BaseModel):
    project_key: str
    summary: str
    description: Optional[str] = None
    issue_type: str = "Task"
    priority: Optional[str] = None
    assignee: Optional[str] = None
    labels: Optional[List[str]] = None


# Tool arguments

class SummarizeDocumentArgs(BaseModel):
    content: str = Field(..., description="Text content to summarize (can be from uploaded file or direct input)")
    title: Optional[str] = Field(None, description='Document title (optional, defaults to "Document")')
    max_length: Optional[int] = Field(None, ge=1, description="Maximum length of summary in words (default: 500)")
    format: Optional[SummaryFormat] = Field(None, description="Summary format (default: structured)")
    include_action_items: Optional[bool] = Field(None, description="Include action items in summary (default: true)")
    include_key_topics: Optional[bool] = Field(None, description="Include key topics in summary (default: true)")


class ValidateDocumentArgs(BaseModel):
    content: str = Field(..., description="Text content to validate")
    title: Optional[str] = Field(None, description="Document title (optional)")


class SummarizeFileArgs(BaseModel):
    file_path: Optional[str] = Field(None, description="Path to a local .txt, .md, .pdf or .docx file")
    url: Optional[str] = Field(None, description="URL of a plain text document")
    max_length: Optional[int] = Field(None, ge=1, description="Maximum length of summary in words (default: 500)")
    format: Optional[SummaryFormat] = Field(None, description="Summary format (default: structured)")

    @model_validator(mode="after")
    def one_source(self):
        if bool(self.file_path) == bool(self.url):
            raise ValueError("Provide exactly one of file_path or url")
        return self


class CreateJiraTaskArgs(BaseModel):
    content: str = Field(..., description="Text content to summarize and create task from")
    task_title: str = Field(..., min_length=1, description="Title for the Jira task")
    project_key: str = Field(..., min_length=1, description="Jira project key (e.g., 'PROJ')")
    document_title: Optional[str] = Field(None, description='Document title (optional, defaults to "Document")')
    max_summary_length: Optional[int] = Field(None, ge=1, description="Maximum length of summary (default: 300)")
    issue_type: Optional[str] = Field(None, description="Issue type (default: Task)")
    priority: Optional[str] = Field(None, description="Priority level (e.g., High, Medium, Low)")
    assignee: Optional[str] = Field(None, description="Assignee account ID")
    labels: Optional[List[str]] = Field(None, description="Labels to add to the task")


class ListJiraProjectsArgs(BaseModel):
    pass


class JiraIssueTypesArgs(BaseModel):
    project_key: str = Field(..., min_length=1, description="Jira project key")
