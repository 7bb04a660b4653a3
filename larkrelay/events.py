"""
Modelos tipados dos eventos do GitLab.

O corpo do webhook é um JSON heterogêneo em que quase tudo é opcional.
parse_event() converte esse dict em uma variante por tipo de evento, contendo
apenas os campos que o card daquele tipo precisa. Campos ausentes que o card
não consegue dispensar geram EventPayloadError.
"""
from dataclasses import dataclass, field
from typing import Any, Dict, List, Optional, Union

from .constants import (
    DEFAULT_ACTION,
    DEFAULT_BRANCH,
    ISSUE_HOOK,
    MERGE_REQUEST_HOOK,
    NOTE_HOOK,
    PIPELINE_HOOK,
    PUSH_HOOK,
    TAG_PUSH_HOOK,
)


class EventPayloadError(ValueError):
    pass


@dataclass
class Project:
    name: str
    web_url: str


@dataclass
class Commit:
    id: str
    message: str
    url: str = ""
    author_name: str = ""


@dataclass
class Change:
    previous: Any = None
    current: Any = None


@dataclass
class ObjectAttributes:
    title: str = ""
    description: str = ""
    url: str = ""
    state: str = ""
    action: str = DEFAULT_ACTION
    iid: Optional[int] = None
    source_branch: Optional[str] = None
    target_branch: Optional[str] = None


@dataclass
class PushEvent:
    project: Project
    username: str
    branch: str = DEFAULT_BRANCH
    commits: List[Commit] = field(default_factory=list)
    reviewers: Optional[List[str]] = None


@dataclass
class MergeRequestEvent:
    project: Project
    username: str
    attributes: ObjectAttributes
    reviewers: Optional[List[str]] = None
    changes: Dict[str, Change] = field(default_factory=dict)


@dataclass
class TagPushEvent:
    project: Project
    ref: str
    user_name: str = ""


@dataclass
class IssueEvent:
    project: Project
    author_name: str
    attributes: ObjectAttributes


@dataclass
class NoteEvent:
    project: Project
    author_name: str
    url: str


@dataclass
class PipelineEvent:
    project: Project
    attributes: ObjectAttributes


GitLabEvent = Union[PushEvent, MergeRequestEvent, TagPushEvent, IssueEvent, NoteEvent, PipelineEvent]


def _as_dict(value) -> Dict[str, Any]:
    return value if isinstance(value, dict) else {}


def _as_str(value, default: str = "") -> str:
    if value is None:
        return default
    return str(value)


def _parse_project(payload: Dict[str, Any], require_url: bool = True) -> Project:
    project = _as_dict(payload.get("project"))
    web_url = _as_str(project.get("web_url"))
    if require_url and not web_url:
        raise EventPayloadError("Missing project.web_url")
    return Project(name=_as_str(project.get("name")), web_url=web_url)


def _parse_user(payload: Dict[str, Any]) -> Dict[str, Any]:
    return _as_dict(payload.get("user"))


def _parse_reviewers(payload: Dict[str, Any]) -> Optional[List[str]]:
    # None = chave ausente; [] = chave presente porém vazia
    if "reviewers" not in payload or payload.get("reviewers") is None:
        return None
    reviewers = payload.get("reviewers")
    if not isinstance(reviewers, list):
        raise EventPayloadError("Invalid reviewers list")
    return [_as_str(_as_dict(r).get("username")) for r in reviewers]


def _parse_commits(payload: Dict[str, Any]) -> List[Commit]:
    commits = []
    for raw in payload.get("commits") or []:
        raw = _as_dict(raw)
        author = _as_dict(raw.get("author"))
        commits.append(Commit(
            id=_as_str(raw.get("id")),
            message=_as_str(raw.get("message")),
            url=_as_str(raw.get("url")),
            author_name=_as_str(author.get("name")),
        ))
    return commits


def _parse_changes(payload: Dict[str, Any]) -> Dict[str, Change]:
    changes = {}
    for key, delta in _as_dict(payload.get("changes")).items():
        delta = _as_dict(delta)
        changes[key] = Change(previous=delta.get("previous"), current=delta.get("current"))
    return changes


def _parse_attributes(raw: Dict[str, Any]) -> ObjectAttributes:
    iid = raw.get("iid")
    return ObjectAttributes(
        title=_as_str(raw.get("title")),
        description=_as_str(raw.get("description")),
        url=_as_str(raw.get("url")),
        state=_as_str(raw.get("state")),
        action=_as_str(raw.get("action")) or DEFAULT_ACTION,
        iid=iid if isinstance(iid, int) else None,
        source_branch=raw.get("source_branch"),
        target_branch=raw.get("target_branch"),
    )


def _object_attributes(payload: Dict[str, Any]) -> Optional[ObjectAttributes]:
    raw = payload.get("object_attributes")
    if not isinstance(raw, dict):
        return None
    return _parse_attributes(raw)


def parse_push_event(payload: Dict[str, Any]) -> PushEvent:
    attrs = _as_dict(payload.get("object_attributes"))
    return PushEvent(
        project=_parse_project(payload),
        username=_as_str(_parse_user(payload).get("username")),
        branch=_as_str(attrs.get("source_branch")) or DEFAULT_BRANCH,
        commits=_parse_commits(payload),
        reviewers=_parse_reviewers(payload),
    )


def parse_merge_request_event(payload: Dict[str, Any]) -> Optional[MergeRequestEvent]:
    attributes = _object_attributes(payload)
    if attributes is None:
        return None
    if not attributes.url:
        raise EventPayloadError("Missing object_attributes.url")
    return MergeRequestEvent(
        project=_parse_project(payload, require_url=False),
        username=_as_str(_parse_user(payload).get("username")),
        attributes=attributes,
        reviewers=_parse_reviewers(payload),
        changes=_parse_changes(payload),
    )


def parse_tag_push_event(payload: Dict[str, Any]) -> TagPushEvent:
    return TagPushEvent(
        project=_parse_project(payload),
        ref=_as_str(payload.get("ref")),
        user_name=_as_str(payload.get("user_name")),
    )


def parse_issue_event(payload: Dict[str, Any]) -> Optional[IssueEvent]:
    attributes = _object_attributes(payload)
    if attributes is None:
        return None
    if not attributes.url:
        raise EventPayloadError("Missing object_attributes.url")
    return IssueEvent(
        project=_parse_project(payload, require_url=False),
        author_name=_as_str(_parse_user(payload).get("name")),
        attributes=attributes,
    )


def parse_note_event(payload: Dict[str, Any]) -> NoteEvent:
    project = _parse_project(payload)
    attrs = _as_dict(payload.get("object_attributes"))
    return NoteEvent(
        project=project,
        author_name=_as_str(_parse_user(payload).get("name")),
        url=_as_str(attrs.get("url")) or project.web_url,
    )


def parse_pipeline_event(payload: Dict[str, Any]) -> Optional[PipelineEvent]:
    attributes = _object_attributes(payload)
    if attributes is None:
        return None
    if not attributes.url:
        raise EventPayloadError("Missing object_attributes.url")
    return PipelineEvent(project=_parse_project(payload, require_url=False), attributes=attributes)


EVENT_PARSERS = {
    PUSH_HOOK: parse_push_event,
    MERGE_REQUEST_HOOK: parse_merge_request_event,
    TAG_PUSH_HOOK: parse_tag_push_event,
    ISSUE_HOOK: parse_issue_event,
    NOTE_HOOK: parse_note_event,
    PIPELINE_HOOK: parse_pipeline_event,
}


def parse_event(payload: Dict[str, Any], event_type: Optional[str]) -> Optional[GitLabEvent]:
    """Retorna a variante tipada do evento, ou None se o tipo não é suportado."""
    parser = EVENT_PARSERS.get(event_type)
    if parser is None:
        return None
    if not isinstance(payload, dict):
        raise EventPayloadError("Event payload must be a JSON object")
    return parser(payload)


def get_source_branch(payload: Any) -> Optional[str]:
    if not isinstance(payload, dict):
        return None
    return _as_dict(payload.get("object_attributes")).get("source_branch")
