import logging
from typing import Dict, Iterable, Optional

from . import constants
from .cards import action_block, build_card, button, text_block
from .constants import (
    ACTION_EMOJIS,
    COMMIT_MESSAGE_MAX,
    COMMIT_PREVIEW_LIMIT,
    DEFAULT_ACTION_EMOJI,
    DEFAULT_COLOR,
    DEFAULT_PIPELINE_STATUS,
    DESCRIPTION_MAX,
    MERGE_REQUEST_HOOK,
    PIPELINE_STATUS,
    PUSH_HOOK,
    RELEASE_COLOR,
    TAG_PUSH_HOOK,
    TITLE_PREFIX,
)
from .events import (
    IssueEvent,
    MergeRequestEvent,
    NoteEvent,
    PipelineEvent,
    PushEvent,
    TagPushEvent,
    parse_event,
)
from .utils import capitalize_first, mention_users, truncate

logger = logging.getLogger(__name__)

CORE_EVENTS = {PUSH_HOOK, MERGE_REQUEST_HOOK, TAG_PUSH_HOOK}


def get_action_emoji(action: Optional[str]) -> str:
    return ACTION_EMOJIS.get(action, DEFAULT_ACTION_EMOJI)


def get_pipeline_status(status: Optional[str]) -> Dict[str, str]:
    return PIPELINE_STATUS.get(status, DEFAULT_PIPELINE_STATUS)


def format_push_message(event: PushEvent, color: str = DEFAULT_COLOR) -> Dict:
    elements = [
        text_block(
            f"**Repository:** {event.project.name}\n"
            f"**Branch:** {event.branch}\n"
            f"**Commits:** {len(event.commits)}"
        ),
        text_block(f"**Author:** {mention_users([event.username])}"),
    ]
    for commit in event.commits[:COMMIT_PREVIEW_LIMIT]:
        elements.append(text_block(f"• {truncate(commit.message, COMMIT_MESSAGE_MAX)}"))
    elements.append(action_block(button('View Repository', event.project.web_url)))

    if event.reviewers:
        elements.append(text_block(f"**Reviewers:** {mention_users(event.reviewers)}"))

    return build_card(f"{TITLE_PREFIX}: Push Event", elements, color)


def format_merge_request_message(event: MergeRequestEvent, color: str = DEFAULT_COLOR) -> Dict:
    mr = event.attributes
    elements = [
        text_block(f"**Title:** {mr.title}"),
        text_block(f"**Repository:** [{event.project.name}]({event.project.web_url})"),
        text_block(f"**Author:** {mention_users([event.username])}"),
    ]
    # Lista vazia ainda gera a linha; só some quando o GitLab não manda o campo
    if event.reviewers is not None:
        elements.append(text_block(f"**Reviewers:** {mention_users(event.reviewers)}"))
    elements.append(text_block(f"**Source:** {mr.source_branch or ''}"))
    elements.append(text_block(f"**Target:** {mr.target_branch or ''}"))
    elements.append(action_block(button('View Merge Request', mr.url)))

    title = f"{get_action_emoji(mr.action)} [{event.project.name}] Merge Request {capitalize_first(mr.state)}"
    return build_card(title, elements, color)


def format_tag_push_message(event: TagPushEvent, color: str = DEFAULT_COLOR) -> Dict:
    elements = [
        text_block(
            f"**Repository:** {event.project.name}\n"
            f"**Tag:** {event.ref}\n"
            f"**Author:** {mention_users([event.user_name])}"
        ),
        action_block(button('View Repository', event.project.web_url)),
    ]
    return build_card(f"{TITLE_PREFIX}: Tag Push", elements, color)


def format_issue_message(event: IssueEvent, color: str = DEFAULT_COLOR) -> Dict:
    issue = event.attributes
    elements = [
        text_block(
            f"**Title:** {issue.title}\n"
            f"**Repository:** {event.project.name}\n"
            f"**Author:** {event.author_name}"
        ),
        text_block(f"**Issue #{issue.iid}** | **State:** {issue.state}"),
    ]
    if issue.description:
        elements.append(text_block(f"**Description:**\n{truncate(issue.description, DESCRIPTION_MAX)}"))
    elements.append(action_block(button('View Issue', issue.url)))

    title = f"{TITLE_PREFIX}: {get_action_emoji(issue.action)} Issue {issue.action}"
    return build_card(title, elements, color)


def format_note_message(event: NoteEvent, color: str = DEFAULT_COLOR) -> Dict:
    elements = [
        text_block(f"**Repository:** {event.project.name}\n**Author:** {event.author_name}"),
        action_block(button('View Comment', event.url)),
    ]
    return build_card(f"{TITLE_PREFIX}: New Comment", elements, color)


def format_pipeline_message(event: PipelineEvent) -> Dict:
    pipeline = event.attributes
    status = pipeline.state or 'unknown'
    status_config = get_pipeline_status(status)
    elements = [
        text_block(
            f"**Repository:** {event.project.name}\n"
            f"**Pipeline:** #{pipeline.iid}\n"
            f"**Status:** {status}"
        ),
        action_block(button('View Pipeline', pipeline.url)),
    ]
    title = f"{TITLE_PREFIX}: {status_config['emoji']} Pipeline {status}"
    return build_card(title, elements, status_config['color'])


FORMATTERS = {
    PushEvent: format_push_message,
    MergeRequestEvent: format_merge_request_message,
    TagPushEvent: format_tag_push_message,
    IssueEvent: format_issue_message,
    NoteEvent: format_note_message,
    PipelineEvent: format_pipeline_message,
}


def generate_lark_message(event: Dict, event_type: Optional[str],
                          extra_events: Optional[Iterable[str]] = None) -> Optional[Dict]:
    """
    Gera o card do Lark para um webhook do GitLab.

    Retorna None quando o tipo de evento não é suportado (ou não foi habilitado
    via GITLAB_EXTRA_EVENTS), ou quando o evento não traz os dados mínimos
    (ex: Merge Request Hook sem object_attributes). O chamador deve tratar None
    como requisição inválida.
    """
    if extra_events is None:
        extra_events = constants.GITLAB_EXTRA_EVENTS
    if event_type not in CORE_EVENTS and event_type not in set(extra_events):
        logger.debug(f"Evento não suportado: {event_type}")
        return None

    parsed = parse_event(event, event_type)
    if parsed is None:
        logger.debug(f"Evento {event_type} sem dados suficientes para gerar card")
        return None

    return FORMATTERS[type(parsed)](parsed)


def build_release_card(data: Dict[str, str]) -> Dict:
    """Card do notificador de release; espera os campos já validados e sem espaços."""
    elements = [
        text_block(
            f"**Application:** {data['app_name']}\n"
            f"**Environment:** {data['enviroment']}\n"
            f"**Platform:** {data['platform']}\n"
            f"**Version:** {data['version']}\n"
            f"**Commit:** {data['commit']}\n"
            f"**URL:** {data['url']}"
        ),
        action_block(button('Go to Release', data['url'])),
    ]
    return build_card(f"[{data['platform'].upper()}] {data['app_name']}", elements, RELEASE_COLOR)
