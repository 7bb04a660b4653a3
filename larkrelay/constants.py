import os

# Configurações globais de ambiente
APP_PORT = int(os.getenv("APP_PORT", "5001"))
DEBUG_MODE = os.getenv("DEBUG_MODE", "False").lower() == "true"
SERVICE_NAME = "gitlab-lark-relay"

# Verificação do token do GitLab (header X-Gitlab-Token)
GITLAB_WEBHOOK_SECRET = os.getenv("GITLAB_WEBHOOK_SECRET")
GITLAB_TOKEN_CHECK_ENABLED = os.getenv("GITLAB_TOKEN_CHECK_ENABLED", "true").lower() == "true"
# Somente para desenvolvimento: aceita qualquer token quando não há secret configurado
ALLOW_UNVERIFIED_WEBHOOKS = os.getenv("ALLOW_UNVERIFIED_WEBHOOKS", "false").lower() == "true"

# Branches cujas notificações são bloqueadas
_protected_branches_env = os.getenv("PROTECTED_BRANCHES", "production,staging,pre-production").strip()
PROTECTED_BRANCHES = set([s.strip() for s in _protected_branches_env.split(",") if s.strip()])

# Eventos extras do GitLab habilitados explicitamente (ex: "Issue Hook,Note Hook,Pipeline Hook")
_extra_events_env = os.getenv("GITLAB_EXTRA_EVENTS", "").strip()
GITLAB_EXTRA_EVENTS = set([s.strip() for s in _extra_events_env.split(",") if s.strip()])

# Headers
GITLAB_EVENT_HEADER = "X-Gitlab-Event"
GITLAB_TOKEN_HEADER = "X-Gitlab-Token"
LARK_URL_HEADER = "X-Lark-Url"
LARK_SECRET_HEADER = "X-Lark-Secret"

# Tipos de evento do GitLab
PUSH_HOOK = "Push Hook"
MERGE_REQUEST_HOOK = "Merge Request Hook"
TAG_PUSH_HOOK = "Tag Push Hook"
ISSUE_HOOK = "Issue Hook"
NOTE_HOOK = "Note Hook"
PIPELINE_HOOK = "Pipeline Hook"

# Layout dos cards
TITLE_PREFIX = "GitLab Notification"
DEFAULT_COLOR = "blue"
RELEASE_COLOR = "green"
DEFAULT_BRANCH = "main"
COMMIT_PREVIEW_LIMIT = 3
COMMIT_MESSAGE_MAX = 100
DESCRIPTION_MAX = 200
ELLIPSIS = "..."

# Payload do notificador de release (o nome "enviroment" vem do cliente externo)
RELEASE_REQUIRED_FIELDS = ["url", "app_name", "enviroment", "platform"]
RELEASE_OPTIONAL_FIELDS = ["version", "commit"]
RELEASE_FIELD_DEFAULT = "N/A"

ACTION_EMOJIS = {
    "opened": "🆕",
    "closed": "🔒",
    "reopened": "🔄",
    "updated": "✏️",
    "approved": "✅",
    "unapproved": "❌",
    "merged": "🔀",
    "commented": "💬",
}
DEFAULT_ACTION = "opened"
DEFAULT_ACTION_EMOJI = "📝"

PIPELINE_STATUS = {
    "success": {"emoji": "✅", "color": "green"},
    "failed": {"emoji": "❌", "color": "red"},
    "running": {"emoji": "🔄", "color": "blue"},
    "pending": {"emoji": "⏳", "color": "orange"},
    "canceled": {"emoji": "⏹️", "color": "grey"},
    "skipped": {"emoji": "⏭️", "color": "grey"},
}
DEFAULT_PIPELINE_STATUS = {"emoji": "❓", "color": DEFAULT_COLOR}
