from typing import Iterable, Optional

from .constants import ELLIPSIS


def _is_blank(value):
    if value is None:
        return True
    return str(value).strip() == ""


def pick_first_nonempty(*candidates):
    for c in candidates:
        if not _is_blank(c):
            return str(c).strip()
    return None


def truncate(text: Optional[str], limit: int) -> str:
    # Só acrescenta reticências quando houve corte de fato
    text = text or ""
    if len(text) > limit:
        return text[:limit] + ELLIPSIS
    return text


def capitalize_first(value: Optional[str]) -> str:
    if not value:
        return ""
    return value[0].upper() + value[1:]


def mention_user(username: str) -> str:
    return f'<at id="{username}">{username}</at> '


def mention_users(usernames: Iterable[str]) -> str:
    """
    Renderiza uma lista de usernames como menções do Lark, separadas por vírgula.
    O próprio username é usado como id da menção.
    """
    return ", ".join(mention_user(u) for u in usernames)
