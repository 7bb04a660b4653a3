import hmac
import logging
from typing import Optional

from . import constants

logger = logging.getLogger(__name__)


def verify_gitlab_webhook(body: str, token: Optional[str], secret: Optional[str] = None,
                          allow_unverified: Optional[bool] = None) -> bool:
    """
    Valida o token enviado pelo GitLab no header X-Gitlab-Token.

    O GitLab envia o secret configurado no webhook como token simples (sem HMAC),
    então `body` não participa da comparação.
    Sem secret configurado o resultado depende de ALLOW_UNVERIFIED_WEBHOOKS,
    que deve ficar ligado apenas em desenvolvimento.
    """
    if not token:
        return False

    if secret is None:
        secret = constants.GITLAB_WEBHOOK_SECRET
    if allow_unverified is None:
        allow_unverified = constants.ALLOW_UNVERIFIED_WEBHOOKS

    if not secret:
        if allow_unverified:
            logger.warning("GITLAB_WEBHOOK_SECRET não configurado; aceitando webhook sem verificação (modo desenvolvimento)")
        else:
            logger.warning("GITLAB_WEBHOOK_SECRET não configurado; webhook rejeitado")
        return bool(allow_unverified)

    return hmac.compare_digest(token.encode("utf-8"), secret.encode("utf-8"))
