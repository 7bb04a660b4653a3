import base64
import hashlib
import hmac
import logging
import time
from typing import Dict, Optional

import requests

logger = logging.getLogger(__name__)


def gen_lark_signature(timestamp: str, secret: str) -> str:
    # Formato exigido pelo bot do Lark: HMAC-SHA256 com chave=secret sobre "timestamp+secret"
    string_to_sign = f"{timestamp}{secret}"
    digest = hmac.new(secret.encode('utf-8'), string_to_sign.encode('utf-8'), hashlib.sha256).digest()
    return base64.b64encode(digest).decode('utf-8')


def _delivery_result(success: bool, message_id: Optional[str] = None, error: Optional[str] = None) -> Dict:
    return {
        'success': success,
        'message_id': message_id if success else None,
        'error': None if success else (error or 'Unknown error'),
    }


def send_lark_payload(webhook_url: Optional[str], secret: Optional[str], message: Dict) -> Dict:
    """
    Envia um card para o webhook do bot Lark.

    Uma única tentativa, sem retry. Qualquer falha (URL ausente, resposta
    com code != 0, erro de rede, corpo não-JSON) volta como
    {'success': False, 'error': ...}; nunca levanta exceção.
    """
    if not webhook_url:
        return _delivery_result(False, error='Lark webhook URL is not set')

    payload = message
    if secret:
        timestamp = str(int(time.time()))
        payload = dict(message)
        payload['sign'] = gen_lark_signature(timestamp, secret)
        payload['timestamp'] = timestamp

    try:
        resp = requests.post(webhook_url, json=payload, headers={'Content-Type': 'application/json'})
        data = resp.json()
        logger.debug(f"Lark response: {resp.status_code} {data}")
    except Exception as exc:
        logger.error(f"Erro ao enviar para o Lark: {exc}")
        return _delivery_result(False, error=str(exc) or exc.__class__.__name__)

    if not isinstance(data, dict):
        data = {}
    code = data.get('code')
    if resp.status_code == 200 and code == 0:
        inner = data.get('data')
        message_id = inner.get('message_id') if isinstance(inner, dict) else None
        return _delivery_result(True, message_id=message_id)

    error = data.get('msg') or f"Lark request failed (HTTP {resp.status_code}, code {code})"
    logger.warning(f"Lark recusou a mensagem: {error}")
    return _delivery_result(False, error=error)
