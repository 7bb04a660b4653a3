from flask import Flask, request
import json
import logging

from . import constants
from .constants import (
    GITLAB_EVENT_HEADER,
    GITLAB_TOKEN_HEADER,
    LARK_SECRET_HEADER,
    LARK_URL_HEADER,
    RELEASE_FIELD_DEFAULT,
    RELEASE_OPTIONAL_FIELDS,
    RELEASE_REQUIRED_FIELDS,
    SERVICE_NAME,
)
from .events import EventPayloadError, get_source_branch
from .services import send_lark_payload
from .templates import build_release_card, generate_lark_message
from .utils import pick_first_nonempty
from .verification import verify_gitlab_webhook

logger = logging.getLogger(__name__)


def extract_release_fields(data):
    """
    Valida o payload do notificador de release.
    Retorna (campos_limpos, campos_faltando); campos_limpos é None se faltar algo.
    """
    missing = [
        name for name in RELEASE_REQUIRED_FIELDS
        if not isinstance(data.get(name), str) or data.get(name).strip() == ''
    ]
    if missing:
        return None, missing

    fields = {name: data[name].strip() for name in RELEASE_REQUIRED_FIELDS}
    for name in RELEASE_OPTIONAL_FIELDS:
        fields[name] = pick_first_nonempty(data.get(name)) or RELEASE_FIELD_DEFAULT
    return fields, []


def is_protected_branch(event, protected_branches=None):
    if protected_branches is None:
        protected_branches = constants.PROTECTED_BRANCHES
    branch = get_source_branch(event)
    return isinstance(branch, str) and branch in protected_branches


def create_app():
    app = Flask(__name__)

    def lark_target():
        # Destino e secret vêm por requisição, cada chamada pode mirar um bot diferente
        return request.headers.get(LARK_URL_HEADER), request.headers.get(LARK_SECRET_HEADER)

    @app.route('/health', methods=['GET'])
    def health():
        return {'status': 'ok', 'service': SERVICE_NAME}, 200

    @app.route('/api/webhooks/app-release-notify', methods=['POST'])
    def app_release_notify():
        try:
            payload = request.get_json(force=True, silent=True)
            if constants.DEBUG_MODE:
                logger.debug(f"Release payload recebido: {payload}")

            data = payload.get('data') if isinstance(payload, dict) else None
            if not isinstance(data, dict):
                return {'error': 'Missing data payload'}, 400

            fields, missing = extract_release_fields(data)
            if missing:
                return {'error': f"Missing fields: {', '.join(missing)}"}, 400

            webhook_url, secret = lark_target()
            result = send_lark_payload(webhook_url, secret, build_release_card(fields))
            if not result['success']:
                return {'error': result['error']}, 502

            return {
                'success': True,
                'message': 'Forwarded to Lark',
                'larkMessageId': result['message_id'],
            }, 200
        except Exception:
            logger.exception("Erro ao processar webhook de release")
            return {'error': 'Internal server error'}, 500

    @app.route('/api/webhooks/gitlab-to-lark', methods=['POST'])
    def gitlab_to_lark():
        try:
            body = request.get_data(as_text=True)
            event_type = request.headers.get(GITLAB_EVENT_HEADER)
            logger.info(f"Webhook do GitLab recebido: {event_type}")

            if constants.GITLAB_TOKEN_CHECK_ENABLED:
                if not verify_gitlab_webhook(body, request.headers.get(GITLAB_TOKEN_HEADER)):
                    return {'error': 'Invalid webhook token'}, 401

            try:
                event = json.loads(body)
            except ValueError:
                return {'error': 'Invalid JSON payload'}, 400

            if is_protected_branch(event):
                logger.info(f"Evento {event_type} ignorado: branch protegida {get_source_branch(event)}")
                return {'error': 'Protected branch'}, 400

            try:
                message = generate_lark_message(event, event_type)
            except EventPayloadError as exc:
                return {'error': str(exc)}, 400

            if message is None:
                return {'error': 'Unsupported event type'}, 400
            if constants.DEBUG_MODE:
                logger.debug(f"Card gerado: {json.dumps(message, ensure_ascii=False)}")

            webhook_url, secret = lark_target()
            result = send_lark_payload(webhook_url, secret, message)
            if not result['success']:
                logger.warning(f"Falha ao enviar para o Lark: {result['error']}")
                return {'error': result['error']}, 502

            return {
                'success': True,
                'message': 'Webhook processed successfully',
                'eventType': event_type,
                'larkMessageId': result['message_id'],
            }, 200
        except Exception:
            logger.exception("Erro ao processar webhook do GitLab")
            return {'error': 'Internal server error'}, 500

    return app
