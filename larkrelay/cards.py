from typing import Dict, List


class CardError(ValueError):
    pass


def text_block(content: str) -> Dict:
    return {
        'tag': 'div',
        'text': {
            'content': content,
            'tag': 'lark_md',
        },
    }


def button(label: str, url: str, button_type: str = 'primary') -> Dict:
    if not url:
        raise CardError(f"Botão '{label}' sem URL")
    return {
        'tag': 'button',
        'text': {
            'content': label,
            'tag': 'plain_text',
        },
        'url': url,
        'type': button_type,
    }


def action_block(*buttons: Dict) -> Dict:
    if not buttons:
        raise CardError("Bloco de ação precisa de pelo menos um botão")
    return {
        'tag': 'action',
        'actions': list(buttons),
    }


def build_card(title: str, elements: List[Dict], color: str) -> Dict:
    """Monta o envelope de mensagem interativa do Lark (header + elementos)."""
    if not elements:
        raise CardError("Card sem elementos")
    return {
        'msg_type': 'interactive',
        'card': {
            'config': {
                'wide_screen_mode': True,
            },
            'header': {
                'template': color,
                'title': {
                    'content': title,
                    'tag': 'plain_text',
                },
            },
            'elements': elements,
        },
    }
