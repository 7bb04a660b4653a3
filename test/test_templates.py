#!/usr/bin/env python3
import unittest

from larkrelay.events import EventPayloadError
from larkrelay.templates import build_release_card, generate_lark_message
from larkrelay.utils import mention_users


def make_push_event(commit_messages, **extra):
    event = {
        'object_kind': 'push',
        'project': {'name': 'relay', 'web_url': 'https://gitlab.example.com/team/relay'},
        'user': {'id': 1, 'name': 'Ana Souza', 'username': 'ana'},
        'commits': [
            {
                'id': f'c{i}',
                'message': msg,
                'url': f'https://gitlab.example.com/team/relay/-/commit/c{i}',
                'author': {'name': 'Ana Souza', 'email': 'ana@example.com'},
            }
            for i, msg in enumerate(commit_messages)
        ],
    }
    event.update(extra)
    return event


def make_merge_request_event(**attrs):
    object_attributes = {
        'title': 'Add release card',
        'description': 'Adds the release card',
        'url': 'https://gitlab.example.com/team/relay/-/merge_requests/7',
        'state': 'opened',
        'action': 'open',
        'iid': 7,
        'source_branch': 'feature/release-card',
        'target_branch': 'main',
    }
    object_attributes.update(attrs)
    return {
        'object_kind': 'merge_request',
        'project': {'name': 'relay', 'web_url': 'https://gitlab.example.com/team/relay'},
        'user': {'id': 1, 'name': 'Ana Souza', 'username': 'ana'},
        'object_attributes': object_attributes,
    }


def element_texts(message):
    return [e['text']['content'] for e in message['card']['elements'] if e['tag'] == 'div']


def commit_bullets(message):
    return [t for t in element_texts(message) if t.startswith('• ')]


class TestPushMessage(unittest.TestCase):
    def test_only_first_three_commits_rendered(self):
        msg = generate_lark_message(make_push_event(['one', 'two', 'three', 'four', 'five']), 'Push Hook')
        self.assertEqual(commit_bullets(msg), ['• one', '• two', '• three'])
        self.assertIn('**Commits:** 5', element_texts(msg)[0])

    def test_long_commit_message_truncated(self):
        long_msg = 'x' * 150
        msg = generate_lark_message(make_push_event([long_msg]), 'Push Hook')
        self.assertEqual(commit_bullets(msg), ['• ' + 'x' * 100 + '...'])

    def test_short_commit_message_unchanged(self):
        short_msg = 'y' * 80
        msg = generate_lark_message(make_push_event([short_msg]), 'Push Hook')
        self.assertEqual(commit_bullets(msg), ['• ' + short_msg])

    def test_exactly_limit_has_no_ellipsis(self):
        msg = generate_lark_message(make_push_event(['z' * 100]), 'Push Hook')
        self.assertEqual(commit_bullets(msg), ['• ' + 'z' * 100])

    def test_header_branch_and_button(self):
        msg = generate_lark_message(make_push_event(['fix']), 'Push Hook')
        card = msg['card']
        self.assertEqual(msg['msg_type'], 'interactive')
        self.assertEqual(card['config'], {'wide_screen_mode': True})
        self.assertEqual(card['header']['template'], 'blue')
        self.assertEqual(card['header']['title'], {'content': 'GitLab Notification: Push Event', 'tag': 'plain_text'})
        self.assertIn('**Branch:** main', element_texts(msg)[0])
        self.assertEqual(element_texts(msg)[1], '**Author:** <at id="ana">ana</at> ')

        actions = [e for e in card['elements'] if e['tag'] == 'action']
        self.assertEqual(len(actions), 1)
        self.assertEqual(actions[0]['actions'][0]['url'], 'https://gitlab.example.com/team/relay')
        self.assertEqual(actions[0]['actions'][0]['text']['content'], 'View Repository')

    def test_source_branch_from_object_attributes(self):
        event = make_push_event(['fix'], object_attributes={'source_branch': 'develop'})
        msg = generate_lark_message(event, 'Push Hook')
        self.assertIn('**Branch:** develop', element_texts(msg)[0])

    def test_reviewers_line_appended_when_present(self):
        event = make_push_event(['fix'], reviewers=[{'username': 'bia'}, {'username': 'caio'}])
        msg = generate_lark_message(event, 'Push Hook')
        last = msg['card']['elements'][-1]
        self.assertEqual(
            last['text']['content'],
            '**Reviewers:** <at id="bia">bia</at> , <at id="caio">caio</at> ',
        )

    def test_empty_reviewers_omitted(self):
        msg = generate_lark_message(make_push_event(['fix'], reviewers=[]), 'Push Hook')
        self.assertFalse(any(t.startswith('**Reviewers:**') for t in element_texts(msg)))
        self.assertEqual(msg['card']['elements'][-1]['tag'], 'action')

    def test_missing_project_url_is_payload_error(self):
        event = make_push_event(['fix'])
        event['project'] = {'name': 'relay'}
        with self.assertRaises(EventPayloadError):
            generate_lark_message(event, 'Push Hook')


class TestMergeRequestMessage(unittest.TestCase):
    def test_missing_object_attributes_returns_none(self):
        event = make_merge_request_event()
        del event['object_attributes']
        self.assertIsNone(generate_lark_message(event, 'Merge Request Hook'))

    def test_title_emoji_and_capitalized_state(self):
        msg = generate_lark_message(make_merge_request_event(action='merged', state='merged'), 'Merge Request Hook')
        self.assertEqual(msg['card']['header']['title']['content'], '🔀 [relay] Merge Request Merged')

    def test_missing_action_defaults_to_opened(self):
        event = make_merge_request_event()
        del event['object_attributes']['action']
        msg = generate_lark_message(event, 'Merge Request Hook')
        self.assertTrue(msg['card']['header']['title']['content'].startswith('🆕 '))

    def test_unknown_action_uses_fallback_emoji(self):
        msg = generate_lark_message(make_merge_request_event(action='open'), 'Merge Request Hook')
        self.assertTrue(msg['card']['header']['title']['content'].startswith('📝 '))

    def test_body_lines(self):
        event = make_merge_request_event(action='approved')
        event['reviewers'] = [{'username': 'bia'}]
        msg = generate_lark_message(event, 'Merge Request Hook')
        self.assertEqual(element_texts(msg), [
            '**Title:** Add release card',
            '**Repository:** [relay](https://gitlab.example.com/team/relay)',
            '**Author:** <at id="ana">ana</at> ',
            '**Reviewers:** <at id="bia">bia</at> ',
            '**Source:** feature/release-card',
            '**Target:** main',
        ])
        button = msg['card']['elements'][-1]['actions'][0]
        self.assertEqual(button['text']['content'], 'View Merge Request')
        self.assertEqual(button['url'], 'https://gitlab.example.com/team/relay/-/merge_requests/7')

    def test_empty_reviewers_still_rendered(self):
        event = make_merge_request_event()
        event['reviewers'] = []
        msg = generate_lark_message(event, 'Merge Request Hook')
        self.assertIn('**Reviewers:** ', element_texts(msg))

    def test_absent_reviewers_not_rendered(self):
        msg = generate_lark_message(make_merge_request_event(), 'Merge Request Hook')
        self.assertFalse(any(t.startswith('**Reviewers:**') for t in element_texts(msg)))


class TestTagPushMessage(unittest.TestCase):
    def test_tag_push(self):
        event = {
            'object_kind': 'tag_push',
            'ref': 'refs/tags/v1.2.0',
            'user_name': 'ana',
            'project': {'name': 'relay', 'web_url': 'https://gitlab.example.com/team/relay'},
        }
        msg = generate_lark_message(event, 'Tag Push Hook')
        self.assertEqual(msg['card']['header']['title']['content'], 'GitLab Notification: Tag Push')
        self.assertEqual(
            element_texts(msg)[0],
            '**Repository:** relay\n**Tag:** refs/tags/v1.2.0\n**Author:** <at id="ana">ana</at> ',
        )

    def test_missing_user_name_falls_back_to_empty(self):
        event = {
            'ref': 'refs/tags/v1.2.0',
            'project': {'name': 'relay', 'web_url': 'https://gitlab.example.com/team/relay'},
        }
        msg = generate_lark_message(event, 'Tag Push Hook')
        self.assertTrue(element_texts(msg)[0].endswith('**Author:** <at id=""></at> '))


class TestDispatch(unittest.TestCase):
    def test_unknown_event_type_returns_none(self):
        self.assertIsNone(generate_lark_message(make_push_event(['fix']), 'unknown-type'))
        self.assertIsNone(generate_lark_message(make_push_event(['fix']), None))

    def test_extra_events_disabled_by_default(self):
        event = make_merge_request_event()
        self.assertIsNone(generate_lark_message(event, 'Issue Hook', extra_events=[]))
        self.assertIsNone(generate_lark_message(event, 'Pipeline Hook', extra_events=[]))

    def test_issue_event_when_enabled(self):
        event = make_merge_request_event(description='d' * 250, state='opened', action='opened')
        msg = generate_lark_message(event, 'Issue Hook', extra_events=['Issue Hook'])
        self.assertEqual(msg['card']['header']['title']['content'], 'GitLab Notification: 🆕 Issue opened')
        self.assertIn('**Issue #7** | **State:** opened', element_texts(msg))
        self.assertIn('**Description:**\n' + 'd' * 200 + '...', element_texts(msg))

    def test_note_event_falls_back_to_project_url(self):
        event = make_push_event([])
        msg = generate_lark_message(event, 'Note Hook', extra_events=['Note Hook'])
        self.assertEqual(msg['card']['header']['title']['content'], 'GitLab Notification: New Comment')
        self.assertEqual(msg['card']['elements'][-1]['actions'][0]['url'], 'https://gitlab.example.com/team/relay')

    def test_pipeline_color_follows_status(self):
        event = make_merge_request_event(state='failed')
        msg = generate_lark_message(event, 'Pipeline Hook', extra_events=['Pipeline Hook'])
        self.assertEqual(msg['card']['header']['template'], 'red')
        self.assertEqual(msg['card']['header']['title']['content'], 'GitLab Notification: ❌ Pipeline failed')


class TestReleaseCard(unittest.TestCase):
    def test_release_card(self):
        msg = build_release_card({
            'url': 'https://x/1',
            'app_name': 'App',
            'enviroment': 'prod',
            'platform': 'ios',
            'version': '1.0',
            'commit': 'abc',
        })
        card = msg['card']
        self.assertEqual(card['header']['template'], 'green')
        self.assertEqual(card['header']['title']['content'], '[IOS] App')
        self.assertEqual(
            card['elements'][0]['text']['content'],
            '**Application:** App\n**Environment:** prod\n**Platform:** ios\n'
            '**Version:** 1.0\n**Commit:** abc\n**URL:** https://x/1',
        )
        buttons = card['elements'][1]['actions']
        self.assertEqual(len(buttons), 1)
        self.assertEqual(buttons[0]['text']['content'], 'Go to Release')
        self.assertEqual(buttons[0]['url'], 'https://x/1')


class TestMentions(unittest.TestCase):
    def test_mentions_joined_with_comma(self):
        self.assertEqual(mention_users(['a', 'b']), '<at id="a">a</at> , <at id="b">b</at> ')
        self.assertEqual(mention_users([]), '')


if __name__ == '__main__':
    unittest.main()
