"""
Tests for the Flask JSON API

Runs the app factory against a tmp_path transcript store and a stub
provider lookup.
"""

import sys
import os
sys.path.insert(0, os.path.dirname(os.path.dirname(os.path.abspath(__file__))))

import pytest

from app import ActiveConversations, create_app
from healthbot.contracts import ProviderRecord
from healthbot.core.dialogue_manager import DialogueManager
from healthbot.persistence import ConversationStore
from healthbot.utils import response_templates as templates


class StubProviderLookup:
    def find_nearby_providers(self, location_text):
        return [ProviderRecord(name="Rice Village Clinic", address="2400 Rice Blvd, Houston, TX",
                               type="Medical Clinic", distance="1.1 miles")]


@pytest.fixture
def client(tmp_path):
    manager = DialogueManager(provider_lookup=StubProviderLookup(), choice_fn=lambda options: options[0])
    app = create_app(manager=manager, store=ConversationStore(str(tmp_path)))
    app.config['TESTING'] = True
    return app.test_client()


def _start(client):
    data = client.post('/api/conversations').get_json()
    assert data['success']
    return data['conversation_id']


def test_health(client):
    data = client.get('/api/health').get_json()
    assert data == {'success': True, 'lexicon_version': "1.1.0"}


def test_start_conversation(client):
    response = client.post('/api/conversations')
    data = response.get_json()

    assert response.status_code == 200
    assert data['conversation_id'].startswith("conv-")
    assert data['message']['content'] == templates.OPENING_MESSAGE
    assert data['message']['role'] == "assistant"


def test_message_flow_and_transcript(client):
    conversation_id = _start(client)

    data = client.post(f'/api/conversations/{conversation_id}/messages', json={'message': "Hi"}).get_json()
    assert data['success']
    assert data['needs_info'] is False

    data = client.post(f'/api/conversations/{conversation_id}/messages',
                       json={'message': "I have a bad headache"}).get_json()
    assert data['needs_info'] is True
    assert data['info_type'] == "duration"

    transcript = client.get(f'/api/conversations/{conversation_id}').get_json()['conversation']
    assert [m['role'] for m in transcript['messages']] == [
        "assistant", "user", "assistant", "user", "assistant"
    ]
    assert transcript['messages'][3]['content'] == "I have a bad headache"


def test_provider_lookup_attachments(client):
    conversation_id = _start(client)
    data = client.post(f'/api/conversations/{conversation_id}/messages',
                       json={'message': "Find a clinic near 77005"}).get_json()

    attachments = data['message']['attachments']
    assert attachments[0]['name'] == "Rice Village Clinic"
    assert attachments[0]['distance'] == "1.1 miles"


def test_reset(client):
    conversation_id = _start(client)
    client.post(f'/api/conversations/{conversation_id}/messages', json={'message': "I have a fever"})

    assert client.post(f'/api/conversations/{conversation_id}/reset').get_json()['success']

    data = client.post(f'/api/conversations/{conversation_id}/messages', json={'message': "Hello"}).get_json()
    assert data['message']['content'] == f"{templates.GREETINGS[0]} {templates.FOLLOW_UPS[0]}"


def test_unknown_conversation(client):
    response = client.post('/api/conversations/conv-missing/messages', json={'message': "Hi"})
    assert response.status_code == 404
    assert response.get_json()['success'] is False

    assert client.get('/api/conversations/conv-missing').status_code == 404
    assert client.post('/api/conversations/conv-missing/reset').status_code == 404


def test_empty_message(client):
    conversation_id = _start(client)
    response = client.post(f'/api/conversations/{conversation_id}/messages', json={'message': "   "})
    assert response.status_code == 400


def test_api_keys(client):
    conversation_id = _start(client)

    key = client.post('/api/keys', json={'role': "provider"}).get_json()['api_key']
    assert key.startswith("provider_")

    data = client.post(f'/api/conversations/{conversation_id}/messages',
                       json={'message': "I have a fever", 'api_key': key}).get_json()
    assert data['info_type'] == "duration"

    assert client.post('/api/keys/revoke', json={'api_key': key}).get_json()['success']

    data = client.post(f'/api/conversations/{conversation_id}/messages',
                       json={'message': "since yesterday", 'api_key': key}).get_json()
    assert data['message']['content'] == templates.INVALID_API_KEY_MESSAGE


def test_api_key_errors(client):
    assert client.post('/api/keys', json={'role': "admin"}).status_code == 400
    assert client.post('/api/keys/revoke', json={}).status_code == 400
    assert client.post('/api/keys/revoke', json={'api_key': "patient_unknown"}).status_code == 404


def test_least_recently_used_conversation_evicted(tmp_path):
    manager = DialogueManager(provider_lookup=StubProviderLookup(), choice_fn=lambda options: options[0])
    app = create_app(manager=manager, store=ConversationStore(str(tmp_path)), max_conversations=2)
    client = app.test_client()

    first, second = _start(client), _start(client)
    # Touching the first conversation makes the second the oldest
    client.post(f'/api/conversations/{first}/messages', json={'message': "Hi"})
    third = _start(client)

    active = app.extensions['healthbot']['conversations']
    assert len(active) == 2
    assert second not in active
    assert first in active and third in active

    response = client.post(f'/api/conversations/{second}/messages', json={'message': "Hi"})
    assert response.status_code == 404

    # Transcript of the evicted conversation is still on disk
    assert client.get(f'/api/conversations/{second}').status_code == 200


def test_active_conversations_size_must_be_positive():
    with pytest.raises(ValueError):
        ActiveConversations(0)
