"""
Flask Web Application for the Health-Intake Assistant

JSON API over the DialogueManager. Conversations are held in memory keyed
by conversation id (one ConversationContext each) and transcripts are
appended to the ConversationStore.

Run with:
    flask --app app run
or:
    python3 app.py
"""

from collections import OrderedDict
from flask import Flask, jsonify, request
import logging
import os

from healthbot.contracts import user_message
from healthbot.core.dialogue_manager import DialogueManager
from healthbot.persistence import ConversationStore
from healthbot.utils.provider_lookup import (
    DEFAULT_GEOCODER_URL,
    DEFAULT_OVERPASS_URL,
    ProviderLookupService,
)

# Configure logging
logging.basicConfig(
    level=logging.INFO,
    format='%(asctime)s - %(name)s - %(levelname)s - %(message)s'
)
logger = logging.getLogger(__name__)

SECRET_KEY = os.environ.get('HEALTHBOT_SECRET_KEY', 'healthbot-dev-secret-key')
CONVERSATIONS_DIR = os.environ.get('HEALTHBOT_CONVERSATIONS_DIR', 'outputs/conversations')
GEOCODER_URL = os.environ.get('HEALTHBOT_GEOCODER_URL', DEFAULT_GEOCODER_URL)
OVERPASS_URL = os.environ.get('HEALTHBOT_OVERPASS_URL', DEFAULT_OVERPASS_URL)
MAX_ACTIVE_CONVERSATIONS = int(os.environ.get('HEALTHBOT_MAX_ACTIVE_CONVERSATIONS', '1000'))


def _error(message, status):
    return jsonify({'success': False, 'error': message}), status


class ActiveConversations:
    """
    In-memory ConversationContexts for this process.

    Bounded: once max_size is reached the least recently used conversation
    is dropped. Its transcript stays in the ConversationStore, but it can no
    longer receive messages. Contexts are not shared between processes, so
    run a single worker.
    """

    def __init__(self, max_size=MAX_ACTIVE_CONVERSATIONS):
        if max_size < 1:
            raise ValueError(f"max_size must be at least 1, got {max_size}")
        self.max_size = max_size
        self._contexts = OrderedDict()

    def add(self, context):
        self._contexts[context.conversation_id] = context
        self._contexts.move_to_end(context.conversation_id)
        while len(self._contexts) > self.max_size:
            evicted, _ = self._contexts.popitem(last=False)
            logger.info(f"Evicted inactive conversation {evicted}")

    def get(self, conversation_id):
        context = self._contexts.get(conversation_id)
        if context is not None:
            self._contexts.move_to_end(conversation_id)
        return context

    def __contains__(self, conversation_id):
        return conversation_id in self._contexts

    def __len__(self):
        return len(self._contexts)


def create_app(manager=None, store=None, max_conversations=MAX_ACTIVE_CONVERSATIONS):
    """
    Build the Flask app.

    Args:
        manager: DialogueManager (default: packaged lexicon + live provider lookup)
        store: ConversationStore (default: CONVERSATIONS_DIR)
        max_conversations: How many conversations stay active in memory
    """
    app = Flask(__name__)
    app.config['SECRET_KEY'] = SECRET_KEY

    if manager is None:
        lookup = ProviderLookupService(geocoder_url=GEOCODER_URL, overpass_url=OVERPASS_URL)
        manager = DialogueManager(provider_lookup=lookup)
    if store is None:
        store = ConversationStore(CONVERSATIONS_DIR)

    conversations = ActiveConversations(max_conversations)

    app.extensions['healthbot'] = {
        'manager': manager,
        'store': store,
        'conversations': conversations,
    }

    @app.route('/api/health')
    def health():
        return jsonify({'success': True, 'lexicon_version': manager.matcher.version})

    @app.route('/api/conversations', methods=['POST'])
    def start_conversation():
        """Start new conversation"""
        try:
            context, opening = manager.start_conversation()
            conversations.add(context)
            store.append_messages(context.conversation_id, [opening])

            return jsonify({
                'success': True,
                'conversation_id': context.conversation_id,
                'message': opening.to_dict()
            })

        except Exception as e:
            logger.error(f"Error starting conversation: {e}", exc_info=True)
            return _error(str(e), 500)

    @app.route('/api/conversations/<conversation_id>/messages', methods=['POST'])
    def post_message(conversation_id):
        """Submit a user message and get the assistant reply"""
        context = conversations.get(conversation_id)
        if context is None:
            logger.warning(f"Message for unknown conversation {conversation_id}")
            return _error('Conversation not found', 404)

        data = request.get_json(silent=True) or {}
        text = (data.get('message') or '').strip()
        if not text:
            return _error('Message text is required', 400)

        try:
            response = manager.process_message(text, context, api_key=data.get('api_key'))
            store.append_messages(conversation_id, [user_message(text), response.message])

            return jsonify({
                'success': True,
                'message': response.message.to_dict(),
                'needs_info': response.needs_info,
                'info_type': response.info_type
            })

        except Exception as e:
            logger.error(f"Error processing message: {e}", exc_info=True)
            return _error(str(e), 500)

    @app.route('/api/conversations/<conversation_id>/reset', methods=['POST'])
    def reset_conversation(conversation_id):
        context = conversations.get(conversation_id)
        if context is None:
            return _error('Conversation not found', 404)

        manager.reset_conversation(context)
        return jsonify({'success': True, 'conversation_id': conversation_id})

    @app.route('/api/conversations/<conversation_id>')
    def get_conversation(conversation_id):
        """Return the stored transcript"""
        try:
            return jsonify({'success': True, 'conversation': store.load(conversation_id)})
        except (FileNotFoundError, ValueError):
            return _error('Conversation not found', 404)

    @app.route('/api/keys', methods=['POST'])
    def generate_key():
        data = request.get_json(silent=True) or {}
        try:
            key = manager.generate_api_key(data.get('role', 'patient'))
        except ValueError as e:
            return _error(str(e), 400)
        return jsonify({'success': True, 'api_key': key})

    @app.route('/api/keys/revoke', methods=['POST'])
    def revoke_key():
        data = request.get_json(silent=True) or {}
        key = data.get('api_key')
        if not key:
            return _error('api_key is required', 400)

        if not manager.revoke_api_key(key):
            return _error('API key not found', 404)
        return jsonify({'success': True})

    return app


if __name__ == '__main__':
    app = create_app()

    print("\n" + "="*60)
    print("HEALTH-INTAKE ASSISTANT - WEB API")
    print("="*60)
    print("\nServer starting on http://localhost:5000")
    print("\nPress Ctrl+C to stop the server")
    print("="*60 + "\n")

    app.run(debug=False, host='0.0.0.0', port=5000)
