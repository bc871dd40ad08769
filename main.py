"""
Console Harness for the Health-Intake Assistant

Simple console loop over DialogueManager.process_message() for trying the
engine without the Flask layer.

Commands:
    quit / exit / stop  end the session
    reset               start the intake over
"""

import logging
import sys

from healthbot.core.dialogue_manager import DialogueManager
from healthbot.utils.provider_lookup import ProviderLookupService

# Configure logging
logging.basicConfig(
    level=logging.INFO,
    format='%(asctime)s - %(name)s - %(levelname)s - %(message)s'
)
logger = logging.getLogger(__name__)

EXIT_COMMANDS = {"quit", "exit", "stop"}


def print_separator(char="=", length=60):
    """Print a separator line"""
    print(char * length)


def print_turn_info(response, context):
    """Print needs-info status and intake progress"""
    print("-" * 60)
    status = f"waiting on {response.info_type}" if response.needs_info else "not waiting"
    print(f"[{status}] goal={context.current_goal.value} collected={context.collected_fields()}")

    for provider in response.message.attachments or ():
        print(f"  * {provider.name} ({provider.type}) - {provider.address}"
              f"{' - ' + provider.distance if provider.distance else ''}")
    print("-" * 60)


def main():
    """Run console session"""
    print_separator()
    print("HEALTH-INTAKE ASSISTANT - CONSOLE")
    print_separator()

    manager = DialogueManager(provider_lookup=ProviderLookupService())
    context, opening = manager.start_conversation()

    print("Type 'quit', 'exit', or 'stop' to end, 'reset' to start over\n")
    print(f"Assistant: {opening.content}\n")

    while True:
        try:
            user_input = input("> ").strip()

            if not user_input:
                print("Please enter a message.\n")
                continue

            if user_input.lower() in EXIT_COMMANDS:
                break

            if user_input.lower() == "reset":
                manager.reset_conversation(context)
                print("\nConversation reset.\n")
                continue

            response = manager.process_message(user_input, context)
            print(f"\nAssistant: {response.message.content}\n")
            print_turn_info(response, context)

        except KeyboardInterrupt:
            print("\n\nSession interrupted by user (Ctrl+C)")
            break

        except EOFError:
            break

    print_separator()
    print("Session complete")
    print_separator()
    return 0


if __name__ == '__main__':
    sys.exit(main())
