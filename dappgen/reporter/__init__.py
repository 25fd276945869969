"""dappgen reporter module.

Turns a finished scaffolding run into the message shown to the user.

Key functions:
    get_success_message - variant-aware summary for a successful run
    print_result        - render a ``BuildResult`` to the console
"""

from .summary import (
    get_script_command,
    get_success_message,
    get_success_message_prefix,
    get_success_message_suffix,
    print_result,
)

__all__ = [
    "get_script_command",
    "get_success_message",
    "get_success_message_prefix",
    "get_success_message_suffix",
    "print_result",
]
