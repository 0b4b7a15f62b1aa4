from .commands import register_commands
from .errors import handle_app_command_error, notify_admin_error

__all__ = [
    "register_commands",
    "handle_app_command_error",
    "notify_admin_error",
]
