"""
Command table for the control plane.

The meter answers a single remote command ("snapshot"); the table keeps
name -> (handler, description) so an unknown command can be rejected
with the list of what is accepted.
"""

from typing import Callable, Dict, Optional, Tuple

Handler = Callable[[dict], None]


class CommandNotAvailableError(Exception):
    """Unknown command name."""


class CommandRegistry:
    """
    Example:
        registry = CommandRegistry()
        registry.register('snapshot', lambda data: flag.request(), "Report now")
        registry.execute('snapshot', {'command': 'snapshot'})
    """

    def __init__(self):
        self._commands: Dict[str, Tuple[Handler, str]] = {}

    def register(self, command: str, handler: Handler, description: str) -> None:
        # Handlers are registered once at setup, before the MQTT thread starts
        if command in self._commands:
            raise ValueError(f"Command '{command}' already registered")
        self._commands[command] = (handler, description)

    def execute(self, command: str, command_data: Optional[dict] = None) -> None:
        """
        Raises:
            CommandNotAvailableError: If command not registered
        """
        entry = self._commands.get(command)
        if entry is None:
            raise CommandNotAvailableError(
                f"Command '{command}' not available. "
                f"Available commands: {', '.join(self.describe()) or 'none'}"
            )
        handler, _ = entry
        handler(command_data or {'command': command})

    def describe(self) -> Dict[str, str]:
        """Command name -> description, sorted by name."""
        return {name: self._commands[name][1] for name in sorted(self._commands)}
