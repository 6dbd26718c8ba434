"""gcli - Gmail and Google Calendar from the terminal.

Package containing:
- gcli.sdk: Account registry, authentication, Gmail/Calendar adapters,
  multi-account fan-out and the scheduled-email outbox
- gcli.cli: Command-line interface
"""

__version__ = "0.3.0"
