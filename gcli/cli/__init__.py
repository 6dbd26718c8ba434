"""gcli command-line interface."""
