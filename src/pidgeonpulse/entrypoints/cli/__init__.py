"""The ``pidgeonpulse`` command-line interface."""
