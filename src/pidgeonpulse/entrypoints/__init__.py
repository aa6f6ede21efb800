"""Entry points for PidgeonPulse.

Thin adapters that translate external inputs into application calls. The
only entry point today is the ``pidgeonpulse`` command line.

Dependency rule: may import `pidgeonpulse.bootstrap`, `pidgeonpulse.config`
and `pidgeonpulse.logging`; keep business rules out of this package.
"""
