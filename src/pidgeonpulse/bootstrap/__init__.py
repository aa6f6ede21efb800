"""Bootstrap (composition root) for PidgeonPulse.

Assembles the application at runtime: wires the thread-backed worker pool
into the test registry, reads configuration, and holds the process-wide
default registry.

Import rules:
- Entry points import *this* package (not adapters/service_layer internals).
- This package may import: `pidgeonpulse.adapters`,
  `pidgeonpulse.service_layer`, `pidgeonpulse.interfaces`,
  `pidgeonpulse.domain`, and `pidgeonpulse.config`.
- Inner layers must not import `pidgeonpulse.bootstrap`.
"""

from .bootstrap import build_registry, get_registry, init_registry, reset_registry

__all__ = ["build_registry", "get_registry", "init_registry", "reset_registry"]
