"""Adapters (infrastructure) for PidgeonPulse.

Provide concrete implementations of the ports declared in
`pidgeonpulse.interfaces`, such as the thread-backed worker pool.

Dependency rule: may import `pidgeonpulse.interfaces` and
`pidgeonpulse.domain`; neither of those may import this package.
"""
