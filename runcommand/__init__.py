"""
Run Command Service - Remote trigger for a single predefined shell command

A sidecar that exposes one configured shell command over HTTP,
protected by a shared secret.

Architecture:
- Each module is self-contained with clear interfaces
- main.py only wires modules together

Modules:
- config: Environment and YAML configuration loading
- auth: Shared secret verification
- executor: Shell runner and execution mode controller
- api: Response models for the HTTP layer
"""

__version__ = "1.0.0"
