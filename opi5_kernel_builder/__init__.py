"""Orange Pi 5 Plus kernel builder (RK3588, Mali G610).

Core design goals:
- One ordered pipeline of steps, each with a fatal or best-effort policy
- Every external tool call returns a structured result
- Package and kernel-config lists kept as YAML manifests
- Centralized logging to an append-only file plus a coloured console
"""

__version__ = "1.0.0"

__all__ = ["__version__"]
