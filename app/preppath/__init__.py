"""PrepPath resilience layer.

Retry/backoff execution and network-status monitoring shared by the
interview, dashboard and roadmap flows when they call the hosted database
and the generative-AI service.
"""

__version__ = "0.1.0"
