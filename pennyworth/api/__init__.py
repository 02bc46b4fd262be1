"""HTTP API layer.

Key components:
- **request** / **responder**: the contract a handler uses to read its input
  and emit its result
- **handler**: route declaration, middleware composition and panic recovery
- **server**: route aggregation, default 404/405 responses and the listener
- **customers** / **health**: the service endpoints
"""
