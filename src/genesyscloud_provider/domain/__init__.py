"""Domain layer - resource data, schemas, diagnostics and ports.

- core/: Domain exceptions
- base/ports/: Ports for the remote object API
- resource/: Engine-facing resource data, schema markers and diagnostics
"""
