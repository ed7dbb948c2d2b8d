"""Genesys Cloud Resource Provider - Root Package.

This package lets a declarative infrastructure engine manage Genesys Cloud
objects (integrations, integration credentials, integration actions and
recording media retention policies) as resources with create, read, update,
delete, export and name lookup support.

Key Components:
    - domain: Resource data, schemas, diagnostics and remote object ports
    - infrastructure: Retry runner, consistency checks, pagination, logging,
      registry and exporter support
    - providers: Genesys Cloud HTTP client and resource implementations
    - config: Configuration schemas and loading
    - cli: Command-line interface for export and lookup

Architecture:
    Resource entry points never talk to the engine's state format directly.
    They receive a ResourceData, call the remote object API through a pooled
    client and confirm every write through the retrying operation runner.
"""

from ._version import __version__

PACKAGE_NAME = "genesyscloud-resource-provider"

__author__ = "Genesys Cloud DevOps"
__package_name__ = PACKAGE_NAME
