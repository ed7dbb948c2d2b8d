"""
Main CLI module with argument parsing and command execution.

This module provides the main CLI interface including:
- Command line argument parsing
- Command routing and execution
- Output formatting
"""
import argparse
import os
import sys
from typing import Any, Dict, List, Optional

from genesyscloud_provider._version import __version__
from genesyscloud_provider.cli.formatters import format_diagnostics, format_output
from genesyscloud_provider.config.manager import ConfigurationManager
from genesyscloud_provider.config.schemas import AppConfig
from genesyscloud_provider.domain.core.exceptions import DomainException
from genesyscloud_provider.infrastructure.exporter import export_inventory
from genesyscloud_provider.infrastructure.logging.logger import get_logger, setup_logging
from genesyscloud_provider.infrastructure.registry import ResourceRegistry
from genesyscloud_provider.infrastructure.resilience import OperationContext, RetryError
from genesyscloud_provider.providers.genesyscloud.client_pool import ProviderMeta
from genesyscloud_provider.providers.genesyscloud.exceptions import APIError
from genesyscloud_provider.providers.genesyscloud.registration import register_all

FORMATS = ["json", "yaml", "table"]


def parse_args(argv: Optional[List[str]] = None) -> argparse.Namespace:
    """Parse command line arguments with resource-action structure."""

    # Main parser with global options
    parser = argparse.ArgumentParser(
        prog=os.path.basename(sys.argv[0]) if sys.argv and sys.argv[0] else "genesyscloud-provider",
        description="Genesys Cloud resource provider - export and look up platform objects",
        formatter_class=argparse.RawDescriptionHelpFormatter,
        epilog="""
Examples:
  %(prog)s export                                           # Export every supported type
  %(prog)s export --type genesyscloud_integration_action    # Export one type
  %(prog)s lookup genesyscloud_integration "My Integration" # Resolve a name to an ID
  %(prog)s config show --format yaml                        # Show effective configuration
        """
    )

    # Global options
    parser.add_argument('--config', help='Configuration file path (YAML or JSON)')
    parser.add_argument('--log-level', choices=['DEBUG', 'INFO', 'WARNING', 'ERROR', 'CRITICAL'],
                        help='Override the configured logging level')
    parser.add_argument('--format', choices=FORMATS, default='json', help='Output format')
    parser.add_argument('--output', help='Output file (default: stdout)')
    parser.add_argument('--verbose', action='store_true', help='Enable verbose output')
    parser.add_argument('--version', action='version', version=f'%(prog)s {__version__}')

    subparsers = parser.add_subparsers(dest='command', help='Available commands')

    # Export
    export_parser = subparsers.add_parser('export', help='Export existing objects as resource configuration')
    export_parser.add_argument('--type', dest='resource_types', action='append',
                               help='Resource type to export, repeatable (default: all)')

    # Lookup
    lookup_parser = subparsers.add_parser('lookup', help='Look an object up by name')
    lookup_parser.add_argument('resource_type', help='Data source type, e.g. genesyscloud_integration')
    lookup_parser.add_argument('name', help='Object name')

    # Config
    config_parser = subparsers.add_parser('config', help='Inspect configuration')
    config_subparsers = config_parser.add_subparsers(dest='action', help='Config actions')
    config_subparsers.add_parser('show', help='Show effective configuration')
    config_subparsers.add_parser('validate', help='Validate configuration')

    return parser.parse_args(argv)


def _load_config(args: argparse.Namespace) -> AppConfig:
    config = ConfigurationManager(args.config).app_config
    if args.log_level:
        config = config.model_copy(
            update={"logging": config.logging.model_copy(update={"level": args.log_level})}
        )
    return config


def _build_provider(config: AppConfig) -> tuple:
    registry = register_all(ResourceRegistry())
    return registry, ProviderMeta.from_config(config)


def run_export(args: argparse.Namespace, config: AppConfig, ctx: OperationContext) -> Dict[str, Any]:
    """Export objects of the requested types."""
    registry, meta = _build_provider(config)
    try:
        result = export_inventory(ctx, registry, meta, args.resource_types)
    finally:
        meta.pool.close()
    return {
        "resources": result.resources,
        "variables": result.variables,
        "unresolved_references": [f"{ref_type}:{object_id}" for ref_type, object_id in result.unresolved],
        "diagnostics": format_diagnostics(result.diagnostics),
    }


def run_lookup(args: argparse.Namespace, config: AppConfig, ctx: OperationContext) -> Dict[str, Any]:
    """Resolve an object name through its data source."""
    registry, meta = _build_provider(config)
    data_source = registry.get_data_source(args.resource_type)
    d = data_source.new_resource_data({"name": args.name})
    try:
        diagnostics = data_source.read(ctx, d, meta)
    finally:
        meta.pool.close()
    if diagnostics.has_error():
        raise LookupFailedError("; ".join(format_diagnostics(diagnostics)))
    return {"type": args.resource_type, "name": args.name, "id": d.id}


def run_config(args: argparse.Namespace, config: AppConfig) -> Dict[str, Any]:
    if args.action == 'validate':
        return {"valid": True, "region": config.provider.aws_region, "credentials": config.provider.has_credentials()}
    return config.model_dump(mode="json")


class LookupFailedError(Exception):
    """Raised when a data source lookup reports errors."""
    pass


def execute_command(args: argparse.Namespace, config: AppConfig, ctx: OperationContext) -> Dict[str, Any]:
    """Route a parsed command to its handler."""
    if args.command == 'export':
        return run_export(args, config, ctx)
    elif args.command == 'lookup':
        return run_lookup(args, config, ctx)
    elif args.command == 'config':
        return run_config(args, config)
    raise ValueError(f"Unknown command: {args.command}")


def main(argv: Optional[List[str]] = None) -> int:
    """Main CLI entry point."""
    args = parse_args(argv)

    if not args.command:
        print("Error: No command specified. Use --help for usage information.")
        return 1

    try:
        config = _load_config(args)
    except DomainException as e:
        print(f"Error: {e}")
        return 1

    setup_logging(config.logging)
    logger = get_logger(__name__)
    ctx = OperationContext()

    try:
        result = execute_command(args, config, ctx)
        formatted_output = format_output(result, args.format)

        if args.output:
            with open(args.output, 'w') as f:
                f.write(formatted_output)
            print(f"Output written to {args.output}")
        else:
            print(formatted_output)
        return 0

    except KeyboardInterrupt:
        ctx.cancel()
        print("\nOperation cancelled by user.")
        return 130
    except (DomainException, APIError, RetryError, LookupFailedError) as e:
        logger.error(f"Command failed: {e}")
        print(f"Error: {e}")
        return 1
    except Exception as e:
        logger.error(f"Unexpected error: {e}")
        if args.verbose:
            import traceback
            traceback.print_exc()
        print(f"Unexpected error: {e}")
        return 1


if __name__ == "__main__":
    sys.exit(main())
