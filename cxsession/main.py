"""
cxsession Command Line

Connect to a switch, report the negotiated REST API version, optionally
GET one resource, then log out.

Usage:
    cxsession --server switch.example.com --username admin
    cxsession --config config/connection.yaml --get system --depth 1
"""

import argparse
import json
import logging
import sys
from pathlib import Path
from typing import List, Optional

from cxsession import __version__
from cxsession.communication.http_client import build_query
from cxsession.devices.connection_manager import ConnectionManager
from cxsession.exceptions import CXSessionError
from cxsession.logging.logger import configure_logging, device_fields
from cxsession.monitoring.metrics import start_metrics_server
from cxsession.utils.config_loader import ConnectionSettings

DEFAULT_LOGGING_CONFIG = Path(__file__).parent.parent / "config" / "logging.yaml"


def build_parser() -> argparse.ArgumentParser:
    parser = argparse.ArgumentParser(
        prog='cxsession',
        description='Open (and close) a REST session on a switch'
    )
    parser.add_argument('--config', help='YAML connection settings (CXSESSION_* env vars override)')
    parser.add_argument('--server', help='Switch address or hostname')
    parser.add_argument('--port', type=int, default=None, help='HTTPS port (default: 443)')
    parser.add_argument('--username', help='Login username (prompted when omitted)')
    parser.add_argument('--skip-certificate-check', action='store_true',
                        help='Accept any server certificate')
    parser.add_argument('--timeout', type=float, default=None, help='Request timeout in seconds')
    parser.add_argument('--get', metavar='RESOURCE',
                        help='GET a resource under the negotiated API version before logging out')
    parser.add_argument('--depth', type=int, help='Depth for --get')
    parser.add_argument('--metrics-port', type=int, default=None,
                        help='Expose Prometheus metrics on this port while the session is open')
    parser.add_argument('--metrics-addr', default='127.0.0.1', help='Bind address for --metrics-port')
    parser.add_argument('--logging-config', default=str(DEFAULT_LOGGING_CONFIG),
                        help='YAML logging configuration')
    parser.add_argument('--version', action='version', version=f'cxsession {__version__}')
    return parser


def load_settings(args: argparse.Namespace) -> ConnectionSettings:
    """Merge the optional config file with command-line flags (flags win)"""
    data = {}
    if args.config:
        settings = ConnectionSettings.load(args.config)
        data = {
            'server': settings.server,
            'port': settings.port,
            'username': settings.username,
            'password': settings.password,
            'skip_certificate_check': settings.skip_certificate_check,
            'default_connection': settings.default_connection,
            'timeout': settings.timeout,
            'keep_alive': settings.keep_alive
        }
    
    if args.server:
        data['server'] = args.server
    if args.port is not None:
        data['port'] = args.port
    if args.username:
        data['username'] = args.username
    if args.skip_certificate_check:
        data['skip_certificate_check'] = True
    if args.timeout is not None:
        data['timeout'] = args.timeout
    
    return ConnectionSettings.from_dict(data)


def main(argv: Optional[List[str]] = None, manager: Optional[ConnectionManager] = None) -> int:
    args = build_parser().parse_args(argv)
    
    configure_logging(args.logging_config)
    logger = logging.getLogger(__name__)
    
    if args.metrics_port is not None:
        start_metrics_server(args.metrics_port, addr=args.metrics_addr)
        logger.info(f"Prometheus metrics on {args.metrics_addr}:{args.metrics_port}")
    
    try:
        settings = load_settings(args)
    except (OSError, ValueError) as e:
        print(f"✗ Invalid configuration: {e}", file=sys.stderr)
        return 2
    
    manager = manager or ConnectionManager()
    
    try:
        connection = manager.connect_from_settings(settings)
    except CXSessionError as e:
        print(f"✗ {e}", file=sys.stderr)
        return 1
    
    print(f"✓ Connected to {connection.server}:{connection.port}")
    print(f"✓ REST API version: {connection.api_version}")
    
    status = 0
    try:
        if args.get:
            result = manager.invoke(
                'GET',
                connection.api_path(args.get),
                connection=connection,
                params=build_query(depth=args.depth)
            )
            print(json.dumps(result, indent=2))
    except CXSessionError as e:
        print(f"✗ {e}", file=sys.stderr)
        status = 1
    finally:
        try:
            manager.disconnect(connection, force_no_confirm=True)
            logger.info(
                f"Session on {connection.server} closed",
                extra=device_fields(connection.server, connection.port)
            )
        except CXSessionError as e:
            print(f"✗ {e}", file=sys.stderr)
            status = 1
    
    return status


if __name__ == "__main__":
    sys.exit(main())
