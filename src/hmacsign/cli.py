"""
Command-line interface for hmacsign
Hash data, sign request descriptions and verify signatures from the shell
"""

import argparse
import json
import logging
import sys
from typing import Any, Dict, Optional

from . import __version__
from .config import HmacConfig, load_config_from_dict, load_config_from_file
from .exceptions import ConfigurationError, HmacSignError
from .signing import AUTHORIZATION_HEADER, Credential, Signer, normalize, parse_authorization
from .verification import Verifier

EXIT_OK = 0
EXIT_REJECTED = 1
EXIT_CONFIG_ERROR = 2


def create_parser() -> argparse.ArgumentParser:
    """Create the main argument parser with subcommands."""
    parser = argparse.ArgumentParser(
        prog='hmacsign',
        description='HMAC request signing: hash data, sign and verify requests'
    )

    parser.add_argument(
        '--version',
        action='version',
        version=f'hmacsign {__version__}'
    )
    parser.add_argument('--config', help='JSON configuration file')
    parser.add_argument('--algorithm', help='Digest algorithm (default: sha256)')
    parser.add_argument('--encoding', help='Signature encoding: hex, base64 or base64url')
    parser.add_argument('--skew', help="Acceptable date skew in seconds, or 'disabled'")
    parser.add_argument('-v', '--verbose', action='store_true', help='Enable debug logging')

    subparsers = parser.add_subparsers(dest='command', help='Available commands')

    hash_parser = subparsers.add_parser('hash', help='Hash text (UTF-8) with the configured algorithm')
    hash_parser.add_argument('text', help='Text to hash')

    sign_parser = subparsers.add_parser('sign', help='Print the Authorization header for a request')
    sign_parser.add_argument('--key-id', required=True, help='Credential key ID')
    sign_parser.add_argument('--secret', required=True, help='Shared secret')
    sign_parser.add_argument('--request', default='-', help="Request JSON file ('-' for stdin)")
    sign_parser.add_argument('--show-canonical', action='store_true', help='Also print the string to sign')

    verify_parser = subparsers.add_parser('verify', help='Verify a signed request')
    verify_parser.add_argument('--key-id', help='Credential key ID (read from Authorization if omitted)')
    verify_parser.add_argument('--secret', required=True, help='Shared secret')
    verify_parser.add_argument('--signature', help='Signature (read from Authorization if omitted)')
    verify_parser.add_argument('--request', default='-', help="Request JSON file ('-' for stdin)")

    return parser


def build_config(args: argparse.Namespace) -> HmacConfig:
    """Merge the config file with command-line overrides."""
    options: Dict[str, Any] = {}
    if args.config:
        options.update(load_config_from_file(args.config).to_dict())
    if args.algorithm:
        options['algorithm'] = args.algorithm
    if args.encoding:
        options['encoding'] = args.encoding
    if args.skew is not None:
        options['acceptable_date_skew'] = args.skew
    return load_config_from_dict(options)


def read_request(source: str) -> Any:
    """Load a request description from a JSON file or stdin."""
    if source == '-':
        return json.load(sys.stdin)
    with open(source, 'r', encoding='utf-8') as fh:
        return json.load(fh)


def handle_hash_command(args, config: HmacConfig) -> int:
    """Handle hash command."""
    print(config.create_engine().hash(args.text))
    return EXIT_OK


def handle_sign_command(args, config: HmacConfig) -> int:
    """Handle sign command."""
    signer = Signer(config)
    credential = Credential(args.key_id, args.secret)
    raw_request = read_request(args.request)

    if args.show_canonical:
        request = normalize(raw_request)
        if request is not None:
            print(signer.string_to_sign(request))
            print()

    print(signer.authorization_header(raw_request, credential))
    return EXIT_OK


def handle_verify_command(args, config: HmacConfig) -> int:
    """Handle verify command."""
    raw_request = read_request(args.request)
    key_id, signature = args.key_id, args.signature

    if key_id is None or signature is None:
        request = normalize(raw_request)
        parsed = None
        if request is not None:
            parsed = parse_authorization(request.get_header(AUTHORIZATION_HEADER), config.scheme)
        if parsed is None:
            print("Error: no usable Authorization header; pass --key-id and --signature", file=sys.stderr)
            return EXIT_REJECTED
        key_id = key_id or parsed[0]
        signature = signature or parsed[1]

    result = Verifier(config).verify(raw_request, signature, Credential(key_id, args.secret))
    print(result.reason.value)
    return EXIT_OK if result.accepted else EXIT_REJECTED


def main(argv: Optional[list] = None) -> int:
    """
    Main entry point for the CLI

    Args:
        argv: Command line arguments (None to use sys.argv)

    Returns:
        int: Exit code (0 success/accepted, 1 failure/rejected, 2 configuration error)
    """
    if argv is None:
        argv = sys.argv[1:]

    parser = create_parser()
    args = parser.parse_args(argv)

    logging.basicConfig(
        level=logging.DEBUG if args.verbose else logging.WARNING,
        format='%(asctime)s %(levelname)s %(name)s: %(message)s'
    )

    try:
        config = build_config(args)

        if args.command == 'hash':
            return handle_hash_command(args, config)
        elif args.command == 'sign':
            return handle_sign_command(args, config)
        elif args.command == 'verify':
            return handle_verify_command(args, config)
        else:
            parser.print_help()
            return EXIT_REJECTED

    except ConfigurationError as e:
        print(f"Configuration error: {e}", file=sys.stderr)
        return EXIT_CONFIG_ERROR
    except (HmacSignError, OSError, ValueError) as e:
        print(f"Error: {e}", file=sys.stderr)
        return EXIT_REJECTED
    except KeyboardInterrupt:
        print("\nOperation cancelled by user", file=sys.stderr)
        return 130


if __name__ == '__main__':
    sys.exit(main())
