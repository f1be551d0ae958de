#!/usr/bin/env python3
"""
FRITZ!OS Secret Decoder

Decrypts the secrets (passwords, WLAN keys, certificate passwords) that
FRITZ!OS stores as '$$$$...' tokens in its configuration files and settings
exports, and derives the keys needed for that.

Keys can be derived from:
1. The local device (urlader environment), when run on the device itself
2. An already known key given as 64 hex digits
3. The properties of another device (serial number, maca, wlan_key,
   tr069_passphrase)
4. The password of a settings export

Requirements:
    pip install pycryptodome
"""

import argparse
import re
import signal
import sys

import fritz_base32
import fritz_keys
import fritz_secrets
from fritz_errors import DecoderError, InvalidLength, InvalidSymbol

__version__ = "1.0.0"

BOLD = "\033[1m"
RESET = "\033[0m"


def error(message):
    """Print a fatal error as a single bold line"""
    print(f"{BOLD}[-] Error: {message}{RESET}", file=sys.stderr)


def debug(args, message):
    if args.debug:
        print(f"[*] {message}", file=sys.stderr)


def _terminate(signum, frame):
    raise SystemExit(1)


def device_key(args):
    """Cipher key (bytes) from the device properties given on the command line"""
    key_hex = fritz_keys.derive_device_key(args.properties, args.env_file)
    debug(args, f"device key ready ({len(args.properties)} argument(s) given)")
    return fritz_keys.key_from_hex(key_hex)


def cmd_decode_secrets(args):
    document = fritz_secrets.read_document(args.input)

    if args.password is not None:
        key = fritz_keys.export_key(document, args.password)
        debug(args, "key taken from export header")
    else:
        key = device_key(args)

    options = fritz_secrets.DecodeOptions(escape=not args.no_escape, debug=args.debug)
    result = fritz_secrets.rewrite(document, key, options)
    fritz_secrets.write_document(result, args.output)
    return 0


def cmd_device_to_key(args):
    print(fritz_keys.derive_device_key(args.properties, args.env_file))
    return 0


def cmd_password_to_key(args):
    print(fritz_keys.derive_password_key(args.password).hex())
    return 0


def cmd_privatekeypassword(args):
    if args.mac:
        password = fritz_keys.derive_certificate_password(args.mac)
    else:
        password = fritz_keys.certificate_password_from_device(args.env_file)
    print(password.decode('ascii'))
    return 0


def cmd_encode_secret(args):
    if args.value is not None:
        value = args.value.encode('utf-8')
    else:
        value = sys.stdin.buffer.read().rstrip(b'\r\n')
    print(fritz_secrets.encode_token(value, device_key(args)).decode('ascii'))
    return 0


def cmd_b32dec(args):
    data = re.sub(rb'\s+', b'', sys.stdin.buffer.read())
    try:
        binary = fritz_base32.decode(data)
    except InvalidSymbol:
        error("Invalid data value encountered on STDIN.")
        return 1
    except InvalidLength:
        error("Invalid data size encountered on STDIN.")
        return 1

    if args.hex_output:
        sys.stdout.write(binary.hex())
        sys.stdout.flush()
    else:
        sys.stdout.buffer.write(binary)
        sys.stdout.buffer.flush()
    return 0


def cmd_b32enc(args):
    print(fritz_base32.encode(sys.stdin.buffer.read()))
    return 0


def add_key_arguments(parser):
    parser.add_argument('-e', '--env-file',
                        help='Alternate urlader environment file for the local device')
    parser.add_argument('properties', nargs='*', metavar='PROPERTY',
                        help='none: local device, one: key as 64 hex digits, '
                             'two to four: serial number, maca, wlan_key, tr069_passphrase')


def build_parser():
    parser = argparse.ArgumentParser(
        prog='fritz-decoder',
        description='FRITZ!OS Secret Decoder',
        formatter_class=argparse.RawDescriptionHelpFormatter,
        epilog="""
Examples:
  # Decode secrets in a configuration file on the device itself
  fritz-decoder decode-secrets -i /var/flash/ar7.cfg

  # Decode secrets in a file from another device
  fritz-decoder decode-secrets -i ar7.cfg -o ar7_decoded.cfg 1234567890123456 00:11:22:33:44:55

  # Decode a settings export protected with a password
  fritz-decoder decode-secrets -i settings.export -p secret

  # Show the password of the private key for the GUI certificate
  fritz-decoder privatekeypassword 00:11:22:33:44:55
        """
    )

    parser.add_argument('--version', action='version', version=f'%(prog)s {__version__}')
    parser.add_argument('-d', '--debug', action='store_true', help='Show diagnostic messages')

    subparsers = parser.add_subparsers(dest='command', help='Command to execute')

    p = subparsers.add_parser('decode-secrets', help='Replace encrypted values in a file')
    p.add_argument('-i', '--input', help='Input file (default: STDIN)')
    p.add_argument('-o', '--output', help='Output file (default: STDOUT)')
    p.add_argument('-p', '--password', help='Password of a settings export')
    p.add_argument('--no-escape', action='store_true',
                   help='Insert decoded values without escaping quotes and backslashes')
    add_key_arguments(p)
    p.set_defaults(func=cmd_decode_secrets)

    p = subparsers.add_parser('device-to-key', help='Show the key of a device as hex digits')
    add_key_arguments(p)
    p.set_defaults(func=cmd_device_to_key)

    p = subparsers.add_parser('password-to-key', help='Show the key for an export password')
    p.add_argument('password', help='Export password')
    p.set_defaults(func=cmd_password_to_key)

    p = subparsers.add_parser('privatekeypassword',
                              help='Show the password of the GUI certificate private key')
    p.add_argument('-e', '--env-file', help='Alternate urlader environment file')
    p.add_argument('mac', nargs='?', help='MAC address (maca), default: local device')
    p.set_defaults(func=cmd_privatekeypassword)

    p = subparsers.add_parser('encode-secret', help='Encrypt a value (STDIN) into a token')
    p.add_argument('-v', '--value', help='Value to encrypt instead of reading STDIN')
    add_key_arguments(p)
    p.set_defaults(func=cmd_encode_secret)

    p = subparsers.add_parser('b32dec', help='Decode base32 data from STDIN')
    p.add_argument('-x', '--hex-output', action='store_true', help='Write hex digits')
    p.set_defaults(func=cmd_b32dec)

    p = subparsers.add_parser('b32enc', help='Encode binary data from STDIN as base32')
    p.set_defaults(func=cmd_b32enc)

    return parser


def main(argv=None):
    parser = build_parser()
    args = parser.parse_args(argv)

    if not args.command:
        parser.print_help(sys.stderr)
        return 1

    previous = signal.signal(signal.SIGTERM, _terminate)
    try:
        return args.func(args)
    except DecoderError as e:
        error(e)
        return 1
    except FileNotFoundError as e:
        error(f"File not found: {e.filename}")
        return 1
    except OSError as e:
        error(e)
        return 1
    except KeyboardInterrupt:
        error("Interrupted")
        return 1
    finally:
        signal.signal(signal.SIGTERM, previous)


if __name__ == '__main__':
    sys.exit(main())
