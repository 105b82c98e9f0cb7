#!/usr/bin/env python3
"""
otp_cli.py — command line front end for the TOTPHog credential store.

Subcommands:
- add        : store a credential from name + secret
- import     : store a credential from an otpauth:// URI
- list       : list stored credentials
- code       : show the current code of one credential (or of all)
- uri        : print the otpauth:// provisioning URI of a credential
- delete     : delete one credential
- clear      : delete every credential
- new-secret : print a fresh random Base32 secret
- serve      : run the REST API server

eg..:
    totphog add --name alice@example.com --secret JBSWY3DPEHPK3PXP --issuer GitHub
    totphog import "otpauth://totp/GitHub:alice?secret=JBSWY3DPEHPK3PXP&issuer=GitHub"
    totphog code
    totphog --storage /tmp/tokens.json list
"""

import argparse
import sys

from totphog.config import Config
from totphog.core import otp_core
from totphog.core.errors import OtpError
from totphog.core.models import DEFAULT_ALGORITHM, DEFAULT_DIGITS, DEFAULT_ISSUER, DEFAULT_PERIOD, CredentialFields
from totphog.database import CredentialStore


def _open_store(args) -> CredentialStore:
    return CredentialStore(args.storage)


# --- CLI command handlers ---
def cmd_add(args):
    store = _open_store(args)
    credential = store.add(CredentialFields(
        name=args.name,
        secret=args.secret,
        issuer=args.issuer,
        digits=args.digits,
        period=args.period,
        algorithm=args.algorithm,
    ))
    print(f"[+] Added {credential.issuer}:{credential.name} (id={credential.id})")


def cmd_import(args):
    store = _open_store(args)
    credential = store.add_from_uri(args.uri)
    print(f"[+] Imported {credential.issuer}:{credential.name} (id={credential.id})")


def cmd_list(args):
    store = _open_store(args)
    credentials = store.get_all()
    if not credentials:
        print("No tokens stored.")
        return
    for c in credentials:
        print(f"{c.id}  {c.issuer}:{c.name}  ({c.digits}d/{c.period}s/{c.algorithm})")


def cmd_code(args):
    store = _open_store(args)
    if args.id:
        result = store.generate_code(args.id)
        if result is None:
            print(f"[-] Token '{args.id}' not found", file=sys.stderr)
            return 1
        print(f"{result.code}  (valid {result.remaining_seconds:2d}s)")
        return 0

    for credential, result in store.generate_all_codes():
        print(f"{result.code}  {result.remaining_seconds:2d}s  {credential.issuer}:{credential.name}")
    return 0


def cmd_uri(args):
    store = _open_store(args)
    uri = store.get_provisioning_uri(args.id)
    if uri is None:
        print(f"[-] Token '{args.id}' not found", file=sys.stderr)
        return 1
    print(uri)
    return 0


def cmd_delete(args):
    store = _open_store(args)
    if not store.delete(args.id):
        print(f"[-] Token '{args.id}' not found", file=sys.stderr)
        return 1
    print(f"[+] Deleted {args.id}")
    return 0


def cmd_clear(args):
    count = _open_store(args).delete_all()
    print(f"[+] Deleted {count} tokens")


def cmd_new_secret(args):
    print(otp_core.generate_base32_secret())


def cmd_serve(args):
    from totphog.backend.app import create_app

    app = create_app({"STORAGE_PATH": args.storage})
    app.run(debug=app.config["DEBUG"], host=args.host, port=args.port)


def cmd_help(args):
    print("'totphog -h' for help.")


# --- Argparse builder ---
def build_parser() -> argparse.ArgumentParser:
    p = argparse.ArgumentParser(prog="totphog", description="TOTP credential store and code generator")
    p.add_argument("--storage", default=Config.STORAGE_PATH, help="JSON file holding the tokens")
    sub = p.add_subparsers(dest="cmd")
    p.set_defaults(func=cmd_help)

    # add
    pa = sub.add_parser("add", help="Store a token from name + Base32 secret")
    pa.add_argument("--name", required=True, help="Account label (e.g. alice@example.com)")
    pa.add_argument("--secret", required=True, help="Base32 secret")
    pa.add_argument("--issuer", default=DEFAULT_ISSUER, help="Service label")
    pa.add_argument("--digits", type=int, default=DEFAULT_DIGITS, help="Number of code digits")
    pa.add_argument("--period", type=int, default=DEFAULT_PERIOD, help="TOTP time step (seconds)")
    pa.add_argument("--algorithm", default=DEFAULT_ALGORITHM, choices=sorted(otp_core.HASH_FUNCTIONS))
    pa.set_defaults(func=cmd_add)

    # import
    pi = sub.add_parser("import", help="Store a token from an otpauth:// URI")
    pi.add_argument("uri", help="otpauth://totp/... URI (quote it in the shell)")
    pi.set_defaults(func=cmd_import)

    # list
    pl = sub.add_parser("list", help="List stored tokens")
    pl.set_defaults(func=cmd_list)

    # code
    pc = sub.add_parser("code", help="Show current codes (all tokens, or one by id)")
    pc.add_argument("id", nargs="?", help="Token id")
    pc.set_defaults(func=cmd_code)

    # uri
    pu = sub.add_parser("uri", help="Print the otpauth:// provisioning URI of a token")
    pu.add_argument("id", help="Token id")
    pu.set_defaults(func=cmd_uri)

    # delete
    pd = sub.add_parser("delete", help="Delete one token")
    pd.add_argument("id", help="Token id")
    pd.set_defaults(func=cmd_delete)

    # clear
    px = sub.add_parser("clear", help="Delete all tokens")
    px.set_defaults(func=cmd_clear)

    # new-secret
    pn = sub.add_parser("new-secret", help="Print a random Base32 secret")
    pn.set_defaults(func=cmd_new_secret)

    # serve
    ps = sub.add_parser("serve", help="Run the REST API server")
    ps.add_argument("--host", default=Config.HOST)
    ps.add_argument("--port", type=int, default=Config.PORT)
    ps.set_defaults(func=cmd_serve)

    return p


def main(argv=None) -> int:
    parser = build_parser()
    args = parser.parse_args(argv)
    try:
        status = args.func(args)
    except OtpError as e:
        print(f"[!] {e}", file=sys.stderr)
        return 1
    return status or 0


if __name__ == "__main__":
    sys.exit(main())
