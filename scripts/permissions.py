"""Command-line reconciliation of a single Frontegg permission.

This module serves as a CLI wrapper around permsync.core.frontegg services.
The declared state lives in a JSON file (``--state``) that holds the remote
identity and the last observed attributes.
"""
from __future__ import annotations
import argparse
import json
import logging
import os
import sys
import tempfile
from pathlib import Path
from typing import Optional, Sequence

SCRIPT_DIR = Path(__file__).parent
PROJECT_ROOT = SCRIPT_DIR.parent
if str(PROJECT_ROOT) not in sys.path:
    sys.path.insert(0, str(PROJECT_ROOT))

from permsync.config import AppConfig, load_settings
from permsync.core.frontegg import (
    FronteggClient,
    FronteggError,
    PermissionService,
    ResourceData,
    PERMISSION_SCHEMA,
    create_client_with_token,
)
from scripts import audit

# CLI flag -> declared-state attribute
_ATTRIBUTE_FLAGS = {
    "name": "name",
    "key": "key",
    "category_id": "category_id",
    "description": "description",
}


def load_state(path: Path) -> ResourceData:
    """Load declared state from disk; a missing file is an absent permission."""
    if not path.exists():
        return ResourceData(PERMISSION_SCHEMA)
    payload = json.loads(path.read_text(encoding="utf-8"))
    if not isinstance(payload, dict):
        raise ValueError(f"{path} does not hold a JSON object")
    return ResourceData.from_dict(PERMISSION_SCHEMA, payload)


def save_state(path: Path, data: ResourceData) -> None:
    """Write state atomically; a failed write leaves the previous file intact."""
    path.parent.mkdir(parents=True, exist_ok=True)
    fd, tmp_name = tempfile.mkstemp(dir=path.parent, prefix=f".{path.name}.", suffix=".tmp")
    try:
        with os.fdopen(fd, "w", encoding="utf-8") as f:
            f.write(json.dumps(data.to_dict(), indent=2) + "\n")
        os.replace(tmp_name, path)
    except BaseException:
        if os.path.exists(tmp_name):
            os.unlink(tmp_name)
        raise


def build_client(args: argparse.Namespace, config: AppConfig) -> FronteggClient:
    """Return an authenticated client (pre-issued token first, then vendor credentials)."""
    if config.frontegg_api_token and not args.client_id:
        return create_client_with_token(args.api_url, config.frontegg_api_token, timeout=args.timeout)
    
    client_id = args.client_id or config.frontegg_client_id
    if not client_id:
        raise ValueError("Missing Frontegg client id (--client-id or FRONTEGG_CLIENT_ID)")
    secret = args.secret_key or config.secret_key_resolved
    
    client = FronteggClient(args.api_url, timeout=args.timeout)
    client.authenticate_vendor(client_id, secret)
    return client


def _apply_declared(data: ResourceData, args: argparse.Namespace) -> None:
    for flag, attribute in _ATTRIBUTE_FLAGS.items():
        value = getattr(args, flag, None)
        if value is not None:
            data.set(attribute, value)


def _print_state(data: ResourceData) -> None:
    print(json.dumps(data.to_dict(), indent=2))


def main(argv: Optional[Sequence[str]] = None) -> None:
    """Command-line entry point."""
    config = load_settings()
    
    parser = argparse.ArgumentParser(description="Frontegg permission reconciler")
    parser.add_argument("--api-url", default=config.frontegg_api_url)
    parser.add_argument("--client-id", default=None,
                        help="Frontegg vendor client id (default: FRONTEGG_CLIENT_ID)")
    parser.add_argument("--secret-key", default=None,
                        help="Frontegg vendor secret key (default: FRONTEGG_SECRET_KEY)")
    parser.add_argument("--state", default=config.state_file,
                        help="Path of the JSON state file")
    parser.add_argument("--timeout", type=float, default=config.request_timeout,
                        help="Per-request timeout in seconds")
    parser.add_argument("--operator", default="automation",
                        help="Operator identifier for audit logs (default: automation)")
    parser.add_argument("--verbose", action="store_true")
    
    sub = parser.add_subparsers(dest="cmd")
    
    sc = sub.add_parser("create")
    sc.add_argument("--name", required=True)
    sc.add_argument("--key", required=True)
    sc.add_argument("--category-id", dest="category_id", required=True)
    sc.add_argument("--description", required=True)
    
    sub.add_parser("read")
    
    su = sub.add_parser("update")
    su.add_argument("--name")
    su.add_argument("--key")
    su.add_argument("--category-id", dest="category_id")
    su.add_argument("--description")
    
    sub.add_parser("delete")
    
    si = sub.add_parser("import")
    si.add_argument("--id", dest="permission_id", required=True)
    
    sub.add_parser("show")
    sub.add_parser("verify-audit")
    
    args = parser.parse_args(argv)
    
    logging.basicConfig(
        level=logging.DEBUG if args.verbose else logging.WARNING,
        format="%(levelname)s %(name)s: %(message)s",
    )
    
    if not args.cmd:
        parser.print_help()
        return
    
    if args.cmd == "verify-audit":
        total, valid = audit.verify_audit_log()
        print(f"Audit log: {valid}/{total} events with valid signatures")
        if total != valid:
            sys.exit(1)
        return
    
    state_path = Path(args.state)
    try:
        data = load_state(state_path)
    except (FronteggError, ValueError) as e:
        print(f"[state] Error: cannot load {state_path}: {e}", file=sys.stderr)
        sys.exit(1)
    
    if args.cmd == "show":
        _print_state(data)
        return
    
    if args.cmd == "create" and data.id:
        parser.error(f"State already holds permission id={data.id}; use update or delete")
    if args.cmd in ("read", "update", "delete") and not data.id:
        parser.error(f"No permission recorded in {state_path}; run create or import first")
    if args.cmd == "import" and data.id and data.id != args.permission_id:
        parser.error(f"State already holds permission id={data.id}; delete it or use another --state file")
    
    if args.cmd in ("create", "update"):
        _apply_declared(data, args)
        missing = data.missing_required()
        if missing:
            parser.error(f"Missing required attributes: {', '.join(missing)}")
    
    try:
        client = build_client(args, config)
    except ValueError as e:
        parser.error(str(e))
    except FronteggError as e:
        print(f"[auth] Error: {e}", file=sys.stderr)
        sys.exit(1)
    
    service = PermissionService(client, config.permissions_path)
    event_type = f"permission_{args.cmd}"
    target_id = data.id
    
    try:
        if args.cmd == "create":
            service.create(data, timeout=args.timeout)
            print(f"[create] Created permission '{data.get('key')}' (id={data.id})", file=sys.stderr)
        elif args.cmd == "read":
            if not service.read(data, timeout=args.timeout):
                event_type = "permission_drift"
                print(f"[read] Permission id={target_id} no longer exists upstream", file=sys.stderr)
        elif args.cmd == "update":
            if not service.update(data, timeout=args.timeout):
                event_type = "permission_drift"
                print(f"[update] Permission id={target_id} vanished after update", file=sys.stderr)
        elif args.cmd == "delete":
            service.delete(data, timeout=args.timeout)
            data.set_id("")
            print(f"[delete] Deleted permission id={target_id}", file=sys.stderr)
        elif args.cmd == "import":
            target_id = args.permission_id
            data = ResourceData.import_state(PERMISSION_SCHEMA, target_id)
            if not service.read(data, timeout=args.timeout):
                print(f"[import] Permission id={target_id} not found", file=sys.stderr)
                audit.safe_log_permission_event(
                    "permission_import", target_id, operator=args.operator,
                    details={"error": "not found"}, success=False,
                )
                sys.exit(1)
    except FronteggError as e:
        print(f"[{args.cmd}] Error: {e}", file=sys.stderr)
        audit.safe_log_permission_event(
            event_type, target_id, operator=args.operator,
            details={"error": str(e)}, success=False,
        )
        sys.exit(1)
    
    try:
        save_state(state_path, data)
    except OSError as e:
        print(
            f"[state] Error: could not write {state_path} (remote id={data.id or target_id}): {e}",
            file=sys.stderr,
        )
        print(json.dumps(data.to_dict(), indent=2), file=sys.stderr)
        sys.exit(1)
    audit.safe_log_permission_event(
        event_type, data.id or target_id, operator=args.operator,
        details={"key": data.get("key")},
    )
    _print_state(data)


if __name__ == "__main__":
    main()
