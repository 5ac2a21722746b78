import argparse
import json
import os
import sys
from typing import List, Optional

import httpx

DEFAULT_API_URL = "http://localhost:3000"


def _build_parser() -> argparse.ArgumentParser:
    parser = argparse.ArgumentParser(
        prog="schema-registry", description="Upload and fetch versioned schemas"
    )
    parser.add_argument(
        "--api-url",
        default=os.getenv("REGISTRY_API_URL", DEFAULT_API_URL),
        help="Base URL of the registry service",
    )
    commands = parser.add_subparsers(dest="command", required=True)

    import_cmd = commands.add_parser("import", help="Import an OpenAPI spec")
    import_cmd.add_argument("-s", "--spec", required=True, help="Path to the spec file")
    import_cmd.add_argument("-a", "--application", required=True)
    import_cmd.add_argument("--service", help="The service name (optional)")

    get_cmd = commands.add_parser("get", help="Get a schema")
    get_cmd.add_argument("-a", "--application", required=True)
    get_cmd.add_argument("--service", help="The service name (optional)")
    get_cmd.add_argument(
        "-v",
        "--schema-version",
        default="latest",
        help='Version to fetch: "latest" or a number',
    )

    versions_cmd = commands.add_parser("versions", help="List schema versions")
    versions_cmd.add_argument("-a", "--application", required=True)
    versions_cmd.add_argument("--service", help="The service name (optional)")
    return parser


def _scope_params(args: argparse.Namespace) -> dict:
    params = {"application": args.application}
    if args.service:
        params["service"] = args.service
    return params


def _send(client: httpx.Client, args: argparse.Namespace) -> httpx.Response:
    if args.command == "import":
        with open(args.spec, "rb") as handle:
            return client.post(
                "/api/v1/upload",
                data=_scope_params(args),
                files={"file": (os.path.basename(args.spec), handle.read())},
            )
    if args.command == "get":
        params = _scope_params(args)
        params["version"] = args.schema_version
        return client.get("/api/v1/schema", params=params)
    return client.get("/api/v1/schema/versions", params=_scope_params(args))


def _print_body(response: httpx.Response, stream) -> None:
    try:
        body = response.json()
    except ValueError:
        print(response.text, file=stream)
        return
    print(json.dumps(body, indent=2), file=stream)


def run(argv: Optional[List[str]] = None, client: Optional[httpx.Client] = None) -> int:
    args = _build_parser().parse_args(argv)
    if args.command == "import" and not os.path.isfile(args.spec):
        print(f"Error: File not found at {os.path.abspath(args.spec)}", file=sys.stderr)
        return 1

    owns_client = client is None
    if client is None:
        client = httpx.Client(base_url=args.api_url, timeout=30.0)
    try:
        response = _send(client, args)
    except httpx.HTTPError as exc:
        print(f"Request failed: {exc}", file=sys.stderr)
        return 1
    finally:
        if owns_client:
            client.close()

    if response.is_error:
        print(f"Request failed with status {response.status_code}:", file=sys.stderr)
        _print_body(response, sys.stderr)
        return 1
    _print_body(response, sys.stdout)
    return 0


def main() -> None:
    sys.exit(run())


if __name__ == "__main__":
    main()
