"""Foundation API CLI.

Usage:
    foundation-api serve --port 2929 --debug
    foundation-api serve --config local backend.base_url=http://gpu:8000
    foundation-api health
    foundation-api complete "Write a haiku about rain" --stream
"""

from __future__ import annotations

import argparse
import json
import sys

import httpx

DEFAULT_URL = "http://127.0.0.1:2929"


def cmd_serve(args: argparse.Namespace) -> int:
    """Run the API server with uvicorn."""
    import uvicorn

    from .api import configure_web_app, web_app
    from .core.config import configure_logging, load_core_config

    overrides = list(args.overrides)
    if args.host:
        overrides.append(f"host={args.host}")
    if args.port:
        overrides.append(f"port={args.port}")
    if args.debug:
        overrides.append("debug=true")

    cfg = load_core_config(args.config, overrides=overrides)
    configure_logging(cfg.debug)
    configure_web_app(cfg)
    uvicorn.run(
        web_app,
        host=cfg.host,
        port=cfg.port,
        log_level="debug" if cfg.debug else "info",
    )
    return 0


def cmd_health(args: argparse.Namespace) -> int:
    """Check health of a running server."""
    try:
        resp = httpx.get(f"{args.url.rstrip('/')}/health", timeout=args.timeout)
    except httpx.HTTPError as e:
        print(f"Error: {e}", file=sys.stderr)
        return 1
    print(resp.text)
    return 0 if resp.status_code == 200 else 1


def _completion_body(args: argparse.Namespace) -> dict[str, object]:
    body: dict[str, object] = {"prompt": args.prompt, "stream": args.stream}
    if args.max_tokens is not None:
        body["max_tokens"] = args.max_tokens
    if args.temperature is not None:
        body["temperature"] = args.temperature
    if args.stop:
        body["stop"] = args.stop
    return body


def _print_error(resp: httpx.Response) -> None:
    try:
        message = resp.json()["error"]["message"]
    except (ValueError, KeyError, TypeError):
        message = resp.text
    print(f"Error ({resp.status_code}): {message}", file=sys.stderr)


def cmd_complete(args: argparse.Namespace) -> int:
    """Send a completion request and print the generated text."""
    url = f"{args.url.rstrip('/')}/v1/completions"
    body = _completion_body(args)
    try:
        if not args.stream:
            resp = httpx.post(url, json=body, timeout=args.timeout)
            if resp.status_code != 200:
                _print_error(resp)
                return 1
            print(resp.json()["choices"][0]["text"])
            return 0

        with httpx.stream("POST", url, json=body, timeout=args.timeout) as resp:
            if resp.status_code != 200:
                resp.read()
                _print_error(resp)
                return 1
            for line in resp.iter_lines():
                if not line.startswith("data: "):
                    continue
                payload = line[len("data: "):]
                if payload == "[DONE]":
                    break
                chunk = json.loads(payload)
                sys.stdout.write(chunk["choices"][0]["text"])
                sys.stdout.flush()
        print()
        return 0
    except httpx.HTTPError as e:
        print(f"Error: {e}", file=sys.stderr)
        return 1


def main() -> int:
    """Main CLI entry point."""
    parser = argparse.ArgumentParser(
        prog="foundation-api",
        description="OpenAI-compatible completions for a local text-generation model",
    )
    subparsers = parser.add_subparsers(dest="command", required=True)

    # serve command
    serve_parser = subparsers.add_parser("serve", help="Run the API server")
    serve_parser.add_argument("--host", default=None, help="Bind address (default from config)")
    serve_parser.add_argument("--port", type=int, default=None, help="Port (default from config)")
    serve_parser.add_argument("--debug", action="store_true", help="Enable debug logging")
    serve_parser.add_argument(
        "--config",
        default=None,
        help="Config profile name (default: $FOUNDATION_API_CONFIG_NAME or 'local')",
    )
    serve_parser.add_argument(
        "overrides",
        nargs="*",
        help="Hydra overrides, e.g. backend.base_url=http://gpu:8000",
    )
    serve_parser.set_defaults(func=cmd_serve)

    # health command
    health_parser = subparsers.add_parser("health", help="Check a running server")
    health_parser.add_argument("--url", default=DEFAULT_URL, help="Server base URL")
    health_parser.add_argument("--timeout", type=float, default=10.0, help="Request timeout (s)")
    health_parser.set_defaults(func=cmd_health)

    # complete command
    complete_parser = subparsers.add_parser("complete", help="Request a completion")
    complete_parser.add_argument("prompt", help="Prompt text")
    complete_parser.add_argument("--url", default=DEFAULT_URL, help="Server base URL")
    complete_parser.add_argument("--max-tokens", type=int, default=None, help="Maximum tokens")
    complete_parser.add_argument("--temperature", type=float, default=None, help="Sampling temperature")
    complete_parser.add_argument("--stop", nargs="+", default=None, help="Stop sequences")
    complete_parser.add_argument("--stream", action="store_true", help="Stream the response")
    complete_parser.add_argument("--timeout", type=float, default=300.0, help="Request timeout (s)")
    complete_parser.set_defaults(func=cmd_complete)

    args = parser.parse_args()
    return args.func(args)


if __name__ == "__main__":
    sys.exit(main())
