import argparse
import logging
import sys

from relay.config import Config
from relay.engine import RequestRunner
from relay.errors import RunnerError
from relay.request import build_request, format_request, parse_request_spec

USAGE = "Parameters: <method> <host> <port> <path> [<data> [<headers>]]"

logger = logging.getLogger("rpcpost")


class ArgumentParser(argparse.ArgumentParser):
    def error(self, message):
        print(USAGE)
        self.exit(1, f"{self.prog}: {message}\n")


def build_parser() -> ArgumentParser:
    parser = ArgumentParser(prog="rpcpost", description="Send a raw HTTP POST request and read the reply")
    parser.add_argument("method", help="HTTP method, only POST is accepted")
    parser.add_argument("host", help="target host name or IP address")
    parser.add_argument("port", help="target port, falls back to 80 when not a positive integer")
    parser.add_argument("path", help="request path, '/' when empty")
    parser.add_argument("body", nargs="?", default=None, help="raw request body")
    parser.add_argument("headers", nargs="*", default=[], help="extra header lines, one per argument")
    parser.add_argument("--connect-timeout", type=float, default=None, help="seconds to wait for connect")
    parser.add_argument("--read-timeout", type=float, default=None, help="seconds to wait for each read")
    parser.add_argument("--max-response-bytes", type=int, default=None, help="response buffer capacity")
    parser.add_argument("--print-response", action="store_true", help="write the received bytes to stdout")
    parser.add_argument("--debug", "-D", action="store_true", help="enable debug logging")
    return parser


def setup_logging(debug: bool) -> None:
    logging.basicConfig(
        stream=sys.stderr,
        format="{asctime} - {levelname} - {message}",
        style="{",
        datefmt="%Y-%m-%d %H:%M:%S",
        level=logging.DEBUG if debug else logging.INFO,
        force=True,
    )


def main(argv=None) -> int:
    args = build_parser().parse_intermixed_args(argv)

    try:
        config = Config.from_environment(
            connect_timeout=args.connect_timeout,
            read_timeout=args.read_timeout,
            max_response_bytes=args.max_response_bytes,
            print_response=args.print_response or None,
            debug=args.debug or None,
        )
    except ValueError as e:
        print(f"Error: {e}", file=sys.stderr)
        return 1
    setup_logging(config.debug)

    try:
        spec = parse_request_spec(
            args.method, args.host, args.port, args.path, args.body, args.headers, config=config
        )
    except RunnerError as e:
        print(e)
        return e.exit_code

    raw = build_request(spec, config)
    print(format_request(raw), end="")

    try:
        response = RequestRunner(config).run(spec, raw)
    except RunnerError as e:
        logger.error(f"Error: {e}")
        return e.exit_code

    if config.print_response:
        sys.stdout.write(response.data.decode("utf-8", errors="replace"))
        sys.stdout.flush()
    return 0


if __name__ == "__main__":
    sys.exit(main())
