# Main Entry Point - EagleDash backend
#
# Starts the local REST API that backs the dashboard's vault screen and
# prints the session token the UI must send in X-Session-Token.

import argparse
import os
import sys

from . import __version__
from .core import EventSeverity, EventType, get_settings, log_security_event


def main():
    """Main entry point for the EagleDash backend."""
    settings = get_settings()

    parser = argparse.ArgumentParser(
        description="EagleDash - study dashboard backend with a PIN-protected credential vault",
    )

    parser.add_argument(
        "--host",
        default=settings.host,
        help=f"Backend host (default: {settings.host})"
    )

    parser.add_argument(
        "--port",
        type=int,
        default=settings.port,
        help=f"Backend port (default: {settings.port})"
    )

    parser.add_argument(
        "--data-dir",
        default=None,
        help=f"Directory for the persisted dashboard state (default: {settings.data_dir})"
    )

    parser.add_argument(
        "--version",
        action="version",
        version=f"EagleDash v{__version__}"
    )

    args = parser.parse_args()

    if args.data_dir:
        os.environ["EAGLEDASH_DATA_DIR"] = args.data_dir
        get_settings.cache_clear()

    log_security_event(
        EventType.SYSTEM_START,
        EventSeverity.INFO,
        "EagleDash starting",
        details={
            "version": __version__,
            "data_dir": str(get_settings().data_dir),
        }
    )

    from .api.main import start_api_server
    from .api.security import initialize_session_token

    token = initialize_session_token()

    print("=" * 60)
    print(f"  EagleDash backend v{__version__}")
    print("=" * 60)
    print(f"  API server:     http://{args.host}:{args.port}")
    print(f"  Session token:  {token}")
    print("  Press Ctrl+C to stop")
    print("=" * 60)
    print()

    try:
        start_api_server(host=args.host, port=args.port)
    except KeyboardInterrupt:
        print("\n\nShutting down backend...")
        log_security_event(
            EventType.SYSTEM_STOP,
            EventSeverity.INFO,
            "EagleDash backend stopped (user interrupt)"
        )
    except Exception as e:
        print(f"\n\nError: {str(e)}")
        log_security_event(
            EventType.SYSTEM_STOP,
            EventSeverity.CRITICAL,
            f"EagleDash backend crashed: {str(e)}"
        )
        sys.exit(1)


if __name__ == "__main__":
    main()
