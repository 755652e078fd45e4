"""Main entry point for the docs server."""
import logging
import sys
import uvicorn
from dotenv import load_dotenv
from .config import DocsConfig
from .errors import RouteConfigError
from .server import create_app


def main():
    """Start docs server."""
    load_dotenv()
    config = DocsConfig.from_env()

    logging.basicConfig(
        level=logging.DEBUG if config.verbose else logging.INFO,
        format="%(asctime)s - %(name)s - %(levelname)s - %(message)s"
    )

    print(f"=== Docs Server v1.0.0 ===")
    print(f"Routes: {config.routes_file}")
    print(f"Snapshot: {config.snapshot_path}")
    print(f"Refresh: every {config.refresh_interval:.0f}s")
    print(f"Server: http://{config.host}:{config.port}")
    print(f"==========================")

    try:
        app = create_app(config)
    except RouteConfigError as e:
        print(f"Invalid route configuration: {e}", file=sys.stderr)
        sys.exit(2)

    try:
        uvicorn.run(
            app,
            host=config.host,
            port=config.port,
            log_level="debug" if config.verbose else "info",
        )
    except KeyboardInterrupt:
        print("\nShutting down docs server...")
        sys.exit(0)


if __name__ == "__main__":
    main()
