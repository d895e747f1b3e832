import argparse
from typing import Optional

import uvicorn
from loguru import logger

from release_metrics.config import DEFAULT_CONFIG_PATH, load_config
from .app import build_app


def start_server(
    host: Optional[str] = None,
    port: Optional[int] = None,
    metrics_root: Optional[str] = None,
    config_path: str = DEFAULT_CONFIG_PATH,
):
    """Start the metrics HTTP server.

    Loads the configuration from ``config_path``, applies any overrides,
    builds the Starlette app and serves it with Uvicorn.

    Args:
        host: Interface to bind the server to (overrides config value).
        port: Port to bind the server to (overrides config value).
        metrics_root: Metrics root directory (overrides config value).
        config_path: Path to the config file (YAML/JSON).

    Returns:
        None
    """
    config = load_config(config_path)
    if metrics_root:
        config["metrics"]["root"] = metrics_root
    host = host or config["server"]["host"]
    port = port or config["server"]["port"]

    logger.info(f"Starting metrics server on http://{host}:{port} (root: {config['metrics']['root']})")
    uvicorn.run(build_app(config), host=host, port=port)


if __name__ == "__main__":
    parser = argparse.ArgumentParser(description="Run the release metrics server.")
    parser.add_argument("--host", type=str, help="Host to bind the server")
    parser.add_argument("--port", type=int, help="Port to bind the server")
    parser.add_argument("--root", type=str, help="Metrics root directory (overrides config)")
    parser.add_argument(
        "--config",
        type=str,
        default=DEFAULT_CONFIG_PATH,
        help="Path to config file (YAML/JSON)",
    )
    args = parser.parse_args()

    start_server(
        host=args.host,
        port=args.port,
        metrics_root=args.root,
        config_path=args.config,
    )
