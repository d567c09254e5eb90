"""
Network Simulator API — FastAPI endpoints for the visualization client.

- GET /api/test                      liveness check
- GET /api/config                    client rendering config
- GET /api/networks/{id}             full snapshot
- GET /api/networks/{id}/updates     diff since the previous call
"""

import json
import logging
from pathlib import Path
from typing import Optional

from fastapi import FastAPI, HTTPException

from netsim_kernel.models.simulator import SimulatorConfig
from netsim_kernel.state.store import NetworkStateStore
from netsim_kernel.topology.factory import NetworkNotFoundError

logger = logging.getLogger(__name__)

DEFAULT_VISUALIZATION_CONFIG = {
    "nodes": {
        "leaf": {"radius": 8, "strokeWidth": 2},
        "cluster": {"radius": 12, "strokeWidth": 3},
    },
    "links": {"width": 5, "arrowSize": 5},
    "visualization": {
        "metric": "allocation",
        "ranges": [
            {"max": 0, "color": "#006994"},
            {"max": 45, "color": "#4CAF50"},
            {"max": 55, "color": "#FFC107"},
            {"max": 75, "color": "#FF9800"},
            {"max": 100, "color": "#f44336"},
        ],
    },
}


def _load_visualization_config(topology_dir: Optional[str]) -> dict:
    if topology_dir:
        path = Path(topology_dir) / "config.json"
        if path.is_file():
            try:
                return json.loads(path.read_text())
            except (OSError, ValueError) as e:
                logger.warning("Ignoring unreadable client config %s: %s", path, e)
    logger.info("Using fallback config")
    return DEFAULT_VISUALIZATION_CONFIG


def create_app(
    state_store: Optional[NetworkStateStore] = None,
    config: Optional[SimulatorConfig] = None,
) -> FastAPI:
    """Create and configure the FastAPI application."""

    app = FastAPI(
        title="Network Simulator API",
        description="Synthetic metrics for hierarchical network visualization",
        version="0.1.0",
    )

    config = config or (state_store.config if state_store else SimulatorConfig.from_env())
    store = state_store or NetworkStateStore(config=config)
    app.state.state_store = store

    @app.get("/api/test")
    def api_test():
        return {"status": "API routes are working"}

    @app.get("/api/config")
    def api_config():
        """Rendering configuration for the client."""
        return _load_visualization_config(config.topology_dir)

    @app.get("/api/networks/{network_id}")
    def get_network(network_id: str):
        """Full network snapshot."""
        logger.info("Network data requested: %s", network_id)
        try:
            snapshot = store.snapshot(network_id)
        except NetworkNotFoundError:
            raise HTTPException(404, "Network not found")
        return snapshot.to_payload()

    @app.get("/api/networks/{network_id}/updates")
    def get_network_updates(network_id: str):
        """Changes since the previous snapshot or update."""
        logger.info("Network updates requested: %s", network_id)
        try:
            diff = store.update(network_id)
        except NetworkNotFoundError:
            raise HTTPException(404, "Network not found")
        return diff.to_payload()

    return app


# Default application instance
app = create_app()
