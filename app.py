# app.py
from dotenv import load_dotenv

# Load .env before config modules read the environment
load_dotenv()

from shiny import App

from replay_app.logging_config import setup_logging
from replay_app.ui import app_ui
from replay_app.server import server
from replay_app.config.network_config import NETWORK, RPC_URL, CONTRACT_ADDRESSES

logger = setup_logging()

app = App(app_ui, server)


def main():
    """Main entry point when running app.py directly"""
    logger.info(f"Starting Protocol Replay on {NETWORK} ({RPC_URL[:50]})")
    if not CONTRACT_ADDRESSES.is_configured():
        logger.warning("No contract addresses configured; set REPLAY_*_ADDRESS in .env")
    logger.info("Application will be available at http://localhost:8001")
    app.run(host="127.0.0.1", port=8001, launch_browser=False)


if __name__ == "__main__":
    main()
