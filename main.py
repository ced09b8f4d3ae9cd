#!/usr/bin/env python3
"""
Main entry point for the order book matching agent.

This script connects to the order book contract, starts the status API
and runs the poll loop until the process is terminated.
"""

import asyncio
import logging
import signal
import sys
import threading
from typing import Optional

from obmatcher.agent.poll_loop import PollLoop
from obmatcher.agent.quarantine import MatchQuarantine
from obmatcher.api.rest_api import create_app
from obmatcher.config.settings import Settings, get_settings
from obmatcher.ledger.client import LedgerInitError, NearLedgerClient, load_private_key
from obmatcher.ledger.submitter import ExecutionSubmitter
from obmatcher.utils.logger import setup_logging, get_logger, create_audit_logger

logger = get_logger(__name__)


class MatcherAgent:
    """
    Wires the ledger client, the poll loop and the status API together.
    """

    def __init__(self, settings: Settings):
        """Initialize the agent."""
        self.settings = settings
        self.ledger: Optional[NearLedgerClient] = None
        self.poll_loop: Optional[PollLoop] = None
        self.rest_thread: Optional[threading.Thread] = None

        setup_logging(
            level=self.settings.log_level,
            log_file=self.settings.log_file
        )

        logger.info(f"Matcher agent initialized for contract {self.settings.contract_id}")

    def _resolve_private_key(self) -> Optional[str]:
        if self.settings.private_key:
            return self.settings.private_key
        try:
            return load_private_key(
                self.settings.credentials_dir,
                self.settings.network_id,
                self.settings.account_id,
            )
        except LedgerInitError:
            if self.settings.dry_run:
                logger.warning("No signing key found; continuing read-only in dry-run mode")
                return None
            raise

    async def _setup(self) -> None:
        """Connect to the ledger and build the poll loop."""
        self.ledger = NearLedgerClient(
            contract_id=self.settings.contract_id,
            account_id=self.settings.account_id,
            rpc_addr=self.settings.node_url,
            private_key=self._resolve_private_key(),
            page_limit=self.settings.fetch_page_limit,
            max_pages=self.settings.fetch_max_pages,
        )
        await self.ledger.connect()

        submitter = None
        if not self.settings.dry_run:
            submitter = ExecutionSubmitter(
                self.ledger,
                gas=self.settings.execute_gas,
                deposit=self.settings.execute_deposit,
                audit_logger=create_audit_logger(self.settings.audit_log_file),
            )

        self.poll_loop = PollLoop(
            ledger=self.ledger,
            submitter=submitter,
            dry_run=self.settings.dry_run,
            poll_interval=self.settings.poll_interval_seconds,
            quarantine=MatchQuarantine(self.settings.quarantine_seconds),
        )

    def _start_rest_server(self) -> None:
        """Start the status API in a daemon thread."""
        app = create_app(self.poll_loop, self.settings)

        def run_rest_server():
            try:
                logger.info(f"Starting status API on {self.settings.status_api_host}:{self.settings.status_api_port}")
                app.run(
                    host=self.settings.status_api_host,
                    port=self.settings.status_api_port,
                    debug=self.settings.debug,
                    use_reloader=False
                )
            except Exception as e:
                logger.error(f"Error starting status API: {str(e)}")

        self.rest_thread = threading.Thread(target=run_rest_server, daemon=True)
        self.rest_thread.start()

    async def run(self) -> None:
        """Set up and run the poll loop until stopped."""
        await self._setup()

        if self.settings.status_api_enabled:
            self._start_rest_server()

        await self.poll_loop.run_forever()

    def stop(self) -> None:
        """Ask the poll loop to exit after its current cycle."""
        logger.info("Stopping matcher agent...")
        if self.poll_loop is not None:
            self.poll_loop.stop()


def main():
    """Main entry point."""
    try:
        settings = get_settings()
    except ValueError as e:
        logging.basicConfig(level=logging.ERROR)
        logger.error(str(e))
        sys.exit(1)

    agent = MatcherAgent(settings)

    def signal_handler(signum, frame):
        logger.info(f"Received signal {signum}, shutting down...")
        agent.stop()

    signal.signal(signal.SIGINT, signal_handler)
    signal.signal(signal.SIGTERM, signal_handler)

    try:
        asyncio.run(agent.run())
    except LedgerInitError as e:
        logger.error(f"Initialization failed: {str(e)}")
        sys.exit(1)
    except KeyboardInterrupt:
        logger.info("Received keyboard interrupt, shutting down...")
    except Exception as e:
        logger.error(f"Fatal error: {str(e)}")
        sys.exit(1)


if __name__ == "__main__":
    main()
