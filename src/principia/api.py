"""
Status API for a running trading loop.

Read-only monitoring endpoints:
- GET /              - System status
- GET /health        - Health check
- GET /state         - Engine state for every pair
- GET /state/{pair}  - Engine state, config and last cycle for one pair
- GET /trades        - Recent trade records
- GET /stats         - Trade statistics and loop counters
"""

from datetime import datetime

from fastapi import FastAPI, HTTPException

from principia import __version__
from principia.trading_engine.loop import TradingLoop

# Upper bound for /trades?count=
MAX_TRADES = 1000


def create_app(loop: TradingLoop) -> FastAPI:
    """Build the FastAPI app bound to `loop`."""
    app = FastAPI(title="Principia Trading Bot API", version=__version__)

    @app.get("/")
    async def root():
        """Root endpoint."""
        return {
            "name": "Principia Trading Bot",
            "version": __version__,
            "status": "running" if loop.is_running else "idle",
            "pairs": loop.pairs,
            "dry_run": loop.gate.dry_run,
        }

    @app.get("/health")
    async def health_check():
        """Health check endpoint."""
        return {"status": "healthy"}

    @app.get("/state")
    async def get_states():
        """Engine state of every pair."""
        return {
            "timestamp": datetime.now().isoformat(),
            "states": loop.get_states(),
        }

    @app.get("/state/{pair}")
    async def get_pair_state(pair: str):
        """Engine state for one pair."""
        engine = loop.engines.get(pair.upper())
        if engine is None:
            raise HTTPException(status_code=404, detail=f"Unknown pair: {pair}")

        report = loop.last_reports.get(engine.pair)
        return {
            **engine.get_stats(),
            "current_price": loop.pipeline.get_current_price(engine.pair),
            "last_cycle": report.to_dict() if report else None,
        }

    @app.get("/trades")
    async def get_trades(count: int = 10):
        """
        Most recent trade records, oldest first.

        Examples:
            /trades?count=50
        """
        count = max(0, min(count, MAX_TRADES))
        trades = loop.gate.get_trade_history(count)
        return {
            "count": len(trades),
            "trades": [t.to_dict() for t in trades],
        }

    @app.get("/stats")
    async def get_stats():
        """Trade statistics and loop counters."""
        return {
            "timestamp": datetime.now().isoformat(),
            "trades": loop.gate.get_statistics().to_dict(),
            "loop": loop.get_status(),
        }

    return app
