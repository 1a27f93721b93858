import asyncio
import argparse
import logging
import uvicorn
from core.db import create_tables, dispose_engine
from utils.logging_config import setup_logging
from api.rest import app as rest_app

logger = logging.getLogger(__name__)

def main():
    parser = argparse.ArgumentParser(description="Error Tracker")
    parser.add_argument("--host", default="0.0.0.0", help="REST API host")
    parser.add_argument("--port", type=int, default=8000, help="REST API port")
    parser.add_argument("--log-level", default=None, help="Log level (default: LOG_LEVEL or INFO)")
    parser.add_argument("--json-logs", action="store_true", help="Emit JSON log lines")
    parser.add_argument("--init-db", action="store_true", help="Create missing tables and exit")
    args = parser.parse_args()

    setup_logging(args.log_level, json_output=True if args.json_logs else None)

    if args.init_db:
        async def _init():
            await create_tables()
            await dispose_engine()
        asyncio.run(_init())
        logger.info("database tables created")
        return

    logger.info(f"REST API starting on {args.host}:{args.port}")
    uvicorn.run(rest_app, host=args.host, port=args.port, log_config=None)

if __name__ == "__main__":
    main()
