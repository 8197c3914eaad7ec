"""Entry point for the OCR plugin bridge.

Serves the bridge services to the plugin UI over a localhost REST API and
offers a small CLI for inspecting settings and temporary files.

- settings persisted as JSON under a single storage key
- temporary images swept every ``CLEANUP_INTERVAL_MS``
- ``plugin-enter`` events forwarded to the configured OCR endpoint
- API served only on localhost (do not expose publicly)
"""

import argparse
import json
import os
import sys
from contextlib import asynccontextmanager
from pathlib import Path
from typing import List

from dotenv import load_dotenv
from fastapi import FastAPI
from fastapi.middleware.trustedhost import TrustedHostMiddleware
from slowapi import _rate_limit_exceeded_handler
from slowapi.errors import RateLimitExceeded

from ocrbridge.api import router as api_router, set_bridge
from ocrbridge.config import BridgeConfig
from ocrbridge.dispatcher import PluginEnterDispatcher
from ocrbridge.host import LocalHost
from ocrbridge.limiter import limiter
from ocrbridge.logger import configure_logging
from ocrbridge.processor import HttpImageProcessor
from ocrbridge.scheduler import CleanupScheduler
from ocrbridge.services import BridgeServices
from ocrbridge.storage import JsonFileStore

# Load environment variables from .env if present
load_dotenv()
configure_logging(os.getenv("LOG_LEVEL", "INFO"))

config = BridgeConfig.from_env()
services = BridgeServices(JsonFileStore(config.settings_path), config.temp_dir)
host = LocalHost()
processor = (
    HttpImageProcessor(
        services,
        config.ocr_endpoint,
        model=config.ocr_model,
        copy_result=config.ocr_copy_result,
    )
    if config.ocr_endpoint
    else None
)
dispatcher = PluginEnterDispatcher(
    services,
    host,
    processor,
    capture_delay_ms=config.capture_delay_ms,
    screenshot_command=config.screenshot_command,
)
dispatcher.attach()
scheduler = CleanupScheduler(
    config.temp_dir,
    interval_ms=config.cleanup_interval_ms,
    max_age_ms=config.temp_max_age_ms,
)


@asynccontextmanager
async def lifespan(app: FastAPI):
    scheduler.start()
    yield
    await scheduler.stop()


app = FastAPI(title="OCR Bridge", description="Settings, clipboard and temp-file services for the OCR plugin", lifespan=lifespan)

allowed_hosts = [
    h.strip()
    for h in os.getenv(
        "ALLOWED_HOSTS",
        "127.0.0.1,localhost,127.0.0.1:8001,localhost:8001",
    ).split(",")
    if h.strip()
]
app.add_middleware(TrustedHostMiddleware, allowed_hosts=allowed_hosts)

# --- Rate Limiting ---
app.state.limiter = limiter
app.add_exception_handler(RateLimitExceeded, _rate_limit_exceeded_handler)

set_bridge(services, host)
app.include_router(api_router)


@app.get("/status")
async def status_endpoint() -> dict:
    return {"status": "ok", "temp_dir": str(config.temp_dir), "cleanup_runs": scheduler.runs}


# --- CLI Mode ---
def cli_mode(command: str, args: List[str]) -> int:
    """Run a single bridge operation from the command line."""
    if command == "settings":
        print(json.dumps(services.get_settings().to_dict(), ensure_ascii=False, indent=2))
    elif command == "token":
        token = services.get_random_token()
        print(token if token is not None else "No token configured.")
    elif command == "cleanup":
        removed = services.cleanup_temp_files(max_age_ms=config.temp_max_age_ms)
        print(f"Removed {len(removed)} file(s) from {config.temp_dir}")
    elif command == "read":
        if not args:
            print("Usage: read <path>", file=sys.stderr)
            return 2
        print(services.read_image_as_base64(args[0]))
    elif command == "save":
        if not args:
            print("Usage: save <file containing base64 data>", file=sys.stderr)
            return 2
        print(services.save_temp_image(Path(args[0]).read_text(encoding="utf-8")))
    else:
        print(f"Unknown command: {command}", file=sys.stderr)
        return 2
    return 0


# --- Entrypoint ---
def main() -> None:
    """Parse command-line arguments and run a CLI command or the REST API server."""
    parser = argparse.ArgumentParser(description="OCR plugin bridge")
    parser.add_argument(
        "command",
        nargs="?",
        default="settings",
        choices=["settings", "token", "cleanup", "read", "save"],
        help="Operation to run in CLI mode",
    )
    parser.add_argument("args", nargs=argparse.REMAINDER, help="Arguments for the command")
    parser.add_argument(
        "--api", action="store_true", help="Run REST API server instead of CLI"
    )
    args = parser.parse_args()

    if args.api:
        import uvicorn

        port = int(os.getenv("PORT", "8001"))
        # Warning: ensure the server is not exposed to the public internet.
        uvicorn.run("main:app", host="127.0.0.1", port=port, reload=False)
    else:
        sys.exit(cli_mode(args.command, args.args))


if __name__ == "__main__":
    main()
