"""Command-line helper to run pending Alembic migrations."""

import asyncio
import sys

from wildwatch.errors import StoreError
from wildwatch.storage import PersistenceGateway


async def main() -> int:
    """Apply migrations against ``WILDWATCH_STORE_URL``."""

    gateway = PersistenceGateway.from_env()
    if not gateway.configured:
        print("WILDWATCH_STORE_URL and WILDWATCH_STORE_KEY must both be set", file=sys.stderr)
        return 1
    try:
        await gateway.initialize()
    except StoreError as exc:
        print(f"Migration failed: {exc}", file=sys.stderr)
        return 1
    finally:
        await gateway.close()
    print(f"Initialized store at {gateway.engine.url.render_as_string(hide_password=True)}")
    return 0


if __name__ == "__main__":
    sys.exit(asyncio.run(main()))
