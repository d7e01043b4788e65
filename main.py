"""
Main entrypoint: run the account_txs index build until it completes.

Env: DATABASE_URL (or ACCOUNT_TXS_DB_PATH), INDEXER_MODE, BLOCK_HEIGHT_FROM,
BLOCK_HEIGHT_TO, CONTRACT_IDS, REGISTRY_API_URL, PAGE_SIZE, LOG_LEVEL, etc.

Equivalent: python -m account_txs
"""

import sys

from account_txs.indexer.driver import main

if __name__ == "__main__":
    sys.exit(main())
