"""python -m account_txs: run the indexer until it completes."""

from account_txs.indexer.driver import main

if __name__ == "__main__":
    raise SystemExit(main())
