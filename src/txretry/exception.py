class TxRetryError(Exception):
    ...
