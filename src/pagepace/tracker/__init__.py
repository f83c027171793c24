"""Reading deadline tracker: progress ledger, pace and daily targets."""
