"""JSON-file persistence for results and the wrong-answers ledger."""
