"""Phase state machine and run persistence."""
