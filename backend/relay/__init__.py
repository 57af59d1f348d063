"""Session relay: message routing and caption fan-out."""
