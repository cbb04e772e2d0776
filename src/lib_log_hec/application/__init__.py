"""Application layer: ports and use cases of the delivery pipeline."""
