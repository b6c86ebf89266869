"""Command line interface for furnledger."""
