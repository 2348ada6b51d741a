"""Command line interface for Node.js Lambda functions."""
