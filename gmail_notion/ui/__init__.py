"""Declarative configuration widgets rendered by the CLI."""
