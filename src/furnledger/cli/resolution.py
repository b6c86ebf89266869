"""CLI helpers for resolving codes and names to IDs."""

from __future__ import annotations

from typing import Callable, TypeVar

import click

from furnledger.cli.error_handling import handle_domain_error
from furnledger.domain.errors import DomainError

S = TypeVar("S")


def resolve_or_exit(
    ctx: click.Context,
    resolver: Callable[[S, str], int],
    service: S,
    value: str | None,
) -> int | None:
    """Resolve a code, name or ID with ``resolver``, or exit with a CLI error.

    None passes through unchanged so optional options stay optional.
    """
    if value is None:
        return None
    try:
        return resolver(service, value)
    except DomainError as exc:
        handle_domain_error(ctx, exc)
