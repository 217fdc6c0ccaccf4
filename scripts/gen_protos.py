#!/usr/bin/env python3
"""Regenerate gRPC stubs under grpc_app/generated/.

Usage: python scripts/gen_protos.py [--force]
"""
from __future__ import annotations

import sys
from pathlib import Path

sys.path.insert(0, str(Path(__file__).resolve().parents[1]))

import click  # noqa: E402

from grpc_app.codegen import generate  # noqa: E402


@click.command()
@click.option("--force", is_flag=True, help="Regenerate even if stubs are up to date.")
def main(force: bool) -> None:
    generated = generate(force=force)
    if not generated:
        click.echo("stubs up to date")
        return
    for proto in generated:
        click.echo(f"generated {proto.name}")


if __name__ == "__main__":
    main()
