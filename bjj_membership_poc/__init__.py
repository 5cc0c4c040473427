"""
BabyJubJub ECDSA membership proof inputs - Proof of Concept.

⚠️  PROOF OF CONCEPT - NOT PRODUCTION READY
"""

import click

__version__ = "0.1.0"

DISCLAIMER = (
    "⚠️  bjj-membership is a proof of concept. The default hash oracles are "
    "not circuit compatible and nothing here has been audited."
)


def print_disclaimer() -> None:
    click.echo(click.style(DISCLAIMER, fg="yellow"), err=True)
