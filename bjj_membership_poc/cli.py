"""
Command-Line Interface for BabyJubJub ECDSA membership inputs.

Provides commands to create keys and signatures, build Merkle roots and
proofs over a key set, derive Efficient ECDSA public inputs and assemble the
membership circuit's input file.
"""

import functools
import json
import logging
from pathlib import Path
from typing import Any, List

import click
import yaml
from rich.console import Console
from rich.table import Table

from bjj_membership_poc import __version__, print_disclaimer
from bjj_membership_poc.membership_protocol.curve import (
    EdwardsPoint,
    WeierstrassPoint,
)
from bjj_membership_poc.membership_protocol.ecdsa import (
    derive_inputs,
    generate_private_key,
    private_key_to_public_key,
    sign as sign_message,
)
from bjj_membership_poc.membership_protocol.exceptions import MembershipProtocolError
from bjj_membership_poc.membership_protocol.factory import get_hash_oracle
from bjj_membership_poc.membership_protocol.fields import parse_int
from bjj_membership_poc.membership_protocol.merkle import (
    compute_merkle_root,
    generate_merkle_proof,
)
from bjj_membership_poc.membership_protocol.prover import prepare_membership_inputs
from bjj_membership_poc.membership_protocol.security import hash_to_scalar
from bjj_membership_poc.membership_protocol.types import Signature


def _handle_errors(func):
    """Report library errors as click errors (exit code 1)."""

    @functools.wraps(func)
    def wrapper(*args, **kwargs):
        try:
            return func(*args, **kwargs)
        except (MembershipProtocolError, ValueError, TypeError, ZeroDivisionError) as exc:
            raise click.ClickException(str(exc)) from exc

    return wrapper


def _emit(data: Any, output: str = None) -> None:
    text = json.dumps(data, indent=2)
    if output:
        Path(output).write_text(text + "\n", encoding="utf-8")
        click.echo(f"wrote {output}", err=True)
    else:
        click.echo(text)


def _load_file(path: str) -> Any:
    # yaml.safe_load also parses JSON documents
    with open(path, "r", encoding="utf-8") as handle:
        return yaml.safe_load(handle)


def _load_keys(path: str) -> List[EdwardsPoint]:
    data = _load_file(path)
    if isinstance(data, dict):
        data = data.get("publicKeys")
    if not isinstance(data, list):
        raise ValueError(
            f"{path}: expected a list of public keys or a 'publicKeys' list"
        )
    return [EdwardsPoint.from_dict(entry) for entry in data]


def _load_signature(path: str):
    data = _load_file(path)
    if not isinstance(data, dict):
        raise ValueError(f"{path}: expected a mapping with r, s, msgHash, publicKey")
    for key in ("r", "s", "msgHash", "publicKey"):
        if key not in data:
            raise ValueError(f"{path}: missing {key!r}")
    sig = Signature.from_dict(data)
    msg_hash = parse_int(data["msgHash"], "msgHash")
    pub_key = WeierstrassPoint.from_dict(data["publicKey"])
    return sig, msg_hash, pub_key


def _render_table(title: str, rows) -> None:
    table = Table(title=title)
    table.add_column("field", style="cyan", no_wrap=True)
    table.add_column("value", overflow="fold")
    for name, value in rows:
        table.add_row(name, str(value))
    Console().print(table)


@click.group()
@click.version_option(version=__version__)
@click.option(
    "--hash",
    "hash_name",
    type=str,
    default=None,
    help="Hash oracle name (default: BJJ_MEMBERSHIP_HASH or sha256)",
)
@click.option(
    "--workers",
    type=click.IntRange(min=1),
    default=None,
    help="Thread pool size for leaf hashing and R recovery",
)
@click.option("--verbose", is_flag=True, help="Enable debug logging")
@click.pass_context
def main(ctx, hash_name, workers, verbose):
    """
    BabyJubJub ECDSA membership proof inputs - Proof of Concept

    ⚠️  PROOF OF CONCEPT - NOT PRODUCTION READY
    """
    if verbose:
        logging.basicConfig(
            level=logging.DEBUG, format="%(levelname)s %(name)s: %(message)s"
        )
    ctx.ensure_object(dict)
    ctx.obj["hash_name"] = hash_name
    ctx.obj["workers"] = workers


def _hasher(ctx):
    try:
        return get_hash_oracle(prefer=ctx.obj["hash_name"])
    except (MembershipProtocolError, ImportError, TypeError) as exc:
        raise click.ClickException(str(exc)) from exc


@main.command()
@click.option(
    "--private-key",
    type=str,
    default=None,
    help="Existing private key (decimal or 0x hex); random if omitted",
)
@_handle_errors
def keygen(private_key):
    """
    Generate a key pair.

    Prints the private key and the public key in both Weierstrass and
    Edwards form. Key sets for merkle-root/merkle-proof use the Edwards form.
    """
    if private_key is None:
        sk = generate_private_key()
    else:
        sk = parse_int(private_key, "private key")
    pub_key = private_key_to_public_key(sk)
    _emit(
        {
            "privateKey": str(sk),
            "publicKey": pub_key.to_dict(),
            "publicKeyEdwards": pub_key.to_edwards().to_dict(),
        }
    )


@main.command()
@click.option("--private-key", type=str, required=True, help="Signing key")
@click.option("--msg-hash", type=str, default=None, help="Message hash scalar")
@click.option("--message", type=str, default=None, help="Message text to hash")
@click.option("--output", type=click.Path(), help="Write JSON to this file")
@_handle_errors
def sign(private_key, msg_hash, message, output):
    """
    Sign a message hash.

    Exactly one of --msg-hash and --message is required. The output can be
    passed to derive-inputs and assemble as --signature.
    """
    if (msg_hash is None) == (message is None):
        raise click.UsageError("pass exactly one of --msg-hash or --message")

    sk = parse_int(private_key, "private key")
    if message is not None:
        m = hash_to_scalar(message.encode("utf-8"))
    else:
        m = parse_int(msg_hash, "msg hash")

    sig = sign_message(m, sk)
    _emit(
        {
            **sig.to_dict(),
            "msgHash": str(m),
            "publicKey": private_key_to_public_key(sk).to_dict(),
        },
        output,
    )


@main.command("merkle-root")
@click.option("--keys", "keys_path", type=click.Path(exists=True), required=True)
@click.pass_context
@_handle_errors
def merkle_root(ctx, keys_path):
    """Compute the Merkle root of an Edwards key set."""
    keys = _load_keys(keys_path)
    root = compute_merkle_root(keys, _hasher(ctx), max_workers=ctx.obj["workers"])
    _emit({"root": str(root), "leaves": len(keys)})


@main.command("merkle-proof")
@click.option("--keys", "keys_path", type=click.Path(exists=True), required=True)
@click.option("--index", type=int, required=True, help="Position of the key")
@click.option("--pretty", is_flag=True, help="Render a table instead of JSON")
@click.pass_context
@_handle_errors
def merkle_proof(ctx, keys_path, index, pretty):
    """Generate a depth-8 inclusion proof for one key of the set."""
    keys = _load_keys(keys_path)
    proof = generate_merkle_proof(
        keys, index, _hasher(ctx), max_workers=ctx.obj["workers"]
    )
    if pretty:
        rows = [("root", proof.root)]
        rows += [
            (f"level {i}", f"bit={bit} sibling={sibling}")
            for i, (bit, sibling) in enumerate(zip(proof.path_indices, proof.siblings))
        ]
        _render_table(f"Merkle proof for index {index}", rows)
    else:
        _emit(proof.to_dict())


@main.command("derive-inputs")
@click.option(
    "--signature",
    "signature_path",
    type=click.Path(exists=True),
    required=True,
    help="File with r, s, msgHash and publicKey (output of sign)",
)
@click.option("--pretty", is_flag=True, help="Render a table instead of JSON")
@click.pass_context
@_handle_errors
def derive_inputs_cmd(ctx, signature_path, pretty):
    """Recover R and compute T, U (Efficient ECDSA) in Edwards form."""
    sig, msg_hash, pub_key = _load_signature(signature_path)
    result = derive_inputs(sig, msg_hash, pub_key, max_workers=ctx.obj["workers"])
    if pretty:
        rows = []
        for name in ("R", "T", "U"):
            point = getattr(result, name)
            rows.append((f"{name}.x", point.x))
            rows.append((f"{name}.y", point.y))
        _render_table("Efficient ECDSA inputs", rows)
    else:
        _emit(result.to_dict())


@main.command()
@click.option("--keys", "keys_path", type=click.Path(exists=True), required=True)
@click.option("--index", type=int, required=True, help="Position of the signer")
@click.option(
    "--signature", "signature_path", type=click.Path(exists=True), required=True
)
@click.option(
    "--nullifier-randomness",
    type=str,
    default=None,
    help="Fixed nullifier randomness; random if omitted",
)
@click.option("--output", type=click.Path(), help="Write circuit input JSON here")
@click.pass_context
@_handle_errors
def assemble(ctx, keys_path, index, signature_path, nullifier_randomness, output):
    """
    Assemble the membership circuit input file.

    The output is the input.json expected by the circuit's witness generator.
    """
    print_disclaimer()
    keys = _load_keys(keys_path)
    sig, msg_hash, pub_key = _load_signature(signature_path)
    if nullifier_randomness is not None:
        nullifier_randomness = parse_int(nullifier_randomness, "nullifier randomness")

    inputs, _ = prepare_membership_inputs(
        keys,
        index,
        sig,
        msg_hash,
        pub_key,
        _hasher(ctx),
        nullifier_randomness=nullifier_randomness,
        max_workers=ctx.obj["workers"],
    )
    _emit(inputs.to_circuit_dict(), output)


if __name__ == "__main__":
    main()
