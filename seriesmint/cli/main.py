"""
seriesmint.cli.main
===================

Operator / devnet tool for the series-mint engine.

State lives in the configured store, so point every invocation at the same
durable URI (``--store sqlite:///path.db`` or ``ANIMICA_SERIES_STORE``).
The engine mints through the reference token ledger kept in the same store.

Examples
--------
# Bootstrap roles
python -m seriesmint.cli init --store sqlite:///series.db \
  --admin 0xaa.. --creator 0xcc.. --minter 0xbb..

# Publish a series and mint one leaf
python -m seriesmint.cli add-series --store sqlite:///series.db \
  --caller 0xcc.. --root 0x.. --name genesis --metadata-ref 0x.. --capacity 100
python -m seriesmint.cli mint --store sqlite:///series.db --caller 0xbb.. \
  --recipient 0xdd.. --metadata-ref ipfs://asset-0 --series 0 --leaf 0x.. \
  --proof 0x.. --proof 0x..

# Offline proof check (no store)
python -m seriesmint.cli verify-proof --leaf 0x.. --root 0x.. --proof 0x..
"""

from __future__ import annotations

import json
import logging
from contextlib import contextmanager
from typing import Any, Dict, Iterator, List, Optional

import typer

from ..config import SeriesMintConfig
from ..constants import ROLE_NAMES
from ..engine import SeriesMintEngine
from ..errors import SeriesMintError
from ..merkle.verify import verify
from ..utils.bytes import hex_to_bytes
from ..version import __version__

app = typer.Typer(
    name="seriesmint",
    add_completion=False,
    no_args_is_help=True,
    help="Publish Merkle-authorized series and mint their assets.",
)

log = logging.getLogger("seriesmint.cli")

_STATE: Dict[str, Any] = {"config": None, "store": None}


# -------------------- helpers --------------------

def _config() -> SeriesMintConfig:
    path: Optional[str] = _STATE["config"]
    try:
        cfg = SeriesMintConfig.from_file(path) if path else SeriesMintConfig.from_env()
        if _STATE["store"]:
            cfg.storage.uri = _STATE["store"]
        cfg.validate()
    except (OSError, ValueError) as e:
        raise typer.BadParameter(str(e))
    return cfg


def _hex(value: str, name: str) -> bytes:
    try:
        return hex_to_bytes(value)
    except SeriesMintError:
        raise typer.BadParameter(f"{name} must be 0x-hex, got {value!r}")


def _emit(obj: Any) -> None:
    typer.echo(json.dumps(obj, indent=2, sort_keys=True))


def _fail(err: SeriesMintError) -> None:
    typer.echo(json.dumps(err.to_dict(), sort_keys=True), err=True)
    raise typer.Exit(1)


@contextmanager
def _engine(**grants: List[bytes]) -> Iterator[SeriesMintEngine]:
    cfg = _config()
    logging.basicConfig(level=cfg.log_level_int(), format="%(levelname)s %(name)s: %(message)s")
    log.debug("cli: opening store %s", cfg.storage.uri)
    try:
        eng = SeriesMintEngine.open(cfg, **grants)
    except SeriesMintError as e:
        _fail(e)
    try:
        yield eng
    except SeriesMintError as e:
        _fail(e)
    finally:
        eng.close()


# -------------------- CLI --------------------

def _print_version(value: bool) -> None:
    if value:
        typer.echo(f"animica-seriesmint {__version__}")
        raise typer.Exit(0)


@app.callback()
def _meta(
    config: Optional[str] = typer.Option(None, "--config", "-c", help="JSON/YAML config file (default: environment)."),
    store: Optional[str] = typer.Option(None, "--store", "-s", help="Storage URI override (memory:// or sqlite://path)."),
    version: bool = typer.Option(
        False, "--version", "-V", help="Print version and exit", is_eager=True, callback=_print_version
    ),
) -> None:
    _STATE["config"] = config
    _STATE["store"] = store


@app.command("init")
def init(
    admin: List[str] = typer.Option([], "--admin", help="Account to grant ADMIN (repeatable)."),
    creator: List[str] = typer.Option([], "--creator", help="Account to grant CREATOR (repeatable)."),
    minter: List[str] = typer.Option([], "--minter", help="Account to grant MINTER (repeatable)."),
) -> None:
    """Bootstrap role members and the token ledger in the store."""
    grants = {
        "admins": [_hex(a, "--admin") for a in admin],
        "creators": [_hex(a, "--creator") for a in creator],
        "minters": [_hex(a, "--minter") for a in minter],
    }
    with _engine(**grants) as eng:
        _emit(
            {
                "store": eng.config.storage.uri,
                "engineAddress": eng.config.engine_address,
                "granted": {k: len(v) for k, v in grants.items()},
                "seriesCount": eng.series_count(),
            }
        )


@app.command("add-series")
def add_series(
    caller: str = typer.Option(..., "--caller", help="Creator account (0x-hex)."),
    root: str = typer.Option(..., "--root", help="32-byte Merkle root (0x-hex)."),
    name: str = typer.Option(..., "--name", help="Human-readable series name."),
    metadata_ref: str = typer.Option(..., "--metadata-ref", help="32-byte initial metadata reference (0x-hex)."),
    capacity: int = typer.Option(..., "--capacity", min=1, help="Declared number of assets."),
) -> None:
    """Publish a new series; prints its id."""
    with _engine() as eng:
        sid = eng.add_series(
            _hex(caller, "--caller"), _hex(root, "--root"), name, _hex(metadata_ref, "--metadata-ref"), capacity
        )
        _emit({"seriesId": sid})


@app.command("add-metadata")
def add_metadata(
    caller: str = typer.Option(..., "--caller", help="Creator account (0x-hex)."),
    series: int = typer.Option(..., "--series", min=0, help="Series id."),
    ref: str = typer.Option(..., "--ref", help="32-byte metadata reference (0x-hex)."),
) -> None:
    """Append a metadata reference to a series."""
    with _engine() as eng:
        idx = eng.add_metadata_ref(_hex(caller, "--caller"), series, _hex(ref, "--ref"))
        _emit({"seriesId": series, "index": idx})


@app.command("mint")
def mint(
    caller: str = typer.Option(..., "--caller", help="Minter account (0x-hex)."),
    recipient: str = typer.Option(..., "--recipient", help="Receiving account (0x-hex)."),
    metadata_ref: str = typer.Option(..., "--metadata-ref", help="Metadata reference string for the asset."),
    series: int = typer.Option(..., "--series", min=0, help="Series id."),
    leaf: str = typer.Option(..., "--leaf", help="32-byte leaf hash (0x-hex)."),
    proof: List[str] = typer.Option([], "--proof", help="Sibling hash, leaf to root (repeatable)."),
) -> None:
    """Mint the asset authorized by ``leaf`` in ``series``."""
    with _engine() as eng:
        receipt = eng.mint(
            _hex(caller, "--caller"),
            _hex(recipient, "--recipient"),
            metadata_ref,
            series,
            _hex(leaf, "--leaf"),
            [_hex(p, "--proof") for p in proof],
        )
        _emit(receipt.to_dict())


@app.command("show")
def show(series: Optional[int] = typer.Argument(None, help="Series id (omit for all).")) -> None:
    """Print one series, or every series."""
    with _engine() as eng:
        _emit(eng.snapshot() if series is None else eng.get_series(series).to_dict())


@app.command("events")
def events(
    start: int = typer.Option(0, "--start", min=0),
    limit: int = typer.Option(50, "--limit", min=1, max=10000),
    name: Optional[str] = typer.Option(None, "--name", help="Only events with this name."),
) -> None:
    """Print logged events in order."""
    with _engine() as eng:
        _emit([e.to_dict() for e in eng.get_events(start=start, limit=limit, name=name)])


@app.command("grant")
def grant(
    caller: str = typer.Option(..., "--caller", help="Admin account (0x-hex)."),
    role: str = typer.Option(..., "--role", help="One of: admin, creator, minter."),
    account: str = typer.Option(..., "--account", help="Account to grant (0x-hex)."),
) -> None:
    """Grant an engine role (admin only)."""
    role_id = ROLE_NAMES.get(role.strip().lower())
    if role_id is None:
        raise typer.BadParameter(f"unknown role {role!r}; expected one of {sorted(ROLE_NAMES)}")
    with _engine() as eng:
        changed = eng.grant_role(_hex(caller, "--caller"), role_id, _hex(account, "--account"))
        _emit({"role": role, "account": account, "changed": changed})


@app.command("verify-proof")
def verify_proof(
    leaf: str = typer.Option(..., "--leaf", help="32-byte leaf hash (0x-hex)."),
    root: str = typer.Option(..., "--root", help="32-byte root (0x-hex)."),
    proof: List[str] = typer.Option([], "--proof", help="Sibling hash, leaf to root (repeatable)."),
) -> None:
    """Check a proof offline. Exit code 0 if valid, 1 otherwise."""
    ok = verify(_hex(leaf, "--leaf"), _hex(root, "--root"), [_hex(p, "--proof") for p in proof])
    typer.echo("valid" if ok else "invalid")
    if not ok:
        raise typer.Exit(1)


def main() -> None:  # pragma: no cover
    app()


if __name__ == "__main__":  # pragma: no cover
    main()
