#!/usr/bin/env python3
"""Live probe for a single Sesame lock.

Reads configuration from ``SESAME_*`` environment variables (see
``SesameConfig.from_env``) and:
1) fetches and prints the current status,
2) optionally sends a lock/unlock command through the full accessory
   stack (dispatcher, settle delay, re-poll),
3) optionally watches status updates for a while.
"""

from __future__ import annotations

import argparse
import asyncio
import logging
import sys
from pathlib import Path

# Allow running from repo root without installing the package.
_repo = Path(__file__).resolve().parent.parent
_src = _repo / "src"
if _src.is_dir():
    sys.path.insert(0, str(_src))

from pysesame import Characteristic, LockState, LoggingExposer, SesameConfig, SesamePlatform  # noqa: E402
from pysesame.exceptions import SesameError  # noqa: E402

_LOG = logging.getLogger("lock_probe")


def _parse_args() -> argparse.Namespace:
    parser = argparse.ArgumentParser(description="Probe a Sesame lock through pysesame.")
    parser.add_argument(
        "--command",
        choices=("lock", "unlock"),
        default=None,
        help="Send a command after the initial status fetch.",
    )
    parser.add_argument(
        "--watch",
        type=int,
        default=0,
        help="Keep receiving status updates for N seconds.",
    )
    parser.add_argument(
        "--verbose",
        "-v",
        action="store_true",
        help="Enable debug logs.",
    )
    return parser.parse_args()


async def _run(args: argparse.Namespace) -> int:
    config = SesameConfig.from_env()
    if not config.locks:
        print("[probe] No lock configured (set SESAME_LOCK_UUID and SESAME_LOCK_SECRET)", file=sys.stderr)
        return 2

    async with SesamePlatform(config, lambda lock: LoggingExposer(lock.display_name)) as platform:
        for uuid, accessory in platform.accessories.items():
            state = LockState(accessory.get_value(Characteristic.LOCK_CURRENT_STATE))
            battery = accessory.get_value(Characteristic.BATTERY_LEVEL)
            print(f"[probe] {uuid}: {state.name.lower()} battery={battery}%")

            if args.command is not None:
                target = LockState.SECURED if args.command == "lock" else LockState.UNSECURED
                await accessory.set_value(Characteristic.LOCK_TARGET_STATE, int(target))
                state = LockState(accessory.get_value(Characteristic.LOCK_CURRENT_STATE))
                print(f"[probe] {uuid}: after {args.command}: {state.name.lower()}")

        if args.watch > 0:
            _LOG.info("Watching for %d seconds", args.watch)
            await asyncio.sleep(args.watch)
    return 0


def main() -> int:
    args = _parse_args()
    logging.basicConfig(
        level=logging.DEBUG if args.verbose else logging.INFO,
        format="%(levelname)s %(name)s: %(message)s",
    )
    try:
        return asyncio.run(_run(args))
    except SesameError as exc:  # pragma: no cover - network/system interaction
        print(f"[probe] {exc}", file=sys.stderr)
        return 1


if __name__ == "__main__":
    raise SystemExit(main())
