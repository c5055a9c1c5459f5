#!/usr/bin/env python3
"""
Run a BDP check on a road-network snapshot.

Selects the given segments (either the two bracketing segments, or a whole
detour with its bracketing segments) and reports whether a direct route
exists between the bracketing segments.

Usage:
    python run_bdp_check.py network.json SEG_ID SEG_ID [SEG_ID ...] [--no-live-map] [--region na|il|row | --country-id ID]

Exit codes:
    0 - a direct route was found (BDP applies)
    1 - no direct route was found (BDP does not apply)
    2 - the selection is not eligible for BDP, or the input is invalid
"""

import argparse
import logging
import sys
from dataclasses import replace
from pathlib import Path

from bdp_core import (
    BDPConfig,
    BDPError,
    DirectRouteOrchestrator,
    InMemoryRoadNetwork,
    OutcomeKind,
    SelectionContext,
    build_selection,
    setup_logging,
)
from bdp_core.config import REGION_PATHS, region_for_country

EXIT_CODES = {
    OutcomeKind.FOUND: 0,
    OutcomeKind.NOT_FOUND: 1,
    OutcomeKind.INELIGIBLE: 2,
}


def main(argv=None) -> int:
    parser = argparse.ArgumentParser(
        description='Check for possible BDP routes between two selected segments'
    )
    parser.add_argument('snapshot', help='JSON road-network snapshot')
    parser.add_argument('segment_ids', nargs='+', type=int,
                        help='Selected segment ids, in selection order')
    parser.add_argument('--path-end', type=int,
                        help='Segment id recorded by a path-select gesture (optional)')
    parser.add_argument('--no-live-map', action='store_true',
                        help='Skip the live-map routing service, use local search only')
    server = parser.add_mutually_exclusive_group()
    server.add_argument('--region', choices=sorted(REGION_PATHS),
                        help='Live-map routing server region (default: from environment or na)')
    server.add_argument('--country-id', type=int,
                        help='Editor country id; picks the routing server region serving it')
    parser.add_argument('--log-file', type=Path,
                        help='Also write logs to this file')
    parser.add_argument('--verbose', '-v', action='store_true',
                        help='Enable verbose logging')

    args = parser.parse_args(argv)

    logger = setup_logging(
        level=logging.DEBUG if args.verbose else logging.INFO,
        log_file=args.log_file,
        detailed=args.verbose,
    )

    try:
        config = BDPConfig.from_env()
        if args.region:
            config = config.with_region(args.region)
        elif args.country_id is not None:
            config = config.with_region(region_for_country(args.country_id))
        if args.no_live_map:
            config = replace(config, use_live_map=False)

        network = InMemoryRoadNetwork.load_json(args.snapshot)
        selection = build_selection(network, args.segment_ids)
    except BDPError as e:
        logger.error(f"{type(e).__name__}: {e}")
        return 2

    context = SelectionContext()
    if args.path_end is not None:
        context.record_path_end(args.path_end)

    orchestrator = DirectRouteOrchestrator(network, config=config, context=context)
    outcome = orchestrator.check(selection)

    logger.info("=" * 80)
    logger.info(f"BDP CHECK RESULT: {outcome.kind.value.upper()}")
    logger.info("=" * 80)
    logger.info(outcome.message)
    if outcome.found:
        logger.info(f"Direct route ({outcome.source}): {' -> '.join(str(i) for i in outcome.route)}")

    return EXIT_CODES[outcome.kind]


if __name__ == "__main__":
    sys.exit(main())
