#!/usr/bin/env python3
import argparse
import json
import logging
import sys
from concurrent.futures import Future, as_completed
from typing import Dict, List

from storeinfo.client import StoreInfoClient
from storeinfo.config import (
    DEFAULT_REFERRER,
    DEFAULT_STORE_URL,
    DEFAULT_TIMEOUT,
    DEFAULT_USER_AGENT,
    FetcherConfig,
)
from storeinfo.fetcher import PageInfoFetcher
from storeinfo.prometheus_exporter import PrometheusExporter
from storeinfo.storage import JsonlWriter
from storeinfo.tags import Tag


def parse_args(argv: List[str] | None = None) -> argparse.Namespace:
    parser = argparse.ArgumentParser(description="Scrape metadata fields from a store listing page.")
    parser.add_argument("package", help="Package identifier, e.g. com.example.app")
    parser.add_argument(
        "--field",
        dest="fields",
        action="append",
        choices=[t.name for t in Tag],
        default=None,
        help="Field to fetch by itemprop; repeatable.",
    )
    parser.add_argument("--validate", action="store_true", help="Check that the listing page answers 200.")
    parser.add_argument("--rating", action="store_true", help="Fetch the rating widget.")
    parser.add_argument("--rating-count", action="store_true", help="Fetch the rating count widget.")
    parser.add_argument("--changelog", action="store_true", help="Fetch the recent changelog entries.")
    parser.add_argument("--timeout", type=float, default=DEFAULT_TIMEOUT, help="Connect/read timeout in seconds.")
    parser.add_argument("--referrer", default=DEFAULT_REFERRER, help="Referer header to send.")
    parser.add_argument("--store-url", default=DEFAULT_STORE_URL, help="Listing details endpoint.")
    parser.add_argument("--user-agent", default=DEFAULT_USER_AGENT, help="User-Agent header to send.")
    parser.add_argument("--workers", type=int, default=4, help="Concurrent requests.")
    parser.add_argument("--strict", action="store_true", help="Treat a non-200 listing as a validation failure.")
    parser.add_argument("--out", dest="output_path", default=None, help="Append results to this JSONL file.")
    parser.add_argument("--prometheus-port", type=int, default=None, help="Expose metrics on this port.")
    parser.add_argument("-v", "--verbose", action="count", default=0, help="Increase logging verbosity.")
    return parser.parse_args(argv)


def submit_requested(client: StoreInfoClient, args: argparse.Namespace) -> Dict[Future, str]:
    select_all = not (args.fields or args.validate or args.rating or args.rating_count or args.changelog)
    futures: Dict[Future, str] = {}
    if args.validate or select_all:
        futures[client.validate(args.package)] = "validate"
    fields = [t.name for t in Tag] if select_all else (args.fields or [])
    for name in fields:
        futures[client.fetch_field(args.package, Tag[name])] = name
    if args.rating:
        futures[client.fetch_rating(args.package)] = "rating"
    if args.rating_count:
        futures[client.fetch_rating_count(args.package)] = "rating-count"
    if args.changelog or select_all:
        futures[client.fetch_changelog(args.package)] = "changelog"
    return futures


def main(argv: List[str] | None = None) -> int:
    args = parse_args(argv)
    log_level = logging.WARNING
    if args.verbose == 1:
        log_level = logging.INFO
    elif args.verbose >= 2:
        log_level = logging.DEBUG
    logging.basicConfig(
        level=log_level,
        format="%(asctime)s %(levelname)s %(threadName)s %(message)s",
    )

    config = FetcherConfig(
        store_url=args.store_url,
        timeout=max(0.5, args.timeout),
        referrer=args.referrer,
        user_agent=args.user_agent,
        max_workers=max(1, args.workers),
        strict_validation=args.strict,
    )
    fetcher = PageInfoFetcher(config)

    exporter = None
    if args.prometheus_port is not None:
        exporter = PrometheusExporter(fetcher.metrics, port=args.prometheus_port)
        exporter.start()

    writer = JsonlWriter(args.output_path) if args.output_path else None
    failures = 0
    try:
        with StoreInfoClient(fetcher) as client:
            futures = submit_requested(client, args)
            for future in as_completed(futures):
                label = futures[future]
                try:
                    info = future.result()
                except Exception as e:
                    failures += 1
                    logging.warning("%s failed for %s: %s", label, args.package, e)
                    continue
                if writer:
                    writer.write(info)
                else:
                    print(json.dumps(info.to_dict(), ensure_ascii=False))
    finally:
        if writer:
            writer.close()
        if exporter:
            exporter.stop()

    logging.info("Finished %s with %d failure(s)", args.package, failures)
    return 1 if failures else 0


if __name__ == "__main__":
    sys.exit(main())
