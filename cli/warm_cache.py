#!/usr/bin/env python3
import argparse
import os
import sys

from dotenv import load_dotenv

sys.path.insert(0, os.path.join(os.path.dirname(__file__), '..'))

from plebiscito import queries  # noqa: E402
from plebiscito.cache import Cache  # noqa: E402
from plebiscito.config import Settings  # noqa: E402
from plebiscito.storage import open_storage  # noqa: E402
from plebiscito.utils import say  # noqa: E402


def build_queries(settings, zones):
    """The queries to warm: the static tables, plus whatever the configured roots allow."""
    selected = [queries.zones(), queries.elections(), queries.ambits()]

    if settings.files_path:
        selected.append(queries.files(settings))
    if settings.files_path and settings.schema_path:
        selected.append(queries.not_copied(settings))
    if settings.schema_path:
        selected.append(queries.all_results(settings))
        for zone in zones:
            selected.append(queries.zone_data(settings, zone))
            selected.append(queries.scenery(settings, zone))

    return selected


def format_report(rows):
    lines = [f"{'Key':<40} {'Status':>8}", '-' * 49]
    for key, status in rows:
        lines.append(f'{key:<40} {status:>8}')
    return '\n'.join(lines)


def main():
    parser = argparse.ArgumentParser(
        description='Recompute cached API payloads and store them again',
    )
    parser.add_argument(
        '-z', '--zone',
        help='Also warm zone data and scenery for this zone (repeatable)',
        action='append',
        default=[],
    )
    parser.add_argument(
        '-n', '--dry-run',
        help='List the keys that would be warmed without touching the cache',
        action='store_true',
    )
    args = parser.parse_args()

    load_dotenv()
    settings = Settings.from_env()

    selected = build_queries(settings, args.zone)

    if args.dry_run:
        print(format_report([(q.key, 'pending') for q in selected]))
        return

    storage = open_storage(settings.cache_url)
    if storage is None:
        parser.error('No cache configured: set CACHE_URL or REDIS_URL')

    # resolve() never reports store trouble, so check reachability up front
    try:
        storage.connect().disconnect()
    except Exception as e:
        say('Cache unreachable', e)
        storage.close()
        sys.exit(1)

    cache = Cache(storage)
    rows = []
    failed = False
    try:
        for query in selected:
            try:
                cache.resolve(query.key, query.produce, bypass=True, ttl=settings.cache_ttl)
                rows.append((query.key, 'ok'))
            except Exception as e:
                say(f'Could not warm {query.key}', e)
                rows.append((query.key, 'failed'))
                failed = True
    finally:
        storage.close()

    print(format_report(rows))
    if failed:
        sys.exit(1)


if __name__ == '__main__':
    main()
