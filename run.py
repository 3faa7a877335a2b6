#!/usr/bin/env python3
"""
GlamorousDesi Store Builder - Provision a Shopify store in one run.

Usage:
    python run.py --shop my-store.myshopify.com --token shpat_...   # Build the store
    python run.py --shop my-store.myshopify.com                     # Use the token stored at install
    python run.py --shop ... --token ... --no-automation            # Skip recurring jobs
    python run.py --serve                                           # Start the OAuth/setup server
    python run.py --debug                                           # Enable debug output
"""

import sys
import argparse

from core import (
    AppSettings,
    AuthenticationError,
    OutputManager,
    SchedulerHandle,
    Session,
    SessionStore,
    StoreBuildOrchestrator,
    StoreRESTClient,
)


def main():
    parser = argparse.ArgumentParser(
        description="GlamorousDesi Store Builder - Configure a Shopify store from scratch"
    )
    parser.add_argument("--env", "-e", default="./.env", help="Path to .env file")
    parser.add_argument("--shop", help="Shop domain (e.g. my-store.myshopify.com)")
    parser.add_argument("--token", help="Admin API access token (defaults to the stored session)")
    parser.add_argument("--no-automation", action="store_true", help="Do not schedule recurring jobs")
    parser.add_argument("--serve", action="store_true", help="Run the HTTP server instead of a build")
    parser.add_argument("--port", type=int, help="Port for --serve")
    parser.add_argument("--debug", action="store_true", help="Enable debug output")

    args = parser.parse_args()

    settings = AppSettings(env_file=args.env)

    if args.debug:
        settings.debug = True
    if args.no_automation:
        settings.enable_automation = False
    if args.port:
        settings.port = args.port

    if args.serve:
        from server import create_app

        if not settings.validate(serve=True):
            sys.exit(1)
        create_app(settings).run(host="0.0.0.0", port=settings.port)
        return

    if not args.shop:
        parser.error("--shop is required unless --serve is given")

    token = args.token
    if not token:
        stored = SessionStore(settings.session_store_path, settings.debug).load_session(args.shop)
        if stored is None:
            parser.error(f"No stored session for {args.shop}; pass --token")
        token = stored.access_token

    print(f"\n{'='*60}")
    print("GLAMOROUSDESI STORE BUILDER")
    print("="*60)
    print(f"Shop: {args.shop}")
    print(f"Automation: {'ON' if settings.enable_automation else 'OFF'}")

    if not settings.validate():
        sys.exit(1)

    scheduler = SchedulerHandle(debug=settings.debug)
    client = StoreRESTClient(Session(args.shop, token), settings.api_version, settings.debug)
    output_manager = OutputManager(settings.output_dir, settings.retention_days, settings.debug)
    orchestrator = StoreBuildOrchestrator.from_settings(settings, client, scheduler, output_manager)

    try:
        report = orchestrator.build_complete_store()
    except AuthenticationError as e:
        print(f"\n  ERROR: {e}")
        sys.exit(1)
    orchestrator.print_summary(report)

    if scheduler.tasks:
        print("\nRecurring jobs only run while the server is up: python run.py --serve")
    scheduler.shutdown()

    if not report.succeeded:
        sys.exit(1)


if __name__ == "__main__":
    main()
