#!/usr/bin/env python3
"""
Store Builder HTTP server - OAuth install, setup page, build trigger, webhooks.

Routes:
    GET  /auth?shop=X.myshopify.com   redirect to Shopify's OAuth consent page
    GET  /auth/callback               store the session, redirect to /setup
    GET  /setup                       one-click setup page (app/index.html)
    POST /api/build-store             {shop, accessToken} or {shop, query} -> build + report
    POST /webhooks/order-created      orders/create deliveries
    POST /webhooks/product-created    products/create deliveries
    GET  /health

Usage:
    python server.py                  # listens on PORT (default 3000)
"""

import os
from urllib.parse import urlencode

from flask import Flask, jsonify, redirect, request, send_from_directory

from core import (
    AppSettings,
    AuthenticationError,
    OutputManager,
    SchedulerHandle,
    Session,
    SessionStore,
    ShopifyOAuth,
    StoreBuildOrchestrator,
    StoreRESTClient,
    verify_webhook_hmac,
)
from core.oauth import is_valid_shop, sign_query, verify_signed_query

STATIC_DIR = os.path.join(os.path.dirname(os.path.abspath(__file__)), "app")


def create_app(
    settings=None,
    oauth=None,
    session_store=None,
    scheduler=None,
    client_factory=None,
    output_manager=None,
) -> Flask:
    """Build the Flask app. Every collaborator can be injected for tests."""
    settings = settings or AppSettings()
    oauth = oauth or ShopifyOAuth(
        settings.api_key,
        settings.api_secret,
        settings.scope_list,
        settings.host,
        debug=settings.debug,
    )
    session_store = session_store or SessionStore(settings.session_store_path, settings.debug)
    scheduler = scheduler or SchedulerHandle(debug=settings.debug)
    client_factory = client_factory or (
        lambda session: StoreRESTClient(session, settings.api_version, settings.debug)
    )
    if output_manager is None and settings.save_json:
        output_manager = OutputManager(settings.output_dir, settings.retention_days, settings.debug)

    app = Flask(__name__, static_folder=STATIC_DIR, static_url_path="/static")
    app.config["SCHEDULER"] = scheduler

    @app.route("/health", methods=["GET"])
    def health():
        return "ok", 200

    @app.route("/auth", methods=["GET"])
    def auth():
        shop = request.args.get("shop", "")
        try:
            return redirect(oauth.begin_auth(shop))
        except ValueError as e:
            return str(e), 400

    @app.route("/auth/callback", methods=["GET"])
    def auth_callback():
        try:
            session = oauth.complete_auth_callback(request.args.to_dict())
        except AuthenticationError as e:
            print(f"Auth callback error: {e}")
            return "Authentication failed", 500

        session_store.store_session(session)
        signed = sign_query({"shop": session.shop}, settings.api_secret)
        return redirect(f"/setup?{urlencode(signed)}")

    @app.route("/setup", methods=["GET"])
    def setup():
        return send_from_directory(STATIC_DIR, "index.html")

    @app.route("/api/build-store", methods=["POST"])
    def build_store():
        body = request.get_json(silent=True) or {}
        shop = body.get("shop", "")
        access_token = body.get("accessToken")

        if not access_token and is_valid_shop(shop):
            # The stored token is only released to a caller holding a
            # signed query for this shop (the /setup link).
            query = body.get("query")
            if not isinstance(query, dict):
                query = {}
            if query.get("shop") != shop or not verify_signed_query(query, settings.api_secret):
                return jsonify({
                    "success": False,
                    "error": "Request is not signed for this shop; open the app from Shopify admin",
                }), 401
            stored = session_store.load_session(shop)
            if stored:
                access_token = stored.access_token

        if not is_valid_shop(shop) or not access_token:
            return jsonify({
                "success": False,
                "error": "A valid shop domain and accessToken are required",
            }), 400

        try:
            client = client_factory(Session(shop=shop, access_token=access_token))
            orchestrator = StoreBuildOrchestrator.from_settings(
                settings, client, scheduler, output_manager
            )
            report = orchestrator.build_complete_store()
        except Exception as e:
            print(f"Build error: {e}")
            return jsonify({"success": False, "error": str(e)}), 500

        orchestrator.print_summary(report)

        if scheduler.tasks and not scheduler.running:
            scheduler.start()

        if report.succeeded:
            message = "Store built successfully!"
        else:
            message = f"Store built with failed steps: {', '.join(report.failed_steps)}"

        return jsonify({
            "success": report.succeeded,
            "message": message,
            "storeUrl": f"https://{shop}",
            "report": report.to_dict(),
        }), 200

    def _receive_webhook(name: str):
        if settings.api_secret:
            signature = request.headers.get("X-Shopify-Hmac-Sha256", "")
            if not verify_webhook_hmac(request.get_data(), signature, settings.api_secret):
                return "Invalid signature", 401

        topic = request.headers.get("X-Shopify-Topic", name)
        shop = request.headers.get("X-Shopify-Shop-Domain", "unknown")
        print(f"Webhook received: {topic} from {shop}")
        return "", 200

    @app.route("/webhooks/order-created", methods=["POST"])
    def order_created():
        return _receive_webhook("orders/create")

    @app.route("/webhooks/product-created", methods=["POST"])
    def product_created():
        return _receive_webhook("products/create")

    return app


def main():
    settings = AppSettings()
    if not settings.validate(serve=True):
        raise SystemExit(1)

    app = create_app(settings)
    print(f"GlamorousDesi store builder running on port {settings.port}")
    app.run(host="0.0.0.0", port=settings.port)


if __name__ == "__main__":
    main()
