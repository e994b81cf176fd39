"""Merchant, payment gateway and driver simulator for the logistics engine.

    python simulator.py ingest ORD-1 --name Jane --address "1 Rd"
    python simulator.py pay ORD-1
    python simulator.py dispatch TRK-1A2B3C4D --driver DRIVER-007
    python simulator.py walkthrough
"""
import argparse
import json
import os
import sys
import uuid

from client import DEFAULT_BASE_URL, PAYMENT_STATUSES, LogisticsClient
from errors import DispatchDeniedError, LogisticsError
from models import PackageStatus


def show(data):
    print(json.dumps(data, indent=2, ensure_ascii=False))


def run_walkthrough(client, external_order_id=None, out=print):
    """Drive one order through its whole lifecycle, including a refused second dispatch."""
    external_order_id = external_order_id or f"ORD-{uuid.uuid4().hex[:6].upper()}"

    created = client.create_order(
        external_order_id, "MERCHANT-001", {"name": "Jane", "address": "1 Rd"}
    )
    tracking_number = created["tracking_number"]
    out(f"📦 {external_order_id} ingested as {tracking_number} ({created['status']})")

    paid = client.simulate_payment(external_order_id)
    out(f"💳 payment: {paid['order']['status']}")

    dispatched = client.dispatch_package(tracking_number)
    out(f"🚚 dispatch: {dispatched['new_status']}")

    try:
        client.dispatch_package(tracking_number)
        out("⚠️ second dispatch was accepted")
    except DispatchDeniedError as e:
        out(f"⛔ second dispatch denied: {e.reason}")

    notified = client.notify_store(external_order_id, PackageStatus.DELIVERED.value)
    out(f"🔔 notify: {notified['new_status']}")

    return client.get_package_status(external_order_id)


def build_parser():
    parser = argparse.ArgumentParser(description="Logistics engine simulator")
    parser.add_argument(
        "--base-url",
        default=os.environ.get("LOGISTICS_BASE_URL", DEFAULT_BASE_URL),
        help="server URL (default: $LOGISTICS_BASE_URL or %(default)s)",
    )
    parser.add_argument("--timeout", type=float, default=10)
    sub = parser.add_subparsers(dest="command", required=True)

    p = sub.add_parser("ingest", help="create an order as a merchant")
    p.add_argument("external_order_id")
    p.add_argument("--merchant", default="MERCHANT-001")
    p.add_argument("--name", required=True)
    p.add_argument("--address", required=True)
    p.add_argument("--phone")
    p.add_argument("--email")

    p = sub.add_parser("pay", help="send a payment webhook")
    p.add_argument("external_order_id")
    p.add_argument("--status", choices=PAYMENT_STATUSES, default="success")
    p.add_argument("--txn")

    p = sub.add_parser("status", help="look up an order as a partner")
    p.add_argument("external_order_id")

    p = sub.add_parser("dispatch", help="pick up a package as a driver")
    p.add_argument("tracking_number")
    p.add_argument("--driver", default="DRIVER-001")

    p = sub.add_parser("notify", help="overwrite the status of an order")
    p.add_argument("external_order_id")
    p.add_argument("status", choices=PackageStatus.values())

    sub.add_parser("orders", help="list all packages, newest first")

    p = sub.add_parser("walkthrough", help="run one order through the full lifecycle")
    p.add_argument("--order-id")

    return parser


def main(argv=None, client=None):
    args = build_parser().parse_args(argv)
    client = client or LogisticsClient(args.base_url, timeout=args.timeout)

    try:
        if args.command == "ingest":
            recipient = {"name": args.name, "address": args.address}
            if args.phone:
                recipient["phone"] = args.phone
            if args.email:
                recipient["email"] = args.email
            show(client.create_order(args.external_order_id, args.merchant, recipient))
        elif args.command == "pay":
            show(client.simulate_payment(args.external_order_id, args.status, args.txn))
        elif args.command == "status":
            show(client.get_package_status(args.external_order_id))
        elif args.command == "dispatch":
            show(client.dispatch_package(args.tracking_number, args.driver))
        elif args.command == "notify":
            show(client.notify_store(args.external_order_id, args.status))
        elif args.command == "orders":
            show(client.get_all_orders())
        elif args.command == "walkthrough":
            show(run_walkthrough(client, args.order_id))
    except DispatchDeniedError as e:
        print(f"dispatch denied: {e.reason}", file=sys.stderr)
        return 3
    except LogisticsError as e:
        print(f"error: {e.message}", file=sys.stderr)
        return 1
    return 0


if __name__ == "__main__":
    sys.exit(main())
