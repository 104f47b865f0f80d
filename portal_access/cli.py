"""
Interactive console for the booking portal's access engine.
Inspect capabilities and manage operator assignments from a terminal.
"""

import os

from portal_access.api.auth import actor_from_claims, verify_token
from portal_access.assignments import AssignmentManager
from portal_access.errors import AssignmentError, TransportError
from portal_access.filters import build_filters
from portal_access.permissions import CAPABILITY_FLAGS, resolve, role_display_name, with_assignments
from portal_access.storage import MemoryStore
from portal_access.transport import AssignmentTransport
from portal_access.working_point import WorkingPointSelector

HELP = """Commands:
  caps                          show capability flags
  filters                       show API scoping filters
  list <operator> [active]      list assignments (full history unless 'active')
  assign <operator> <point>     assign one service point
  bulk <operator> <p1,p2,...>   assign several service points
  toggle <assignment> on|off    activate / deactivate an assignment
  revoke <assignment>           revoke an assignment
  point                         show the current working point (operators)
  select <point|none>           choose the working point (operators)
  quit"""


def print_bulk_result(result):
    s = result.summary
    print(f"\n[bulk] {s.successful} of {s.total_requested} assigned, {s.failed} failed")
    for a in result.succeeded:
        print(f"  ✓ {a.service_point_id} {a.service_point_name}")
    for f in result.failed:
        print(f"  ✗ {f.service_point_id} {f.service_point_name}: {f.error} ({f.code})")


def main():
    print("=== Booking Portal: Access & Assignment Console ===\n")

    try:
        token = input("Enter access token (or 'quit'): ").strip()
    except (EOFError, KeyboardInterrupt):
        print("\nExiting.")
        return

    if not token or token.lower() in {"quit", "exit"}:
        print("Goodbye.")
        return

    claims = verify_token(token)
    if not claims:
        print("\n[ERROR] Login failed: invalid or expired token.")
        return

    actor = actor_from_claims(claims)
    manager = AssignmentManager(AssignmentTransport(token=token))
    selector = WorkingPointSelector(MemoryStore(), actor)

    def refresh():
        caps = resolve(actor)
        if caps.is_operator and caps.operator_id is not None:
            active = manager.list_assignments(caps.operator_id, active_only=True)
            return resolve(with_assignments(actor, active)), active
        return caps, []

    try:
        caps, active = refresh()
    except TransportError as e:
        print("\n[TRANSPORT ERROR] Could not load assignments; retry later.")
        print("Details:", e)
        return

    print(f"\n[auth] Logged in as actor {actor.id} ({role_display_name(caps.role)})")
    print(HELP)

    # ── REPL ─────────────────────────────────────────────────────────
    while True:
        try:
            line = input("\n> ").strip()
        except (EOFError, KeyboardInterrupt):
            print("\nExiting.")
            break

        if not line:
            continue
        cmd, *args = line.split()
        cmd = cmd.lower()
        if cmd in {"quit", "exit"}:
            print("Goodbye.")
            break

        try:
            if cmd == "caps":
                for flag in CAPABILITY_FLAGS:
                    print(f"  {flag:32} {getattr(caps, flag)}")
                print(f"  partner_id={caps.partner_id} operator_id={caps.operator_id} "
                      f"client_id={caps.client_id} points={caps.assigned_service_point_ids}")

            elif cmd == "filters":
                filters = build_filters(caps)
                print(f"  params={filters.query_params()} restricted={filters.restricted}")
                if filters.matches_nothing:
                    print("  (no visible resources)")

            elif cmd == "list" and args:
                rows = manager.list_assignments(int(args[0]), active_only=args[1:] == ["active"])
                if not rows:
                    print("(no assignments)")
                for a in rows:
                    state = "active" if a.is_active else "revoked"
                    print(f"  #{a.id} point={a.service_point_id} {a.service_point_name} [{state}]")

            elif cmd == "assign" and len(args) == 2:
                a = manager.assign(int(args[0]), int(args[1]))
                print(f"[assign] Created assignment #{a.id}")

            elif cmd == "bulk" and len(args) == 2:
                ids = [int(x) for x in args[1].split(",") if x.strip()]
                print_bulk_result(manager.bulk_assign(int(args[0]), ids))

            elif cmd == "toggle" and len(args) == 2 and args[1] in {"on", "off"}:
                a = manager.update_assignment(int(args[0]), args[1] == "on")
                print(f"[assign] #{a.id} is now {'active' if a.is_active else 'revoked'}")

            elif cmd == "revoke" and len(args) == 1:
                manager.unassign(int(args[0]))
                print(f"[assign] #{args[0]} revoked")

            elif cmd == "point":
                caps, active = refresh()
                print(f"  working point: {selector.current(active)}")

            elif cmd == "select" and len(args) == 1:
                caps, active = refresh()
                choice = None if args[0].lower() == "none" else int(args[0])
                if choice is not None and choice not in (caps.assigned_service_point_ids or ()):
                    print(f"[WARN] Service point {choice} is not assigned to you.")
                    continue
                selector.set_selection(choice)
                print(f"  working point: {choice}")

            else:
                print(HELP)

        except AssignmentError as e:
            print(f"\n[VALIDATION ERROR] {e} (fix the input before retrying)")
        except TransportError as e:
            print("\n[TRANSPORT ERROR] Backend request failed; it is safe to retry.")
            print("Details:", e)
        except ValueError as e:
            print(f"\n[ERROR] {e}")


if __name__ == "__main__":
    if os.getenv("PORTAL_API_URL") is None:
        print("[WARN] PORTAL_API_URL not set; using the default backend URL.")
    main()
