"""Seed a running dev server (EXPOSE_INTERNAL_ROUTES=true) with demo users, groups and tickets."""
import argparse
import os
import sys

from helpdesk.frontend.backend_client import BackendClient, BackendTransportError
from helpdesk.shared.schemas import (
    GroupDestination,
    TelegramUserProfile,
    TicketStatus,
    UserDestination,
    generate_id,
)


def parse_args() -> argparse.Namespace:
    parser = argparse.ArgumentParser(description="Fill a dev helpdesk server with demo data")
    parser.add_argument("--base-url", default=os.getenv("BACKEND_BASE_URL", "http://localhost:8000"))
    parser.add_argument("--api-prefix", default=os.getenv("BACKEND_API_PREFIX", "/api"))
    return parser.parse_args()


def login_new_user(client: BackendClient, first_name: str, telegram_id: int) -> str:
    """Create a user through the internal route and log the client in as that user."""
    user_id = generate_id()
    profile = TelegramUserProfile(id=telegram_id, first_name=first_name, username=first_name.lower())
    client.internal_create_user(user_id, profile).unwrap()
    client.internal_fake_login(user_id).unwrap()
    return user_id


def seed(base_url: str, api_prefix: str) -> None:
    with BackendClient(base_url=base_url, api_prefix=api_prefix) as admin, \
            BackendClient(base_url=base_url, api_prefix=api_prefix) as student:
        admin_id = login_new_user(admin, "Admin", 1000001)
        student_id = login_new_user(student, "Student", 1000002)

        dorm = generate_id()
        admin.create_group(dorm, "Dorm manager").unwrap()
        admin.create_group(generate_id(), "IT support").unwrap()

        chair = generate_id()
        student.create_ticket(chair, GroupDestination(id=dorm), "Broken chair", "The chair in room 42 is broken").unwrap()
        admin.send_ticket_message(chair, "Will send someone tomorrow").unwrap()
        admin.change_ticket_assignee(chair, admin_id).unwrap()
        admin.change_ticket_status(chair, TicketStatus.IN_PROGRESS).unwrap()

        direct = generate_id()
        admin.create_ticket(direct, UserDestination(id=student_id), "Key return", "Please return the key").unwrap()

    print(f"admin={admin_id} student={student_id} group={dorm} tickets={chair},{direct}")


def main() -> None:
    args = parse_args()
    try:
        seed(args.base_url, args.api_prefix)
    except BackendTransportError as e:
        print(f"Server is not reachable: {e}", file=sys.stderr)
        raise SystemExit(1)


if __name__ == "__main__":
    main()
