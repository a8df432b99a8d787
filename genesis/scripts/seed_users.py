"""Script to register a demo account and print a token for it."""

import argparse
import logging

from genesis.core import create_document_store, issue_token, load_settings
from genesis.core.logging_config import LOG_FORMAT
from genesis.models.enums import UserRole
from genesis.repositories import DocumentUserRepository
from genesis.services import ProfileService


logging.basicConfig(level=logging.INFO, format=LOG_FORMAT)
logger = logging.getLogger(__name__)


def main() -> None:
    """Register (or reuse) a user, optionally fund it, and print its token."""
    parser = argparse.ArgumentParser(description="Register a demo borrower or lender.")
    parser.add_argument("--config", type=str, default=None, help="Optional config.yml path.")
    parser.add_argument("--name", type=str, required=True, help="Display name.")
    parser.add_argument("--email", type=str, required=True, help="Unique email address.")
    parser.add_argument("--role", choices=[role.value for role in UserRole], required=True)
    parser.add_argument("--city", type=str, default="", help="Optional city.")
    parser.add_argument("--country", type=str, default="", help="Optional country.")
    parser.add_argument("--deposit", type=float, default=0.0, help="Initial balance to add.")
    args = parser.parse_args()

    settings = load_settings(args.config)
    if settings.storage_backend == "memory":
        logger.warning("Storage backend is 'memory'; the seeded user disappears when this script exits.")

    store = create_document_store(settings)
    try:
        users = DocumentUserRepository(store=store, collection_name=settings.users_collection)
        profiles = ProfileService(store=store, user_repository=users)

        user = users.find_by_email(args.email)
        if user is None:
            user = profiles.register_user(
                name=args.name,
                email=args.email,
                role=args.role,
                city=args.city,
                country=args.country,
            )
        else:
            logger.info("Reusing existing user user_id=%s", user.id)
        if args.deposit > 0:
            profiles.deposit(user.id, args.deposit)

        token = issue_token(
            user.id,
            settings.jwt_secret,
            algorithm=settings.jwt_algorithm,
            ttl_minutes=settings.token_ttl_minutes,
        )
        logger.info("Seeded user_id=%s role=%s", user.id, user.role)
        print(token)
    finally:
        store.close()


if __name__ == "__main__":
    main()
