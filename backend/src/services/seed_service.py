"""Demo data for development databases: Auth0 accounts and sample prompts."""
import asyncio
import logging
from collections.abc import Sequence
from dataclasses import dataclass

from sqlalchemy import delete, insert
from sqlalchemy.ext.asyncio import AsyncSession

from core.auth0_management import Account, Auth0ManagementClient, Auth0ManagementError, NewAccount
from models.prompt import Prompt

logger = logging.getLogger(__name__)

DEMO_PASSWORD = "testPassword123!"

DEMO_ACCOUNTS = [
    NewAccount(
        email="user1+demo@example.com",
        password=DEMO_PASSWORD,
        first_name="Test",
        last_name="User1",
    ),
    NewAccount(
        email="user2+demo@example.com",
        password=DEMO_PASSWORD,
        first_name="Test",
        last_name="User2",
    ),
    NewAccount(
        email="user3+demo@example.com",
        password=DEMO_PASSWORD,
        first_name="Test",
        last_name="User3",
    ),
]

BASE_PROMPTS = [
    {
        "name": "Code Explainer",
        "description": "Explains code in simple terms",
        "content": (
            "Please explain this code in simple terms, as if you're teaching a "
            "beginner programmer:"
        ),
    },
    {
        "name": "Bug Finder",
        "description": "Helps identify bugs in code",
        "content": (
            "Review this code and identify potential bugs, performance issues, or "
            "security vulnerabilities:"
        ),
    },
    {
        "name": "Feature Planner",
        "description": "Helps plan new features",
        "content": (
            "Help me plan the implementation of this feature. Consider edge cases, "
            "potential challenges, and best practices:"
        ),
    },
    {
        "name": "SQL Query Helper",
        "description": "Assists with SQL queries",
        "content": "Help me write an efficient SQL query to accomplish the following task:",
    },
    {
        "name": "API Documentation",
        "description": "Generates API documentation",
        "content": (
            "Generate clear and comprehensive documentation for this API endpoint, "
            "including parameters, responses, and examples:"
        ),
    },
    {
        "name": "Code Refactorer",
        "description": "Suggests code improvements",
        "content": (
            "Review this code and suggest improvements for better readability, "
            "maintainability, and performance:"
        ),
    },
    {
        "name": "Test Case Generator",
        "description": "Creates test cases",
        "content": (
            "Generate comprehensive test cases for this function, including edge cases "
            "and error scenarios:"
        ),
    },
    {
        "name": "UI/UX Reviewer",
        "description": "Reviews UI/UX design",
        "content": (
            "Review this UI design and provide feedback on usability, accessibility, "
            "and user experience:"
        ),
    },
    {
        "name": "Git Command Helper",
        "description": "Helps with Git commands",
        "content": "What Git commands should I use to accomplish the following task:",
    },
]


@dataclass(frozen=True)
class SeedResult:
    """Outcome of a seed run."""

    accounts: list[Account]
    deleted: int
    inserted: int


def partition_prompts(
    prompts: Sequence[dict[str, str]],
    owner_ids: Sequence[str],
) -> list[dict[str, str]]:
    """
    Assign prompts to owners in contiguous, balanced chunks.

    With 9 prompts and 3 owners each owner gets 3. When the counts don't divide
    evenly the first `len(prompts) % len(owner_ids)` owners get one extra, so
    every prompt is assigned exactly once.

    Returns:
        Copies of the prompts, in their original order, each with a `user_id`.

    Raises:
        ValueError: If there are no owners.
    """
    if not owner_ids:
        raise ValueError("Cannot partition prompts across zero accounts")

    base, remainder = divmod(len(prompts), len(owner_ids))
    records = []
    start = 0
    for index, owner_id in enumerate(owner_ids):
        size = base + (1 if index < remainder else 0)
        records.extend({**prompt, "user_id": owner_id} for prompt in prompts[start:start + size])
        start += size
    return records


async def create_accounts(
    client: Auth0ManagementClient,
    accounts: Sequence[NewAccount],
) -> list[Account]:
    """
    Create all accounts concurrently.

    All-or-nothing: the first failure propagates and no partial list is returned.
    Accounts that were created before the failure are left in Auth0.
    """
    return list(await asyncio.gather(*(client.create_user(account) for account in accounts)))


async def replace_prompts(db: AsyncSession, records: Sequence[dict[str, str]]) -> tuple[int, int]:
    """
    Delete every prompt, then insert the given records.

    Note: Does not commit.

    Returns:
        (rows deleted, rows inserted)
    """
    result = await db.execute(delete(Prompt))
    deleted = result.rowcount or 0
    if records:
        await db.execute(insert(Prompt), list(records))
    return deleted, len(records)


async def seed(
    db: AsyncSession,
    client: Auth0ManagementClient,
    accounts: Sequence[NewAccount] = DEMO_ACCOUNTS,
    prompts: Sequence[dict[str, str]] = BASE_PROMPTS,
) -> SeedResult:
    """
    Create demo accounts and replace the prompts table with owner-stamped samples.

    Not idempotent: existing prompts are always deleted and Auth0 accounts are not
    de-duplicated across runs. Failures are logged and re-raised.

    Note: Does not commit. The caller commits once the whole run succeeds.
    """
    try:
        logger.info("Creating %d demo accounts in Auth0...", len(accounts))
        created = await create_accounts(client, accounts)
        for account in created:
            logger.info("  Created account %s %s", account.id, account.email_addresses)

        records = partition_prompts(prompts, [account.id for account in created])

        logger.info("Clearing existing prompts and inserting %d seed prompts...", len(records))
        deleted, inserted = await replace_prompts(db, records)
        logger.info("  Deleted %d prompts, inserted %d prompts", deleted, inserted)
    except Auth0ManagementError as e:
        logger.error("Seeding failed: %s", e)
        if e.errors:
            logger.error("Auth0 error details: %s", e.errors)
        raise
    except Exception as e:
        logger.error("Seeding failed: %s", e)
        raise

    return SeedResult(accounts=created, deleted=deleted, inserted=inserted)
