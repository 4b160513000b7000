"""Seed script to populate the local dev database with categories and sample content.

Usage:
    PYTHONPATH=src python scripts/seed_data.py populate
    PYTHONPATH=src python scripts/seed_data.py populate --force
    PYTHONPATH=src python scripts/seed_data.py clear
"""

import argparse
import asyncio

from sqlalchemy import func, select
from sqlalchemy.ext.asyncio import AsyncSession, async_sessionmaker

from core.auth import get_or_create_dev_user
from core.config import get_settings
from db.session import build_engine
from models import Category, CursorRule, Prompt, User
from schemas.cursor_rule import CursorRuleCreate
from schemas.prompt import PromptCreate
from services.cursor_rule_service import CursorRuleService
from services.prompt_service import PromptService

prompt_service = PromptService()
cursor_rule_service = CursorRuleService()

# ---------------------------------------------------------------------------
# Categories
# ---------------------------------------------------------------------------

CATEGORIES = [
    {'name': 'Coding', 'slug': 'coding', 'prompt_type': 'developer',
     'description': 'Prompts for writing, reviewing and debugging code.'},
    {'name': 'Writing', 'slug': 'writing', 'prompt_type': 'user',
     'description': 'Prompts for drafting and editing prose.'},
    {'name': 'Analysis', 'slug': 'analysis', 'prompt_type': 'user',
     'description': 'Prompts for summarizing and reasoning over data.'},
    {'name': 'Assistants', 'slug': 'assistants', 'prompt_type': 'system',
     'description': 'System prompts that define an assistant persona.'},
    # Cursor rules without an explicit category are filed under their rule type
    {'name': 'Always', 'slug': 'always', 'prompt_type': 'developer',
     'description': 'Rules attached to every request.'},
    {'name': 'Auto-attached', 'slug': 'auto-attached', 'prompt_type': 'developer',
     'description': 'Rules attached when matching files are referenced.'},
    {'name': 'Agent-requested', 'slug': 'agent-requested', 'prompt_type': 'developer',
     'description': 'Rules the agent may choose to include.'},
    {'name': 'Manual', 'slug': 'manual', 'prompt_type': 'developer',
     'description': 'Rules included only when mentioned explicitly.'},
]

# ---------------------------------------------------------------------------
# Prompts
# ---------------------------------------------------------------------------

PROMPTS = [
    {
        'slug': 'senior-code-reviewer',
        'title': 'Senior Code Reviewer',
        'excerpt': 'A reviewer persona that focuses on correctness, naming and tests.',
        'content': (
            'You are a senior engineer reviewing a pull request. Read the diff carefully and '
            'point out correctness bugs first, then unclear naming, then missing tests. '
            'Quote the lines you are commenting on and suggest a concrete fix for each issue.'
        ),
        'prompt_type': 'system',
        'category': 'coding',
        'tags': ['code-review', 'engineering'],
    },
    {
        'slug': 'explain-like-im-new',
        'title': "Explain Like I'm New",
        'excerpt': 'Turns a dense technical explanation into plain language with an example.',
        'content': (
            'Rewrite the following explanation for someone who is new to the field. Keep every '
            'fact, drop the jargon or define it the first time it appears, and finish with one '
            'short, concrete example that illustrates the main idea.\n\n{{text}}'
        ),
        'prompt_type': 'user',
        'category': 'writing',
        'tags': ['writing', 'teaching'],
    },
    {
        'slug': 'csv-insight-summary',
        'title': 'CSV Insight Summary',
        'excerpt': 'Summarizes a CSV export into the three findings that matter most.',
        'content': (
            'Here is a CSV export. Identify the three most important findings, each with the '
            'numbers that support it. Flag any columns that look inconsistent or incomplete, and '
            'list the questions you would ask the data owner before drawing conclusions.'
        ),
        'prompt_type': 'user',
        'category': 'analysis',
        'tags': ['data', 'summarization'],
    },
    {
        'slug': 'sql-migration-planner',
        'title': 'SQL Migration Planner',
        'excerpt': 'Plans a zero-downtime schema migration as a sequence of safe steps.',
        'content': (
            'Given the current schema and the desired schema, produce a migration plan that can '
            'run without downtime. Split it into expand, backfill and contract phases, state '
            'which application release each phase depends on, and call out any locks taken.'
        ),
        'prompt_type': 'developer',
        'category': 'coding',
        'tags': ['sql', 'database'],
        'published': False,
    },
]

CURSOR_RULES = [
    {
        'title': 'Python Type Hints Everywhere',
        'description': 'Require type hints on every new function and method signature.',
        'content': (
            'Annotate every function parameter and return type. Prefer built-in generics '
            'such as list[str] over typing aliases.'
        ),
        'rule_type': 'auto-attached',
        'globs': '**/*.py',
        'tags': ['python', 'typing'],
    },
    {
        'title': 'Small Focused Commits',
        'description': 'Keep each change small and describe what it does in plain words.',
        'content': (
            'Make one logical change per commit. Write the subject line in the imperative '
            'mood and keep it under seventy characters.'
        ),
        'rule_type': 'always',
        'tags': ['git'],
    },
]


async def create_categories(session: AsyncSession) -> dict[str, Category]:
    """Create seed categories, reusing any that already exist."""
    existing = {
        c.slug: c for c in (await session.execute(select(Category))).scalars().all()
    }
    for data in CATEGORIES:
        if data['slug'] not in existing:
            category = Category(**data)
            session.add(category)
            existing[data['slug']] = category
    await session.flush()
    print(f'  {len(existing)} categories available')
    return existing


async def create_prompts(
    session: AsyncSession, user: User, categories: dict[str, Category],
) -> None:
    """Create seed prompts."""
    for data in PROMPTS:
        payload = {k: v for k, v in data.items() if k != 'category'}
        payload['category_id'] = categories[data['category']].id
        await prompt_service.create(session, user.id, PromptCreate(**payload))
    print(f'  Created {len(PROMPTS)} prompts')


async def create_cursor_rules(session: AsyncSession, user: User) -> None:
    """Create seed cursor rules; slugs are generated from titles."""
    for data in CURSOR_RULES:
        await cursor_rule_service.create(session, user.id, CursorRuleCreate(**data))
    print(f'  Created {len(CURSOR_RULES)} cursor rules')


async def clear_data(session: AsyncSession) -> None:
    """Clear all content owned by the dev user. Categories are kept."""
    user = await get_or_create_dev_user(session)
    print(f'Clearing data for dev user {user.id}...')

    prompts = (await session.execute(
        select(Prompt).where(Prompt.author_id == user.id),
    )).scalars().unique().all()
    for prompt in prompts:
        await prompt_service.delete_item(session, prompt)

    rules = (await session.execute(
        select(CursorRule).where(CursorRule.author_id == user.id),
    )).scalars().unique().all()
    for rule in rules:
        await cursor_rule_service.delete_item(session, rule)

    print(f'  Deleted {len(prompts)} prompts, {len(rules)} cursor rules')
    print('Clear complete.')


async def populate(force: bool = False) -> None:
    """Populate the database with seed data."""
    settings = get_settings()
    engine = build_engine(settings)
    session_factory = async_sessionmaker(engine, class_=AsyncSession, expire_on_commit=False)

    async with session_factory() as session:
        try:
            user = await get_or_create_dev_user(session)

            prompt_count = (await session.execute(
                select(func.count()).select_from(Prompt).where(Prompt.author_id == user.id),
            )).scalar()

            if prompt_count and prompt_count > 0:
                if force:
                    print('Existing data found, clearing first (--force)...')
                    await clear_data(session)
                    await session.flush()
                else:
                    print(
                        f'Data already exists ({prompt_count} prompts). '
                        f'Use --force to clear and re-seed.'
                    )
                    return

            print('Populating seed data...')
            categories = await create_categories(session)
            await create_prompts(session, user, categories)
            await create_cursor_rules(session, user)
            await session.commit()
            print('Seed data created successfully.')
        except Exception:
            await session.rollback()
            raise
        finally:
            await engine.dispose()


async def clear() -> None:
    """Clear all dev user data."""
    settings = get_settings()
    engine = build_engine(settings)
    session_factory = async_sessionmaker(engine, class_=AsyncSession, expire_on_commit=False)

    async with session_factory() as session:
        try:
            await clear_data(session)
            await session.commit()
        except Exception:
            await session.rollback()
            raise
        finally:
            await engine.dispose()


def main() -> None:
    """CLI entry point."""
    settings = get_settings()
    if not settings.dev_mode:
        print(
            'ERROR: Seed script requires DEV_MODE=true.\n'
            'This script modifies data directly and must only run against a local dev database.'
        )
        raise SystemExit(1)

    parser = argparse.ArgumentParser(description='Seed the dev database with sample content.')
    subparsers = parser.add_subparsers(dest='command', required=True)

    populate_parser = subparsers.add_parser('populate', help='Populate database with sample data')
    populate_parser.add_argument(
        '--force', action='store_true',
        help='Clear existing data before populating',
    )

    subparsers.add_parser('clear', help='Remove all dev user content')

    args = parser.parse_args()

    if args.command == 'populate':
        asyncio.run(populate(force=args.force))
    elif args.command == 'clear':
        asyncio.run(clear())


if __name__ == '__main__':
    main()
