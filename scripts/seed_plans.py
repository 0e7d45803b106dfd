#!/usr/bin/env python3
"""
Seed Script: Default Pricing Plans

Creates the default pricing plans in Firestore when no plan with the same
name exists. Safe to run repeatedly.

Usage:
    python scripts/seed_plans.py
"""

import sys

from gym_portal.config import logger
from gym_portal.core.query import PageParams
from gym_portal.core.services import PlanService
from gym_portal.dependencies import get_member_repository, get_plan_repository


def main():
    """Run plan seeding."""
    logger.info("Seeding default pricing plans...")

    plan_service = PlanService(get_plan_repository(), get_member_repository())

    try:
        created = plan_service.ensure_default_plans_exist()
        logger.info("Created %d default plans", len(created))

        plans, pagination = plan_service.list_plans(PageParams(limit=100))
        logger.info("Found %d plans in Firestore:", pagination["total"])

        for plan in plans:
            logger.info(
                "  - %s (%s): $%.2f for %d days, active=%s",
                plan["name"],
                plan["id"],
                plan["price"],
                plan["duration_days"],
                plan.get("is_active", True),
            )

        logger.info("Plan seeding completed successfully")
        return 0

    except Exception as e:
        logger.error("Plan seeding failed: %s", e, exc_info=True)
        return 1


if __name__ == "__main__":
    sys.exit(main())
