"""
Referral graph walker.

Traverses the referral forest downward from a referral code, grouping
descendants by generation (hop distance from the root).
"""

from typing import Any

from loguru import logger

from app.models.user import User
from app.repositories.protocols import UserDirectory


class ReferralGraphWalker:
    """Breadth-first walker over the "children of code" relation."""

    def __init__(self, directory: UserDirectory) -> None:
        """
        Initialize walker.

        Args:
            directory: User directory to read children from
        """
        self.directory = directory

    async def walk(self, root_code: str) -> dict[int, set[int]]:
        """
        Group all descendants of a code by generation.

        Generation 1 holds direct referrals, generation 2 their referrals,
        and so on. The root itself is never included. Each descendant is
        recorded once, at its shortest distance from the root.

        Args:
            root_code: Referral code of the root user

        Returns:
            Dict of generation -> set of user ids (empty generations omitted)
        """
        generations: dict[int, set[int]] = {}
        visited_codes: set[str] = {root_code}
        seen_ids: set[int] = set()

        frontier = [root_code]
        generation = 0

        while frontier:
            children = await self.directory.get_children_of_codes(frontier)
            generation += 1
            next_frontier: list[str] = []

            for child in children:
                if child.referral_code in visited_codes or child.id in seen_ids:
                    logger.warning(
                        "Referral cycle detected during walk",
                        extra={
                            "root_code": root_code,
                            "user_id": child.id,
                            "referral_code": child.referral_code,
                            "generation": generation,
                        },
                    )
                    continue

                visited_codes.add(child.referral_code)
                seen_ids.add(child.id)
                generations.setdefault(generation, set()).add(child.id)
                next_frontier.append(child.referral_code)

            frontier = next_frontier

        logger.debug(
            "Referral graph walked",
            extra={
                "root_code": root_code,
                "generations": len(generations),
                "descendants": len(seen_ids),
            },
        )

        return generations

    async def all_descendants(self, root_code: str) -> set[int]:
        """
        Get every descendant (direct and indirect) of a code.

        Args:
            root_code: Referral code of the root user

        Returns:
            Set of user ids
        """
        generations = await self.walk(root_code)
        return flatten_generations(generations)

    async def direct_descendants(self, root_code: str) -> set[int]:
        """
        Get direct referrals of a code.

        Args:
            root_code: Referral code of the root user

        Returns:
            Set of user ids at generation 1
        """
        children = await self.directory.get_children_of_code(root_code)
        return {child.id for child in children if child.referral_code != root_code}

    async def build_tree(self, root: User) -> dict[str, Any]:
        """
        Build the nested referral tree below a user.

        Args:
            root: Root user

        Returns:
            Dict with id, username, referral_code, level and children
        """
        visited_codes: set[str] = {root.referral_code}

        async def build_children(referral_code: str, level: int) -> list[dict[str, Any]]:
            children = []
            for child in await self.directory.get_direct_referrals(referral_code):
                if child.referral_code in visited_codes:
                    logger.warning(
                        "Referral cycle detected while building tree",
                        extra={"root_user_id": root.id, "user_id": child.id},
                    )
                    continue
                visited_codes.add(child.referral_code)
                children.append({
                    "id": child.id,
                    "username": child.username,
                    "referral_code": child.referral_code,
                    "level": level + 1,
                    "children": await build_children(child.referral_code, level + 1),
                })
            return children

        return {
            "id": root.id,
            "username": root.username,
            "referral_code": root.referral_code,
            "level": 0,
            "children": await build_children(root.referral_code, 0),
        }


def flatten_generations(generations: dict[int, set[int]]) -> set[int]:
    """Union of all generation buckets."""
    descendants: set[int] = set()
    for ids in generations.values():
        descendants.update(ids)
    return descendants


def generation_counts(generations: dict[int, set[int]]) -> dict[int, int]:
    """Convert generation buckets to generation -> count."""
    return {
        generation: len(ids)
        for generation, ids in sorted(generations.items())
        if ids
    }
