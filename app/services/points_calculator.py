"""
Points calculator.

Exponential generation-based points:

* Generation 1 (direct referrals): no points
* Generation 2: 4 referrals = 1 point
* Generation 3: 8 referrals = 1 point
* Generation n: 2^n referrals = 1 point
"""

from collections.abc import Mapping

from loguru import logger

from app.utils.exceptions import InvalidGenerationStatsError

# Direct referrals never earn points
FIRST_REWARDED_GENERATION = 2


def referrals_required_for_point(generation: int) -> int:
    """
    Number of referrals at a generation needed to earn one point.

    Args:
        generation: Generation number (>= 2)

    Returns:
        2 ** generation

    Raises:
        InvalidGenerationStatsError: If generation does not earn points
    """
    if generation < FIRST_REWARDED_GENERATION:
        raise InvalidGenerationStatsError(
            f"Generation {generation} does not earn points"
        )
    return 2 ** generation


def validate_generation_stats(generation_stats: Mapping[int, int]) -> None:
    """
    Validate a generation -> count mapping.

    Raises:
        InvalidGenerationStatsError: On non-integer or non-positive
            generations, or non-integer or negative counts
    """
    for generation, count in generation_stats.items():
        if isinstance(generation, bool) or not isinstance(generation, int):
            raise InvalidGenerationStatsError(
                f"Generation must be an integer, got {generation!r}"
            )
        if generation < 1:
            raise InvalidGenerationStatsError(
                f"Generation must be >= 1, got {generation}"
            )
        if isinstance(count, bool) or not isinstance(count, int):
            raise InvalidGenerationStatsError(
                f"Count for generation {generation} must be an integer, "
                f"got {count!r}"
            )
        if count < 0:
            raise InvalidGenerationStatsError(
                f"Count for generation {generation} must be >= 0, got {count}"
            )


def calculate_points(generation_stats: Mapping[int, int]) -> int:
    """
    Calculate total points for a generation -> count mapping.

    Args:
        generation_stats: Referral count per generation

    Returns:
        Sum over generations g >= 2 of count // 2**g

    Raises:
        InvalidGenerationStatsError: If the mapping is malformed
    """
    validate_generation_stats(generation_stats)

    total_points = 0
    for generation in sorted(generation_stats):
        count = generation_stats[generation]

        if generation < FIRST_REWARDED_GENERATION:
            logger.trace(
                f"[Points] Generation {generation}: {count} referrals = 0 points "
                "(direct referrals excluded)"
            )
            continue

        required = referrals_required_for_point(generation)
        generation_points = count // required
        total_points += generation_points

        logger.trace(
            f"[Points] Generation {generation}: {count} referrals, "
            f"requires {required} per point = {generation_points} points"
        )

    return total_points
