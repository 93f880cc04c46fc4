"""
Action Economy.

Every player turn grants one main and one bonus action. These helpers decide
which slot an action occupies, whether that slot is still free, and whether a
resolved action ends the player's turn.
"""

from encounter.actions.ability import Ability
from encounter.core.constants import ActionClass, ActionType

# Actions that ignore the slot flags and always hand the turn on.
ALWAYS_ADVANCING = {ActionType.SKIP, ActionType.END_TURN, ActionType.SURRENDER}


def action_class_for(action_type: ActionType, ability: Ability | None = None) -> ActionClass:
    """
    Returns the economy slot an action occupies.

    Args:
        action_type (ActionType): What the player asked for.
        ability (Ability | None): The ability, for ability actions.

    Returns:
        ActionClass: MAIN or BONUS.

    """
    if action_type in (ActionType.ITEM, ActionType.DEFEND):
        return ActionClass.BONUS
    if action_type == ActionType.ABILITY and ability is not None:
        return ability.action_class
    return ActionClass.MAIN


def is_slot_exempt(action_type: ActionType) -> bool:
    """Skip, end turn and surrender are never blocked by a spent slot; flee takes the main action."""
    return action_type in ALWAYS_ADVANCING


def slot_available(main_used: bool, bonus_used: bool, action_class: ActionClass) -> bool:
    """Returns True when the given slot has not been spent this turn."""
    if action_class == ActionClass.MAIN:
        return not main_used
    return not bonus_used


def mark_used(
    main_used: bool, bonus_used: bool, action_class: ActionClass
) -> tuple[bool, bool]:
    """Returns the (main, bonus) flags after spending the given slot."""
    if action_class == ActionClass.MAIN:
        return True, bonus_used
    return main_used, True


def should_advance(
    action_type: ActionType,
    main_used: bool,
    bonus_used: bool,
    fled: bool = False,
) -> bool:
    """
    Decides whether the player's turn ends after a resolved action.

    Args:
        action_type (ActionType): The action that was resolved.
        main_used (bool): Main slot flag after the action.
        bonus_used (bool): Bonus slot flag after the action.
        fled (bool): True when a flee succeeded.

    Returns:
        bool: True when the sequencer should advance.

    """
    if action_type in ALWAYS_ADVANCING:
        return True
    if action_type == ActionType.FLEE:
        return fled
    return main_used and bonus_used
